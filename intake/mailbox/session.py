"""IMAP session owned by the mailbox poller."""
import imaplib
import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

logger = logging.getLogger(__name__)

# Raised by imaplib and the socket layer when the connection itself is gone
_TRANSPORT_ERRORS = (imaplib.IMAP4.abort, OSError)


class MailboxError(Exception):
    """Raised when the mail server rejects a command."""


class MailboxConnectionError(MailboxError):
    """Raised when the connection to the mail server is lost or times out.

    Only mailbox I/O raises this; local failures while handling a message
    (disk, parsing, database) never do.
    """


def _quote(name: str) -> str:
    """Quote a mailbox name for an IMAP command argument."""
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class MailboxSession:
    """A single authenticated IMAP connection.

    All message addressing uses UIDs, which stay stable while messages are
    moved out of the selected folder during a cycle.
    """

    def __init__(
        self,
        host: str,
        port: int = 993,
        user: str = "",
        password: str = "",
        secure: bool = True,
        inbox: str = "INBOX",
        timeout: Optional[float] = 30.0,
        connection_factory: Optional[Callable[..., imaplib.IMAP4]] = None,
    ):
        """
        Initialize mailbox session.

        Args:
            host: IMAP server host
            port: IMAP server port
            user: Login user
            password: Login password
            secure: Use implicit TLS (IMAP4_SSL)
            inbox: Folder polled for new applications
            timeout: Socket timeout in seconds for connect and every command
            connection_factory: Override for creating the imaplib connection
        """
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.secure = secure
        self.inbox = inbox
        self.timeout = timeout
        self._connection_factory = connection_factory or (
            imaplib.IMAP4_SSL if secure else imaplib.IMAP4
        )
        self._conn: Optional[imaplib.IMAP4] = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings) -> "MailboxSession":
        """Create a session from application settings."""
        return cls(
            host=settings.imap_host,
            port=settings.imap_port,
            user=settings.imap_user,
            password=settings.imap_password,
            secure=settings.imap_secure,
            inbox=settings.imap_inbox,
            timeout=settings.imap_timeout_seconds,
        )

    @property
    def connected(self) -> bool:
        return self._conn is not None

    @property
    def conn(self) -> imaplib.IMAP4:
        if self._conn is None:
            raise MailboxError("Mailbox session is not connected")
        return self._conn

    def connect(self) -> None:
        """Open the connection and authenticate.

        Raises:
            imaplib.IMAP4.error: on authentication failure
            MailboxConnectionError: when the server is unreachable or times out
        """
        logger.info("Connecting to IMAP %s:%d as %s", self.host, self.port, self.user)
        try:
            conn = self._connection_factory(self.host, self.port, timeout=self.timeout)
        except _TRANSPORT_ERRORS as e:
            raise MailboxConnectionError(f"connect to {self.host}:{self.port}: {e}") from e

        try:
            conn.login(self.user, self.password)
        except (imaplib.IMAP4.error, OSError) as e:
            try:
                conn.logout()
            except (imaplib.IMAP4.error, OSError):
                pass
            if isinstance(e, _TRANSPORT_ERRORS):
                raise MailboxConnectionError(f"login to {self.host}: {e}") from e
            raise
        self._conn = conn
        logger.info("Connected to IMAP server %s", self.host)

    def logout(self) -> None:
        """Close the connection; a no-op when already closed."""
        if self._conn is None:
            return
        try:
            self._conn.logout()
        except (imaplib.IMAP4.error, OSError) as e:
            logger.debug("IMAP logout error (ignored): %s", e)
        finally:
            self._conn = None
        logger.info("Logged out of IMAP server %s", self.host)

    def _command(self, action: str, name: str, *args):
        """Run one imaplib command, turning transport failures into MailboxConnectionError."""
        try:
            return getattr(self.conn, name)(*args)
        except _TRANSPORT_ERRORS as e:
            raise MailboxConnectionError(f"{action}: {e}") from e

    def _check(self, typ: str, data, action: str) -> None:
        if typ != "OK":
            detail = b" ".join(d for d in data if isinstance(d, bytes)).decode(
                "utf-8", errors="replace"
            )
            raise MailboxError(f"{action} failed: {typ} {detail}".strip())

    def _run(self, action: str, name: str, *args):
        typ, data = self._command(action, name, *args)
        self._check(typ, data, action)
        return data

    def folder_exists(self, name: str) -> bool:
        """Check for a folder with an explicit LIST."""
        data = self._run(f"LIST {name}", "list", '""', _quote(name))
        return any(item for item in data if item)

    def ensure_folder(self, name: str) -> bool:
        """
        Create a folder if it does not exist yet.

        Returns:
            True if the folder was created, False if it already existed
        """
        if self.folder_exists(name):
            return False

        typ, data = self._command(f"CREATE {name}", "create", _quote(name))
        if typ != "OK":
            text = b" ".join(d for d in data if isinstance(d, bytes)).lower()
            # Another client may have created it between LIST and CREATE
            if b"alreadyexists" in text or b"already exists" in text:
                return False
            self._check(typ, data, f"CREATE {name}")

        logger.info("Created mailbox folder %s", name)
        return True

    def select(self, folder: str) -> int:
        """Select a folder read-write and return its message count."""
        data = self._run(f"SELECT {folder}", "select", _quote(folder))
        try:
            return int(data[0])
        except (TypeError, ValueError, IndexError):
            return 0

    @contextmanager
    def inbox_lock(self) -> Iterator["MailboxSession"]:
        """Hold the inbox exclusively with it selected read-write."""
        with self._lock:
            self.select(self.inbox)
            yield self

    def search(self, *criteria: str) -> list[str]:
        """UIDs in the selected folder matching the search criteria."""
        data = self._run(f"SEARCH {' '.join(criteria)}", "uid", "SEARCH", None, *criteria)
        if not data or not data[0]:
            return []
        return [uid.decode() for uid in data[0].split()]

    def search_unseen(self) -> list[str]:
        """UIDs of unseen messages in the selected folder."""
        return self.search("UNSEEN")

    def fetch(self, uid: str) -> Optional[bytes]:
        """Full message source, without setting the \\Seen flag."""
        data = self._run(f"FETCH {uid}", "uid", "FETCH", uid, "(BODY.PEEK[])")
        for item in data:
            if isinstance(item, tuple) and len(item) >= 2:
                return item[1]
        return None

    def mark_seen(self, uid: str) -> None:
        self._run(f"STORE {uid} \\Seen", "uid", "STORE", uid, "+FLAGS", "(\\Seen)")

    def mark_unseen(self, uid: str) -> None:
        self._run(f"STORE {uid} -\\Seen", "uid", "STORE", uid, "-FLAGS", "(\\Seen)")

    def supports(self, capability: str) -> bool:
        return capability.upper() in (c.upper() for c in self.conn.capabilities)

    def move(self, uid: str, folder: str) -> None:
        """Move a message, using UID MOVE when the server offers it."""
        target = _quote(folder)
        if self.supports("MOVE"):
            self._run(f"MOVE {uid} -> {folder}", "uid", "MOVE", uid, target)
            return

        self._run(f"COPY {uid} -> {folder}", "uid", "COPY", uid, target)
        self._run(f"STORE {uid} \\Deleted", "uid", "STORE", uid, "+FLAGS", "(\\Deleted)")
        if self.supports("UIDPLUS"):
            self._run("EXPUNGE", "uid", "EXPUNGE", uid)
        else:
            self._run("EXPUNGE", "expunge")
