"""Outbound email over SMTP with a durable send log."""
import logging
import smtplib
import threading
from datetime import datetime, timezone
from email.message import EmailMessage
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class MailSendError(Exception):
    """Raised when an outbound email could not be delivered to the SMTP server."""


class SendLog:
    """Append-only record of every send attempt.

    Line format: ``[<ISO timestamp>] SENT|FAILED | To: <to> | Subject: <subject>``
    followed by `` | Error: <message>`` for failures.
    """

    def __init__(self, path: Optional[str | Path]):
        self.path = Path(path) if path else None
        self._lock = threading.Lock()

    def record(self, to: str, subject: str, sent: bool, error: Optional[str] = None) -> None:
        if self.path is None:
            return

        timestamp = datetime.now(timezone.utc).isoformat()
        outcome = "SENT" if sent else "FAILED"
        line = f"[{timestamp}] {outcome} | To: {to} | Subject: {' '.join(str(subject).split())}"
        if error:
            line += f" | Error: {' '.join(str(error).split())}"

        try:
            with self._lock:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.path, "a", encoding="utf-8") as f:
                    f.write(line + "\n")
        except OSError as e:
            logger.error("Failed to write email send log %s: %s", self.path, e)


class SmtpMailer:
    """Send multipart (text + HTML) emails through an SMTP relay."""

    def __init__(
        self,
        host: Optional[str],
        port: int = 587,
        user: Optional[str] = None,
        password: Optional[str] = None,
        use_ssl: bool = False,
        send_log: Optional[SendLog] = None,
        timeout: float = 30.0,
    ):
        """
        Initialize SMTP mailer.

        Args:
            host: SMTP server host; sends fail while unset
            port: SMTP server port (465 implies implicit TLS)
            user: Login user, login is skipped when unset
            password: Login password
            use_ssl: Use implicit TLS instead of STARTTLS
            send_log: Where every attempt is recorded
            timeout: Socket timeout in seconds
        """
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.use_ssl = use_ssl or port == 465
        self.send_log = send_log or SendLog(None)
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "SmtpMailer":
        """Create a mailer from application settings."""
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            user=settings.smtp_user,
            password=settings.smtp_password,
            use_ssl=settings.smtp_use_ssl,
            send_log=SendLog(settings.email_log_file),
        )

    def _build_message(
        self, to: str, sender: str, subject: str, html: str, text: str
    ) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = sender
        msg["To"] = to
        msg.set_content(text)
        msg.add_alternative(html, subtype="html")
        return msg

    def _connect(self) -> smtplib.SMTP:
        if self.use_ssl:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout)
        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            server.starttls()
        except (smtplib.SMTPException, OSError):
            server.close()
            raise
        return server

    def send(self, to: str, sender: str, subject: str, html: str, text: str) -> None:
        """
        Send one email.

        Raises:
            MailSendError: if SMTP is not configured, the message cannot be
                built or the server refuses it
        """
        if not self.host:
            error = "SMTP_HOST is not configured"
            logger.error("Cannot send '%s' to %s: %s", subject, to, error)
            self.send_log.record(to, subject, sent=False, error=error)
            raise MailSendError(error)

        try:
            # Header values with line breaks are rejected here
            msg = self._build_message(to, sender, subject, html, text)
            with self._connect() as server:
                if self.user and self.password:
                    server.login(self.user, self.password)
                server.send_message(msg)
        except smtplib.SMTPAuthenticationError as e:
            logger.error(
                "SMTP authentication failed for %s@%s:%d. Check SMTP_USER and "
                "SMTP_PASSWORD; providers such as Gmail require an app password.",
                self.user,
                self.host,
                self.port,
            )
            self.send_log.record(to, subject, sent=False, error=str(e))
            raise MailSendError(f"SMTP authentication failed: {e}") from e
        except (smtplib.SMTPException, OSError, ValueError) as e:
            logger.error("Failed to send '%s' to %s: %s", subject, to, e)
            self.send_log.record(to, subject, sent=False, error=str(e))
            raise MailSendError(str(e)) from e

        self.send_log.record(to, subject, sent=True)
        logger.info("Email sent to %s: %s", to, subject)
