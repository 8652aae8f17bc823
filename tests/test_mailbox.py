"""Tests for message parsing and the IMAP session."""
import imaplib
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from intake.mailbox import MailboxConnectionError, MailboxError, MailboxSession, parse_message


def make_session(capabilities=("IMAP4REV1",)):
    """MailboxSession over a MagicMock imaplib connection."""
    conn = MagicMock()
    conn.capabilities = capabilities
    conn.login.return_value = ("OK", [b"Logged in"])
    conn.uid.return_value = ("OK", [None])
    conn.select.return_value = ("OK", [b"3"])
    conn.expunge.return_value = ("OK", [None])
    session = MailboxSession(
        host="imap.test",
        user="u",
        password="p",
        connection_factory=lambda host, port, timeout=None: conn,
    )
    session.connect()
    return session, conn


class TestParseMessage:
    """Tests for parse_message."""

    def test_headers_body_and_attachments(self, raw_email):
        """Test sender, subject, date, body and attachments are decoded."""
        raw = raw_email(
            subject="Backend Developer",
            attachments=[("cv.pdf", "application", "pdf", b"%PDF-1.4 data")],
        )

        message = parse_message("42", raw)

        assert message.uid == "42"
        assert message.subject == "Backend Developer"
        assert message.sender_email == "jane@example.com"
        assert message.sender_name == "Jane Doe"
        assert message.candidate_name == "Jane Doe"
        assert message.received_at == datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)
        assert message.body_text == "Please find my resume attached."
        assert len(message.attachments) == 1
        assert message.attachments[0].filename == "cv.pdf"
        assert message.attachments[0].content_type == "application/pdf"
        assert message.attachments[0].data == b"%PDF-1.4 data"

    def test_encoded_subject_and_bare_sender(self):
        """Test RFC 2047 subjects are decoded and a bare address is the name fallback."""
        raw = (
            b"From: jo@example.com\r\n"
            b"Subject: =?utf-8?q?Ing=C3=A9nieur_Backend?=\r\n"
            b"\r\n"
            b"Hello\r\n"
        )

        message = parse_message("1", raw)

        assert message.subject == "Ingénieur Backend"
        assert message.sender_name == ""
        assert message.candidate_name == "jo@example.com"
        assert message.attachments == []
        assert message.received_at.tzinfo is not None


class TestMailboxSession:
    """Tests for MailboxSession command handling."""

    def test_search_unseen_uses_uids(self):
        """Test unseen search returns decoded UIDs."""
        session, conn = make_session()
        conn.uid.return_value = ("OK", [b"4 9 12"])

        assert session.search_unseen() == ["4", "9", "12"]
        conn.uid.assert_called_with("SEARCH", None, "UNSEEN")

    def test_fetch_peeks(self):
        """Test fetch does not set the seen flag."""
        session, conn = make_session()
        conn.uid.return_value = ("OK", [(b"1 (UID 9 BODY[] {5}", b"hello"), b")"])

        assert session.fetch("9") == b"hello"
        conn.uid.assert_called_with("FETCH", "9", "(BODY.PEEK[])")

    def test_ensure_folder_existing(self):
        """Test an existing folder is not recreated."""
        session, conn = make_session()
        conn.list.return_value = ("OK", [b'(\\HasNoChildren) "/" "Processed"'])

        assert session.ensure_folder("Processed") is False
        conn.create.assert_not_called()

    def test_ensure_folder_creates(self):
        """Test a missing folder is created."""
        session, conn = make_session()
        conn.list.return_value = ("OK", [None])
        conn.create.return_value = ("OK", [b"CREATE completed"])

        assert session.ensure_folder("Failed") is True
        conn.create.assert_called_once_with('"Failed"')

    def test_ensure_folder_race(self):
        """Test an ALREADYEXISTS response is not an error."""
        session, conn = make_session()
        conn.list.return_value = ("OK", [None])
        conn.create.return_value = ("NO", [b"[ALREADYEXISTS] Mailbox exists"])

        assert session.ensure_folder("Failed") is False

    def test_move_with_move_capability(self):
        """Test UID MOVE is used when advertised."""
        session, conn = make_session(capabilities=("IMAP4REV1", "MOVE"))
        conn.uid.return_value = ("OK", [None])

        session.move("9", "Processed")

        conn.uid.assert_called_once_with("MOVE", "9", '"Processed"')

    def test_move_fallback(self):
        """Test COPY + delete + expunge without MOVE support."""
        session, conn = make_session()

        session.move("9", "Failed")

        commands = [c.args[0] for c in conn.uid.call_args_list]
        assert commands == ["COPY", "STORE"]
        conn.expunge.assert_called_once()

    def test_rejected_command_raises(self):
        """Test a NO response becomes MailboxError."""
        session, conn = make_session()
        conn.uid.return_value = ("NO", [b"permission denied"])

        with pytest.raises(MailboxError):
            session.mark_seen("9")

    def test_inbox_lock_selects_inbox(self):
        """Test the inbox is selected while the lock is held."""
        session, conn = make_session()

        with session.inbox_lock():
            conn.select.assert_called_once_with('"INBOX"')

    def test_login_failure_propagates(self):
        """Test authentication errors surface from connect."""
        conn = MagicMock()
        conn.login.side_effect = imaplib.IMAP4.error("AUTHENTICATIONFAILED")
        session = MailboxSession(
            host="imap.test", user="u", password="bad",
            connection_factory=lambda host, port, timeout=None: conn,
        )

        with pytest.raises(imaplib.IMAP4.error):
            session.connect()
        assert not session.connected

    def test_not_connected(self):
        """Test commands before connect raise MailboxError."""
        session = MailboxSession(host="imap.test")

        with pytest.raises(MailboxError):
            session.search_unseen()

    @pytest.mark.parametrize(
        "error",
        [OSError("Connection reset by peer"), imaplib.IMAP4.abort("socket error: EOF")],
    )
    def test_transport_errors_become_connection_errors(self, error):
        """Test socket failures during a command raise MailboxConnectionError."""
        session, conn = make_session()
        conn.uid.side_effect = error

        with pytest.raises(MailboxConnectionError):
            session.fetch("9")

    def test_timeout_passed_to_connection(self, poller_settings):
        """Test the configured socket timeout reaches imaplib."""
        calls = []

        def factory(host, port, timeout=None):
            calls.append((host, port, timeout))
            conn = MagicMock()
            conn.login.return_value = ("OK", [b"Logged in"])
            return conn

        session = MailboxSession.from_settings(poller_settings)
        session._connection_factory = factory
        session.connect()

        assert calls == [("imap.example.com", 993, 5.0)]

    def test_unreachable_server(self):
        """Test a refused connection is reported as a connection error."""

        def refuse(host, port, timeout=None):
            raise ConnectionRefusedError("connection refused")

        session = MailboxSession(host="imap.test", connection_factory=refuse)

        with pytest.raises(MailboxConnectionError):
            session.connect()
        assert not session.connected
