"""Inbound application mailbox."""
from intake.mailbox.message import Attachment, InboundMessage, parse_message
from intake.mailbox.poller import Disposition, MailboxPoller, PollerStatus
from intake.mailbox.session import MailboxConnectionError, MailboxError, MailboxSession

__all__ = [
    "Attachment",
    "Disposition",
    "InboundMessage",
    "MailboxConnectionError",
    "MailboxError",
    "MailboxPoller",
    "MailboxSession",
    "PollerStatus",
    "parse_message",
]
