"""Parse raw RFC 822 messages into inbound application emails."""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email import policy
from email.message import EmailMessage
from email.parser import BytesParser
from email.utils import getaddresses
from typing import Optional

from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)


@dataclass
class Attachment:
    """A file attached to an inbound email."""

    filename: Optional[str]
    content_type: str
    data: bytes


@dataclass
class InboundMessage:
    """Parsed application email."""

    uid: str
    subject: str
    sender_email: str
    sender_name: str
    received_at: datetime
    body_text: str = ""
    attachments: list[Attachment] = field(default_factory=list)

    @property
    def candidate_name(self) -> str:
        """Display name for the applicant, falling back to the address."""
        return self.sender_name or self.sender_email or "Unknown"


def _parse_date(value: Optional[str]) -> datetime:
    if value:
        try:
            parsed = dateutil_parser.parse(value)
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed
        except (ValueError, OverflowError):
            logger.debug("Unparseable Date header: %r", value)
    return datetime.now(timezone.utc)


def _parse_sender(msg: EmailMessage) -> tuple[str, str]:
    from_header = msg.get("From", "")
    addresses = getaddresses([str(from_header)]) if from_header else []
    if not addresses:
        return "", ""
    name, address = addresses[0]
    return name.strip().strip('"'), address.strip()


def _extract_body(msg: EmailMessage) -> str:
    body = msg.get_body(preferencelist=("plain", "html"))
    if body is None:
        return ""
    try:
        content = body.get_content()
    except (LookupError, UnicodeDecodeError):
        payload = body.get_payload(decode=True) or b""
        content = payload.decode("utf-8", errors="replace")
    return content.strip() if isinstance(content, str) else ""


def _extract_attachments(msg: EmailMessage) -> list[Attachment]:
    attachments: list[Attachment] = []
    for part in msg.iter_attachments():
        data = part.get_payload(decode=True)
        if data is None:
            continue
        attachments.append(
            Attachment(
                filename=part.get_filename(),
                content_type=part.get_content_type(),
                data=data,
            )
        )
    return attachments


def parse_message(uid: str, raw: bytes) -> InboundMessage:
    """
    Parse a raw message fetched from the mailbox.

    Args:
        uid: Mailbox UID of the message
        raw: Full RFC 822 source

    Returns:
        InboundMessage with decoded headers, body and attachments in message order
    """
    msg = BytesParser(policy=policy.default).parsebytes(raw)
    sender_name, sender_email = _parse_sender(msg)

    return InboundMessage(
        uid=uid,
        subject=str(msg.get("Subject", "") or ""),
        sender_email=sender_email,
        sender_name=sender_name,
        received_at=_parse_date(msg.get("Date")),
        body_text=_extract_body(msg),
        attachments=_extract_attachments(msg),
    )
