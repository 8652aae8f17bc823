"""Candidate and HR email notifications."""
from intake.notifications.dispatcher import (
    DispatchReport,
    NotificationDispatcher,
    resolve_hr_recipient,
    resolve_sender_address,
)
from intake.notifications.mailer import MailSendError, SendLog, SmtpMailer
from intake.notifications.templates import RenderedEmail

__all__ = [
    "DispatchReport",
    "MailSendError",
    "NotificationDispatcher",
    "RenderedEmail",
    "SendLog",
    "SmtpMailer",
    "resolve_hr_recipient",
    "resolve_sender_address",
]
