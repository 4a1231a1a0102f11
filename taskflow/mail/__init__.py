"""Outbound mail: transports, the sender, and the email audit log."""

from taskflow.mail.models import EmailLog, MailSendError, OutboundEmail, SendRecord
from taskflow.mail.sender import MailSender
from taskflow.mail.store import EmailLogStore
from taskflow.mail.transports import DevLogTransport, MailTransport, ResendTransport

__all__ = [
    "DevLogTransport",
    "EmailLog",
    "EmailLogStore",
    "MailSendError",
    "MailSender",
    "MailTransport",
    "OutboundEmail",
    "ResendTransport",
    "SendRecord",
]
