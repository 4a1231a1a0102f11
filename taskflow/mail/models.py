"""Outbound mail data models."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime


class MailSendError(RuntimeError):
    """Raised when a transport fails to hand a message to its provider."""

    def __init__(self, message: str, *, provider: str, status: int | None = None) -> None:
        super().__init__(message)
        self.provider = provider
        self.status = status


@dataclass(frozen=True)
class OutboundEmail:
    to: str
    subject: str
    body_html: str
    body_text: str


@dataclass(frozen=True)
class SendRecord:
    """Result of a successful send.

    Attributes:
        provider: Transport that handled delivery (``"resend"`` or ``"dev-log"``).
        message_id: Provider message ID, if the provider returns one.
        log_id: ID of the ``email_logs`` row written for this send.
    """

    provider: str
    to: str
    subject: str
    message_id: str | None
    log_id: str
    sent_at: str


@dataclass
class EmailLog:
    """Append-only audit row for one email that reached a transport."""

    user_id: str
    to_email: str
    subject: str
    body_html: str
    body_text: str
    provider: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: str = ""

    def __post_init__(self) -> None:
        if not self.created_at:
            self.created_at = datetime.now(UTC).isoformat()

    def to_row(self) -> tuple:
        return (
            self.id,
            self.user_id,
            self.to_email,
            self.subject,
            self.body_html,
            self.body_text,
            self.provider,
            self.created_at,
        )

    @classmethod
    def from_row(cls, row: tuple) -> EmailLog:
        return cls(
            id=row[0],
            user_id=row[1],
            to_email=row[2],
            subject=row[3],
            body_html=row[4],
            body_text=row[5],
            provider=row[6] or "",
            created_at=row[7],
        )
