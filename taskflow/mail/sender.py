"""MailSender — dispatches an email and records it in the audit log."""

from __future__ import annotations

import logging

from taskflow.mail.models import EmailLog, OutboundEmail, SendRecord
from taskflow.mail.store import EmailLogStore
from taskflow.mail.transports import MailTransport, transport_from_settings

logger = logging.getLogger(__name__)


class MailSender:
    """Sends mail through a transport and writes one ``EmailLog`` per success.

    Args:
        transport: Outbound channel (defaults from settings).
        log_store: Where audit rows are written.
    """

    def __init__(
        self,
        transport: MailTransport | None = None,
        log_store: EmailLogStore | None = None,
    ) -> None:
        self._transport = transport or transport_from_settings()
        self._log_store = log_store or EmailLogStore.get()

    @property
    def provider(self) -> str:
        return self._transport.name

    async def send(
        self,
        *,
        to: str,
        subject: str,
        body_html: str,
        body_text: str,
        user_id: str,
    ) -> SendRecord:
        """Deliver the message. Raises ``MailSendError`` if the transport fails.

        Nothing is logged to ``email_logs`` for a failed delivery.
        """
        email = OutboundEmail(to=to, subject=subject, body_html=body_html, body_text=body_text)
        message_id = await self._transport.deliver(email)

        log = await self._log_store.add(
            EmailLog(
                user_id=user_id,
                to_email=to,
                subject=subject,
                body_html=body_html,
                body_text=body_text,
                provider=self._transport.name,
            )
        )
        logger.info("Email sent via %s to %s: %s", self._transport.name, to, subject)
        return SendRecord(
            provider=self._transport.name,
            to=to,
            subject=subject,
            message_id=message_id,
            log_id=log.id,
            sent_at=log.created_at,
        )

    async def close(self) -> None:
        close = getattr(self._transport, "close", None)
        if close is not None:
            await close()
