"""Mail transports — the outbound channel behind MailSender."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import aiohttp

from taskflow.config import settings
from taskflow.mail.models import MailSendError

if TYPE_CHECKING:
    from taskflow.mail.models import OutboundEmail

logger = logging.getLogger(__name__)


@runtime_checkable
class MailTransport(Protocol):
    """Protocol that all mail transports must satisfy."""

    @property
    def name(self) -> str:
        """Provider identifier recorded on the email log (e.g. 'resend')."""
        ...

    async def deliver(self, email: OutboundEmail) -> str | None:
        """Hand *email* to the provider. Returns the provider message ID.

        Raises ``MailSendError`` when the provider rejects the message.
        """
        ...


class DevLogTransport:
    """Logs the message locally instead of sending it."""

    @property
    def name(self) -> str:
        return "dev-log"

    async def deliver(self, email: OutboundEmail) -> str | None:
        rule = "=" * 60
        logger.info(
            "[DEV MAIL] Email logged (not sent)\n%s\nTo: %s\nSubject: %s\n%s\n%s\n%s",
            rule,
            email.to,
            email.subject,
            "-" * 60,
            email.body_text,
            rule,
        )
        return None


class ResendTransport:
    """Sends mail through the Resend HTTP API."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        api_url: str | None = None,
        sender: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._api_key = api_key or settings.resend_api_key
        self._api_url = (api_url or settings.resend_api_url).rstrip("/")
        self._sender = sender or settings.email_from
        self._timeout = aiohttp.ClientTimeout(total=timeout or settings.mail_timeout_seconds)
        self._session: aiohttp.ClientSession | None = None

    @property
    def name(self) -> str:
        return "resend"

    def _get_session(self) -> aiohttp.ClientSession:
        """Return (and lazily create) the aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"Authorization": f"Bearer {self._api_key}"},
                timeout=self._timeout,
            )
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def deliver(self, email: OutboundEmail) -> str | None:
        payload = {
            "from": self._sender,
            "to": [email.to],
            "subject": email.subject,
            "html": email.body_html,
            "text": email.body_text,
        }
        session = self._get_session()
        try:
            async with session.post(f"{self._api_url}/emails", json=payload) as resp:
                if resp.status >= 400:
                    body = await resp.text()
                    msg = (
                        f"Resend rejected email to {email.to}:"
                        f" status={resp.status} body={body[:200]}"
                    )
                    raise MailSendError(msg, provider=self.name, status=resp.status)
                data = await resp.json(content_type=None)
        except aiohttp.ClientError as exc:
            msg = f"Resend request failed for {email.to}: {exc}"
            raise MailSendError(msg, provider=self.name) from exc
        message_id = data.get("id") if isinstance(data, dict) else None
        logger.info("Sent via Resend to %s: %s (id=%s)", email.to, email.subject, message_id)
        return message_id


def transport_from_settings() -> MailTransport:
    """Dev log when ``DEV_MAIL`` is on or no Resend key is configured, else Resend."""
    if settings.use_dev_mail():
        return DevLogTransport()
    return ResendTransport()
