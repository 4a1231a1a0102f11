"""Tests for MailSender and the mail transports."""

from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from taskflow.mail.models import MailSendError, OutboundEmail
from taskflow.mail.sender import MailSender
from taskflow.mail.store import EmailLogStore
from taskflow.mail.transports import (
    DevLogTransport,
    MailTransport,
    ResendTransport,
    transport_from_settings,
)

EMAIL = OutboundEmail(
    to="ada@example.com", subject="Hi", body_html="<p>Hi</p>", body_text="Hi"
)


def _mock_response(status: int, *, json_data=None, text: str = "") -> AsyncMock:
    resp = AsyncMock()
    resp.status = status
    resp.json = AsyncMock(return_value=json_data)
    resp.text = AsyncMock(return_value=text)
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=False)
    return resp


def _mock_session(resp) -> MagicMock:
    session = MagicMock()
    session.post = MagicMock(return_value=resp)
    session.closed = False
    return session


async def _send(sender: MailSender):
    return await sender.send(
        to="ada@example.com",
        subject="TaskFlow: 1 outstanding task",
        body_html="<p>body</p>",
        body_text="body",
        user_id="user1",
    )


# -- MailSender ----------------------------------------------------------------


async def test_send_writes_email_log(email_logs: EmailLogStore) -> None:
    sender = MailSender(transport=DevLogTransport(), log_store=email_logs)
    record = await _send(sender)

    assert record.provider == "dev-log"
    assert record.message_id is None
    [log] = await email_logs.list_for_user("user1")
    assert log.id == record.log_id
    assert log.to_email == "ada@example.com"
    assert log.subject == "TaskFlow: 1 outstanding task"
    assert log.body_text == "body"
    assert log.provider == "dev-log"


async def test_failed_delivery_writes_no_log(email_logs: EmailLogStore) -> None:
    transport = MagicMock()
    transport.name = "resend"
    transport.deliver = AsyncMock(side_effect=MailSendError("boom", provider="resend"))
    sender = MailSender(transport=transport, log_store=email_logs)

    with pytest.raises(MailSendError):
        await _send(sender)
    assert await email_logs.list_for_user("user1") == []


async def test_records_provider_message_id(email_logs: EmailLogStore) -> None:
    transport = MagicMock()
    transport.name = "resend"
    transport.deliver = AsyncMock(return_value="msg_123")
    sender = MailSender(transport=transport, log_store=email_logs)

    record = await _send(sender)
    assert record.message_id == "msg_123"
    assert sender.provider == "resend"


async def test_close_closes_transport(email_logs: EmailLogStore) -> None:
    transport = MagicMock()
    transport.name = "resend"
    transport.close = AsyncMock()
    sender = MailSender(transport=transport, log_store=email_logs)

    await sender.close()
    transport.close.assert_awaited_once()


async def test_close_without_transport_close(email_logs: EmailLogStore) -> None:
    sender = MailSender(transport=DevLogTransport(), log_store=email_logs)
    await sender.close()


async def test_log_list_newest_first(email_logs: EmailLogStore) -> None:
    sender = MailSender(transport=DevLogTransport(), log_store=email_logs)
    first = await _send(sender)
    second = await _send(sender)

    logs = await email_logs.list_for_user("user1")
    assert [log.id for log in logs] == [second.log_id, first.log_id]


# -- Transports ----------------------------------------------------------------


def test_transports_satisfy_protocol() -> None:
    assert isinstance(DevLogTransport(), MailTransport)
    assert isinstance(ResendTransport(api_key="k"), MailTransport)


async def test_dev_transport_logs_body(caplog) -> None:
    with caplog.at_level("INFO", logger="taskflow.mail.transports"):
        assert await DevLogTransport().deliver(EMAIL) is None
    assert "ada@example.com" in caplog.text
    assert "[DEV MAIL]" in caplog.text


async def test_resend_success() -> None:
    transport = ResendTransport(
        api_key="re_test", api_url="https://mail.test", sender="TaskFlow <x@test>"
    )
    session = _mock_session(_mock_response(200, json_data={"id": "msg_1"}))

    with patch.object(transport, "_get_session", return_value=session):
        message_id = await transport.deliver(EMAIL)

    assert message_id == "msg_1"
    session.post.assert_called_once()
    call = session.post.call_args
    assert call.args[0] == "https://mail.test/emails"
    payload = call.kwargs["json"]
    assert payload == {
        "from": "TaskFlow <x@test>",
        "to": ["ada@example.com"],
        "subject": "Hi",
        "html": "<p>Hi</p>",
        "text": "Hi",
    }


async def test_resend_error_status_raises() -> None:
    transport = ResendTransport(api_key="re_test")
    session = _mock_session(_mock_response(422, text="invalid from address"))

    with (
        patch.object(transport, "_get_session", return_value=session),
        pytest.raises(MailSendError, match="status=422") as excinfo,
    ):
        await transport.deliver(EMAIL)

    assert excinfo.value.status == 422
    assert excinfo.value.provider == "resend"


async def test_resend_network_error_raises() -> None:
    transport = ResendTransport(api_key="re_test")
    session = MagicMock()
    session.post = MagicMock(side_effect=aiohttp.ClientConnectionError("refused"))

    with (
        patch.object(transport, "_get_session", return_value=session),
        pytest.raises(MailSendError, match="request failed"),
    ):
        await transport.deliver(EMAIL)


def test_transport_from_settings_dev_without_key() -> None:
    with patch("taskflow.mail.transports.settings") as mock_settings:
        mock_settings.use_dev_mail.return_value = True
        assert isinstance(transport_from_settings(), DevLogTransport)


def test_transport_from_settings_resend_with_key() -> None:
    with patch("taskflow.mail.transports.settings") as mock_settings:
        mock_settings.use_dev_mail.return_value = False
        mock_settings.resend_api_key = "re_live"
        mock_settings.resend_api_url = "https://api.resend.com"
        mock_settings.email_from = "TaskFlow <noreply@taskflow.app>"
        mock_settings.mail_timeout_seconds = 15.0
        assert isinstance(transport_from_settings(), ResendTransport)
