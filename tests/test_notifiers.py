"""Tests for the delivery transports and the notifier factory."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import aiosmtplib
import httpx
import pytest
import smpplib.exceptions

from otp_gateway.config import Settings
from otp_gateway.exceptions import BadRequestError, NotificationError
from otp_gateway.notifications.base import NotificationChannel
from otp_gateway.notifications.emailer import EmailNotifier
from otp_gateway.notifications.factory import NotifierFactory
from otp_gateway.notifications.file import FileNotifier
from otp_gateway.notifications.sms import SmsNotifier
from otp_gateway.notifications.telegram import TelegramNotifier


@pytest.fixture
def transport_settings() -> Settings:
    return Settings(
        _env_file=None,
        smtp_host="smtp.test",
        smtp_port=2525,
        smtp_username="mailer",
        smtp_password="mail-pw",
        email_from="otp@test",
        smpp_host="smsc.test",
        smpp_port=2776,
        smpp_system_id="sys",
        smpp_password="smpp-pw",
        smpp_system_type="OTP",
        smpp_source_addr="OTPSvc",
        telegram_api_url="https://tg.test/bot",
        telegram_token="TOKEN",
        telegram_chat_id="777",
    )


# ── File ─────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_file_notifier_appends_and_creates_dirs(tmp_path, clock):
    target = tmp_path / "nested" / "dir" / "codes.txt"
    notifier = FileNotifier(clock)

    await notifier.send_code(str(target), "123456")
    clock.advance(seconds=1)
    await notifier.send_code(str(target), "654321")

    assert target.read_text().splitlines() == [
        "2026-01-01 12:00:00 - OTP: 123456",
        "2026-01-01 12:00:01 - OTP: 654321",
    ]


@pytest.mark.asyncio
async def test_file_notifier_wraps_os_errors(tmp_path, clock):
    with pytest.raises(NotificationError):
        await FileNotifier(clock).send_code(str(tmp_path), "123456")


# ── Telegram ─────────────────────────────────────────────

@pytest.mark.asyncio
async def test_telegram_sends_get_with_chat_and_text(transport_settings):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    notifier = TelegramNotifier(transport_settings, transport=httpx.MockTransport(handler))
    await notifier.send_code("42", "123456")

    (request,) = seen
    assert request.method == "GET"
    assert request.url.path == "/botTOKEN/sendMessage"
    assert request.url.params["chat_id"] == "42"
    assert request.url.params["text"] == "Your one-time confirmation code is: 123456"


@pytest.mark.asyncio
async def test_telegram_blank_recipient_uses_default_chat(transport_settings):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200)

    notifier = TelegramNotifier(transport_settings, transport=httpx.MockTransport(handler))
    await notifier.send_code("  ", "123456")
    assert seen[0].url.params["chat_id"] == "777"


@pytest.mark.asyncio
async def test_telegram_non_200_is_failure(transport_settings):
    notifier = TelegramNotifier(
        transport_settings,
        transport=httpx.MockTransport(lambda request: httpx.Response(403, text="forbidden")),
    )
    with pytest.raises(NotificationError, match="403"):
        await notifier.send_code("42", "123456")


@pytest.mark.asyncio
async def test_telegram_transport_error_is_failure(transport_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    notifier = TelegramNotifier(transport_settings, transport=httpx.MockTransport(handler))
    with pytest.raises(NotificationError):
        await notifier.send_code("42", "123456")


# ── Email ────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_email_sends_authenticated_message(transport_settings):
    with patch("aiosmtplib.send", new=AsyncMock()) as send:
        await EmailNotifier(transport_settings).send_code("alice@example.com", "123456")

    send.assert_awaited_once()
    msg = send.await_args.args[0]
    assert msg["Subject"] == "Your OTP Code"
    assert msg["To"] == "alice@example.com"
    assert msg["From"] == "otp@test"
    assert "123456" in msg.get_content()
    assert send.await_args.kwargs["hostname"] == "smtp.test"
    assert send.await_args.kwargs["port"] == 2525
    assert send.await_args.kwargs["username"] == "mailer"
    assert send.await_args.kwargs["password"] == "mail-pw"


@pytest.mark.asyncio
async def test_email_failure_is_wrapped(transport_settings):
    failing = AsyncMock(side_effect=aiosmtplib.SMTPException("relay denied"))
    with patch("aiosmtplib.send", new=failing):
        with pytest.raises(NotificationError):
            await EmailNotifier(transport_settings).send_code("alice@example.com", "123456")


# ── SMS ──────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_sms_binds_submits_and_unbinds(transport_settings):
    with patch("smpplib.client.Client") as client_cls:
        await SmsNotifier(transport_settings).send_code("+15551234567", "123456")

    client_cls.assert_called_once_with("smsc.test", 2776)
    client = client_cls.return_value
    client.connect.assert_called_once()
    bind_kwargs = client.bind_transmitter.call_args.kwargs
    assert bind_kwargs["system_id"] == "sys"
    assert bind_kwargs["password"] == "smpp-pw"
    assert bind_kwargs["system_type"] == "OTP"
    submit_kwargs = client.send_message.call_args.kwargs
    assert submit_kwargs["destination_addr"] == "+15551234567"
    assert submit_kwargs["source_addr"] == "OTPSvc"
    assert submit_kwargs["short_message"] == b"Your OTP code: 123456"
    client.unbind.assert_called_once()
    client.disconnect.assert_called_once()


@pytest.mark.asyncio
async def test_sms_bind_failure_is_wrapped(transport_settings):
    with patch("smpplib.client.Client") as client_cls:
        client = client_cls.return_value
        client.bind_transmitter.side_effect = smpplib.exceptions.PDUError("bind status 13")
        with pytest.raises(NotificationError, match="SMS sending failed"):
            await SmsNotifier(transport_settings).send_code("+15551234567", "123456")

    client.send_message.assert_not_called()
    client.unbind.assert_not_called()
    client.disconnect.assert_called_once()


# ── Factory ──────────────────────────────────────────────

def test_factory_builds_every_channel(transport_settings, clock):
    factory = NotifierFactory.from_settings(transport_settings, clock)
    assert set(factory.channels) == set(NotificationChannel)
    assert isinstance(factory.get(NotificationChannel.EMAIL), EmailNotifier)
    assert isinstance(factory.get(NotificationChannel.SMS), SmsNotifier)
    assert isinstance(factory.get(NotificationChannel.TELEGRAM), TelegramNotifier)
    assert isinstance(factory.get(NotificationChannel.FILE), FileNotifier)


def test_factory_reuses_constructed_transport(transport_settings, clock):
    factory = NotifierFactory.from_settings(transport_settings, clock)
    assert factory.get(NotificationChannel.SMS) is factory.get(NotificationChannel.SMS)


def test_factory_unknown_channel(clock):
    factory = NotifierFactory([FileNotifier(clock)])
    with pytest.raises(BadRequestError):
        factory.get(NotificationChannel.SMS)
