"""Shared fixtures: a per-test SQLite database, a frozen clock, fake transports."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from otp_gateway.config import Settings
from otp_gateway.database.engine import build_engine, build_session_factory, init_db
from otp_gateway.exceptions import NotificationError
from otp_gateway.main import create_app
from otp_gateway.notifications.base import NotificationChannel, Notifier
from otp_gateway.notifications.factory import NotifierFactory
from otp_gateway.notifications.file import FileNotifier
from otp_gateway.services.container import build_services


class FrozenClock:
    """Clock that only moves when a test tells it to."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **delta: float) -> None:
        self.current += timedelta(**delta)


class RecordingNotifier(Notifier):
    """In-memory transport that records deliveries or fails on demand."""

    def __init__(self, channel: NotificationChannel) -> None:
        self._channel = channel
        self.sent: list[tuple[str, str]] = []
        self.fail = False

    @property
    def channel(self) -> NotificationChannel:
        return self._channel

    async def send_code(self, recipient: str, code: str) -> None:
        if self.fail:
            raise NotificationError(f"{self._channel.value} delivery failed")
        self.sent.append((recipient, code))


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC))


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        bcrypt_rounds=4,
    )


@pytest_asyncio.fixture
async def session_factory(test_settings):
    """Create tables in a fresh file DB, seed the config row, yield the factory."""
    engine = build_engine(test_settings.database_url)
    factory = build_session_factory(engine)
    await init_db(engine, factory, default_length=6, default_ttl_seconds=300)
    yield factory
    await engine.dispose()


@pytest.fixture
def email_notifier() -> RecordingNotifier:
    return RecordingNotifier(NotificationChannel.EMAIL)


@pytest.fixture
def notifier_factory(clock, email_notifier) -> NotifierFactory:
    return NotifierFactory(
        [
            email_notifier,
            RecordingNotifier(NotificationChannel.SMS),
            RecordingNotifier(NotificationChannel.TELEGRAM),
            FileNotifier(clock),
        ]
    )


@pytest.fixture
def services(test_settings, session_factory, clock, notifier_factory):
    return build_services(test_settings, session_factory, clock, notifier_factory)


@pytest_asyncio.fixture
async def client(services):
    """HTTP client bound to an app wired with the test services (no lifespan)."""
    app = create_app()
    app.state.services = services
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http


@pytest.fixture
def sign_in(client):
    """Return a coroutine that registers an account and yields its bearer token."""

    async def _sign_in(username: str, password: str = "secret-pw", role: str = "USER") -> str:
        resp = await client.post(
            "/signup", json={"username": username, "password": password, "role": role}
        )
        assert resp.status_code == 201, resp.text
        resp = await client.post("/signin", json={"username": username, "password": password})
        assert resp.status_code == 200, resp.text
        return resp.json()["token"]

    return _sign_in
