from __future__ import annotations

import os
import sys
from datetime import datetime
from pathlib import Path

import pytest
from cryptography.fernet import Fernet

os.environ["ENV"] = "production"
os.environ["FERNET_SECRET"] = Fernet.generate_key().decode()
os.environ["GUARDIAN_TIMEZONE"] = "UTC"
os.environ["GUARDIAN_WRITE_RATE"] = "1000/minute"
os.environ["DATABASE_URL"] = "sqlite://"

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy.orm import sessionmaker  # noqa: E402

from guardian.models.database import build_engine  # noqa: E402
from guardian.models.migrations import ensure_schema  # noqa: E402
from guardian.services.mail_relay_client import SendResult  # noqa: E402
from guardian.services.notification_dispatcher import NotificationDispatcher  # noqa: E402
from guardian.services.profile_service import save_profile  # noqa: E402
from guardian.services.watchdog import Watchdog  # noqa: E402

NOW = datetime(2026, 3, 10, 12, 0, 0)


class FakeSurface:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[tuple[str, str]] = []

    def __call__(self, title: str, body: str) -> None:
        self.calls.append((title, body))
        if self.fail:
            raise RuntimeError("notification daemon unavailable")

    def titles(self) -> list[str]:
        return [title for title, _ in self.calls]


class FakeRelay:
    def __init__(self, success: bool = True) -> None:
        self.success = success
        self.messages = []

    def send(self, message) -> SendResult:
        self.messages.append(message)
        if self.success:
            return SendResult(success=True)
        return SendResult(success=False, reason="connection refused")


@pytest.fixture
def engine(tmp_path: Path):
    eng = build_engine(f"sqlite:///{tmp_path / 'guardian.sqlite'}")
    ensure_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def surface() -> FakeSurface:
    return FakeSurface()


@pytest.fixture
def relay() -> FakeRelay:
    return FakeRelay()


@pytest.fixture
def watchdog(surface: FakeSurface, relay: FakeRelay, session_factory) -> Watchdog:
    dispatcher = NotificationDispatcher(surface=surface, relay_factory=lambda profile: relay)
    return Watchdog(dispatcher=dispatcher, session_factory=session_factory, soft_pulse_bonus_hours=6)


@pytest.fixture
def profile_data() -> dict[str, object]:
    return {
        "user_name": "Ada Lovelace",
        "user_email": "ada@example.com",
        "contact_name": "Charles",
        "contact_email": "charles@example.com",
        "contact_phone": "+44 20 0000 0000",
        "owner_birthday": None,
        "danger_threshold_days": 2,
        "smtp_host": "smtp.example.com",
        "smtp_port": 587,
        "smtp_user": "guardian@example.com",
        "smtp_pass": "s3cret",
        "auto_start": False,
    }


@pytest.fixture
def profile(db, profile_data):
    return save_profile(db, profile_data)
