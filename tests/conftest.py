from datetime import datetime, timedelta, timezone
from typing import List, Tuple

import pytest
from fastapi.testclient import TestClient

from app.application.services.message_service import MessageService
from app.application.services.verification_service import VerificationService
from app.core.app_factory import create_application
from app.infrastructure.persistence.sqlite import SQLitePersistence
from app.services.account_service import AccountService
from app.services.email_service import EmailService

T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingEmailService:
    """Stands in for EmailService and keeps every code it was asked to send."""

    def __init__(self) -> None:
        self.sent: List[Tuple[str, str, str]] = []
        self.succeed = True

    def send_verification_email(self, to_email: str, username: str, verify_code: str) -> bool:
        self.sent.append((to_email, username, verify_code))
        return self.succeed


@pytest.fixture
def persistence(tmp_path):
    store = SQLitePersistence(tmp_path / "feedback.db")
    yield store
    store.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def email():
    return RecordingEmailService()


@pytest.fixture
def verification_service(persistence, email, clock):
    return VerificationService(persistence, email, clock=clock)


@pytest.fixture
def account_service(persistence, verification_service):
    return AccountService(persistence, verification_service, jwt_secret="test-secret")


@pytest.fixture
def message_service(persistence):
    return MessageService(persistence)


@pytest.fixture
def make_account(persistence):
    def _make(username: str = "alice", email: str = None, verified: bool = True):
        account = persistence.create_account(
            username=username,
            email=email or f"{username}@example.com",
            password_hash="not-a-real-hash",
        )
        if verified:
            account = persistence.mark_account_verified(account.id)
        return account

    return _make


@pytest.fixture
def outbox(monkeypatch):
    sent: List[Tuple[str, str, str]] = []
    state = {"succeed": True}

    def fake_send(self, to_email: str, username: str, verify_code: str) -> bool:
        sent.append((to_email, username, verify_code))
        return state["succeed"]

    monkeypatch.setattr(EmailService, "send_verification_email", fake_send)

    class Outbox:
        messages = sent

        @staticmethod
        def fail_next_sends() -> None:
            state["succeed"] = False

        @staticmethod
        def code_for(username: str) -> str:
            return [code for _, name, code in sent if name == username][-1]

    return Outbox


@pytest.fixture
def client(tmp_path, monkeypatch, outbox):
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "api.db"))
    monkeypatch.setenv("JWT_SECRET", "api-test-secret")
    monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)
    with TestClient(create_application()) as test_client:
        yield test_client
