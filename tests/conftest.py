"""
Shared fixtures.

Everything runs in mock mode: in-memory repositories, in-memory storage and
a mailer that keeps messages in an outbox instead of sending them.
"""

import os

# vidsum.main builds a module-level app on import; keep it off real services
os.environ.setdefault("SNOWFLAKE_MOCK_MODE", "true")
os.environ.setdefault("STORAGE_MOCK_MODE", "true")
os.environ.setdefault("EMAIL_MOCK_MODE", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from tests.helpers import STRONG_PASSWORD, FakeClock, otp_from_text
from vidsum.api.dependencies import ServiceContainer, build_container
from vidsum.config.settings import Settings
from vidsum.main import create_app


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="test",
        jwt_secret="test-secret",
        bcrypt_rounds=4,
        snowflake_mock_mode=True,
        storage_mock_mode=True,
        email_mock_mode=True,
    )


@pytest.fixture
def container(settings: Settings) -> ServiceContainer:
    return build_container(settings)


@pytest.fixture
def client(container: ServiceContainer) -> TestClient:
    return TestClient(create_app(container=container))


@pytest.fixture
def last_otp(container: ServiceContainer):
    """Return the code in the most recent email sent to an address."""
    def _last_otp(email: str) -> str:
        message = container.mailer.last_to(email)
        assert message is not None, f"no email sent to {email}"
        return otp_from_text(message.text)
    return _last_otp


@pytest.fixture
def signup(client: TestClient, last_otp):
    """Register, verify and log in a user; returns auth headers."""
    def _signup(email: str, password: str = STRONG_PASSWORD) -> dict:
        res = client.post("/auth/register", json={"email": email, "password": password})
        assert res.status_code == 201, res.text

        res = client.post("/auth/verify-email", json={"email": email, "otp": last_otp(email)})
        assert res.status_code == 200, res.text

        res = client.post("/auth/login", json={"email": email, "password": password})
        assert res.status_code == 200, res.text
        return {"Authorization": f"Bearer {res.json()['data']['token']}"}
    return _signup
