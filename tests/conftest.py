import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.ext.asyncio import AsyncSession

from warden.core.config.email import EmailSettings
from warden.domain.services.token import TokenService
from warden.infrastructure.repositories.in_memory import InMemoryTokenRepository, InMemoryUserRepository


@pytest.fixture
def user_repository():
    return InMemoryUserRepository()


@pytest.fixture
def token_repository():
    return InMemoryTokenRepository()


@pytest.fixture
def token_service(token_repository):
    return TokenService(token_repository)


@pytest_asyncio.fixture
async def db_session():
    """Provides a mocked asynchronous database session."""
    mock_session = AsyncMock(spec=AsyncSession)
    mock_session.execute = AsyncMock(return_value=MagicMock())
    mock_session.commit = AsyncMock()
    mock_session.rollback = AsyncMock()
    return mock_session


@pytest.fixture
def email_settings():
    """SMTP settings pointing at a host that is never contacted in tests."""
    return EmailSettings(
        EMAIL_TEST_MODE=False,
        SMTP_HOST="smtp.test.invalid",
        SMTP_PORT=2525,
        SMTP_USERNAME="mailer",
        SMTP_PASSWORD="secret",
        SMTP_USE_TLS=False,
        SMTP_USE_SSL=False,
        FROM_EMAIL="noreply@example.com",
        FROM_NAME="Warden",
        EMAIL_SEND_ATTEMPTS=3,
        EMAIL_RETRY_DELAY_SECONDS=0.5,
        EMAIL_STRICT_DELIVERY=False,
    )


@pytest.fixture
def recorded_sleeps():
    """An async sleep replacement that records requested delays instead of waiting."""
    delays = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    fake_sleep.delays = delays
    return fake_sleep
