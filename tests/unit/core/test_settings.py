import pytest
import structlog

from warden.core.config.database import DatabaseSettings
from warden.core.config.email import EmailSettings
from warden.core.config.settings import Settings
from warden.core.logging import configure_logging, mask_email


def test_database_url_is_assembled_for_asyncpg():
    db_settings = DatabaseSettings(
        POSTGRES_USER="app",
        POSTGRES_PASSWORD="pw",
        POSTGRES_HOST="db",
        POSTGRES_PORT=6543,
        POSTGRES_DB="accounts",
    )
    assert db_settings.DATABASE_URL == "postgresql+asyncpg://app:pw@db:6543/accounts"
    assert db_settings.DB_QUERY_TIMEOUT_SECONDS == 3.0


def test_explicit_database_url_wins():
    url = "postgresql+asyncpg://u:p@elsewhere:5432/x"
    assert DatabaseSettings(DATABASE_URL=url).DATABASE_URL == url


def test_email_defaults_follow_delivery_policy():
    email_settings = EmailSettings()
    assert email_settings.EMAIL_SEND_ATTEMPTS == 3
    assert email_settings.EMAIL_RETRY_DELAY_SECONDS == 0.5
    assert email_settings.EMAIL_STRICT_DELIVERY is False


@pytest.mark.parametrize(
    "app_env, expected",
    [("development", True), ("test", True), ("staging", False), ("production", False)],
)
def test_email_test_mode_is_forced_outside_deployed_environments(app_env, expected):
    assert Settings(APP_ENV=app_env, EMAIL_TEST_MODE=False).EMAIL_TEST_MODE is expected


def test_bcrypt_work_factor_default():
    assert Settings().BCRYPT_WORK_FACTOR == 12


@pytest.mark.parametrize(
    "email, masked",
    [
        ("alice@example.com", "ali***@example.com"),
        ("al@example.com", "al@example.com"),
        ("not-an-email", "unknown"),
        (None, "unknown"),
    ],
)
def test_mask_email(email, masked):
    assert mask_email(email) == masked


def test_configure_logging_selects_renderer():
    try:
        configure_logging(log_level="debug", json_logs=True)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
    finally:
        structlog.reset_defaults()
