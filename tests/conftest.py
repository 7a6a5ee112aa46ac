"""
Pytest configuration and shared fixtures.

Provides fixtures for:
- Test users (UserRecord snapshots with bcrypt hashes)
- A mocked user directory
- Settings with a configured exempt identifier set
"""

from unittest.mock import AsyncMock

import bcrypt
import pytest

from monarch_auth.config.settings import Settings, get_settings
from monarch_auth.core.auth import reset_provider_chain
from monarch_auth.domain.models import UserRecord

TEST_PASSWORD = "monarch123!"
EXEMPT_IDENTIFIERS = ["opsadmin", "support"]


@pytest.fixture(autouse=True)
def _reset_globals():
    """Clear cached settings and provider chain between tests."""
    get_settings.cache_clear()
    reset_provider_chain()
    yield
    get_settings.cache_clear()
    reset_provider_chain()


@pytest.fixture(scope="session")
def password_hash() -> str:
    """bcrypt hash of TEST_PASSWORD (low cost factor to keep tests fast)."""
    return bcrypt.hashpw(TEST_PASSWORD.encode(), bcrypt.gensalt(rounds=4)).decode()


@pytest.fixture
def make_user(password_hash):
    """Factory for UserRecord snapshots."""

    def _make(user_code: str = "jdoe", login_fail_count: int = 0, **overrides) -> UserRecord:
        fields = {
            "user_no": 1001,
            "user_code": user_code,
            "password_hash": password_hash,
            "login_fail_count": login_fail_count,
            "is_active": True,
            "tenant_id": 10,
            "user_name": "John Doe",
            "authorities": frozenset({"ROLE_USER", "AUTH_3"}),
        }
        fields.update(overrides)
        return UserRecord(**fields)

    return _make


@pytest.fixture
def directory():
    """Mock user directory returning no user by default."""
    mock = AsyncMock()
    mock.find_user_by_identifier = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def settings() -> Settings:
    """Settings with two exempt operator accounts."""
    return Settings(
        _env_file=None,
        environment="test",
        exempt_identifiers=EXEMPT_IDENTIFIERS,
        lockout_threshold=5,
        jwt_secret_key="test-secret-key",
    )
