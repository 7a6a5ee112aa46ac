"""Unit tests for AccessTokenManager

Tests token lifecycle operations with mocked Redis.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from jose import jwt
from redis.exceptions import ConnectionError as RedisConnectionError

from monarch_auth.core.auth.exceptions import TokenError
from monarch_auth.domain.models import Principal
from monarch_auth.infrastructure.auth import token_manager as token_manager_module
from monarch_auth.infrastructure.auth.token_manager import AccessTokenManager

SECRET = "test-secret-key"


@pytest.fixture
def mock_redis():
    """Mock Redis client"""
    redis = AsyncMock()
    redis.setex = AsyncMock(return_value=True)
    redis.exists = AsyncMock(return_value=0)
    return redis


@pytest.fixture
def token_manager(mock_redis):
    """Create token manager with mocked Redis"""
    return AccessTokenManager(mock_redis, secret_key=SECRET, access_token_expire_minutes=60)


@pytest.fixture
def principal(make_user):
    user = make_user("jdoe")
    return Principal(user=user, authorities=user.authorities, provider="local")


@pytest.fixture(autouse=True)
def _clear_memory_revocations():
    token_manager_module._memory_revoked.clear()
    yield
    token_manager_module._memory_revoked.clear()


@pytest.mark.unit
class TestCreateToken:
    def test_create_token_claims(self, token_manager, principal):
        issued = token_manager.create_token(principal)
        claims = jwt.decode(issued.access_token, SECRET, algorithms=["HS256"])

        assert claims["sub"] == "1001"
        assert claims["user_code"] == "jdoe"
        assert claims["tenant_id"] == 10
        assert claims["authorities"] == ["AUTH_3", "ROLE_USER"]
        assert claims["provider"] == "local"
        assert claims["type"] == "access"
        assert claims["jti"]
        assert issued.token_type == "bearer"
        assert issued.expires_in == 3600

    def test_conn_dur_sets_lifetime(self, token_manager, make_user):
        """Per-user CONN_DUR (minutes) overrides the default lifetime"""
        user = make_user("jdoe", conn_dur=15)
        issued = token_manager.create_token(Principal(user, user.authorities, "local"))

        assert issued.expires_in == 900

    def test_unique_jti(self, token_manager, principal):
        first = jwt.get_unverified_claims(token_manager.create_token(principal).access_token)
        second = jwt.get_unverified_claims(token_manager.create_token(principal).access_token)

        assert first["jti"] != second["jti"]


@pytest.mark.unit
class TestValidateToken:
    @pytest.mark.asyncio
    async def test_validate_token_success(self, token_manager, principal, mock_redis):
        issued = token_manager.create_token(principal)

        claims = await token_manager.validate_token(issued.access_token)

        assert claims["user_code"] == "jdoe"
        mock_redis.exists.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_validate_invalid_jwt(self, token_manager):
        with pytest.raises(TokenError, match="Invalid token"):
            await token_manager.validate_token("invalid.jwt.token")

    @pytest.mark.asyncio
    async def test_validate_expired_token(self, token_manager):
        now = datetime.now(timezone.utc)
        expired = jwt.encode(
            {"sub": "1", "type": "access", "jti": "x", "iat": now - timedelta(hours=2), "exp": now - timedelta(hours=1)},
            SECRET,
            algorithm="HS256",
        )

        with pytest.raises(TokenError):
            await token_manager.validate_token(expired)

    @pytest.mark.asyncio
    async def test_validate_revoked_token(self, token_manager, principal, mock_redis):
        issued = token_manager.create_token(principal)
        mock_redis.exists.return_value = 1

        with pytest.raises(TokenError, match="revoked"):
            await token_manager.validate_token(issued.access_token)

    @pytest.mark.asyncio
    async def test_validate_wrong_type(self, token_manager):
        token = jwt.encode(
            {"sub": "1", "type": "refresh", "jti": "x", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
            SECRET,
            algorithm="HS256",
        )

        with pytest.raises(TokenError, match="payload"):
            await token_manager.validate_token(token)


@pytest.mark.unit
class TestRevokeToken:
    @pytest.mark.asyncio
    async def test_revoke_stores_jti_with_ttl(self, token_manager, principal, mock_redis):
        issued = token_manager.create_token(principal)
        jti = jwt.get_unverified_claims(issued.access_token)["jti"]

        await token_manager.revoke_token(issued.access_token)

        key, ttl, value = mock_redis.setex.call_args.args
        assert key == f"auth:revoked:{jti}"
        assert 0 < ttl <= 3600
        assert value == "1"

    @pytest.mark.asyncio
    async def test_revoke_falls_back_to_memory(self, token_manager, principal, mock_redis):
        """Redis outage: revocation still applies within this process"""
        mock_redis.setex.side_effect = RedisConnectionError("down")
        mock_redis.exists.side_effect = RedisConnectionError("down")
        issued = token_manager.create_token(principal)

        await token_manager.revoke_token(issued.access_token)

        with pytest.raises(TokenError, match="revoked"):
            await token_manager.validate_token(issued.access_token)

    @pytest.mark.asyncio
    async def test_memory_fallback_forgets_expired_tokens(self, token_manager, principal, mock_redis):
        """Expired entries are dropped from the in-memory list on the next check"""
        mock_redis.setex.side_effect = RedisConnectionError("down")
        mock_redis.exists.side_effect = RedisConnectionError("down")
        issued = token_manager.create_token(principal)
        await token_manager.revoke_token(issued.access_token)
        jti = jwt.get_unverified_claims(issued.access_token)["jti"]
        assert jti in token_manager_module._memory_revoked

        past = datetime.now(timezone.utc).timestamp() - 1
        token_manager_module._memory_revoked["stale-jti"] = past

        assert await token_manager._is_revoked(jti) is True
        assert "stale-jti" not in token_manager_module._memory_revoked
        assert await token_manager._is_revoked("stale-jti") is False

    @pytest.mark.asyncio
    async def test_revoke_garbage_token(self, token_manager):
        with pytest.raises(TokenError):
            await token_manager.revoke_token("garbage")
