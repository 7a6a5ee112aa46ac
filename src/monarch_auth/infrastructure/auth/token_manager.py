"""Access Token Manager

Purpose: Turn an admitted Principal into a signed session token

Tokens are HS256 JWTs. Logout revokes a token by storing its ``jti`` in
Redis until the token would have expired anyway.

Storage Schema:
- auth:revoked:{jti} -> "1" (TTL = remaining token lifetime)
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from redis.asyncio import Redis
from redis.exceptions import RedisError

from monarch_auth.core.auth.exceptions import TokenError
from monarch_auth.domain.models import Principal

logger = logging.getLogger(__name__)

# In-memory revocation list: jti -> exp timestamp (fallback when Redis is unavailable)
# WARNING: This only works for single-instance deployments!
_memory_revoked: Dict[str, float] = {}


def _prune_memory_revoked() -> None:
    """Drop in-memory revocations whose token has expired anyway"""
    now = datetime.now(timezone.utc).timestamp()
    for jti in [jti for jti, exp in _memory_revoked.items() if exp <= now]:
        del _memory_revoked[jti]


@dataclass
class IssuedToken:
    """Result of token creation"""

    access_token: str
    expires_in: int
    token_type: str = "bearer"


class AccessTokenManager:
    """Issues, validates and revokes access tokens

    The token lifetime is the user's CONN_DUR (minutes) when set, otherwise
    the configured default.
    """

    def __init__(
        self,
        redis_client: Optional[Redis],
        secret_key: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 60,
    ):
        """Initialize token manager

        Args:
            redis_client: Redis connection for the revocation list (None: memory only)
            secret_key: Secret key for JWT signing
            algorithm: JWT signing algorithm
            access_token_expire_minutes: Default token TTL in minutes
        """
        self.redis = redis_client
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.default_expire = timedelta(minutes=access_token_expire_minutes)
        self.revoked_key_pattern = "auth:revoked:{}"

        if secret_key == "dev-secret-change-in-production":
            logger.warning(
                "Using default JWT_SECRET_KEY! "
                "Set JWT_SECRET_KEY environment variable in production!"
            )

    def create_token(self, principal: Principal) -> IssuedToken:
        """Create an access token for an admitted principal

        Args:
            principal: Principal returned by the provider chain

        Returns:
            IssuedToken with encoded JWT and lifetime in seconds
        """
        user = principal.user
        expire_delta = self.default_expire
        if user.conn_dur and user.conn_dur > 0:
            expire_delta = timedelta(minutes=user.conn_dur)

        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user.user_no),
            "user_code": user.user_code,
            "user_name": user.user_name,
            "tenant_id": user.tenant_id,
            "authorities": sorted(principal.authorities),
            "provider": principal.provider,
            "type": "access",
            "iat": now,
            "exp": now + expire_delta,
            "jti": str(uuid.uuid4()),
        }

        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        logger.info(f"Access token issued for {user.user_code} ({user.user_no})")
        return IssuedToken(access_token=token, expires_in=int(expire_delta.total_seconds()))

    async def validate_token(self, token: str) -> Dict[str, Any]:
        """Validate an access token

        Args:
            token: Encoded JWT

        Returns:
            Decoded claims

        Raises:
            TokenError: If the token is invalid, expired or revoked
        """
        claims = self._decode(token)
        if claims.get("type") != "access" or not claims.get("sub") or not claims.get("jti"):
            raise TokenError("Invalid token payload")

        if await self._is_revoked(claims["jti"]):
            raise TokenError("Token has been revoked")

        return claims

    async def revoke_token(self, token: str) -> None:
        """Revoke an access token until its expiry

        Args:
            token: Encoded JWT

        Raises:
            TokenError: If the token cannot be decoded
        """
        claims = self._decode(token, verify_exp=False)
        jti = claims.get("jti")
        if not jti:
            raise TokenError("Token has no jti claim")

        exp = claims.get("exp", 0)
        ttl = int(exp - datetime.now(timezone.utc).timestamp())
        if ttl <= 0:
            logger.debug("Token already expired, nothing to revoke")
            return

        try:
            if self.redis is None:
                raise RedisError("Redis not configured")
            await self.redis.setex(self.revoked_key_pattern.format(jti), ttl, "1")
            logger.debug(f"Token revoked in Redis (TTL: {ttl}s)")
        except RedisError as e:
            logger.warning(
                f"Redis unavailable for token revocation, using in-memory fallback: {e}. "
                "WARNING: This only works for single-instance deployments!"
            )
            _memory_revoked[jti] = exp

    async def _is_revoked(self, jti: str) -> bool:
        _prune_memory_revoked()
        if jti in _memory_revoked:
            return True
        if self.redis is None:
            return False
        try:
            return await self.redis.exists(self.revoked_key_pattern.format(jti)) > 0
        except RedisError as e:
            logger.debug(f"Redis unavailable for revocation check, using in-memory: {e}")
            return False

    def _decode(self, token: str, verify_exp: bool = True) -> Dict[str, Any]:
        try:
            return jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"verify_exp": verify_exp},
            )
        except JWTError as e:
            logger.warning(f"Token validation failed: {e}")
            raise TokenError(f"Invalid token: {e}") from e
