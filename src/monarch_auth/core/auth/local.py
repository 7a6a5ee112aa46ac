"""Local authentication provider (user code/password against M_USER).

Default provider and always the last one in the chain. Looks the user up,
applies the lockout policy, then verifies the bcrypt password hash.
"""

import logging
from typing import Optional

import bcrypt

from .lockout import LockoutPolicy
from .provider import AuthProvider, UserDirectory
from monarch_auth.domain.models import (
    USERNAME_PASSWORD,
    Admitted,
    AuthenticationDecision,
    AuthenticationRequest,
    LockoutDecision,
    Principal,
    Rejected,
    RejectionReason,
)

logger = logging.getLogger(__name__)


def verify_password(password: Optional[str], password_hash: Optional[str]) -> bool:
    """Check a plain password against a stored bcrypt hash.

    Args:
        password: Plain text password
        password_hash: Stored hash ($2a$/$2b$/$2y$ formats)

    Returns:
        True if password matches, False otherwise (including malformed hashes)
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.error("Stored password hash is not a valid bcrypt hash")
        return False


class LocalAuthProvider(AuthProvider):
    """User code/password authentication.

    Order of checks:
    1. Directory lookup (active accounts only) -> USER_NOT_FOUND
    2. Lockout policy -> ACCOUNT_LOCKED
    3. Password verification -> CREDENTIAL_MISMATCH

    The failure counter is only read here; whoever owns M_USER updates it.
    """

    name = "local"

    def __init__(self, directory: UserDirectory, lockout_policy: LockoutPolicy):
        """Initialize local auth provider.

        Args:
            directory: User directory
            lockout_policy: Lockout rule applied after lookup
        """
        self.directory = directory
        self.lockout_policy = lockout_policy

    def supports(self, kind: str) -> bool:
        return kind == USERNAME_PASSWORD

    async def authenticate(self, request: AuthenticationRequest) -> AuthenticationDecision:
        identifier = request.identifier
        logger.info(f"Attempting to load user by user_code: {identifier}")

        user = await self.directory.find_user_by_identifier(identifier)
        if user is None or not user.is_active:
            logger.warning(f"Login failed: User not found or inactive (user_code: {identifier})")
            return Rejected(
                RejectionReason.USER_NOT_FOUND,
                f"User not found with username: {identifier}",
            )

        if self.lockout_policy.evaluate(identifier, user) is LockoutDecision.LOCKED:
            logger.warning(
                f"Login failed: Account locked (user_code: {identifier}, "
                f"failures: {user.login_fail_count})"
            )
            return Rejected(
                RejectionReason.ACCOUNT_LOCKED,
                f"User account is locked due to {self.lockout_policy.threshold} failed login attempts",
            )

        if not verify_password(request.credential, user.password_hash):
            logger.warning(f"Login failed: Invalid password (user_code: {identifier})")
            return Rejected(RejectionReason.CREDENTIAL_MISMATCH, "Invalid username or password")

        return Admitted(
            Principal(user=user, authorities=user.authorities, provider=self.name)
        )
