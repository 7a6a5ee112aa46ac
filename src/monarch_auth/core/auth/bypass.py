"""Bypass authentication provider.

Admits a fixed set of operator accounts without checking their password.
It sits in front of the credential-checking provider so those accounts
never reach it.
"""

import logging
from typing import Iterable

from .provider import AuthProvider, UserDirectory
from monarch_auth.domain.models import (
    USERNAME_PASSWORD,
    Admitted,
    AuthenticationDecision,
    AuthenticationRequest,
    Deferred,
    Principal,
    Rejected,
    RejectionReason,
)

logger = logging.getLogger(__name__)


class BypassAuthProvider(AuthProvider):
    """Credential-less login for allow-listed identifiers.

    - Identifier on the allow-list and present in the directory: Admitted,
      the presented credential is never looked at.
    - Identifier on the allow-list but unknown: Rejected(USER_NOT_FOUND).
      The provider owns these identifiers, so it does not defer.
    - Any other identifier: Deferred.

    Configuration:
        EXEMPT_IDENTIFIERS=opsadmin,support
    """

    name = "bypass"

    def __init__(self, directory: UserDirectory, exempt_identifiers: Iterable[str]):
        """Initialize bypass provider.

        Args:
            directory: User directory used to load the account
            exempt_identifiers: Identifiers admitted without a password
        """
        self.directory = directory
        self.exempt_identifiers = frozenset(exempt_identifiers)

    def supports(self, kind: str) -> bool:
        return kind == USERNAME_PASSWORD

    async def authenticate(self, request: AuthenticationRequest) -> AuthenticationDecision:
        identifier = request.identifier
        if identifier not in self.exempt_identifiers:
            return Deferred

        user = await self.directory.find_user_by_identifier(identifier)
        if user is None or not user.is_active:
            logger.warning(f"Bypass login failed: User not found or inactive (user_code: {identifier})")
            return Rejected(
                RejectionReason.USER_NOT_FOUND,
                f"User not found with username: {identifier}",
            )

        logger.warning(f"Bypass login without password check: {identifier} ({user.user_no})")
        return Admitted(
            Principal(user=user, authorities=user.authorities, provider=self.name)
        )
