"""Abstract authentication provider interface.

This module defines the contract every provider in the login chain
implements. The chain consults providers in a fixed priority order; a
provider either answers with a terminal decision or defers to the next one.
"""

from abc import ABC, abstractmethod
from typing import Protocol, Optional

from monarch_auth.domain.models import (
    AuthenticationDecision,
    AuthenticationRequest,
    UserRecord,
)


class UserDirectory(Protocol):
    """Read access to stored user accounts.

    Implementations return active accounts only and raise
    DirectoryUnavailableError when the backing store cannot be queried.
    """

    async def find_user_by_identifier(self, identifier: str) -> Optional[UserRecord]:
        ...


class AuthProvider(ABC):
    """Abstract interface for login providers.

    Example:
        chain = ProviderChain([BypassAuthProvider(...), LocalAuthProvider(...)])
        decision = await chain.authenticate(AuthenticationRequest("jdoe", "secret"))
    """

    #: Short name recorded on the Principal
    name: str = "provider"

    @abstractmethod
    def supports(self, kind: str) -> bool:
        """Return True if this provider can handle requests of the given kind.

        Args:
            kind: Request kind (see AuthenticationRequest.kind)
        """
        pass

    @abstractmethod
    async def authenticate(self, request: AuthenticationRequest) -> AuthenticationDecision:
        """Decide a login attempt.

        Args:
            request: The login attempt

        Returns:
            Admitted or Rejected to stop the chain, Deferred to pass the
            request on to the next provider

        Raises:
            DirectoryUnavailableError: If the user directory cannot be queried
        """
        pass
