"""Provider chain coordinator.

Delegates a login attempt through an ordered list of providers until one
returns a terminal decision.
"""

import logging
from typing import Iterable

from .provider import AuthProvider
from monarch_auth.domain.models import (
    Admitted,
    AuthenticationDecision,
    AuthenticationRequest,
    Deferred,
    Rejected,
    RejectionReason,
)

logger = logging.getLogger(__name__)


class ProviderChain:
    """Ordered, immutable list of authentication providers.

    The first provider returning Admitted or Rejected wins; later providers
    are never consulted. Deferred moves on to the next provider. When every
    provider defers (or none supports the request) the attempt is rejected
    with NO_PROVIDER_AVAILABLE.

    Holds no per-request state and is safe to share between concurrent
    requests.
    """

    def __init__(self, providers: Iterable[AuthProvider]):
        self._providers = tuple(providers)

    @property
    def providers(self) -> tuple[AuthProvider, ...]:
        return self._providers

    async def authenticate(self, request: AuthenticationRequest) -> AuthenticationDecision:
        """Run the login attempt through the chain.

        Args:
            request: The login attempt

        Returns:
            Admitted or Rejected (never Deferred)

        Raises:
            DirectoryUnavailableError: Propagated unchanged from providers
        """
        for provider in self._providers:
            if not provider.supports(request.kind):
                continue

            decision = await provider.authenticate(request)
            if decision is Deferred:
                logger.debug(f"{provider.__class__.__name__} deferred '{request.identifier}'")
                continue

            if isinstance(decision, Admitted):
                logger.info(
                    f"Login admitted by {provider.__class__.__name__}: {request.identifier}"
                )
            elif isinstance(decision, Rejected):
                logger.warning(
                    f"Login rejected by {provider.__class__.__name__}: "
                    f"{request.identifier} ({decision.reason.value})"
                )
            return decision

        logger.error(
            f"No authentication provider handled '{request.identifier}' "
            f"(kind={request.kind}, providers={len(self._providers)})"
        )
        return Rejected(
            RejectionReason.NO_PROVIDER_AVAILABLE,
            "No authentication provider is available for this request",
        )
