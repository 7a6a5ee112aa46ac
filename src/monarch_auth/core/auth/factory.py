"""Authentication provider chain factory.

Builds the login chain from configuration. Priority order is fixed:
bypass provider first (when any exempt identifiers are configured), the
credential-checking local provider last.
"""

import logging
from typing import Optional

from .bypass import BypassAuthProvider
from .chain import ProviderChain
from .local import LocalAuthProvider
from .lockout import LockoutPolicy
from .provider import AuthProvider, UserDirectory
from monarch_auth.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

# Global chain instance and its directory (initialized on first call)
_chain_instance: Optional[ProviderChain] = None
_directory_instance = None


def build_provider_chain(
    directory: UserDirectory, settings: Optional[Settings] = None
) -> ProviderChain:
    """Build a provider chain.

    The same exempt identifier set feeds both the bypass provider and the
    lockout policy.

    Args:
        directory: User directory shared by all providers
        settings: Settings (defaults to global settings)

    Returns:
        ProviderChain with the local provider last
    """
    settings = settings or get_settings()
    exempt = frozenset(settings.exempt_identifiers)

    providers: list[AuthProvider] = []
    if exempt:
        providers.append(BypassAuthProvider(directory, exempt))
        logger.warning(
            f"Password bypass enabled for {len(exempt)} identifier(s): {', '.join(sorted(exempt))}"
        )

    lockout_policy = LockoutPolicy.from_settings(settings)
    providers.append(LocalAuthProvider(directory, lockout_policy))

    chain = ProviderChain(providers)
    logger.info(
        "Auth provider chain initialized: "
        + " -> ".join(p.__class__.__name__ for p in chain.providers)
    )
    return chain


def get_provider_chain() -> ProviderChain:
    """Get the process-wide provider chain backed by the SQL user directory.

    Returns:
        Configured ProviderChain instance
    """
    global _chain_instance, _directory_instance

    # Return cached instance
    if _chain_instance is not None:
        return _chain_instance

    from monarch_auth.infrastructure.directory.sql import (
        SqlUserDirectory,
        create_directory_engine,
    )

    settings = get_settings()
    _directory_instance = SqlUserDirectory(create_directory_engine(settings))
    _chain_instance = build_provider_chain(_directory_instance, settings)
    return _chain_instance


def reset_provider_chain() -> None:
    """Forget the global chain and its directory (for testing).

    Does not dispose the directory engine; use close_provider_chain() for that.
    """
    global _chain_instance, _directory_instance
    _chain_instance = None
    _directory_instance = None


async def close_provider_chain() -> None:
    """Release the global chain's directory connections and reset it."""
    global _directory_instance
    if _directory_instance is not None:
        await _directory_instance.close()
        _directory_instance = None
    reset_provider_chain()
