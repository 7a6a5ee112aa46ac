"""Authentication provider chain.

Login attempts are resolved by an ordered chain of providers:
- bypass: credential-less login for configured operator accounts
- local: user code/password against M_USER, with account lockout
"""

from .provider import AuthProvider, UserDirectory
from .chain import ProviderChain
from .bypass import BypassAuthProvider
from .local import LocalAuthProvider
from .lockout import LockoutPolicy
from .factory import (
    build_provider_chain,
    close_provider_chain,
    get_provider_chain,
    reset_provider_chain,
)

__all__ = [
    "AuthProvider",
    "UserDirectory",
    "ProviderChain",
    "BypassAuthProvider",
    "LocalAuthProvider",
    "LockoutPolicy",
    "build_provider_chain",
    "close_provider_chain",
    "get_provider_chain",
    "reset_provider_chain",
]
