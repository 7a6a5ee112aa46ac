"""Domain models for Monarch Auth Service"""

from monarch_auth.domain.models.api_auth import (
    AuthError,
    AuthErrorResponse,
    LoginResponse,
    LogoutResponse,
    UserInfoResponse,
)
from monarch_auth.domain.models.auth import (
    USERNAME_PASSWORD,
    Admitted,
    AuthenticationDecision,
    AuthenticationRequest,
    Deferred,
    LockoutDecision,
    Principal,
    Rejected,
    RejectionReason,
    UserRecord,
    to_int,
)

__all__ = [
    # Auth models
    "USERNAME_PASSWORD",
    "Admitted",
    "AuthenticationDecision",
    "AuthenticationRequest",
    "Deferred",
    "LockoutDecision",
    "Principal",
    "Rejected",
    "RejectionReason",
    "UserRecord",
    "to_int",
    # API models
    "AuthError",
    "AuthErrorResponse",
    "LoginResponse",
    "LogoutResponse",
    "UserInfoResponse",
]
