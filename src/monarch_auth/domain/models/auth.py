"""Authentication Data Models

Purpose: Define data structures for users, principals and login decisions

Key Components:
- UserRecord: Snapshot of an M_USER row as read by the user directory
- Principal: Identity handed to the session layer after admission
- AuthenticationRequest: One login attempt
- AuthenticationDecision: Admitted / Deferred / Rejected outcome
- RejectionReason, LockoutDecision: Decision kinds
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, Optional, Union

USERNAME_PASSWORD = "username_password"

DEFAULT_AUTHORITY = "ROLE_USER"


def to_int(value: Any) -> Optional[int]:
    """Normalize a numeric column value to int, truncating toward zero.

    Database drivers hand back NUMBER columns as int, float, Decimal or
    string depending on the backend.

    Raises:
        ValueError: If the value is not numeric
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float, Decimal)):
        return int(value)
    try:
        return int(Decimal(str(value).strip()))
    except (InvalidOperation, ValueError, OverflowError) as e:
        raise ValueError(f"Not a number: {value!r}") from e


def _column_int(data: Mapping[str, Any], column: str) -> Optional[int]:
    try:
        return to_int(data.get(column))
    except ValueError as e:
        raise ValueError(f"Column {column}: {e}") from e


class RejectionReason(Enum):
    """Why a login attempt was rejected"""
    USER_NOT_FOUND = "user_not_found"
    ACCOUNT_LOCKED = "account_locked"
    NO_PROVIDER_AVAILABLE = "no_provider_available"
    CREDENTIAL_MISMATCH = "credential_mismatch"


class LockoutDecision(Enum):
    """Account lockout policy outcome"""
    ALLOW = "allow"
    LOCKED = "locked"


@dataclass(frozen=True)
class UserRecord:
    """User account snapshot

    Read once per authentication attempt. The auth core never mutates it;
    failure counter bookkeeping belongs to whoever owns the M_USER table.

    Attributes:
        user_no: Internal user number (M_USER_NO)
        user_code: Login identifier (USER_CODE)
        password_hash: Stored bcrypt hash (USER_PASSWORD)
        login_fail_count: Consecutive failed logins (LOGIN_FAIL_CNT)
        is_active: USE_FLAG == '1'
        tenant_id: Member site number (M_USITE_NO)
        user_name: Display name (USER_NAME)
        conn_dur: Session length in minutes (CONN_DUR)
        auth_num: Permission grade (AUTH_NUM)
        authorities: Capability tokens granted to the user
    """
    user_no: int
    user_code: str
    password_hash: Optional[str] = None
    login_fail_count: int = 0
    is_active: bool = True
    tenant_id: Optional[int] = None
    user_name: Optional[str] = None
    conn_dur: Optional[int] = None
    auth_num: Optional[int] = None
    authorities: frozenset[str] = field(default_factory=lambda: frozenset({DEFAULT_AUTHORITY}))

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "UserRecord":
        """Create from a raw M_USER row (column names as keys)

        Raises:
            ValueError: If a numeric column holds a non-numeric value
        """
        data = {str(key).upper(): value for key, value in row.items()}

        auth_num = _column_int(data, "AUTH_NUM")
        authorities = {DEFAULT_AUTHORITY}
        if auth_num is not None:
            authorities.add(f"AUTH_{auth_num}")

        use_flag = data.get("USE_FLAG")
        return cls(
            user_no=_column_int(data, "M_USER_NO"),
            user_code=data["USER_CODE"],
            password_hash=data.get("USER_PASSWORD"),
            login_fail_count=max(_column_int(data, "LOGIN_FAIL_CNT") or 0, 0),
            is_active=use_flag is None or str(use_flag).strip() == "1",
            tenant_id=_column_int(data, "M_USITE_NO"),
            user_name=data.get("USER_NAME"),
            conn_dur=_column_int(data, "CONN_DUR"),
            auth_num=auth_num,
            authorities=frozenset(authorities),
        )

    def to_public_dict(self) -> dict:
        """User info payload for the front end (no credentials)"""
        return {
            "M_USITE_NO": self.tenant_id,
            "M_USER_NO": self.user_no,
            "USER_NAME": self.user_name,
            "USER_CODE": self.user_code,
        }


@dataclass(frozen=True)
class Principal:
    """Authenticated identity produced on admission"""
    user: UserRecord
    authorities: frozenset[str]
    provider: str


@dataclass(frozen=True)
class AuthenticationRequest:
    """A single login attempt

    Attributes:
        identifier: Presented login identifier
        credential: Presented password; may be absent
        kind: Request shape, used by providers' supports() check
    """
    identifier: str
    credential: Optional[str] = field(default=None, repr=False)
    kind: str = USERNAME_PASSWORD


@dataclass(frozen=True)
class Admitted:
    principal: Principal


@dataclass(frozen=True)
class Rejected:
    reason: RejectionReason
    message: str = ""


@dataclass(frozen=True)
class _Deferred:
    """The provider declines to handle the request"""

    def __repr__(self) -> str:
        return "Deferred"


Deferred = _Deferred()

AuthenticationDecision = Union[Admitted, Rejected, _Deferred]
