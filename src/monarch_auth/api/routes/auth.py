"""Authentication Routes

Form login backed by the provider chain, plus the session endpoints the
back-office front end calls.

Key Endpoints:
- POST /api/login: User code/password login (form encoded)
- POST /api/logout: Revoke the current access token
- GET /api/user/info: Current user info
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Form, Header, HTTPException, status

from monarch_auth.config.settings import get_settings
from monarch_auth.core.auth import ProviderChain, get_provider_chain
from monarch_auth.core.auth.exceptions import DirectoryUnavailableError, TokenError
from monarch_auth.domain.models import (
    Admitted,
    AuthErrorResponse,
    AuthenticationRequest,
    LoginResponse,
    LogoutResponse,
    Rejected,
    RejectionReason,
    UserInfoResponse,
)
from monarch_auth.infrastructure.auth.token_manager import AccessTokenManager
from monarch_auth.infrastructure.redis.client import get_redis_client

router = APIRouter(prefix="/api", tags=["authentication"])
logger = logging.getLogger(__name__)

# Each rejection kind keeps its own status and error code all the way to the client.
REJECTION_RESPONSES = {
    RejectionReason.USER_NOT_FOUND: (status.HTTP_401_UNAUTHORIZED, "user_not_found"),
    RejectionReason.CREDENTIAL_MISMATCH: (status.HTTP_401_UNAUTHORIZED, "invalid_credentials"),
    RejectionReason.ACCOUNT_LOCKED: (status.HTTP_423_LOCKED, "account_locked"),
    RejectionReason.NO_PROVIDER_AVAILABLE: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "no_provider_available",
    ),
}

# Documented error bodies for the login endpoint
LOGIN_ERROR_RESPONSES = {
    status.HTTP_401_UNAUTHORIZED: {"model": AuthErrorResponse, "description": "Unknown user or wrong password"},
    status.HTTP_423_LOCKED: {"model": AuthErrorResponse, "description": "Account locked"},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": AuthErrorResponse, "description": "No provider available"},
    status.HTTP_503_SERVICE_UNAVAILABLE: {"model": AuthErrorResponse, "description": "User directory unavailable"},
}


# ============================================================================
# Dependencies
# ============================================================================

async def get_token_manager() -> AccessTokenManager:
    """Access token manager using the shared Redis connection."""
    settings = get_settings()
    redis_client = await get_redis_client()
    return AccessTokenManager(
        redis_client.get_client(),
        secret_key=settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        access_token_expire_minutes=settings.access_token_expire_minutes,
    )


async def extract_bearer_token(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> Optional[str]:
    """Extract Bearer token from Authorization header."""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization[7:].strip()


async def require_token(token: Optional[str] = Depends(extract_bearer_token)) -> str:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required. Please log in to access this resource.",
        )
    return token


async def get_current_claims(
    token: str = Depends(require_token),
    token_manager: AccessTokenManager = Depends(get_token_manager),
) -> Dict[str, Any]:
    """Claims of the current, non-revoked access token."""
    try:
        return await token_manager.validate_token(token)
    except TokenError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))


def rejection_to_http(decision: Rejected) -> HTTPException:
    status_code, error = REJECTION_RESPONSES[decision.reason]
    return HTTPException(
        status_code=status_code,
        detail={"error": error, "message": decision.message or error},
    )


# ============================================================================
# Endpoints
# ============================================================================

@router.post("/login", response_model=LoginResponse, responses=LOGIN_ERROR_RESPONSES)
async def login(
    username: str = Form(..., min_length=1, max_length=50),
    password: Optional[str] = Form(None),
    chain: ProviderChain = Depends(get_provider_chain),
    token_manager: AccessTokenManager = Depends(get_token_manager),
):
    """Authenticate a user code/password pair.

    Returns:
        Access token and user information

    Raises:
        HTTPException: 401 user_not_found / invalid_credentials,
            423 account_locked, 500 no_provider_available,
            503 directory_unavailable
    """
    request = AuthenticationRequest(identifier=username, credential=password)

    try:
        decision = await chain.authenticate(request)
    except DirectoryUnavailableError as e:
        logger.error(f"Login failed for {request.identifier}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "directory_unavailable", "message": "User directory is unavailable"},
        )

    if isinstance(decision, Rejected):
        raise rejection_to_http(decision)

    if not isinstance(decision, Admitted):
        # ProviderChain never returns Deferred
        raise HTTPException(status_code=500, detail="Unexpected authentication result")

    principal = decision.principal
    issued = token_manager.create_token(principal)

    return LoginResponse(
        access_token=issued.access_token,
        token_type=issued.token_type,
        expires_in=issued.expires_in,
        user=UserInfoResponse(
            **principal.user.to_public_dict(),
            authorities=sorted(principal.authorities),
        ),
    )


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    token: str = Depends(require_token),
    token_manager: AccessTokenManager = Depends(get_token_manager),
):
    """Revoke the presented access token."""
    try:
        await token_manager.revoke_token(token)
    except TokenError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))

    return LogoutResponse()


@router.get("/user/info", response_model=UserInfoResponse)
async def get_user_info(claims: Dict[str, Any] = Depends(get_current_claims)):
    """Get the user behind the current access token."""
    return UserInfoResponse(
        M_USITE_NO=claims.get("tenant_id"),
        M_USER_NO=int(claims["sub"]),
        USER_NAME=claims.get("user_name"),
        USER_CODE=claims["user_code"],
        authorities=claims.get("authorities", []),
    )
