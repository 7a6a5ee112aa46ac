"""Authentication API Models

Purpose: Request/response models for authentication endpoints

Key Components:
- UserInfoResponse: Session user info consumed by the front end
- LoginResponse: Token response returned on successful login
- AuthError, AuthErrorResponse: Structured error responses
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserInfoResponse(BaseModel):
    """Public user information

    Field names match the M_USER columns the front end stores in
    sessionStorage and forwards on data requests.
    """

    model_config = ConfigDict(populate_by_name=True)

    tenant_id: Optional[int] = Field(None, alias="M_USITE_NO")
    user_no: int = Field(..., alias="M_USER_NO")
    user_name: Optional[str] = Field(None, alias="USER_NAME")
    user_code: str = Field(..., alias="USER_CODE")
    authorities: list[str] = Field(default_factory=list)


class LoginResponse(BaseModel):
    """Successful login response"""

    access_token: str = Field(..., description="Bearer access token")
    token_type: str = Field("bearer", description="Token type")
    expires_in: int = Field(..., description="Token lifetime in seconds")
    user: UserInfoResponse


class LogoutResponse(BaseModel):
    """Logout confirmation"""

    message: str = "Logged out successfully"


class AuthError(BaseModel):
    """Structured authentication error body"""

    error: str = Field(..., description="Error code", examples=["account_locked"])
    message: str = Field(..., description="Human readable message")


class AuthErrorResponse(BaseModel):
    """Error body as rendered for a rejected login"""

    detail: AuthError
