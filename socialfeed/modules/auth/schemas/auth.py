from typing import Optional
from pydantic import BaseModel, field_validator

from socialfeed.modules.user_management.schemas.user import UserPublic


def _strip(value: Optional[str]) -> Optional[str]:
    """Trim surrounding whitespace; blank strings count as missing."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class SignupRequest(BaseModel):
    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None

    @field_validator("email", "username", "name", mode="before")
    @classmethod
    def strip_fields(cls, v: Optional[str]) -> Optional[str]:
        return _strip(v)

    @field_validator("password", mode="before")
    @classmethod
    def empty_password_is_missing(cls, v: Optional[str]) -> Optional[str]:
        # Passwords are taken verbatim, only the empty string counts as missing
        return v or None


class SignupResponse(BaseModel):
    message: str
    user: UserPublic


class CredentialsSignIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class GoogleSignInRequest(BaseModel):
    id_token: str


class Identity(BaseModel):
    """Minimal identity produced by a successful authentication. Never holds the hash."""
    id: str
    email: str
    name: str
    username: str
    avatar_url: Optional[str] = None


class SessionUser(BaseModel):
    """Request-scoped identity rebuilt from session token claims"""
    id: str
    username: str
    email: Optional[str] = None
    name: Optional[str] = None
    image: Optional[str] = None


class SessionResponse(BaseModel):
    user: Optional[SessionUser] = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: SessionUser
