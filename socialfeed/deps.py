from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from socialfeed.core.config import Settings
from socialfeed.core.messages import ErrorMessages
from socialfeed.core.security import SessionIssuer
from socialfeed.core.storage import ObjectStorage
from socialfeed.modules.auth.schemas.auth import SessionUser
from socialfeed.modules.auth.services.providers import ProviderRegistry

# Bearer tokens are optional: browsers send the session cookie instead
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/callback/credentials", auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_issuer(request: Request) -> SessionIssuer:
    return request.app.state.session_issuer


def get_storage(request: Request) -> ObjectStorage:
    return request.app.state.storage


def get_providers(request: Request) -> ProviderRegistry:
    return request.app.state.providers


def get_optional_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    issuer: SessionIssuer = Depends(get_session_issuer),
    settings: Settings = Depends(get_settings),
) -> Optional[SessionUser]:
    """
    Identity of the caller rebuilt from the session token claims, or None.
    The user table is not queried.

    The bearer token is tried first; the session cookie is used when the
    header is absent or does not verify.
    """
    claims = None
    for candidate in (token, request.cookies.get(settings.SESSION_COOKIE_NAME)):
        if candidate:
            claims = issuer.verify(candidate)
            if claims:
                break
    if not claims:
        return None

    return SessionUser(
        id=claims["sub"],
        username=claims["username"],
        email=claims.get("email"),
        name=claims.get("name"),
        image=claims.get("picture"),
    )


def get_current_user(current_user: Optional[SessionUser] = Depends(get_optional_user)) -> SessionUser:
    """
    Dependency for routes that require a valid session
    """
    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ErrorMessages.UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return current_user
