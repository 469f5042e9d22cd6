"""Authentication router: sign-up, provider callbacks and session introspection"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from socialfeed.core.config import Settings
from socialfeed.core.errors import AppError
from socialfeed.core.messages import ErrorMessages, SuccessMessages
from socialfeed.core.security import SessionIssuer
from socialfeed.db.session import get_db
from socialfeed.deps import get_optional_user, get_providers, get_session_issuer, get_settings
from socialfeed.modules.auth.schemas.auth import (
    SessionResponse, SessionUser, SignupRequest, SignupResponse, Token,
)
from socialfeed.modules.auth.services.auth import signup
from socialfeed.modules.auth.services.providers import ProviderRegistry
from socialfeed.modules.user_management.schemas.user import UserPublic

logger = logging.getLogger("socialfeed")

router = APIRouter()


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
def signup_user(
    *,
    db: Session = Depends(get_db),
    signup_in: SignupRequest,
) -> Any:
    """Register a new account with a local password"""
    try:
        user = signup(db, signup_in)
    except AppError as e:
        raise e.to_http()
    except Exception as e:
        logger.error(f"Signup error: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=ErrorMessages.SERVER,
        )

    return SignupResponse(
        message=SuccessMessages.SIGNUP_SUCCESS,
        user=UserPublic.model_validate(user),
    )


async def _read_payload(request: Request) -> Dict[str, Any]:
    """Accept JSON or form-encoded callback bodies."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            payload = await request.json()
        except ValueError:
            return {}
        return payload if isinstance(payload, dict) else {}
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


@router.post("/callback/{provider_name}", response_model=Token)
async def sign_in(
    provider_name: str,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    providers: ProviderRegistry = Depends(get_providers),
    issuer: SessionIssuer = Depends(get_session_issuer),
    settings: Settings = Depends(get_settings),
) -> Any:
    """Authenticate with the named provider and issue a session token"""
    provider = providers.get(provider_name)
    if provider is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ErrorMessages.UNKNOWN_PROVIDER)

    payload = await _read_payload(request)
    try:
        identity = await run_in_threadpool(provider.authenticate, db, payload)
    except AppError as e:
        raise e.to_http()

    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=ErrorMessages.INVALID_CREDENTIALS,
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = issuer.issue(identity)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=access_token,
        max_age=issuer.expire_minutes * 60,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    logger.info(f"User {identity.id} signed in with '{provider_name}'")

    return Token(
        access_token=access_token,
        user=SessionUser(
            id=identity.id,
            username=identity.username,
            email=identity.email,
            name=identity.name,
            image=identity.avatar_url,
        ),
    )


@router.get("/session", response_model=SessionResponse, response_model_exclude_none=True)
def read_session(current_user: Optional[SessionUser] = Depends(get_optional_user)) -> Any:
    """Current session identity, or an empty object when signed out"""
    return SessionResponse(user=current_user)


@router.post("/signout")
def sign_out(response: Response, settings: Settings = Depends(get_settings)) -> Any:
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"message": SuccessMessages.SIGNOUT_SUCCESS}


@router.get("/providers")
def list_providers(providers: ProviderRegistry = Depends(get_providers)) -> Any:
    return {"providers": providers.names()}
