"""
Sign-in providers.

Every provider turns a provider-specific payload into an ``Identity`` (or
None). The router only deals with this interface, so issuing and verifying
the session token is the same whichever provider authenticated the user.
"""
import logging
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from socialfeed.modules.auth.schemas.auth import CredentialsSignIn, GoogleSignInRequest, Identity
from socialfeed.modules.auth.services.auth import authenticate, to_identity
from socialfeed.modules.auth.services.firebase_auth import get_or_create_user_from_google

logger = logging.getLogger("socialfeed")

TokenVerifier = Callable[[str], Optional[Dict[str, Any]]]


class AuthProvider:
    name: str = ""

    def authenticate(self, db: Session, payload: Dict[str, Any]) -> Optional[Identity]:
        raise NotImplementedError


class CredentialsProvider(AuthProvider):
    """Local email/password accounts"""
    name = "credentials"

    def authenticate(self, db: Session, payload: Dict[str, Any]) -> Optional[Identity]:
        try:
            credentials = CredentialsSignIn(**payload)
        except PydanticValidationError:
            return None
        return authenticate(db, credentials.email, credentials.password)


class GoogleProvider(AuthProvider):
    """Google accounts, verified through a Firebase ID token"""
    name = "google"

    def __init__(self, verify_token: TokenVerifier):
        self.verify_token = verify_token

    def authenticate(self, db: Session, payload: Dict[str, Any]) -> Optional[Identity]:
        try:
            request = GoogleSignInRequest(**payload)
        except PydanticValidationError:
            return None

        google_data = self.verify_token(request.id_token)
        if not google_data or not google_data.get("email"):
            return None
        # An unverified address must not resolve to the account that owns it
        if not google_data.get("email_verified"):
            logger.warning("Google sign-in refused: email not verified")
            return None

        user = get_or_create_user_from_google(db, google_data)
        return to_identity(user)


class ProviderRegistry:
    def __init__(self):
        self._providers: Dict[str, AuthProvider] = {}

    def register(self, provider: AuthProvider) -> None:
        logger.info(f"Registered sign-in provider '{provider.name}'")
        self._providers[provider.name] = provider

    def get(self, name: str) -> Optional[AuthProvider]:
        return self._providers.get(name)

    def names(self):
        return list(self._providers)
