# Implements security-related functionality:
# Password hashing and verification using bcrypt
# Signed session tokens (JWT) issued on sign-in and verified on every request
# Provides core security functions used by the authentication module

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import logging

from jose import jwt, JWTError
from passlib.context import CryptContext

from socialfeed.core.config import settings

logger = logging.getLogger("socialfeed")

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def dummy_verify() -> None:
    """Spend the time of a real verification when there is no hash to check."""
    pwd_context.dummy_verify()


class SessionIssuer:
    """Mints and verifies stateless session tokens.

    A token carries the user id (``sub``) and username plus the display
    fields shown in session introspection. It is never stored server-side:
    a token is valid as long as its signature and expiry check out.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_minutes: int = settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def issue(self, identity: Any, expires_delta: Optional[timedelta] = None) -> str:
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.expire_minutes))

        to_encode = {
            "sub": str(identity.id),
            "username": identity.username,
            "email": identity.email,
            "name": identity.name,
            "picture": getattr(identity, "avatar_url", None),
            "iat": now,
            "exp": expire,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Optional[Dict[str, Any]]:
        """Return the token claims, or None when the token is invalid or expired."""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            logger.warning(f"Session token rejected: {e}")
            return None

        if not payload.get("sub") or not payload.get("username"):
            logger.warning("Session token payload missing 'sub' or 'username'")
            return None

        return payload
