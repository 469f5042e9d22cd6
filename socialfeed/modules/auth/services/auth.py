import logging
import uuid
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from socialfeed.core.errors import ConflictError, ValidationError
from socialfeed.core.messages import ErrorMessages
from socialfeed.core.security import dummy_verify, get_password_hash, verify_password
from socialfeed.modules.auth.schemas.auth import Identity, SignupRequest
from socialfeed.modules.user_management.models.user import User
from socialfeed.modules.user_management.services.user import get_user_by_email, get_user_by_username

logger = logging.getLogger("socialfeed")


def to_identity(user: User) -> Identity:
    return Identity(
        id=user.id,
        email=user.email,
        name=user.name,
        username=user.username,
        avatar_url=user.profile_image,
    )


def authenticate(db: Session, email: Optional[str], password: Optional[str]) -> Optional[Identity]:
    """
    Check an email/password pair against the stored bcrypt hash.

    Unknown email, an account without a local password and a wrong password
    all return None, and all of them pay for one hash verification.
    """
    if not email or not password:
        return None

    user = get_user_by_email(db, email)
    if not user or not user.hashed_password:
        dummy_verify()
        logger.info("Credential sign-in failed")
        return None

    if not verify_password(password, user.hashed_password):
        logger.info("Credential sign-in failed")
        return None

    logger.info(f"Credential sign-in succeeded for user {user.id}")
    return to_identity(user)


def _raise_duplicate(db: Session, email: str, username: str) -> None:
    # Email collisions take priority over username collisions
    if get_user_by_email(db, email):
        raise ConflictError(ErrorMessages.EMAIL_ALREADY_EXISTS, field="email")
    if get_user_by_username(db, username):
        raise ConflictError(ErrorMessages.USERNAME_ALREADY_EXISTS, field="username")


def signup(db: Session, signup_in: SignupRequest) -> User:
    """Create a local-password account."""
    if not all([signup_in.email, signup_in.username, signup_in.password, signup_in.name]):
        raise ValidationError(ErrorMessages.MISSING_FIELDS)

    _raise_duplicate(db, signup_in.email, signup_in.username)

    user = User(
        id=str(uuid.uuid4()),
        email=signup_in.email,
        username=signup_in.username,
        hashed_password=get_password_hash(signup_in.password),
        name=signup_in.name,
        auth_provider="credentials",
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent sign-up won the race for the same email or username
        db.rollback()
        logger.warning("Unique constraint violated during sign-up")
        _raise_duplicate(db, signup_in.email, signup_in.username)
        raise
    db.refresh(user)

    logger.info(f"Created user {user.id} ({user.username})")
    return user
