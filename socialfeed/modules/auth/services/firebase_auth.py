"""Firebase authentication service for Google Sign-In"""
import logging
import os
import uuid
from typing import Optional, Dict, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import firebase_admin
from firebase_admin import credentials, auth

from socialfeed.core.errors import ConflictError
from socialfeed.core.messages import ErrorMessages
from socialfeed.modules.user_management.models.user import User
from socialfeed.modules.user_management.services.user import get_user_by_email

logger = logging.getLogger("socialfeed")

# Matches the users.username column
USERNAME_MAX_LENGTH = 50


def initialize_firebase(service_account_path: str) -> firebase_admin.App:
    """Initialize the default Firebase app once per process."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    if os.path.exists(service_account_path):
        cred = credentials.Certificate(service_account_path)
        app = firebase_admin.initialize_app(cred)
        logger.info(f"Firebase initialized with service account from {service_account_path}")
    else:
        app = firebase_admin.initialize_app()
        logger.warning("Firebase initialized without explicit credentials")
    return app


def verify_firebase_token(token: str) -> Optional[Dict[str, Any]]:
    """Verifies a Firebase ID token and extracts the user data we need."""
    try:
        decoded_token = auth.verify_id_token(token)
    except (ValueError, auth.InvalidIdTokenError, auth.ExpiredIdTokenError,
            auth.RevokedIdTokenError, auth.CertificateFetchError) as e:
        logger.warning(f"Firebase token verification failed: {type(e).__name__}")
        return None

    logger.info(f"Firebase token verified for user: {decoded_token.get('email')}")
    return {
        "uid": decoded_token.get("uid"),
        "email": decoded_token.get("email"),
        "email_verified": decoded_token.get("email_verified", False),
        "name": decoded_token.get("name"),
        "picture": decoded_token.get("picture"),
    }


def _update_existing_user(db: Session, user: User, google_data: Dict[str, Any]) -> User:
    """Fills a missing avatar from the Google profile; nothing else is touched."""
    if google_data.get("picture") and not user.profile_image:
        user.profile_image = google_data.get("picture")
        db.commit()
        db.refresh(user)
    return user


def generate_unique_username(db: Session, email: str) -> str:
    """Email local part, with the smallest free numeric suffix on collision."""
    base_username = email.split("@")[0][:USERNAME_MAX_LENGTH]
    username = base_username
    suffix = 1

    while db.query(User).filter(User.username == username).first():
        tail = str(suffix)
        username = f"{base_username[:USERNAME_MAX_LENGTH - len(tail)]}{tail}"
        suffix += 1

    return username


def get_or_create_user_from_google(db: Session, google_data: Dict[str, Any]) -> User:
    """Finds the account for a Google email, creating a password-less one on first login."""
    email = google_data.get("email")
    if not email:
        raise ValueError("Email is required for Google authentication")

    user = get_user_by_email(db, email)
    if user:
        return _update_existing_user(db, user, google_data)

    new_user = User(
        id=str(uuid.uuid4()),
        email=email,
        username=generate_unique_username(db, email),
        name=google_data.get("name") or email.split("@")[0],
        hashed_password=None,
        profile_image=google_data.get("picture"),
        auth_provider="google",
    )
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Unique constraint violated while provisioning Google user {email}")
        # Another request provisioned the same email first
        existing = get_user_by_email(db, email)
        if existing:
            return existing
        raise ConflictError(ErrorMessages.USERNAME_ALREADY_EXISTS, field="username") from e
    db.refresh(new_user)

    logger.info(f"Provisioned Google user {new_user.id} ({new_user.username})")
    return new_user
