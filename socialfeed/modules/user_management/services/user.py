from typing import Optional
import logging

from sqlalchemy.orm import Session

from socialfeed.core.errors import NotFoundError, ValidationError
from socialfeed.core.messages import ErrorMessages
from socialfeed.modules.user_management.models.user import User

logger = logging.getLogger("socialfeed")


def get_user(db: Session, user_id: str) -> Optional[User]:
    """Get user by ID"""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get user by email (exact match)"""
    return db.query(User).filter(User.email == email).first()


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    """Get user by username"""
    return db.query(User).filter(User.username == username).first()


def count_users(db: Session) -> int:
    return db.query(User).count()


def update_profile(
    db: Session,
    user_id: str,
    name: Optional[str] = None,
    bio: Optional[str] = None,
    profile_image: Optional[str] = None,
) -> User:
    """
    Apply a partial profile update.

    ``name`` is applied only when non-blank. ``bio`` is applied whenever it is not
    None, so ``""`` clears it.
    Email and username are not editable here.
    """
    update_data = {}
    if name and name.strip():
        update_data["name"] = name.strip()
    if bio is not None:
        update_data["bio"] = bio
    if profile_image:
        update_data["profile_image"] = profile_image

    if not update_data:
        raise ValidationError(ErrorMessages.NOTHING_TO_UPDATE)

    db_user = get_user(db, user_id)
    if not db_user:
        raise NotFoundError(ErrorMessages.USER_NOT_FOUND)

    for field, value in update_data.items():
        setattr(db_user, field, value)

    db.commit()
    db.refresh(db_user)
    logger.info(f"Updated profile of user {user_id}: {sorted(update_data)}")
    return db_user
