from typing import List, Optional
import uuid
import logging

from sqlalchemy.orm import Session

from socialfeed.core.errors import ValidationError
from socialfeed.core.messages import ErrorMessages
from socialfeed.modules.posts.models.post import Post

logger = logging.getLogger("socialfeed")

MAX_IMAGES = 4


def validate_content(content: Optional[str]) -> str:
    """Return the trimmed content, rejecting blank input"""
    if content is None or not content.strip():
        raise ValidationError(ErrorMessages.CONTENT_REQUIRED)
    return content.strip()


def get_posts(db: Session) -> List[Post]:
    """All posts, newest first"""
    return db.query(Post).order_by(Post.created_at.desc()).all()


def create_post(db: Session, author_id: str, content: str, image_urls: Optional[List[str]] = None) -> Post:
    """Create new post. Posts are immutable once written."""
    content = validate_content(content)
    if image_urls and len(image_urls) > MAX_IMAGES:
        raise ValidationError(ErrorMessages.TOO_MANY_IMAGES)

    post = Post(
        id=str(uuid.uuid4()),
        author_id=author_id,
        content=content,
        images=list(image_urls) if image_urls else None,
    )
    db.add(post)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(post)

    logger.info(f"Created post {post.id} for author {author_id} with {len(image_urls or [])} image(s)")
    return post
