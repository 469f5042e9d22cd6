from typing import Any
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from socialfeed.db.session import get_db
from socialfeed.deps import get_current_user
from socialfeed.modules.auth.schemas.auth import SessionUser
from socialfeed.modules.home_feed.schemas.feed import FeedResponse
from socialfeed.modules.home_feed.services.feed import get_home_feed

router = APIRouter()


@router.get("", response_model=FeedResponse)
def read_home_feed(
    *,
    db: Session = Depends(get_db),
    current_user: SessionUser = Depends(get_current_user),
) -> Any:
    """Global feed, newest first, with the viewer's profile card and per-author post counts"""
    return get_home_feed(db, current_user)
