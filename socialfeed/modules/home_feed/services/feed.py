from collections import Counter
from typing import Dict, List

from sqlalchemy.orm import Session

from socialfeed.modules.auth.schemas.auth import SessionUser
from socialfeed.modules.home_feed.schemas.feed import FeedItem, FeedResponse, FeedViewer
from socialfeed.modules.posts.models.post import Post as PostModel
from socialfeed.modules.posts.schemas.post import Post as PostSchema
from socialfeed.modules.posts.services.post import get_posts
from socialfeed.modules.user_management.models.user import User as UserModel
from socialfeed.modules.user_management.schemas.user import UserSummary


def list_feed(db: Session) -> List[PostModel]:
    """Every post from every account, newest first. No pagination."""
    return get_posts(db)


def count_posts_by_author(posts: List[PostModel]) -> Dict[str, int]:
    # Counted from the already loaded feed rather than with an aggregate query
    return dict(Counter(post.author_id for post in posts))


def _get_authors(db: Session, posts: List[PostModel]) -> Dict[str, UserModel]:
    author_ids = {post.author_id for post in posts}
    if not author_ids:
        return {}
    authors = db.query(UserModel).filter(UserModel.id.in_(author_ids)).all()
    return {author.id: author for author in authors}


def get_home_feed(db: Session, viewer: SessionUser) -> FeedResponse:
    posts = list_feed(db)
    authors = _get_authors(db, posts)
    post_counts = count_posts_by_author(posts)

    items = [
        FeedItem(
            post=PostSchema.model_validate(post),
            author=UserSummary.model_validate(authors[post.author_id]) if post.author_id in authors else None,
        )
        for post in posts
    ]

    return FeedResponse(
        viewer=FeedViewer(
            id=viewer.id,
            username=viewer.username,
            name=viewer.name,
            image=viewer.image,
            post_count=post_counts.get(viewer.id, 0),
        ),
        items=items,
        author_post_counts=post_counts,
    )
