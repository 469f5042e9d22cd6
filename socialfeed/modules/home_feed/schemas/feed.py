from typing import Dict, List, Optional

from socialfeed.modules.posts.schemas.post import Post
from socialfeed.modules.user_management.schemas.user import CamelModel, UserSummary


class FeedItem(CamelModel):
    """Feed item model returned to client"""
    post: Post
    author: Optional[UserSummary] = None


class FeedViewer(CamelModel):
    """Profile card of the signed-in user shown above the feed"""
    id: str
    username: str
    name: Optional[str] = None
    image: Optional[str] = None
    post_count: int = 0


class FeedResponse(CamelModel):
    """Feed response model returned to client"""
    viewer: FeedViewer
    items: List[FeedItem]
    author_post_counts: Dict[str, int]
