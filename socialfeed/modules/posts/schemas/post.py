from typing import Optional, List
from datetime import datetime

from socialfeed.modules.user_management.schemas.user import CamelModel


class Post(CamelModel):
    """Post model returned to client"""
    id: str
    author_id: str
    content: str
    images: Optional[List[str]] = None
    created_at: datetime
    updated_at: datetime


class PostCreateResponse(CamelModel):
    message: str
    post_id: str
    image_urls: List[str]
