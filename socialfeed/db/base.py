# Import all models here so Alembic and create_all can detect them
from socialfeed.db.session import Base

from socialfeed.modules.user_management.models.user import User
from socialfeed.modules.posts.models.post import Post

__all__ = ["Base", "User", "Post"]
