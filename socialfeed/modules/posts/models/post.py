from sqlalchemy import Column, String, DateTime, Text, ForeignKey, JSON

from socialfeed.db.session import Base, utcnow


class Post(Base):
    __tablename__ = "posts"

    id = Column(String(36), primary_key=True, index=True)
    author_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    images = Column(JSON, nullable=True)  # Ordered list of up to 4 URLs
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
