from datetime import datetime, timezone
from typing import Generator
import logging

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger("socialfeed")

# Base class for all SQLAlchemy models
Base = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    """Create the process-wide engine with a connection pool."""
    if not database_url:
        logger.error("DATABASE_URL is not set or empty!")
        raise ValueError("DATABASE_URL environment variable is required")

    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    engine = create_engine(
        database_url,
        pool_pre_ping=True,  # Check connection before using from pool
        pool_recycle=3600,   # Recycle connections after 1 hour
        connect_args=connect_args,
    )
    logger.info(f"Database engine created for {engine.url.render_as_string(hide_password=True)}")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Database session dependency for FastAPI
def get_db(request: Request) -> Generator[Session, None, None]:
    """One session per request, taken from the factory built at startup."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def utcnow() -> datetime:
    """Naive UTC timestamp with microseconds, used for column defaults."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
