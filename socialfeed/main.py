import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from socialfeed.core.config import Settings, get_settings
from socialfeed.core.messages import ErrorMessages, SuccessMessages
from socialfeed.core.security import SessionIssuer
from socialfeed.core.storage import ObjectStorage
from socialfeed.db.init_db import create_all_tables
from socialfeed.db.session import create_db_engine, create_session_factory, get_db
from socialfeed.middleware.auth_logging import AuthLoggingMiddleware
from socialfeed.middleware.request_logging import RequestLoggingMiddleware
from socialfeed.modules.auth.api.router import router as auth_router
from socialfeed.modules.auth.services.firebase_auth import initialize_firebase, verify_firebase_token
from socialfeed.modules.auth.services.providers import (
    CredentialsProvider, GoogleProvider, ProviderRegistry, TokenVerifier,
)
from socialfeed.modules.home_feed.api.router import router as home_feed_router
from socialfeed.modules.posts.api.router import router as posts_router
from socialfeed.modules.user_management.api.router import router as profile_router
from socialfeed.modules.user_management.services.user import count_users

logger = logging.getLogger("socialfeed")


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_providers(settings: Settings, google_verifier: Optional[TokenVerifier] = None) -> ProviderRegistry:
    providers = ProviderRegistry()
    providers.register(CredentialsProvider())

    if google_verifier is not None:
        providers.register(GoogleProvider(google_verifier))
    elif settings.GOOGLE_AUTH_ENABLED:
        initialize_firebase(settings.FIREBASE_SERVICE_ACCOUNT_PATH)
        providers.register(GoogleProvider(verify_firebase_token))

    return providers


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    storage: Optional[ObjectStorage] = None,
    google_verifier: Optional[TokenVerifier] = None,
) -> FastAPI:
    """
    Build the application. Database engine, storage client and sign-in
    providers are created at startup (unless passed in) and kept on
    ``app.state`` for the request dependencies.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(f"Starting {settings.PROJECT_NAME} in {settings.ENVIRONMENT} mode")
        logger.info(f"BASE_URL: {settings.BASE_URL}")

        db_engine = engine or create_db_engine(settings.DATABASE_URL)
        if settings.AUTO_CREATE_TABLES:
            create_all_tables(db_engine)

        app.state.settings = settings
        app.state.engine = db_engine
        app.state.session_factory = create_session_factory(db_engine)
        app.state.storage = storage or ObjectStorage(settings)
        app.state.session_issuer = SessionIssuer(
            settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
            expire_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        )
        app.state.providers = build_providers(settings, google_verifier)

        yield

        logger.info("Shutting down application...")
        if engine is None:
            db_engine.dispose()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        debug=settings.DEBUG,
        description="Small social network: accounts, profiles, posts with images and a global feed",
        version=settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.info(f"Rejected request to {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": ErrorMessages.INVALID_REQUEST},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": ErrorMessages.SERVER},
        )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        AuthLoggingMiddleware,
        api_prefix=settings.API_PREFIX,
        cookie_name=settings.SESSION_COOKIE_NAME,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Local uploads are only used when no bucket is configured
    if storage is None and not settings.storage_configured:
        app.mount("/static", StaticFiles(directory=settings.UPLOAD_DIRECTORY, check_dir=False), name="static")

    app.include_router(auth_router, prefix=f"{settings.API_PREFIX}/auth", tags=["authentication"])
    app.include_router(profile_router, prefix=f"{settings.API_PREFIX}/profile", tags=["profile"])
    app.include_router(posts_router, prefix=f"{settings.API_PREFIX}/posts", tags=["posts"])
    app.include_router(home_feed_router, prefix=f"{settings.API_PREFIX}/feed", tags=["feed"])

    @app.get("/")
    async def root():
        return {
            "message": f"Welcome to {settings.PROJECT_NAME}",
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "documentation": "/docs" if settings.DEBUG else None,
        }

    @app.get(f"{settings.API_PREFIX}/test-db", tags=["system"])
    def test_db(db: Session = Depends(get_db)):
        """Database connectivity check"""
        try:
            db.execute(text("SELECT 1"))
            user_count = count_users(db)
        except SQLAlchemyError as e:
            logger.error(f"Database check failed: {e}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"success": False, "message": ErrorMessages.DB_CONNECTION_FAILED},
            )
        return {"success": True, "message": SuccessMessages.DB_CONNECTION_OK, "userCount": user_count}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("socialfeed.main:app", host="0.0.0.0", port=8000, reload=True)
