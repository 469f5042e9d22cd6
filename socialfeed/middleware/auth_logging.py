from fastapi import Request
import logging
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("socialfeed")

# Routes that never require a session
PUBLIC_PATH_SUFFIXES = ("/auth/signup", "/auth/session", "/auth/providers", "/test-db")


class AuthLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, api_prefix: str = "/api", cookie_name: str = "session-token"):
        super().__init__(app)
        self.api_prefix = api_prefix
        self.cookie_name = cookie_name

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        has_auth = bool(request.headers.get("Authorization") or request.cookies.get(self.cookie_name))

        if not has_auth and path.startswith(self.api_prefix) and not path.endswith(PUBLIC_PATH_SUFFIXES) \
                and "/auth/callback/" not in path:
            logger.debug(f"Endpoint {path} accessed without session")

        response = await call_next(request)

        # Log auth-related status codes
        if response.status_code in [401, 403]:
            logger.warning(f"Auth error: {response.status_code} on {request.method} {path}")

        return response
