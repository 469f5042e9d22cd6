from fastapi import Request
import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("socialfeed")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request and one per response, with timing."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        method = request.method
        path = request.url.path
        client = request.client.host if request.client else "-"

        # Uploaded files are served often; keep them out of the info log
        log = logger.debug if path.startswith("/static/") else logger.info
        log(f"Request: {method} {path} from {client}")

        response = await call_next(request)

        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        log(f"Response: {method} {path} {response.status_code} in {process_time:.4f}s")

        return response
