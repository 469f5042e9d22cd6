import argparse
import logging

import uvicorn

from socialfeed.core.config import settings
from socialfeed.db.init_db import init_db


def main():
    parser = argparse.ArgumentParser(description="Serve the SocialFeed API")
    parser.add_argument("--host", default="0.0.0.0", help="Bind address (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (always on when DEBUG)")
    parser.add_argument(
        "--migrate",
        action="store_true",
        help="Apply Alembic migrations up to head before serving",
    )
    parser.add_argument("--alembic-config", default="alembic.ini", help="Path to alembic.ini")
    args = parser.parse_args()

    if args.migrate:
        logging.basicConfig(level=logging.INFO)
        init_db(args.alembic_config)

    use_reload = args.reload or settings.DEBUG
    if settings.DEBUG:
        print(f"SocialFeed API ({settings.ENVIRONMENT}) on http://{args.host}:{args.port}, reload={use_reload}")
        print(f"Docs: http://{args.host}:{args.port}/docs")

    uvicorn.run("socialfeed.main:app", host=args.host, port=args.port, reload=use_reload)


if __name__ == "__main__":
    main()
