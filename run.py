#!/usr/bin/env python3
"""Run the organization portal API.

Usage:
    python run.py [--host HOST] [--port PORT] [--reload] [--workers N] [--migrate]
"""

import argparse
from pathlib import Path

import uvicorn
from alembic import command
from alembic.config import Config

ALEMBIC_INI = Path(__file__).resolve().parent / "alembic.ini"


def migrate() -> None:
    """Bring the database schema up to date."""
    command.upgrade(Config(str(ALEMBIC_INI)), "head")


def main():
    parser = argparse.ArgumentParser(
        description="Run the organization portal API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py --migrate            Apply migrations, then serve on localhost:8000
  python run.py --host 0.0.0.0       Listen on all interfaces
  python run.py --reload             Enable auto-reload (development)
        """,
    )
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true", help="Auto-reload on code changes")
    parser.add_argument("--workers", type=int, default=1)
    parser.add_argument(
        "--migrate",
        action="store_true",
        help="Run 'alembic upgrade head' before starting",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        default="info",
        help="Uvicorn's own log level; application logs follow LOG_LEVEL",
    )
    args = parser.parse_args()

    if args.migrate:
        migrate()

    print(f"Organization portal at http://{args.host}:{args.port} (docs: /docs)")
    uvicorn.run(
        "orgportal.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=1 if args.reload else args.workers,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
