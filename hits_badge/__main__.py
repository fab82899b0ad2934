from __future__ import annotations

import argparse
import sys
from typing import Sequence

from hits_badge.api.logging_config import configure_logging
from hits_badge.api.settings import LOG_LEVELS, Settings


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """
    Flags opcionales; sin flags se usan env vars (HITS_DB_PATH, API_PORT...) o defaults.
    """
    parser = argparse.ArgumentParser(
        prog="hits-badge",
        description="Start the gh-hits-badge server",
    )
    parser.add_argument("--db", metavar="DB_FILE", default=None, help="The SQLite DB file to use")
    parser.add_argument("--port", metavar="NUMBER", type=int, default=None, help="The HTTP port to use")
    parser.add_argument("--host", default=None, help="Bind address")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default=None, help="Root log level")
    return parser.parse_args(argv)


def build_settings(argv: Sequence[str] | None = None) -> Settings:
    args = _parse_args(argv)
    return Settings.from_env().override(
        db_path=args.db,
        port=args.port,
        host=args.host,
        log_level=args.log_level,
    )


def main(argv: Sequence[str] | None = None) -> None:
    import uvicorn

    from hits_badge.api.app import create_app
    from hits_badge.api.storage import StorageUnavailable

    settings = build_settings(argv)
    logger = configure_logging(settings)

    try:
        app = create_app(settings)
    except StorageUnavailable as exc:
        logger.critical("cannot start: %s", exc)
        sys.exit(1)

    logger.info("listening on %s:%d (db=%s)", settings.host, settings.port, settings.db_path)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
