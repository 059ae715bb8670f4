"""Run the control API: ``python -m neurospell``."""

from __future__ import annotations

import argparse
import logging

import uvicorn

from .api.app import create_app
from .settings import get_settings


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Serve the Neurospell control API.")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1).")
    parser.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000).")
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Logging level for the neurospell loggers (default: LOG_LEVEL or INFO).",
    )
    parser.add_argument(
        "--connect",
        action="store_true",
        default=settings.stream_autoconnect,
        help="Open the EEG device link on start-up (default: STREAM_AUTOCONNECT).",
    )
    args = parser.parse_args()
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.connect != settings.stream_autoconnect:
        settings = settings.model_copy(update={"stream_autoconnect": args.connect})
    uvicorn.run(create_app(settings), host=args.host, port=args.port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
