"""Run the bridge with uvicorn: ``python -m app``."""

from __future__ import annotations

import logging
import sys

import uvicorn
from pydantic import ValidationError

from app.core.config import get_settings
from app.core.logging import configure_logging

logger = logging.getLogger("app")


def main() -> int:
    try:
        settings = get_settings()
    except ValidationError as exc:
        configure_logging()
        logger.error(
            "EPIC_CLIENT_ID and REDIRECT_URI must be set in environment variables.\n%s",
            exc,
        )
        return 1

    configure_logging(settings.log_level)
    uvicorn.run("app.main:app", host=settings.host, port=settings.port, log_config=None)
    return 0


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
