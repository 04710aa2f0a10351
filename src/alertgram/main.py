"""Main entry point for Alertgram."""

import sys

import structlog
import uvicorn
from pydantic import ValidationError

from alertgram.config import Settings, get_settings

logger = structlog.get_logger(__name__)


def load_settings() -> Settings | None:
    """Load settings, reporting missing or invalid variables instead of a traceback."""
    try:
        return get_settings()
    except ValidationError as e:
        missing = [
            str(error["loc"][0]) for error in e.errors(include_input=False) if error["loc"]
        ]
        logger.error("Invalid configuration", variables=missing)
        return None


def main() -> None:
    """Run the Alertgram application."""
    settings = load_settings()
    if settings is None:
        sys.exit(1)

    # The app factory reloads settings from the same environment
    uvicorn.run(
        "alertgram.api:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
