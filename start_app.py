#!/usr/bin/env python
"""Serve the back office with uvicorn, bound to HOST/PORT from settings."""
import logging

import uvicorn

from backoffice.core import logging_config  # noqa: F401  configures logging on import
from backoffice.core.config import get_settings

logger = logging.getLogger(__name__)


def main():
    settings = get_settings()
    logger.info(f"Serving backoffice.main:app on {settings.HOST}:{settings.PORT} ({settings.ENVIRONMENT})")
    uvicorn.run(
        "backoffice.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    main()
