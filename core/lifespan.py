"""
Define application startup and shutdown procedures
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI

from core.logger import logger


def _log_setting(key: str, value):
    """Log a setting, masking sensitive values like tokens"""
    if "TOKEN" in key and value is not None:
        logger.info("  %s: %s", key, "*****")
    else:
        logger.info("  %s: %s", key, value)


# Handle startup/shutdown tasks
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("In lifespan...starting up")

    settings = app.state.settings

    logger.info("Configuration Settings:")
    for key, value in settings.model_dump().items():
        _log_setting(key, value)

    # Storage root must exist before the first upload lands
    logger.info("Ensuring data directory %s exists...", settings.DATA_DIRECTORY)
    settings.DATA_DIRECTORY.mkdir(parents=True, exist_ok=True)

    logger.info("In lifespan...yield")
    try:
        yield
    finally:
        # Shutdown
        logger.info("In lifespan...shutting down")
