# app/utils/my_logging.py
"""Logging configuration"""
import logging
import sys
from app.config.settings import get_settings

NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "sqlalchemy.orm",
    "sqlalchemy.dialects",
    "alembic",
    "httpx",
    "passlib",
    "uvicorn.access",
)


def setup_logging(verbose=None):
    """Configure application logging. Defaults to verbose in DEBUG mode."""
    settings = get_settings()
    if verbose is None:
        verbose = settings.DEBUG

    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    if not verbose:
        # Silence noisy loggers
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
