# app/utils/my_logging.py
"""Logging configuration"""
import logging
import sys

from app.config.settings import Settings


def setup_logging(settings: Settings, verbose=True):
    """Configure application logging"""
    if verbose:
        level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    if not verbose:
        # Silence noisy loggers
        noisy_loggers = [
            "sqlalchemy",
            "sqlalchemy.engine",
            "sqlalchemy.pool",
            "googleapiclient.discovery",
            "googleapiclient.discovery_cache",
            "google.auth.transport.requests",
            "urllib3",
            "uvicorn",
            "uvicorn.error",
            "uvicorn.access",
        ]
        for name in noisy_loggers:
            logger = logging.getLogger(name)
            logger.setLevel(logging.ERROR)
            logger.propagate = False
