"""
Logging Setup
Configures the root logger once at application startup.
"""

import logging

from shortforge.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = None):
    """Configure root logging with the application format."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )
    # Third-party clients are chatty at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
