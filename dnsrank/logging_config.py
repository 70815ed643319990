"""Logging configuration for dnsrank."""

import logging
import os
import sys

LOG_LEVEL_ENV = "DNSRANK_LOG_LEVEL"


def configure_logging(default_level: str = "WARNING") -> None:
    """
    Configure application-wide logging.

    Respects the DNSRANK_LOG_LEVEL environment variable and logs to
    stderr, keeping stdout free for tables and JSON.

    Examples:
        $ DNSRANK_LOG_LEVEL=DEBUG dnsrank run --simulate
    """
    log_level_str = os.environ.get(LOG_LEVEL_ENV, default_level).upper()
    log_level = logging.getLevelName(log_level_str)
    if not isinstance(log_level, int):
        log_level = logging.WARNING

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )

    logging.getLogger(__name__).debug(
        "Logging configured: level=%s", logging.getLevelName(log_level)
    )
