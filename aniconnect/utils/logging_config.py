"""
Centralized logging configuration for the client library.
"""

import logging
import sys
from typing import Optional

from .config import AppConfig

# Transport libraries log every request at INFO/DEBUG; keep them quiet unless we are debugging.
NOISY_LOGGERS = ('httpx', 'httpcore', 'botocore', 'boto3', 'urllib3')


def _resolve(config: Optional[AppConfig]) -> AppConfig:
    if config is None:
        from .config import config as default_config
        return default_config
    return config


def setup_logging(config: Optional[AppConfig] = None) -> None:
    """
    Setup logging for the client library and quiet the HTTP/AWS transport loggers.

    Args:
        config: AppConfig instance, uses default if None
    """
    config = _resolve(config)
    level = getattr(logging, config.log_level.upper())

    logging.basicConfig(level=level,
                        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                        handlers=[logging.StreamHandler(sys.stdout)])

    transport_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)


def get_logger(name: str, config: Optional[AppConfig] = None) -> logging.Logger:
    """
    Get a module logger at the configured level.

    Args:
        name: Logger name (usually __name__)
        config: AppConfig instance, uses default if None

    Returns:
        Configured logger instance
    """
    config = _resolve(config)

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, config.log_level.upper()))
    return logger
