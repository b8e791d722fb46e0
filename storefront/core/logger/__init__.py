"""
Storefront logger: console + rotating JSON file.

Usage:
    from storefront.core.logger import LoggerConfig, configure, get_logger

    configure()  # LoggerConfig.from_env(): LOG_LEVEL, LOG_DIR, LOG_FILE_BASENAME, ...
    configure(LoggerConfig(level="DEBUG", log_dir="/var/log/storefront"))

    logger = get_logger(__name__)
    logger.info("Scan finished", extra={"processed": 3})
"""
from storefront.core.logger.config import LoggerConfig
from storefront.core.logger.formatters import JsonFormatter, PlainConsoleFormatter
from storefront.core.logger.setup import configure, get_logger

__all__ = [
    "LoggerConfig",
    "JsonFormatter",
    "PlainConsoleFormatter",
    "configure",
    "get_logger",
]
