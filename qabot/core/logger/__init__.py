"""
qabot logger: console + rotating JSON file.

Usage:
    from qabot.core.logger import configure, LoggerConfig

    # Once at startup (reads LOG_LEVEL, LOG_DIR, ... when no config is given)
    configure()
    configure(LoggerConfig(level="DEBUG", log_dir="/var/log/qabot"))

    # Everywhere else, plain stdlib loggers under the qabot root:
    logger = logging.getLogger(__name__)
    logger.info("resolved", extra={"session_id": sid, "source": "local_qa"})
"""
from qabot.core.logger.config import LoggerConfig
from qabot.core.logger.formatters import JsonFormatter, PlainConsoleFormatter
from qabot.core.logger.setup import configure, get_logger

__all__ = [
    "LoggerConfig",
    "JsonFormatter",
    "PlainConsoleFormatter",
    "configure",
    "get_logger",
]
