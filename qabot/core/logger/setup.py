"""
Logger setup: console handler plus an optional rotating JSON file handler.
"""
from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from qabot.core.logger.config import LoggerConfig
from qabot.core.logger.formatters import JsonFormatter, PlainConsoleFormatter

_current_config: Optional[LoggerConfig] = None


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def configure(config: Optional[LoggerConfig] = None) -> LoggerConfig:
    """
    Attach handlers to the qabot root logger. Uses LoggerConfig.from_env()
    when no config is given. Safe to call again (handlers are replaced).
    """
    global _current_config
    config = config or LoggerConfig.from_env()
    _current_config = config

    root = logging.getLogger(config.root_name or "qabot")
    root.setLevel(_level(config.level))
    root.handlers.clear()

    if config.console:
        console = logging.StreamHandler()
        console.setLevel(_level(config.level))
        console.setFormatter(PlainConsoleFormatter())
        root.addHandler(console)

    if config.log_dir and config.log_dir.strip():
        try:
            os.makedirs(config.log_dir, exist_ok=True)
        except OSError:
            root.warning("Could not create log dir %s, skipping file handler", config.log_dir)
        else:
            path = os.path.join(config.log_dir, f"{config.log_file_basename}.log")
            file_handler = RotatingFileHandler(
                path,
                maxBytes=config.max_bytes,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(_level(config.level))
            file_handler.setFormatter(JsonFormatter())
            root.addHandler(file_handler)

    root.propagate = False
    return config


def get_logger(name: str) -> logging.Logger:
    """Logger for *name*; configures from the environment on first use."""
    if _current_config is None:
        configure()
    return logging.getLogger(name)
