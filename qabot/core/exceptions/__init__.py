"""
qabot exception system.

Usage:
    from qabot.core.exceptions import ClientInputError, ChatbotError

    raise ClientInputError("Parameter 'q' is required", details={"field": "q"})

    try:
        ...
    except ChatbotError as exc:
        logger.error("failed: %s", exc.to_dict())
"""
from qabot.core.exceptions.base import GENERIC_SERVER_MESSAGE, ChatbotError
from qabot.core.exceptions.errors import (
    ClientInputError,
    ConfigLoadError,
    ConfigurationError,
    ExternalFallbackError,
    PipelineError,
    SessionNotFoundError,
)

__all__ = [
    "GENERIC_SERVER_MESSAGE",
    "ChatbotError",
    "ClientInputError",
    "ConfigLoadError",
    "ConfigurationError",
    "ExternalFallbackError",
    "PipelineError",
    "SessionNotFoundError",
]
