"""
Concrete error types raised by the dialogue service.
"""
from __future__ import annotations

from qabot.core.exceptions.base import ChatbotError


class ClientInputError(ChatbotError):
    """The caller sent an incomplete query (missing utterance or session id)."""

    default_code = "CLIENT_INPUT_ERROR"
    default_http_status = 400


class ConfigLoadError(ChatbotError):
    """The knowledge base could not be read or failed validation. Fatal at startup."""

    default_code = "CONFIG_LOAD_ERROR"
    default_http_status = 500


class ConfigurationError(ChatbotError):
    """Invalid service settings (environment)."""

    default_code = "CONFIGURATION_ERROR"
    default_http_status = 500


class ExternalFallbackError(ChatbotError):
    """The external fallback endpoint timed out, failed or answered in a bad shape."""

    default_code = "EXTERNAL_FALLBACK_ERROR"
    default_http_status = 502


class PipelineError(ChatbotError):
    """Unexpected failure while resolving an utterance."""

    default_code = "PIPELINE_ERROR"
    default_http_status = 500


class SessionNotFoundError(ChatbotError):
    """No live session exists for the given id."""

    default_code = "SESSION_NOT_FOUND"
    default_http_status = 404
