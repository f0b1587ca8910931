"""
Base exception type for qabot.

Every error raised on purpose by the dialogue pipeline, the knowledge base
loader or the API derives from ChatbotError. Subclasses pin a code and the
HTTP status the API answers with; callers attach ``details`` for logs.
"""
from __future__ import annotations

import traceback
from typing import Any, Optional

# Body sent to clients instead of the real message for 5xx errors.
GENERIC_SERVER_MESSAGE = "Internal error while resolving the request."


class ChatbotError(Exception):
    """
    Base exception for all qabot errors.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable slug (defaults to the class default_code).
        http_status: HTTP status the API answers with.
        details: Extra context for logs, e.g. pydantic validation errors.
        cause: The lower-level exception this one wraps, if any.
    """

    default_code: str = "ERROR"
    default_http_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        http_status: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.http_status = http_status or self.default_http_status
        self.details: dict[str, Any] = dict(details or {})
        self.cause = cause

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code}, {self.http_status}: {self.message!r})"

    def __str__(self) -> str:
        return self.message

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.http_status < 500

    def public_body(self) -> dict[str, str]:
        """Error body for API clients; server-side messages are not exposed."""
        message = self.message if self.is_client_error else GENERIC_SERVER_MESSAGE
        return {"error": message, "code": self.code}

    def to_dict(self) -> dict[str, Any]:
        """Full description for log records."""
        out: dict[str, Any] = {"message": self.message, "code": self.code, "http_status": self.http_status}
        if self.details:
            out["details"] = self.details
        if self.cause is not None:
            out["cause"] = "".join(traceback.format_exception_only(type(self.cause), self.cause)).strip()
        return out
