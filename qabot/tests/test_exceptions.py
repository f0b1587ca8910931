"""ChatbotError hierarchy: codes, statuses and the bodies clients see."""
from __future__ import annotations

import unittest

from qabot.core.exceptions import (
    GENERIC_SERVER_MESSAGE,
    ChatbotError,
    ClientInputError,
    ExternalFallbackError,
    PipelineError,
    SessionNotFoundError,
)


class TestChatbotError(unittest.TestCase):
    def test_class_defaults(self) -> None:
        self.assertEqual((ClientInputError("x").code, ClientInputError("x").http_status), ("CLIENT_INPUT_ERROR", 400))
        self.assertEqual(SessionNotFoundError("x").http_status, 404)
        self.assertEqual(ExternalFallbackError("x").http_status, 502)
        self.assertTrue(issubclass(PipelineError, ChatbotError))

    def test_overrides(self) -> None:
        err = ChatbotError("boom", code="CUSTOM", http_status=418)
        self.assertEqual((err.code, err.http_status), ("CUSTOM", 418))
        self.assertTrue(err.is_client_error)

    def test_public_body_hides_server_messages(self) -> None:
        self.assertEqual(
            ClientInputError("Parameter 'q' is required").public_body(),
            {"error": "Parameter 'q' is required", "code": "CLIENT_INPUT_ERROR"},
        )
        self.assertEqual(
            PipelineError("detector exploded").public_body(),
            {"error": GENERIC_SERVER_MESSAGE, "code": "PIPELINE_ERROR"},
        )

    def test_to_dict_includes_details_and_cause(self) -> None:
        err = PipelineError("failed", details={"stage": "detect"}, cause=RuntimeError("bad state"))
        out = err.to_dict()
        self.assertEqual(out["details"], {"stage": "detect"})
        self.assertEqual(out["cause"], "RuntimeError: bad state")
        self.assertNotIn("details", ClientInputError("x").to_dict())


if __name__ == "__main__":
    unittest.main()
