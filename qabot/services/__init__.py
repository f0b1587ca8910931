"""Service layer: engine construction from configuration."""
from qabot.services.dialogue_service import DialogueService

__all__ = [
    "DialogueService",
]
