"""ResponseComposer: answer variant selection and entity placeholder filling."""
from __future__ import annotations

import random
from typing import Mapping, Optional

from qabot.knowledge.schema import QAItem


class ResponseComposer:
    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    def select_answer(self, item: QAItem) -> str:
        """Uniformly random variant when there are several, else the only one."""
        if len(item.answers) > 1:
            return self._rng.choice(item.answers)
        return item.answers[0]

    @staticmethod
    def personalize(template: str, entities: Mapping[str, str]) -> str:
        """Replace the first ``{name}`` of each recognized entity with its value.

        Placeholders without a recognized entity stay as they are.
        """
        for name, value in entities.items():
            template = template.replace("{" + name + "}", value, 1)
        return template

    def compose(self, item: QAItem, entities: Mapping[str, str]) -> str:
        return self.personalize(self.select_answer(item), entities)
