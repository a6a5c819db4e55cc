"""
Safe Space Agent - answers a mood check-in with validation, a tiny step and a rest reminder.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from langchain_core.prompts import PromptTemplate

from ..config import config
from ..utils.validation import CheckInValidator
from .base import CompanionAgent, ResponseShapeError

logger = logging.getLogger(__name__)

MOODS = {
    "tired": "😴 Tired",
    "stressed": "😵‍💫 Stressed",
    "guilty": "😔 Guilty",
    "numb": "😶 Numb",
    "okay": "🙂 Okay-ish",
}
DEFAULT_MOOD = "not sure"


@dataclass
class CheckInResponse:
    """
    Reply to a Safe Space check-in.

    Attributes:
        validation: Warm validating message (2-3 sentences)
        tiny_step: One optional step that takes under five minutes
        reminder: Rest is allowed; productivity is not worth
    """
    validation: str
    tiny_step: str
    reminder: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "validation": self.validation,
            "tiny_step": self.tiny_step,
            "reminder": self.reminder,
        }


class CheckInCompanion(CompanionAgent):
    """Gentle, non-judgmental responder for mood check-ins."""

    system_prompt = (
        "You are a kind, no-shame study companion. "
        "You only respond with valid JSON in the requested shape."
    )

    def __init__(
        self,
        llm: Any = None,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None,
    ):
        self.default_temperature = config.model.checkin_temperature
        super().__init__(llm=llm, model_name=model_name, temperature=temperature)
        self.validator = CheckInValidator()

        self.checkin_prompt = PromptTemplate(
            input_variables=["mood", "message"],
            template="""A burnt-out student just checked in with how they feel.

Mood: {mood}
What they shared: {message}

Reply softly and without judgment. Never mention JSON or formatting in the text itself.

Respond with a JSON object only, in exactly this shape:
{{
  "validation": "a warm message that validates how they feel (2-3 sentences)",
  "tiny_step": "one optional, very small thing they could do in under 5 minutes",
  "reminder": "a reminder that resting is allowed and productivity is not their worth"
}}""",
        )

    def check_in(
        self,
        mood: Optional[str] = None,
        text: Optional[str] = None,
    ) -> CheckInResponse:
        """
        Respond to a check-in.

        Args:
            mood: Mood id or free text (default "not sure")
            text: Optional message from the student

        Returns:
            CheckInResponse

        Raises:
            EmptyResponseError: If the model returned nothing
            ResponseParseError: If the model did not return JSON
            ResponseShapeError: If a field is missing
        """
        mood = (mood or "").strip() or DEFAULT_MOOD
        message = (text or "").strip()

        prompt = self.checkin_prompt.format(
            mood=mood,
            message=message or "(no details given)",
        )

        parsed = self._complete_json(
            prompt, "Could not parse check-in response from OpenAI"
        )

        result = self.validator.validate(parsed, auto_repair=True)
        if not result.valid:
            logger.error("Check-in JSON rejected: %s", "; ".join(result.errors))
            raise ResponseShapeError("Check-in JSON missing expected fields")

        return CheckInResponse(**result.data)
