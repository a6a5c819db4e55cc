"""
Unit tests for the Safe Space check-in companion.
"""

import unittest

from conftest import make_llm
from flowspace.agents.base import ResponseParseError, ResponseShapeError
from flowspace.agents.checkin_companion import (
    DEFAULT_MOOD,
    MOODS,
    CheckInCompanion,
    CheckInResponse,
)

REPLY = {
    "validation": "That sounds heavy. It makes sense to feel tired.",
    "tiny_step": "Drink some water.",
    "reminder": "Resting is allowed.",
}


class TestCheckInResponse(unittest.TestCase):
    def test_to_dict(self):
        response = CheckInResponse(**REPLY)
        self.assertEqual(response.to_dict(), REPLY)


class TestCheckInCompanion(unittest.TestCase):
    """Test CheckInCompanion."""

    def test_check_in(self):
        llm = make_llm(REPLY)
        response = CheckInCompanion(llm=llm).check_in(mood="tired", text="Long week")

        self.assertEqual(response.tiny_step, "Drink some water.")
        prompt = llm.invoke.call_args[0][0][-1].content
        self.assertIn("Mood: tired", prompt)
        self.assertIn("Long week", prompt)

    def test_defaults_when_nothing_given(self):
        llm = make_llm(REPLY)
        CheckInCompanion(llm=llm).check_in()

        prompt = llm.invoke.call_args[0][0][-1].content
        self.assertIn(f"Mood: {DEFAULT_MOOD}", prompt)
        self.assertIn("(no details given)", prompt)

    def test_extra_keys_dropped(self):
        llm = make_llm({**REPLY, "emoji": "🌿"})
        response = CheckInCompanion(llm=llm).check_in(mood="numb")
        self.assertEqual(response.to_dict(), REPLY)

    def test_unparseable_response(self):
        companion = CheckInCompanion(llm=make_llm("I hear you."))
        with self.assertRaises(ResponseParseError) as cm:
            companion.check_in(mood="stressed")
        self.assertEqual(
            str(cm.exception), "Could not parse check-in response from OpenAI"
        )

    def test_missing_field(self):
        companion = CheckInCompanion(llm=make_llm({"validation": "ok"}))
        with self.assertRaises(ResponseShapeError):
            companion.check_in(mood="okay")

    def test_uses_checkin_temperature(self):
        companion = CheckInCompanion(llm=make_llm(REPLY))
        from flowspace.config import config

        self.assertEqual(companion.temperature, config.model.checkin_temperature)

    def test_moods(self):
        self.assertEqual(
            set(MOODS), {"tired", "stressed", "guilty", "numb", "okay"}
        )


if __name__ == "__main__":
    unittest.main()
