"""
Quiz Generator Agent - turns a student's notes into a few gentle practice questions.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from langchain_core.prompts import PromptTemplate

from ..config import config
from ..models.profile import DIFFICULTIES, QUIZ_TYPES, QuizQuestion
from ..utils.validation import QuizValidator
from .base import CompanionAgent, ResponseShapeError

logger = logging.getLogger(__name__)

DEFAULT_DIFFICULTY = "normal"
DEFAULT_QUIZ_TYPE = "short_answer"


class QuizGenerator(CompanionAgent):
    """
    Generates 3-5 practice questions from notes.

    Features:
    - Difficulty levels: chill, normal, spicy
    - Quiz types: short_answer, multiple_choice, mixed
    - Response shape checked against quiz.schema.json (with auto-repair)
    """

    system_prompt = (
        "You write kind, bite-sized quiz questions for tired students "
        "and always respond with valid JSON only."
    )

    def __init__(
        self,
        llm: Any = None,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None,
    ):
        self.default_temperature = config.model.quiz_temperature
        super().__init__(llm=llm, model_name=model_name, temperature=temperature)
        self.validator = QuizValidator()

        self.quiz_prompt = PromptTemplate(
            input_variables=["notes", "difficulty", "quiz_type"],
            template="""You are a supportive study companion. Nobody gets shamed for not knowing things.

Read the student's notes and write 3 to 5 short practice questions about them.

**Difficulty levels:**
- chill: gentle, checks the basic ideas
- normal: moderate
- spicy: more of a stretch, still friendly

**Quiz types:**
- short_answer: open questions answered in a sentence or two
- multiple_choice: list the options inside the question text; the answer is the correct option
- mixed: some of each

**Notes:**
{notes}

**Difficulty:** {difficulty}
**Quiz type:** {quiz_type}

**Respond with a JSON array only, in exactly this shape:**
[
  {{"q": "question text", "a": "short answer or correct option"}}
]""",
        )

    def generate_quiz(
        self,
        text: str,
        difficulty: Optional[str] = None,
        quiz_type: Optional[str] = None,
    ) -> List[QuizQuestion]:
        """
        Generate practice questions from notes.

        Args:
            text: The student's notes
            difficulty: chill / normal / spicy (default normal)
            quiz_type: short_answer / multiple_choice / mixed (default short_answer)

        Returns:
            List of QuizQuestion objects

        Raises:
            ValueError: If text is blank or difficulty/quiz type is unknown
            EmptyResponseError: If the model returned nothing
            ResponseParseError: If the model did not return JSON
            ResponseShapeError: If the JSON is not a list of {q, a} objects
        """
        if not text or not text.strip():
            raise ValueError("Text is required")

        difficulty = difficulty or DEFAULT_DIFFICULTY
        quiz_type = quiz_type or DEFAULT_QUIZ_TYPE

        if difficulty not in DIFFICULTIES:
            raise ValueError(
                f"Difficulty must be one of {', '.join(DIFFICULTIES)}, got '{difficulty}'"
            )
        if quiz_type not in QUIZ_TYPES:
            raise ValueError(
                f"Quiz type must be one of {', '.join(QUIZ_TYPES)}, got '{quiz_type}'"
            )

        prompt = self.quiz_prompt.format(
            notes=text.strip(),
            difficulty=difficulty,
            quiz_type=quiz_type,
        )

        parsed = self._complete_json(prompt, "Could not parse quiz JSON from OpenAI")

        result = self.validator.validate(parsed, auto_repair=True)
        if not result.valid:
            logger.error("Quiz JSON rejected: %s", "; ".join(result.errors))
            raise ResponseShapeError("Quiz result is not an array of questions")
        if result.repairs:
            logger.info("Quiz JSON repaired: %s", "; ".join(result.repairs))

        return [QuizQuestion.from_dict(item) for item in result.data]
