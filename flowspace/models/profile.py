"""
Profile and saved quiz set models.

The profile is nothing more than a display name; saved quiz sets are
mini flashcard decks the student kept from Quick Quiz.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

DIFFICULTIES = ("chill", "normal", "spicy")
QUIZ_TYPES = ("short_answer", "multiple_choice", "mixed")
THEMES = ("light", "dark")

TITLE_MAX_LENGTH = 60
DEFAULT_QUIZ_TITLE = "Quiz set"


@dataclass
class QuizQuestion:
    """A practice question (`q`) and its short answer or correct option (`a`)."""
    q: str
    a: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuizQuestion":
        return cls(q=str(data["q"]), a=str(data["a"]))

    def to_dict(self) -> Dict[str, str]:
        return {"q": self.q, "a": self.a}


@dataclass
class UserProfile:
    name: str

    def __post_init__(self):
        self.name = self.name.strip()
        if not self.name:
            raise ValueError("Profile name cannot be empty")

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name}


@dataclass
class SavedQuizSet:
    """
    A quiz the student saved for later review.

    Attributes:
        id: uuid4 string
        title: Short label shown in the library
        created_at: ISO-8601 UTC timestamp (serialized as ``createdAt``)
        difficulty: chill / normal / spicy
        questions: The saved questions
    """
    title: str
    difficulty: str
    questions: List[QuizQuestion]
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def __post_init__(self):
        if self.difficulty not in DIFFICULTIES:
            raise ValueError(
                f"Difficulty must be one of {', '.join(DIFFICULTIES)}, got '{self.difficulty}'"
            )
        self.title = self.title.strip() or DEFAULT_QUIZ_TITLE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SavedQuizSet":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            created_at=data.get("createdAt", ""),
            difficulty=data.get("difficulty", "normal"),
            questions=[QuizQuestion.from_dict(q) for q in data.get("questions", [])],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the stored/wire shape."""
        return {
            "id": self.id,
            "title": self.title,
            "createdAt": self.created_at,
            "difficulty": self.difficulty,
            "questions": [q.to_dict() for q in self.questions],
        }


def default_quiz_title(notes: Optional[str]) -> str:
    """First non-blank line of the notes, cut to a library-friendly length."""
    for line in (notes or "").splitlines():
        line = line.strip()
        if line:
            if len(line) > TITLE_MAX_LENGTH:
                return line[: TITLE_MAX_LENGTH - 1].rstrip() + "…"
            return line
    return DEFAULT_QUIZ_TITLE
