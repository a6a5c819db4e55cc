"""
FlowSpace persistence: profile, saved quiz sets and theme.

Each storage key is a JSON file in the data directory. A missing or
unreadable file reads as "no value", so a corrupt blob never blocks the app.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, List, Optional

from ..config import config
from ..models.profile import (
    THEMES,
    QuizQuestion,
    SavedQuizSet,
    UserProfile,
)

logger = logging.getLogger(__name__)

PROFILE_KEY = "flowspace_profile_v1"
QUIZ_SETS_KEY = "flowspace_quiz_sets_v1"
THEME_KEY = "flowspace_theme"
DEFAULT_THEME = "light"


class FlowSpaceStore:
    """
    Key/value JSON store for everything FlowSpace remembers about the student.

    Features:
    - Profile (display name) create/update/remove
    - Saved quiz sets, newest first
    - Light/dark theme preference
    """

    def __init__(self, data_dir: Path | str = None):
        """
        Initialize the store.

        Args:
            data_dir: Directory holding the JSON files (default: config.paths.data_dir)
        """
        self.data_dir = Path(data_dir) if data_dir else config.paths.data_dir
        self.data_dir.mkdir(parents=True, exist_ok=True)
        # Held across each read-modify-write cycle
        self._lock = threading.RLock()

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def _read(self, key: str) -> Any:
        filepath = self._path(key)
        if not filepath.exists():
            return None

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable %s: %s", filepath, e)
            return None

    def _write(self, key: str, value: Any) -> None:
        filepath = self._path(key)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self.data_dir,
            prefix=f"{key}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_path = Path(f.name)
            json.dump(value, f, indent=2, ensure_ascii=False)
        try:
            os.replace(tmp_path, filepath)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

    def _remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    # ------------------------------------------------------------------ profile

    def load_profile(self) -> Optional[UserProfile]:
        data = self._read(PROFILE_KEY)
        if not isinstance(data, dict):
            return None
        try:
            return UserProfile(name=str(data.get("name", "")))
        except ValueError:
            return None

    def update_profile(self, name: Optional[str]) -> Optional[UserProfile]:
        """
        Store the profile name.

        Args:
            name: New name; surrounding whitespace is trimmed

        Returns:
            The stored profile, or None when the trimmed name is empty
            (the stored profile is removed in that case)
        """
        trimmed = (name or "").strip()
        with self._lock:
            if not trimmed:
                self._remove(PROFILE_KEY)
                logger.info("Profile cleared")
                return None

            profile = UserProfile(name=trimmed)
            self._write(PROFILE_KEY, profile.to_dict())
            return profile

    # ---------------------------------------------------------------- quiz sets

    def list_quiz_sets(self) -> List[SavedQuizSet]:
        """List saved quiz sets, newest first."""
        data = self._read(QUIZ_SETS_KEY)
        if not isinstance(data, list):
            return []

        quiz_sets = []
        for entry in data:
            try:
                quiz_sets.append(SavedQuizSet.from_dict(entry))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning("Skipping malformed quiz set entry: %s", e)
        return quiz_sets

    def get_quiz_set(self, quiz_set_id: str) -> Optional[SavedQuizSet]:
        return next((s for s in self.list_quiz_sets() if s.id == quiz_set_id), None)

    def save_quiz_set(
        self,
        title: str,
        difficulty: str,
        questions: List[QuizQuestion | dict],
    ) -> SavedQuizSet:
        """
        Save a quiz set at the top of the library.

        Args:
            title: Label for the set (blank falls back to a default)
            difficulty: chill / normal / spicy
            questions: QuizQuestion objects or {"q", "a"} dicts

        Returns:
            The new SavedQuizSet with its generated id and timestamp

        Raises:
            ValueError: If difficulty is unknown or there are no questions
        """
        parsed = [
            q if isinstance(q, QuizQuestion) else QuizQuestion.from_dict(q)
            for q in questions
        ]
        if not parsed:
            raise ValueError("Cannot save a quiz set without questions")

        new_set = SavedQuizSet(title=title, difficulty=difficulty, questions=parsed)
        with self._lock:
            quiz_sets = [new_set] + self.list_quiz_sets()
            self._write(QUIZ_SETS_KEY, [s.to_dict() for s in quiz_sets])
        logger.info("Saved quiz set %s (%d questions)", new_set.id, len(parsed))
        return new_set

    def delete_quiz_set(self, quiz_set_id: str) -> bool:
        """
        Delete a quiz set by ID.

        Returns:
            True if a set was removed, False if no set had that ID
        """
        with self._lock:
            quiz_sets = self.list_quiz_sets()
            remaining = [s for s in quiz_sets if s.id != quiz_set_id]
            if len(remaining) == len(quiz_sets):
                return False

            self._write(QUIZ_SETS_KEY, [s.to_dict() for s in remaining])
            return True

    # -------------------------------------------------------------------- theme

    def load_theme(self) -> str:
        theme = self._read(THEME_KEY)
        return theme if theme in THEMES else DEFAULT_THEME

    def save_theme(self, theme: str) -> str:
        if theme not in THEMES:
            raise ValueError(f"Theme must be one of {', '.join(THEMES)}, got '{theme}'")
        with self._lock:
            self._write(THEME_KEY, theme)
        return theme

    def toggle_theme(self) -> str:
        with self._lock:
            return self.save_theme("dark" if self.load_theme() == "light" else "light")


# Global store instance
_store: Optional[FlowSpaceStore] = None


def get_store() -> FlowSpaceStore:
    """Get or create the global store."""
    global _store
    if _store is None:
        _store = FlowSpaceStore()
    return _store
