"""
Flow Timer - focus/break countdown with lock-in levels.

Pure state machine: whoever owns the timer calls tick() once per second
(the UI does it from a periodic callback).
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ..config import config

FOCUS = "focus"
BREAK = "break"


class FlowTimer:
    """
    Countdown timer that alternates focus and break blocks.

    Levels map to (label, focus minutes, break minutes). When the countdown
    reaches zero the mode flips and the next block starts immediately.
    """

    def __init__(self, level: Optional[str] = None, levels: Optional[dict] = None):
        """
        Initialize timer in focus mode, paused.

        Args:
            level: Starting lock-in level (default from config)
            levels: Level table (default from config)
        """
        self.levels = levels or config.timer.levels
        level = level or config.timer.default_level
        self._check_level(level)

        self.level = level
        self.mode = FOCUS
        self.is_running = False
        self.task = ""
        self.seconds_left = self.duration_seconds(level, FOCUS)
        self.completed_focus_blocks = 0

    def _check_level(self, level: str) -> None:
        if level not in self.levels:
            raise ValueError(
                f"Unknown level '{level}', expected one of {', '.join(self.levels)}"
            )

    def duration_seconds(self, level: str, mode: str) -> int:
        """Seconds in a block of the given level and mode."""
        self._check_level(level)
        if mode not in (FOCUS, BREAK):
            raise ValueError(f"Unknown mode '{mode}', expected 'focus' or 'break'")
        _, focus_minutes, break_minutes = self.levels[level]
        minutes = focus_minutes if mode == FOCUS else break_minutes
        return minutes * 60

    def label(self, level: Optional[str] = None) -> str:
        return self.levels[level or self.level][0]

    def start(self) -> None:
        self.is_running = True

    def pause(self) -> None:
        self.is_running = False

    def toggle(self) -> bool:
        """Start if paused, pause if running. Returns the new running state."""
        self.is_running = not self.is_running
        return self.is_running

    def tick(self) -> bool:
        """
        Advance the countdown by one second.

        Returns:
            True if this tick finished a block and switched mode
        """
        if not self.is_running:
            return False

        if self.seconds_left <= 1:
            if self.mode == FOCUS:
                self.completed_focus_blocks += 1
            self.mode = BREAK if self.mode == FOCUS else FOCUS
            self.seconds_left = self.duration_seconds(self.level, self.mode)
            return True

        self.seconds_left -= 1
        return False

    def advance(self, seconds: int) -> int:
        """
        Apply ``seconds`` ticks.

        Returns:
            Number of mode switches that happened
        """
        if seconds < 0:
            raise ValueError(f"Cannot advance by a negative amount: {seconds}")
        return sum(1 for _ in range(seconds) if self.tick())

    def set_level(self, level: str) -> None:
        """Switch level: stops the timer and resets to a fresh focus block."""
        self._check_level(level)
        self.level = level
        self.reset()

    def reset(self) -> None:
        """Stop and go back to the start of a focus block at the current level."""
        self.is_running = False
        self.mode = FOCUS
        self.seconds_left = self.duration_seconds(self.level, FOCUS)

    def set_task(self, task: Optional[str]) -> None:
        self.task = (task or "").strip()

    def display(self) -> str:
        """Remaining time as MM:SS."""
        minutes, seconds = divmod(self.seconds_left, 60)
        return f"{minutes:02d}:{seconds:02d}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "label": self.label(),
            "mode": self.mode,
            "is_running": self.is_running,
            "seconds_left": self.seconds_left,
            "display": self.display(),
            "task": self.task,
            "completed_focus_blocks": self.completed_focus_blocks,
        }
