"""
Data models for FlowSpace.

This module contains core data models:
- FlowTimer: focus/break countdown state machine
- UserProfile, SavedQuizSet, QuizQuestion: what the student keeps
"""

from .flow_timer import FlowTimer
from .profile import QuizQuestion, SavedQuizSet, UserProfile, default_quiz_title

__all__ = [
    "FlowTimer",
    "QuizQuestion",
    "SavedQuizSet",
    "UserProfile",
    "default_quiz_title",
]
