"""
AI agents for FlowSpace.

This module contains LangChain-based agents (LLM-powered):
- Quiz generation (practice questions from notes)
- Safe Space check-in (validation, tiny step, rest reminder)
- Time & Priority Coach (today's plan from a task list)

Note: FlowTimer is in flowspace/models (pure logic, not an agent)
"""

from .base import (
    CompanionAgent,
    UpstreamResponseError,
    EmptyResponseError,
    ResponseParseError,
    ResponseShapeError,
)
from .quiz_generator import QuizGenerator
from .checkin_companion import CheckInCompanion, CheckInResponse, MOODS
from .time_coach import (
    TimeCoach,
    CoachPlan,
    PlanItem,
    TaskInput,
    clean_tasks,
    safe_total_minutes,
)

__all__ = [
    # Shared
    "CompanionAgent",
    "UpstreamResponseError",
    "EmptyResponseError",
    "ResponseParseError",
    "ResponseShapeError",
    # Quick Quiz
    "QuizGenerator",
    # Safe Space
    "CheckInCompanion",
    "CheckInResponse",
    "MOODS",
    # Time Coach
    "TimeCoach",
    "CoachPlan",
    "PlanItem",
    "TaskInput",
    "clean_tasks",
    "safe_total_minutes",
]
