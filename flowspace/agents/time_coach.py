"""
Time & Priority Coach Agent - turns today's task list into a soft, realistic plan.

Tasks are sorted into three buckets (do first, do next, if there's time)
with gentle minute estimates and a short reason for each.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from langchain_core.prompts import PromptTemplate

from ..config import config
from ..utils.validation import PlanValidator
from .base import CompanionAgent, ResponseShapeError

logger = logging.getLogger(__name__)

PLAN_BUCKETS = ("do_first", "do_next", "if_time")


@dataclass
class TaskInput:
    """A task row from the student: title plus optional estimate in minutes."""
    title: str
    minutes: Optional[float] = None

    def describe(self, index: int) -> str:
        line = f"{index}. {self.title}"
        if self.minutes:
            line += f" (est: {self.minutes:g} minutes)"
        return line


@dataclass
class PlanItem:
    task: str
    minutes: Optional[float] = None
    reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"task": self.task, "minutes": self.minutes, "reason": self.reason}


@dataclass
class CoachPlan:
    """
    A plan for today.

    Attributes:
        do_first: Start here
        do_next: After that
        if_time: Only if energy and time allow
        summary: Short, encouraging summary (2-3 sentences)
    """
    summary: str
    do_first: List[PlanItem] = field(default_factory=list)
    do_next: List[PlanItem] = field(default_factory=list)
    if_time: List[PlanItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CoachPlan":
        return cls(
            summary=data["summary"],
            **{
                bucket: [PlanItem(**item) for item in data[bucket]]
                for bucket in PLAN_BUCKETS
            },
        )

    def total_minutes(self, buckets: Iterable[str] = PLAN_BUCKETS) -> float:
        return sum(
            item.minutes or 0 for bucket in buckets for item in getattr(self, bucket)
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            bucket: [item.to_dict() for item in getattr(self, bucket)]
            for bucket in PLAN_BUCKETS
        }
        data["summary"] = self.summary
        return data


def _positive_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number <= 0:
        return None
    return int(number) if number.is_integer() else number


def clean_tasks(tasks: Iterable[TaskInput | dict]) -> List[TaskInput]:
    """
    Drop tasks without a title and normalize the rest.

    Titles are stripped; an estimate is kept only when it is a positive number.
    """
    cleaned = []
    for task in tasks or []:
        if isinstance(task, TaskInput):
            title, minutes = task.title, task.minutes
        elif isinstance(task, dict):
            title, minutes = task.get("title"), task.get("minutes")
        else:
            continue

        if not isinstance(title, str) or not title.strip():
            continue
        cleaned.append(TaskInput(title=title.strip(), minutes=_positive_number(minutes)))
    return cleaned


def safe_total_minutes(total_minutes: Any) -> Optional[float]:
    """Available minutes today, or None when not given or not positive."""
    return _positive_number(total_minutes)


class TimeCoach(CompanionAgent):
    """Gentle, realistic time-management coach."""

    system_prompt = (
        "You create soft, realistic study plans for tired students. "
        "You always respond with valid JSON in the requested shape."
    )

    def __init__(
        self,
        llm: Any = None,
        model_name: Optional[str] = None,
        temperature: Optional[float] = None,
    ):
        self.default_temperature = config.model.plan_temperature
        super().__init__(llm=llm, model_name=model_name, temperature=temperature)
        self.validator = PlanValidator()

        self.plan_prompt = PromptTemplate(
            input_variables=["tasks", "available_time"],
            template="""You are a gentle time-management coach for a burnt-out student.

**Today's tasks:**
{tasks}

**Time available today:** {available_time}

Build a simple plan that focuses on starting small.

**Rules:**
1. Keep minutes realistic and gentle, never grindy
2. Big tasks may be split into smaller chunks
3. Sound kind and non-judgmental throughout

**Respond with a JSON object only, in exactly this shape:**
{{
  "do_first": [{{"task": "task name", "minutes": 15, "reason": "short kind reason"}}],
  "do_next": [{{"task": "task name", "minutes": 20, "reason": "short kind reason"}}],
  "if_time": [{{"task": "task name", "minutes": 10, "reason": "short kind reason"}}],
  "summary": "a short, encouraging summary of the plan (2-3 sentences)"
}}""",
        )

    def plan(
        self,
        tasks: Iterable[TaskInput | dict],
        total_minutes: Any = None,
    ) -> CoachPlan:
        """
        Build a plan for today.

        Args:
            tasks: TaskInput objects or {"title", "minutes"} dicts
            total_minutes: Minutes available today (optional)

        Returns:
            CoachPlan

        Raises:
            ValueError: If no task has a title
            EmptyResponseError: If the model returned nothing
            ResponseParseError: If the model did not return JSON
            ResponseShapeError: If buckets or summary are missing
        """
        cleaned = clean_tasks(tasks)
        if not cleaned:
            raise ValueError("Please provide at least one task.")

        total = safe_total_minutes(total_minutes)
        available_time = (
            f"{total:g} minutes" if total else "not specified, assume 60-90 minutes"
        )

        prompt = self.plan_prompt.format(
            tasks="\n".join(task.describe(i) for i, task in enumerate(cleaned, start=1)),
            available_time=available_time,
        )

        parsed = self._complete_json(prompt, "Could not parse plan JSON from OpenAI")

        result = self.validator.validate(parsed, auto_repair=True)
        if not result.valid:
            logger.error("Plan JSON rejected: %s", "; ".join(result.errors))
            raise ResponseShapeError("Plan JSON missing expected fields")

        return CoachPlan.from_dict(result.data)
