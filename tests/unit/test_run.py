"""
Unit tests for the Gradio interface helpers and event handlers.

Handlers are called directly; agents and the store are swapped for
mock-backed instances.
"""

import pytest

from conftest import make_llm
from flowspace import run
from flowspace.agents import CheckInCompanion, CheckInResponse, CoachPlan, QuizGenerator, TimeCoach
from flowspace.models.flow_timer import FlowTimer


@pytest.fixture
def ui(monkeypatch, store, sample_quiz, sample_checkin, sample_plan):
    """Point the UI module at mocked agents and a temp store."""
    monkeypatch.setattr(run, "get_store", lambda: store)
    generator = QuizGenerator(llm=make_llm(sample_quiz))
    companion = CheckInCompanion(llm=make_llm(sample_checkin))
    coach = TimeCoach(llm=make_llm(sample_plan))
    monkeypatch.setattr(run, "get_quiz_generator", lambda: generator)
    monkeypatch.setattr(run, "get_checkin_companion", lambda: companion)
    monkeypatch.setattr(run, "get_time_coach", lambda: coach)
    return run


class TestFormatting:
    def test_format_timer(self):
        timer = FlowTimer()
        timer.set_task("Bio")

        output = run.format_timer(timer)

        assert "# 05:00" in output
        assert "Focus" in output
        assert "Bio" in output

    def test_level_choices(self):
        values = [value for _, value in run.level_choices(FlowTimer())]
        assert values == ["soft", "focus", "deep"]

    def test_format_quiz(self, sample_quiz):
        output = run.format_quiz(sample_quiz)
        assert "**1. What does the mitochondria produce?**" in output
        assert "<details><summary>Show answer</summary>ATP</details>" in output

    def test_format_quiz_empty(self):
        assert "No questions yet" in run.format_quiz([])

    def test_format_checkin(self, sample_checkin):
        output = run.format_checkin(CheckInResponse(**sample_checkin))
        assert sample_checkin["tiny_step"] in output
        assert sample_checkin["reminder"] in output

    def test_format_plan(self, sample_plan):
        sample_plan["if_time"] = []
        output = run.format_plan(CoachPlan.from_dict(sample_plan))

        assert "**Read chapter 3 intro** (15 min) – A small, easy start" in output
        assert "Nothing here, and that's okay." in output
        assert output.endswith(sample_plan["summary"])

    def test_greeting(self):
        assert "Hi Sam!" in run.greeting("Sam")
        assert "don't have to add a name" in run.greeting(None)

    def test_rows_to_tasks(self):
        rows = [["Read", 20], ["Calc", ""], [None, None], []]
        assert run.rows_to_tasks(rows) == [
            {"title": "Read", "minutes": 20},
            {"title": "Calc", "minutes": None},
            {"title": "", "minutes": None},
        ]


class TestHandlers:
    def test_timer_handlers(self, ui):
        timer = FlowTimer()
        _, _, timer = ui.start_pause_ui(timer)
        output, timer = ui.timer_tick_ui(timer)
        assert output.startswith("# 04:59")

        output, _, timer = ui.change_level_ui("deep", timer)
        assert "# 25:00" in output
        assert not timer.is_running

        ui.start_pause_ui(timer)
        ui.timer_tick_ui(timer)
        output, _, timer = ui.reset_timer_ui(timer)
        assert "# 25:00" in output

    def test_set_task(self, ui):
        output, timer = ui.set_task_ui("Calc homework", FlowTimer())
        assert timer.task == "Calc homework"
        assert "Calc homework" in output

    def test_sessions_keep_separate_timers(self, ui):
        mine, theirs = FlowTimer(), FlowTimer()

        ui.start_pause_ui(mine)
        ui.change_level_ui("deep", theirs)
        for _ in range(3):
            ui.timer_tick_ui(mine)
            ui.timer_tick_ui(theirs)

        assert mine.display() == "04:57"
        assert theirs.display() == "25:00"
        assert not theirs.is_running


    def test_generate_quiz_from_notes(self, ui, sample_quiz):
        markdown, data, title = ui.generate_quiz_ui(
            "Cell biology\nMitochondria make ATP", None, "chill", "short_answer"
        )
        assert data == sample_quiz
        assert title == "Cell biology"
        assert "Show answer" in markdown

    def test_generate_quiz_from_file(self, ui, tmp_path, sample_quiz):
        path = tmp_path / "notes.md"
        path.write_text("# Osmosis\nWater moves.", encoding="utf-8")

        _, data, title = ui.generate_quiz_ui("", str(path), "normal", "mixed")

        assert data == sample_quiz
        assert title == "# Osmosis"

    def test_generate_quiz_without_notes(self, ui):
        markdown, data, title = ui.generate_quiz_ui("  ", None, "chill", "short_answer")
        assert markdown.startswith("❌ Error")
        assert data == []

    def test_save_quiz(self, ui, store, sample_quiz):
        status, library = ui.save_quiz_ui(sample_quiz, "Bio", "chill")

        assert "Bio" in status
        assert "**Bio** · chill · 3 questions" in library
        assert len(store.list_quiz_sets()) == 1

    def test_delete_quiz_set(self, ui, store, sample_quiz):
        saved = store.save_quiz_set("Bio", "chill", sample_quiz)

        status, library = ui.delete_quiz_set_ui(f"  {saved.id} ")

        assert "Removed" in status
        assert "haven't saved any quizzes" in library

    def test_check_in_maps_mood_label(self, ui):
        output = ui.check_in_ui(run.MOODS["tired"], "")
        assert "Tiny step" in output

        prompt = ui.get_checkin_companion().llm.invoke.call_args[0][0][-1].content
        assert "Mood: tired" in prompt

    def test_plan_without_tasks(self, ui):
        assert ui.generate_plan_ui([["", None]], None) == (
            "❌ Error: Please provide at least one task."
        )

    def test_plan(self, ui, sample_plan):
        output = ui.generate_plan_ui([["Read chapter 3", 15]], 60)
        assert sample_plan["summary"] in output

    def test_name_change(self, ui, store):
        assert "Hi Ria!" in ui.update_name_ui("Ria")
        assert store.load_profile().name == "Ria"
        assert "don't have to add a name" in ui.update_name_ui("")
        assert store.load_profile() is None

    def test_toggle_theme(self, ui):
        assert ui.toggle_theme_ui() == "dark"
        assert ui.toggle_theme_ui() == "light"
