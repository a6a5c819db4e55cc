"""
FlowSpace: Gradio interface for the study companion.

Tabs mirror the app's screens: Home, Flow Timer, Quick Quiz, Safe Space,
Time Coach and Profile. Agents are called in-process; the HTTP API in
flowspace.server exposes the same features to other clients.
"""

import logging
from typing import Any, List, Optional

import gradio as gr

from .agents import (
    MOODS,
    CheckInCompanion,
    CheckInResponse,
    CoachPlan,
    QuizGenerator,
    TimeCoach,
)
from .config import config, token_tracker
from .models.flow_timer import FOCUS, FlowTimer
from .models.profile import DIFFICULTIES, QUIZ_TYPES, SavedQuizSet, default_quiz_title
from .utils.document_loader import load_notes
from .utils.persistence import get_store

logger = logging.getLogger(__name__)

# Global state
_quiz_generator: Optional[QuizGenerator] = None
_checkin_companion: Optional[CheckInCompanion] = None
_time_coach: Optional[TimeCoach] = None


def get_quiz_generator() -> QuizGenerator:
    global _quiz_generator
    if _quiz_generator is None:
        _quiz_generator = QuizGenerator()
    return _quiz_generator


def get_checkin_companion() -> CheckInCompanion:
    global _checkin_companion
    if _checkin_companion is None:
        _checkin_companion = CheckInCompanion()
    return _checkin_companion


def get_time_coach() -> TimeCoach:
    global _time_coach
    if _time_coach is None:
        _time_coach = TimeCoach()
    return _time_coach


# ==================== Formatting helpers ====================

def format_timer(timer: FlowTimer) -> str:
    """Big MM:SS readout with mode and the current focus task."""
    mode = "Focus" if timer.mode == FOCUS else "Break"
    output = f"# {timer.display()}\n\nMode: **{mode}** · {timer.label()}"
    if timer.task:
        output += f"\n\n*Focusing on: {timer.task}*"
    if timer.completed_focus_blocks:
        output += f"\n\n🌱 Focus blocks finished: {timer.completed_focus_blocks}"
    return output


def level_choices(timer: FlowTimer) -> List[tuple]:
    return [
        (f"{label} – {focus_minutes} min focus", key)
        for key, (label, focus_minutes, _) in timer.levels.items()
    ]


def format_quiz(questions: List[dict]) -> str:
    """Numbered questions with answers folded away until the student opens them."""
    if not questions:
        return "No questions yet. Paste some notes or upload a PDF first."

    lines = []
    for i, question in enumerate(questions, start=1):
        lines.append(f"**{i}. {question['q']}**")
        lines.append(f"<details><summary>Show answer</summary>{question['a']}</details>\n")
    return "\n".join(lines)


def format_checkin(response: CheckInResponse) -> str:
    return (
        f"💛 {response.validation}\n\n"
        f"**Tiny step:** {response.tiny_step}\n\n"
        f"*{response.reminder}*"
    )


def format_plan(plan: CoachPlan) -> str:
    sections = [
        ("✨ Do first", plan.do_first),
        ("➡️ Do next", plan.do_next),
        ("🌙 If there's time", plan.if_time),
    ]
    output = ""
    for title, items in sections:
        output += f"### {title}\n"
        if not items:
            output += "_Nothing here, and that's okay._\n\n"
            continue
        for item in items:
            minutes = f" ({item.minutes:g} min)" if item.minutes else ""
            reason = f" – {item.reason}" if item.reason else ""
            output += f"- **{item.task}**{minutes}{reason}\n"
        output += "\n"
    output += f"---\n\n{plan.summary}"
    return output


def format_library(quiz_sets: List[SavedQuizSet]) -> str:
    if not quiz_sets:
        return (
            "You haven't saved any quizzes yet. Generate one in the **Quick Quiz** "
            "tab and hit \"Save this quiz\" to keep it here."
        )
    lines = []
    for quiz_set in quiz_sets:
        lines.append(
            f"- **{quiz_set.title}** · {quiz_set.difficulty} · "
            f"{len(quiz_set.questions)} questions `{quiz_set.id}`"
        )
    return "\n".join(lines)


def greeting(name: Optional[str]) -> str:
    if name:
        return (
            f"Hi {name}! All the quiz sets you save will show up here "
            "so you can review them later."
        )
    return (
        "You don't have to add a name if you don't want to. "
        "This space is still all yours."
    )


def rows_to_tasks(rows: Any) -> List[dict]:
    """Convert Dataframe rows [[title, minutes], ...] to task dicts."""
    tasks = []
    for row in rows or []:
        if not row:
            continue
        title = str(row[0]) if row[0] is not None else ""
        minutes = row[1] if len(row) > 1 and row[1] not in ("", None) else None
        tasks.append({"title": title, "minutes": minutes})
    return tasks


def api_status() -> str:
    problems = config.validate()
    if problems:
        return "⚠️ " + "; ".join(problems)
    return f"FlowSpace is ready ✨ (model: {config.model.model_name})"


# ==================== Event handlers ====================

def timer_tick_ui(timer: FlowTimer):
    timer.tick()
    return format_timer(timer), timer


def start_pause_ui(timer: FlowTimer):
    running = timer.toggle()
    return format_timer(timer), gr.update(value="Pause" if running else "Start"), timer


def reset_timer_ui(timer: FlowTimer):
    timer.reset()
    return format_timer(timer), gr.update(value="Start"), timer


def change_level_ui(level: str, timer: FlowTimer):
    timer.set_level(level)
    return format_timer(timer), gr.update(value="Start"), timer


def set_task_ui(task: str, timer: FlowTimer):
    timer.set_task(task)
    return format_timer(timer), timer



def generate_quiz_ui(notes: str, notes_file: Optional[str], difficulty: str, quiz_type: str):
    """Generate questions from pasted notes, or from the uploaded file if there is one."""
    try:
        text = notes
        if notes_file:
            text = load_notes(notes_file).content
            if not text.strip():
                return "❌ Error: Could not extract text from the file.", [], ""

        if not text or not text.strip():
            return "❌ Error: Paste a few notes first.", [], ""

        questions = get_quiz_generator().generate_quiz(
            text, difficulty=difficulty, quiz_type=quiz_type
        )
        data = [q.to_dict() for q in questions]
        return format_quiz(data), data, default_quiz_title(text)
    except Exception as e:
        logger.exception("Quiz generation failed")
        return f"❌ Error: {str(e)}", [], ""


def save_quiz_ui(questions: List[dict], title: str, difficulty: str):
    if not questions:
        return "❌ Error: Generate a quiz before saving it.", gr.update()
    try:
        saved = get_store().save_quiz_set(title=title, difficulty=difficulty, questions=questions)
    except ValueError as e:
        return f"❌ Error: {str(e)}", gr.update()
    return f"✅ Saved “{saved.title}”", format_library(get_store().list_quiz_sets())


def check_in_ui(mood_label: Optional[str], text: str):
    mood = next((key for key, label in MOODS.items() if label == mood_label), None)
    try:
        return format_checkin(get_checkin_companion().check_in(mood=mood, text=text))
    except Exception as e:
        logger.exception("Check-in failed")
        return f"❌ Error: {str(e)}"


def generate_plan_ui(rows: Any, total_minutes: Optional[float]):
    tasks = rows_to_tasks(rows)
    try:
        return format_plan(get_time_coach().plan(tasks, total_minutes=total_minutes))
    except Exception as e:
        logger.exception("Plan generation failed")
        return f"❌ Error: {str(e)}"


def update_name_ui(name: str):
    profile = get_store().update_profile(name)
    return greeting(profile.name if profile else None)


def delete_quiz_set_ui(quiz_set_id: str):
    removed = get_store().delete_quiz_set((quiz_set_id or "").strip())
    status = "🗑️ Removed." if removed else "❌ Error: No saved quiz set with that ID."
    return status, format_library(get_store().list_quiz_sets())


def toggle_theme_ui():
    return get_store().toggle_theme()


# ==================== Interface ====================

def create_interface() -> gr.Blocks:
    store = get_store()
    profile = store.load_profile()

    with gr.Blocks(title="FlowSpace") as demo:
        gr.Markdown("# 🌊 FlowSpace\nA no-shame study companion for burnt-out students.")

        with gr.Tab("Home"):
            gr.Markdown(api_status())
            gr.Markdown(
                "- ⏱️ **Focus Timer**: short, kind focus blocks\n"
                "- 🧠 **Smart Quiz**: practice questions from your notes\n"
                "- 💛 **Safe Space**: check in with how you feel\n"
                "- 🗓️ **Time Coach**: a gentle plan for today"
            )
            theme_btn = gr.Button("🌗 Toggle theme")
            theme_state = gr.Textbox(value=store.load_theme(), label="Theme", interactive=False)
            theme_btn.click(toggle_theme_ui, outputs=theme_state).then(
                None, js="() => document.body.classList.toggle('dark')"
            )

        with gr.Tab("Focus Timer"):
            # One FlowTimer per browser session
            initial_timer = FlowTimer()
            timer_state = gr.State(initial_timer)
            task_box = gr.Textbox(
                label="What are you working on?",
                placeholder="e.g. Calc homework, bio notes…",
            )
            level_dd = gr.Dropdown(
                choices=level_choices(initial_timer),
                value=initial_timer.level,
                label="Lock-in level",
            )
            timer_md = gr.Markdown(format_timer(initial_timer))
            with gr.Row():
                start_btn = gr.Button("Start", variant="primary")
                reset_btn = gr.Button("Reset")

            ticker = gr.Timer(config.timer.tick_seconds)
            ticker.tick(timer_tick_ui, inputs=timer_state, outputs=[timer_md, timer_state])
            start_btn.click(
                start_pause_ui, inputs=timer_state, outputs=[timer_md, start_btn, timer_state]
            )
            reset_btn.click(
                reset_timer_ui, inputs=timer_state, outputs=[timer_md, start_btn, timer_state]
            )
            level_dd.change(
                change_level_ui,
                inputs=[level_dd, timer_state],
                outputs=[timer_md, start_btn, timer_state],
            )
            task_box.change(
                set_task_ui, inputs=[task_box, timer_state], outputs=[timer_md, timer_state]
            )


        with gr.Tab("Quick Quiz"):
            notes_box = gr.Textbox(label="Your notes or concept", lines=6)
            notes_file = gr.File(
                label="…or upload notes (PDF, TXT, MD)",
                file_types=[".pdf", ".txt", ".md"],
                type="filepath",
            )
            with gr.Row():
                difficulty_radio = gr.Radio(list(DIFFICULTIES), value="chill", label="Difficulty")
                quiz_type_radio = gr.Radio(list(QUIZ_TYPES), value="short_answer", label="Quiz type")
            quiz_btn = gr.Button("Generate quiz", variant="primary")
            quiz_md = gr.Markdown()
            questions_state = gr.State([])
            title_box = gr.Textbox(label="Title for this set")
            save_btn = gr.Button("💾 Save this quiz")
            save_status = gr.Markdown()

        with gr.Tab("Safe Space"):
            mood_radio = gr.Radio(list(MOODS.values()), label="How are you feeling?")
            checkin_text = gr.Textbox(label="Anything you want to share? (optional)", lines=3)
            checkin_btn = gr.Button("Check in", variant="primary")
            checkin_md = gr.Markdown()
            checkin_btn.click(check_in_ui, inputs=[mood_radio, checkin_text], outputs=checkin_md)

        with gr.Tab("Time Coach"):
            tasks_df = gr.Dataframe(
                headers=["Task", "Minutes (optional)"],
                datatype=["str", "number"],
                value=[["", None], ["", None]],
                row_count=(2, "dynamic"),
                col_count=(2, "fixed"),
                type="array",
                label="Today's tasks",
            )
            total_minutes = gr.Number(label="Time available today (minutes)", value=None)
            plan_btn = gr.Button("Make my plan", variant="primary")
            plan_md = gr.Markdown()
            plan_btn.click(generate_plan_ui, inputs=[tasks_df, total_minutes], outputs=plan_md)

        with gr.Tab("Profile"):
            name_box = gr.Textbox(
                label="Name or alias",
                value=profile.name if profile else "",
                placeholder="e.g. Study gremlin",
            )
            greeting_md = gr.Markdown(greeting(profile.name if profile else None))
            name_box.change(update_name_ui, inputs=name_box, outputs=greeting_md)

            gr.Markdown("### Saved quiz sets")
            library_md = gr.Markdown(format_library(store.list_quiz_sets()))
            delete_box = gr.Textbox(label="Quiz set ID to remove")
            delete_btn = gr.Button("Remove")
            delete_status = gr.Markdown()
            delete_btn.click(
                delete_quiz_set_ui, inputs=delete_box, outputs=[delete_status, library_md]
            )

        quiz_btn.click(
            generate_quiz_ui,
            inputs=[notes_box, notes_file, difficulty_radio, quiz_type_radio],
            outputs=[quiz_md, questions_state, title_box],
        )
        save_btn.click(
            save_quiz_ui,
            inputs=[questions_state, title_box, difficulty_radio],
            outputs=[save_status, library_md],
        )

    return demo


def main():
    logging.basicConfig(level=config.logging.log_level, format=config.logging.log_format)
    config.prepare_fs()

    if not config.model.api_key:
        logger.error("OPENAI_API_KEY not found in environment variables")
        logger.error("Please create a .env file with your OpenAI API key")

    demo = create_interface()
    try:
        demo.launch(server_port=config.server.ui_port)
    finally:
        logger.info(token_tracker.summary())


if __name__ == "__main__":
    main()
