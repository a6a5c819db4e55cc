"""
FlowSpace: a no-shame study companion.

Focus timer, AI practice quizzes, a mood check-in and a gentle time coach,
served over a small JSON API and a Gradio interface.
"""

__version__ = "0.1.0"
