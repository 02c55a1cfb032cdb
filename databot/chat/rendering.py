"""Rendering of turn state into Google Chat message text."""

from databot.models.turn import TurnState
from databot.utils.fences import strip_fence_languages


def render_turn(state: TurnState) -> str:
    """
    Render a turn as chat text.

    Non-empty parts in order: bold question, status, SQL-generation response,
    answer, error. Google Chat bolds with single asterisks and does not
    render language-tagged fences.
    """
    parts = [
        f"**{state.question}**" if state.question else None,
        state.status,
        strip_fence_languages(state.sql) if state.sql else None,
        state.answer,
        state.error,
    ]
    text = "\n\n".join(part for part in parts if part)
    return text.replace("**", "*")
