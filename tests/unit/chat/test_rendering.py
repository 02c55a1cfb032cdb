"""
Unit tests for turn rendering.
"""

from databot.chat.rendering import render_turn
from databot.models.turn import TurnState


def test_new_turn_shows_question_and_status():
    state = TurnState(question="How many users?", status="Thinking...")

    assert render_turn(state) == "*How many users?*\n\nThinking..."


def test_parts_in_order_and_empty_fields_skipped():
    state = TurnState(
        question="Top brands?",
        status="",
        sql="Intent: ranking\n\n```sql\nSELECT brand FROM products\n```",
        answer="Allegra K leads.",
        error=None,
    )

    assert render_turn(state) == (
        "*Top brands?*\n\n"
        "Intent: ranking\n\n```\nSELECT brand FROM products\n```\n\n"
        "Allegra K leads."
    )


def test_language_tags_stripped_from_every_fence():
    state = TurnState(question="q", sql="```sql\nA\n```\nand\n```SQL\nB\n```")

    rendered = render_turn(state)

    assert "```sql" not in rendered
    assert "```SQL" not in rendered
    assert rendered.count("```") == 4


def test_double_asterisk_bold_becomes_single():
    state = TurnState(question="q", answer="Revenue is **$1.2M** this quarter.")

    assert render_turn(state) == "*q*\n\nRevenue is *$1.2M* this quarter."


def test_error_shown_last():
    state = TurnState(
        question="q",
        sql="```sql\nSELECT 1\n```",
        error="ERROR: Syntax error",
    )

    assert render_turn(state).endswith("```\n\nERROR: Syntax error")


def test_rendering_is_idempotent():
    state = TurnState(
        question="Which **brand**?",
        status="Fetched 3 rows. Interpreting...",
        sql="```sql\nSELECT 1\n```",
    )

    assert render_turn(state) == render_turn(state)
    assert state.question == "Which **brand**?"
