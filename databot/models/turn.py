"""
Turn State Models

State threaded through one pipeline run and the outcome returned to callers.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

STATUS_THINKING = "Thinking..."
STATUS_RUNNING_QUERY = "Running query..."


def fetched_status(row_count: int) -> str:
    return f"Fetched {row_count} rows. Interpreting..."


class TurnState(BaseModel):
    """
    Mutable record for one turn.

    Created at turn start, updated at each milestone and discarded when the
    turn ends.
    """

    question: str = Field(..., description="Original user question")
    status: str = Field(default="", description="Current progress line")
    sql: str | None = Field(None, description="Full SQL-generation response as displayed")
    answer: str | None = Field(None, description="Final natural-language answer")
    error: str | None = Field(None, description="Terminal error text")
    message_name: str | None = Field(None, description="Chat message resource name")


class TurnOutcome(BaseModel):
    """Terminal result of ``TurnPipeline.run_turn``."""

    status: Literal["answered", "failed"] = Field(..., description="Terminal state")
    state: TurnState = Field(..., description="Final turn state")
    query: str | None = Field(None, description="Query sent to the executor, if any")
    rows_fetched: int = Field(default=0, description="Rows returned by the query service")
    rows_interpreted: int = Field(default=0, description="Rows passed to interpretation")

    model_config = ConfigDict(frozen=True)

    @property
    def answered(self) -> bool:
        return self.status == "answered"
