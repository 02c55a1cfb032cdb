"""
Background Turn Runner

Spawns one asyncio task per MESSAGE event so the webhook can reply
immediately. Progress reaches the user only through message edits.
"""

import asyncio
import logging

from databot.models.events import InboundEvent
from databot.models.turn import TurnOutcome
from databot.pipeline.orchestrator import TurnPipeline

logger = logging.getLogger(__name__)


class TurnRunner:
    """Fire-and-forget scheduler for pipeline turns."""

    def __init__(self, pipeline: TurnPipeline):
        self.pipeline = pipeline
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(self, event: InboundEvent) -> asyncio.Task:
        """Start a turn in the background and return its task."""
        task = asyncio.create_task(self._run(event), name=f"turn:{event.space}")
        # The loop only keeps weak references to tasks
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, event: InboundEvent) -> TurnOutcome | None:
        try:
            outcome = await self.pipeline.run_turn(event)
        except Exception as e:
            logger.error(f"Unexpected error in background turn: {e}", exc_info=True)
            return None

        logger.info(
            f"Turn finished: {outcome.status}",
            extra={"space": event.space, "status": outcome.status},
        )
        return outcome

    async def drain(self) -> None:
        """Wait for in-flight turns (used on shutdown)."""
        if self._tasks:
            logger.info(f"Waiting for {len(self._tasks)} in-flight turns")
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
