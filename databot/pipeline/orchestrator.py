"""
DataBot Turn Pipeline

Drives one chat turn from the raw question to the final answer:
- Credential: bearer token from the shared CredentialCache
- Created: placeholder message posted with status "Thinking..."
- Classifying: intent model answers directly or writes SQL in ```sql fences
- Executing: SQL runs against BigQuery, rows truncated to the hard cap
- Interpreting: answer model explains the rows
Each milestone edits the same chat message in place.
"""

import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from databot.auth.credentials import CredentialCache, ServiceAccount
from databot.chat.messenger import ChatMessenger
from databot.config import Settings, get_settings
from databot.connectors.base import BaseConnector, QueryRow
from databot.connectors.bigquery import BigQueryConnector
from databot.llm.base import BaseLLMProvider
from databot.llm.factory import LLMProviderFactory
from databot.models.errors import AuthError, DataBotError
from databot.models.events import EventType, InboundEvent
from databot.models.turn import (
    STATUS_RUNNING_QUERY,
    STATUS_THINKING,
    TurnOutcome,
    TurnState,
    fetched_status,
)
from databot.prompts.loader import PromptLoader
from databot.utils.fences import extract_code_blocks

logger = logging.getLogger(__name__)

INTENT_PROMPT = "agents/intent.md"
ANSWER_PROMPT = "agents/answer.md"
SCHEMA_PROMPT = "schema/thelook.md"


class TurnPipeline:
    """
    Orchestrates credential, messenger, LLM and query collaborators for one turn.

    Flow:
        Created -> Classifying -> (NoQuery -> Answered)
                               -> HasQuery -> Executing -> (Failed)
                                                        -> Interpreting -> Answered

    Once a token is in hand, any collaborator error (LLMError, QueryError or
    an unexpected exception) ends the turn as failed with the error rendered
    into the chat message; ``run_turn`` returns a TurnOutcome instead of raising.
    Message edits are best-effort: a failed edit is logged and the turn goes on.

    Usage:
        pipeline = TurnPipeline(credentials, llm, connector, messenger)
        outcome = await pipeline.run_turn(InboundEvent.message("How many users?", "spaces/AAA"))
    """

    def __init__(
        self,
        credentials: CredentialCache,
        llm: BaseLLMProvider,
        connector: BaseConnector,
        messenger: ChatMessenger,
        intent_model: str | None = None,
        answer_model: str | None = None,
        max_rows: int = 1000,
        prompt_row_limit: int = 1000,
        prompts: PromptLoader | None = None,
        schema_prompt: str = SCHEMA_PROMPT,
        now: Callable[[], datetime] | None = None,
    ):
        """
        Initialize pipeline with its collaborators.

        Args:
            credentials: Shared token cache
            llm: Provider used for both completions
            connector: Query executor
            messenger: Chat message create/edit client
            intent_model: Model for intent classification and SQL (None = provider default)
            answer_model: Model for result interpretation (None = provider default)
            max_rows: Rows passed to interpretation
            prompt_row_limit: Row limit requested of the SQL generator
            prompts: Prompt loader (defaults to the bundled templates)
            schema_prompt: Template holding the schema text and sample questions
            now: Clock used for "today" in the interpretation prompt
        """
        self.credentials = credentials
        self.llm = llm
        self.connector = connector
        self.messenger = messenger
        self.intent_model = intent_model
        self.answer_model = answer_model
        self.max_rows = max_rows
        self.prompts = prompts or PromptLoader()
        self.now = now or (lambda: datetime.now(UTC))

        schema_meta = self.prompts.get_metadata(schema_prompt)
        self.intent_prompt = self.prompts.render(
            INTENT_PROMPT,
            dataset_name=schema_meta.get("title", schema_meta.get("name", "dataset")),
            schema=self.prompts.load(schema_prompt).strip(),
            row_limit=prompt_row_limit,
            sample_questions=schema_meta.get("sample_questions", []),
        )

    async def run_turn(self, event: InboundEvent) -> TurnOutcome:
        """
        Run one MESSAGE event to a terminal state.

        Args:
            event: Classified MESSAGE event

        Returns:
            TurnOutcome with status "answered" or "failed"

        Raises:
            ValueError: If the event is not a MESSAGE event
        """
        if event.type is not EventType.MESSAGE:
            raise ValueError(f"run_turn expects a MESSAGE event, got {event.type.value}")

        state = TurnState(question=event.text, status=STATUS_THINKING)
        logger.info(
            f"Turn started: {event.text[:100]}",
            extra={"space": event.space},
        )

        # Created
        try:
            token = await self.credentials.get_token()
        except AuthError as e:
            logger.error(f"Could not obtain API token: {e}")
            state.status = ""
            state.error = f"ERROR: Could not obtain API token. {e.message}"
            return TurnOutcome(status="failed", state=state)

        query: str | None = None
        rows_fetched = 0
        try:
            state.message_name = await self._create(token, event.space, state)

            # Classifying
            generation = await self.llm.complete(
                self.intent_model, self.intent_prompt, state.question
            )

            blocks = extract_code_blocks(generation, language="sql")
            if not blocks:
                # NoQuery: the generation is a deflection or a direct answer
                state.status = ""
                state.answer = generation
                await self._edit(token, state)
                logger.info("Turn answered without a query")
                return TurnOutcome(status="answered", state=state)

            # HasQuery
            query = "\n".join(blocks)
            state.status = STATUS_RUNNING_QUERY
            state.sql = generation
            await self._edit(token, state)

            # Executing
            result = await self.connector.execute(token, query)

            rows_fetched = result.row_count
            rows = result.rows[: self.max_rows]
            state.status = fetched_status(len(rows))
            await self._edit(token, state)

            # Interpreting
            answer = await self.llm.complete(
                self.answer_model,
                self.answer_prompt(rows, state.question),
                state.question,
            )

            # Answered
            state.status = ""
            state.answer = answer
            await self._edit(token, state)
        except Exception as e:
            # LLMError, QueryError and anything unexpected end the turn in the message
            return await self._fail(
                token, state, e, query=query, rows_fetched=rows_fetched
            )

        logger.info(
            "Turn answered",
            extra={"rows_fetched": rows_fetched, "rows_interpreted": len(rows)},
        )
        return TurnOutcome(
            status="answered",
            state=state,
            query=query,
            rows_fetched=rows_fetched,
            rows_interpreted=len(rows),
        )

    def answer_prompt(self, rows: list[QueryRow], question: str) -> str:
        """Render the interpretation system prompt for ``rows``."""
        return self.prompts.render(
            ANSWER_PROMPT,
            data=serialize_rows(rows),
            question=question,
            today=self.now().isoformat(),
        )

    async def _create(self, token: str, space: str | None, state: TurnState) -> str | None:
        if not space:
            logger.warning("MESSAGE event has no space; progress will not be posted")
            return None
        try:
            return await self.messenger.create(token, space, state)
        except DataBotError as e:
            logger.warning(f"Could not create chat message: {e}", extra={"error": e.to_dict()})
        except Exception as e:
            logger.warning(f"Could not create chat message: {e!r}", exc_info=True)
        return None

    async def _edit(self, token: str, state: TurnState) -> None:
        if state.message_name is None:
            logger.debug("No chat message to edit", extra={"status": state.status})
            return
        try:
            await self.messenger.edit(token, state.message_name, state)
        except DataBotError as e:
            logger.warning(f"Could not edit chat message: {e}", extra={"error": e.to_dict()})
        except Exception as e:
            logger.warning(f"Could not edit chat message: {e!r}", exc_info=True)

    async def _fail(
        self,
        token: str,
        state: TurnState,
        error: Exception,
        query: str | None = None,
        rows_fetched: int = 0,
    ) -> TurnOutcome:
        if isinstance(error, DataBotError):
            logger.error(f"Turn failed: {error}", extra={"error": error.to_dict()})
            message = error.message
        else:
            logger.error(f"Turn failed with unexpected error: {error!r}", exc_info=error)
            message = f"Unexpected {type(error).__name__}: {error}"
        state.status = ""
        state.error = f"ERROR: {message}"
        await self._edit(token, state)
        return TurnOutcome(
            status="failed",
            state=state,
            query=query,
            rows_fetched=rows_fetched,
        )


def serialize_rows(rows: list[QueryRow]) -> str:
    """Serialize rows as JSON for the interpretation prompt."""
    return json.dumps(rows, indent=2, ensure_ascii=False, default=str)


def create_pipeline(
    config: Settings | None = None,
    messenger: ChatMessenger | None = None,
    credentials: CredentialCache | None = None,
) -> TurnPipeline:
    """
    Create a TurnPipeline with all dependencies built from settings.

    Args:
        config: Settings (uses get_settings() when omitted)
        messenger: Messenger override (e.g. the CLI console messenger)
        credentials: Existing credential cache to share

    Returns:
        Initialized pipeline
    """
    config = config or get_settings()
    google = config.google

    if credentials is None:
        credentials = create_credential_cache(config)

    connector = BigQueryConnector(
        billing_project=google.billing_project,
        dataset_project=google.dataset_project,
        dataset_id=google.dataset_id,
        base_url=google.bigquery_api_base_url,
        timeout=google.http_timeout,
    )
    messenger = messenger or ChatMessenger(
        base_url=google.chat_api_base_url,
        timeout=google.http_timeout,
    )

    return TurnPipeline(
        credentials=credentials,
        llm=LLMProviderFactory.create_provider(config.llm),
        connector=connector,
        messenger=messenger,
        intent_model=config.llm.intent_model,
        answer_model=config.llm.answer_model,
        max_rows=config.pipeline.max_rows,
        prompt_row_limit=config.pipeline.prompt_row_limit,
        prompts=PromptLoader(config.pipeline.prompts_dir),
    )


def create_credential_cache(config: Settings | None = None) -> CredentialCache:
    """Build the process-wide credential cache from settings."""
    config = config or get_settings()
    google = config.google
    info: dict[str, Any] = google.load_service_account()
    return CredentialCache(
        service_account=ServiceAccount.from_info(info),
        scopes=google.scopes,
        token_url=google.token_url,
        refresh_margin=config.pipeline.token_refresh_margin,
        timeout=google.http_timeout,
    )
