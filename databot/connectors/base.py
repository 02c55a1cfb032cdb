"""
Base Query Connector

Abstract base class for query services. The connector receives an opaque
SQL string and a bearer token and returns rows as name→value mappings.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from databot.models.errors import QueryError

logger = logging.getLogger(__name__)

QueryRow = dict[str, Any]


class QueryResult(BaseModel):
    """Result from query execution."""

    rows: list[QueryRow] = Field(default_factory=list, description="Query result rows")
    row_count: int = Field(default=0, description="Number of rows returned")
    columns: list[str] = Field(default_factory=list, description="Column names")
    execution_time_ms: float = Field(default=0.0, description="Query execution time in ms")


class BaseConnector(ABC):
    """
    Abstract base class for query connectors.

    Connectors do not parse or validate SQL. Empty results are not errors.
    """

    @abstractmethod
    async def execute(self, token: str, sql: str) -> QueryResult:
        """
        Execute a query.

        Args:
            token: Bearer token for the query service
            sql: SQL text, passed through unchanged

        Returns:
            QueryResult with rows in service order

        Raises:
            QueryError: If the service rejects the query or the call fails
        """
        pass  # pragma: no cover - abstract method

    async def close(self) -> None:
        """Release any held resources."""
        return None


__all__ = ["BaseConnector", "QueryError", "QueryResult", "QueryRow"]
