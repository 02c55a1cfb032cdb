"""
BigQuery Connector

Runs standard-SQL queries through the BigQuery ``jobs.query`` REST endpoint
against a fixed default dataset.
"""

import logging
import time
from typing import Any

import httpx

from databot.connectors.base import BaseConnector, QueryResult, QueryRow
from databot.models.errors import QueryError

logger = logging.getLogger(__name__)


class BigQueryConnector(BaseConnector):
    """
    BigQuery REST connector.

    Usage:
        connector = BigQueryConnector(
            billing_project="my-project",
            dataset_project="bigquery-public-data",
            dataset_id="thelook_ecommerce",
        )
        result = await connector.execute(token, "SELECT 1 AS n")
    """

    def __init__(
        self,
        billing_project: str,
        dataset_project: str,
        dataset_id: str,
        base_url: str = "https://bigquery.googleapis.com/bigquery/v2",
        client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ):
        self.billing_project = billing_project
        self.dataset_project = dataset_project
        self.dataset_id = dataset_id
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def query_url(self) -> str:
        return f"{self.base_url}/projects/{self.billing_project}/queries"

    async def execute(self, token: str, sql: str) -> QueryResult:
        """Submit ``sql`` and materialize the returned rows."""
        payload = {
            "query": sql,
            "defaultDataset": {
                "projectId": self.dataset_project,
                "datasetId": self.dataset_id,
            },
            "useLegacySql": False,
        }

        start_time = time.perf_counter()
        try:
            response = await self.client.post(
                self.query_url,
                json=payload,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/json; charset=utf-8",
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"BigQuery request failed: {e}")
            raise QueryError(f"Query request failed: {e}", payload={"message": str(e)}) from e

        try:
            body = response.json()
        except ValueError:
            body = {"message": response.text}

        error = body.get("error") if isinstance(body, dict) else None
        if response.status_code >= 400 or error:
            error = error or body
            message = error.get("message") if isinstance(error, dict) else str(error)
            logger.warning(
                "BigQuery rejected query",
                extra={"status_code": response.status_code, "error": error},
            )
            raise QueryError(
                message or f"Query failed with status {response.status_code}",
                payload=error,
            )

        columns, rows = materialize_rows(body if isinstance(body, dict) else {})
        execution_time_ms = (time.perf_counter() - start_time) * 1000

        logger.info(
            f"Query returned {len(rows)} rows",
            extra={"row_count": len(rows), "execution_time_ms": execution_time_ms},
        )
        return QueryResult(
            rows=rows,
            row_count=len(rows),
            columns=columns,
            execution_time_ms=execution_time_ms,
        )

    async def close(self) -> None:
        await self.client.aclose()


def materialize_rows(body: dict[str, Any]) -> tuple[list[str], list[QueryRow]]:
    """
    Pair ``schema.fields[].name`` with each row's ``f[].v`` values.

    Missing ``schema`` or ``rows`` means an empty or non-tabular result.
    """
    schema = body.get("schema")
    raw_rows = body.get("rows")
    if not schema or not raw_rows:
        columns = [field["name"] for field in (schema or {}).get("fields", [])]
        return columns, []

    columns = [field["name"] for field in schema.get("fields", [])]
    rows = [
        {name: cell.get("v") for name, cell in zip(columns, raw_row.get("f", []))}
        for raw_row in raw_rows
    ]
    return columns, rows
