"""
Unit tests for BigQueryConnector.

Tests request shape, row materialization and QueryError on failures.
"""

import json

import httpx
import pytest

from databot.connectors.bigquery import BigQueryConnector, materialize_rows
from databot.models.errors import QueryError


class QueryEndpoint:
    """MockTransport handler recording query requests."""

    def __init__(self, status_code: int = 200, body: dict | None = None):
        self.status_code = status_code
        self.body = body if body is not None else {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)


def make_connector(endpoint) -> BigQueryConnector:
    return BigQueryConnector(
        billing_project="billing-proj",
        dataset_project="bigquery-public-data",
        dataset_id="thelook_ecommerce",
        client=httpx.AsyncClient(transport=httpx.MockTransport(endpoint)),
    )


class TestMaterializeRows:
    """Pairing field names with positional row values."""

    def test_single_cell(self):
        body = {"schema": {"fields": [{"name": "n"}]}, "rows": [{"f": [{"v": "5"}]}]}

        columns, rows = materialize_rows(body)

        assert columns == ["n"]
        assert rows == [{"n": "5"}]

    def test_preserves_row_order_and_nulls(self):
        body = {
            "schema": {"fields": [{"name": "status"}, {"name": "orders"}]},
            "rows": [
                {"f": [{"v": "Shipped"}, {"v": "12"}]},
                {"f": [{"v": "Returned"}, {"v": None}]},
                {"f": [{"v": "Cancelled"}, {"v": "3"}]},
            ],
        }

        _, rows = materialize_rows(body)

        assert [row["status"] for row in rows] == ["Shipped", "Returned", "Cancelled"]
        assert rows[1] == {"status": "Returned", "orders": None}
        assert all(set(row) == {"status", "orders"} for row in rows)

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"schema": {"fields": [{"name": "n"}]}},
            {"rows": [{"f": [{"v": "1"}]}]},
            {"jobComplete": True, "totalRows": "0", "schema": {"fields": [{"name": "n"}]}},
        ],
    )
    def test_missing_schema_or_rows_is_empty(self, body):
        _, rows = materialize_rows(body)

        assert rows == []


class TestExecute:
    """Test query execution against the REST endpoint."""

    @pytest.mark.asyncio
    async def test_request_shape(self):
        endpoint = QueryEndpoint(
            body={"schema": {"fields": [{"name": "n"}]}, "rows": [{"f": [{"v": "5"}]}]}
        )
        connector = make_connector(endpoint)

        result = await connector.execute("ya29.token", "SELECT 5 AS n")

        request = endpoint.requests[0]
        assert request.method == "POST"
        assert str(request.url) == (
            "https://bigquery.googleapis.com/bigquery/v2/projects/billing-proj/queries"
        )
        assert request.headers["authorization"] == "Bearer ya29.token"
        assert json.loads(request.content) == {
            "query": "SELECT 5 AS n",
            "defaultDataset": {
                "projectId": "bigquery-public-data",
                "datasetId": "thelook_ecommerce",
            },
            "useLegacySql": False,
        }
        assert result.rows == [{"n": "5"}]
        assert result.row_count == 1
        assert result.columns == ["n"]

    @pytest.mark.asyncio
    async def test_sql_is_passed_through_unchanged(self):
        endpoint = QueryEndpoint()
        connector = make_connector(endpoint)
        sql = "SELECT 1;\nDROP TABLE users -- not validated here"

        result = await connector.execute("t", sql)

        assert json.loads(endpoint.requests[0].content)["query"] == sql
        assert result.rows == []

    @pytest.mark.asyncio
    async def test_error_response_raises_query_error_with_payload(self):
        error = {
            "code": 400,
            "message": "Syntax error: Unexpected keyword FROM at [1:8]",
            "status": "INVALID_ARGUMENT",
        }
        connector = make_connector(QueryEndpoint(status_code=400, body={"error": error}))

        with pytest.raises(QueryError) as exc_info:
            await connector.execute("t", "SELECT FROM")

        assert exc_info.value.message == error["message"]
        assert exc_info.value.payload == error

    @pytest.mark.asyncio
    async def test_transport_failure_raises_query_error(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        connector = make_connector(handler)

        with pytest.raises(QueryError, match="Query request failed"):
            await connector.execute("t", "SELECT 1")
