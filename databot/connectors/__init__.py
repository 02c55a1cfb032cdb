"""
Query connectors for DataBot.
"""

from databot.connectors.base import BaseConnector, QueryError, QueryResult, QueryRow
from databot.connectors.bigquery import BigQueryConnector, materialize_rows

__all__ = [
    "BaseConnector",
    "BigQueryConnector",
    "QueryError",
    "QueryResult",
    "QueryRow",
    "materialize_rows",
]
