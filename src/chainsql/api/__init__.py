"""Public API: the client and the table handles it creates."""

from chainsql.api.client import Client
from chainsql.api.schema_table import SchemaTable
from chainsql.api.table import Table

__all__ = [
    "Client",
    "SchemaTable",
    "Table",
]
