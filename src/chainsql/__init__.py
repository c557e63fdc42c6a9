from chainsql.__version__ import __version__

from chainsql.api import Client, SchemaTable, Table

from chainsql.common.exceptions import (
    ChainSQLError,
    ErrorCode,
    QueryError,
    SchemaValidationError,
    TableError,
)

from chainsql.constants import LikePattern, QueryType, SortDirection, SqlOperator

from chainsql.engines import SQLAlchemyExecutor, SQLExecutor

from chainsql.types import (
    ComparisonCondition,
    InCondition,
    LikeCondition,
    NullCondition,
    SortSpec,
)

from chainsql.validation import SchemaDescriptor, ValidationResult


__all__ = [
    "__version__",

    "Client",
    "Table",
    "SchemaTable",

    # Exceptions (public API)
    "ChainSQLError",
    "ErrorCode",
    "QueryError",
    "SchemaValidationError",
    "TableError",

    # Conditions and sorting
    "ComparisonCondition",
    "InCondition",
    "LikeCondition",
    "NullCondition",
    "SortSpec",
    "LikePattern",
    "QueryType",
    "SortDirection",
    "SqlOperator",

    # Execution
    "SQLAlchemyExecutor",
    "SQLExecutor",

    # Schema validation
    "SchemaDescriptor",
    "ValidationResult",
]
