"""Common exceptions for chainsql.

Exception Design:
    The exception system uses error codes for categorization rather than
    numerous specific exception classes. All exceptions inherit from
    ChainSQLError and carry structured error information. Configuration
    problems raise TableError; every rejected query raises QueryError.
"""

from chainsql.common.exceptions import (
    ChainSQLError,
    ErrorCode,
    QueryError,
    SchemaValidationError,
    TableError,
    # Helper functions
    configuration_error,
    inconsistent_columns_error,
    insert_returned_empty_error,
    invalid_columns_error,
    invalid_comparison_error,
    invalid_condition_error,
    invalid_field_error,
    invalid_in_error,
    invalid_insert_data_error,
    invalid_like_error,
    invalid_null_check_error,
    invalid_skip_error,
    invalid_sort_error,
    invalid_table_name_error,
    invalid_take_error,
    invalid_update_data_error,
    missing_where_error,
    not_unique_error,
    schema_validation_error,
    unsupported_operator_error,
)

__all__ = [
    "ChainSQLError",
    "ErrorCode",
    "QueryError",
    "SchemaValidationError",
    "TableError",
    "configuration_error",
    "inconsistent_columns_error",
    "insert_returned_empty_error",
    "invalid_columns_error",
    "invalid_comparison_error",
    "invalid_condition_error",
    "invalid_field_error",
    "invalid_in_error",
    "invalid_insert_data_error",
    "invalid_like_error",
    "invalid_null_check_error",
    "invalid_skip_error",
    "invalid_sort_error",
    "invalid_table_name_error",
    "invalid_take_error",
    "invalid_update_data_error",
    "missing_where_error",
    "not_unique_error",
    "schema_validation_error",
    "unsupported_operator_error",
]
