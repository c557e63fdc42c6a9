from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Sequence


class ErrorCode(Enum):
    """Standard error codes for chainsql operations.

    This enum provides categorized error codes that identify the failure
    without creating a separate exception class per case. Each category has
    its own prefix for easy identification.

    Attributes:
        CONFIG_*: Configuration errors (invalid table names, bad settings)
        SELECT_*: Projection and pagination errors
        WHERE_*: Condition compiler errors
        INSERT_*: create/create_many payload errors
        UPDATE_*: update payload and safety errors
        DELETE_*: delete safety errors
        QUERY_*: Result-shape errors detected after dispatch
        VALIDATION_*: Schema overlay errors
    """
    # Configuration errors
    CONFIG_ERROR = "CONFIG_001"
    INVALID_TABLE_NAME = "CONFIG_002"

    # Projection / pagination errors
    INVALID_COLUMNS = "SELECT_001"
    INVALID_TAKE = "SELECT_002"
    INVALID_SKIP = "SELECT_003"

    # Condition compiler errors
    INVALID_FIELD = "WHERE_001"
    INVALID_IN = "WHERE_002"
    INVALID_LIKE = "WHERE_003"
    INVALID_COMPARISON = "WHERE_004"
    INVALID_NULL_CHECK = "WHERE_005"
    INVALID_SORT = "WHERE_006"
    UNSUPPORTED_OPERATOR = "WHERE_007"
    INVALID_CONDITION = "WHERE_008"

    # Insert errors
    INSERT_INVALID_DATA = "INSERT_001"
    INSERT_INCONSISTENT_COLUMNS = "INSERT_002"
    INSERT_RETURNED_EMPTY = "INSERT_003"

    # Update errors
    UPDATE_INVALID_DATA = "UPDATE_001"
    UPDATE_NO_CONDITIONS = "UPDATE_002"

    # Delete errors
    DELETE_NO_CONDITIONS = "DELETE_001"

    # Result errors
    NOT_UNIQUE = "QUERY_001"

    # Schema overlay errors
    VALIDATION_ERROR = "VALIDATION_001"


class ChainSQLError(Exception):
    """Base exception for all chainsql errors.

    Uses error codes for categorization instead of numerous specific
    exception classes. Only two kinds are distinguished by type:
    configuration errors (:class:`TableError`) and query errors
    (:class:`QueryError`).

    Attributes:
        message: Error message
        error_code: Error code from ErrorCode enum
        details: Additional error details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.CONFIG_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

        # Lazy import to avoid circular dependency
        from chainsql.logging import get_logger
        logger = get_logger(__name__)
        logger.debug(
            message,
            extra={"error_code": error_code.value, "details": self.details},
        )

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "error_name": self.error_code.name,
            "details": self.details,
        }


class TableError(ChainSQLError):
    """Configuration error: the table handle cannot be built."""


class QueryError(ChainSQLError):
    """A query was rejected before (or, for result-shape checks, after) dispatch."""


class SchemaValidationError(QueryError):
    """Schema overlay rejected a filter or payload.

    Attributes:
        issues: One ``{"path": ..., "message": ...}`` entry per offending field
    """

    def __init__(self, message: str, issues: Sequence[Dict[str, str]], **kwargs):
        self.issues: List[Dict[str, str]] = list(issues)
        details = kwargs.pop("details", None) or {}
        details["issues"] = self.issues
        super().__init__(message, error_code=ErrorCode.VALIDATION_ERROR, details=details, **kwargs)


# Helper functions for common error scenarios
def configuration_error(message: str, config_key: Optional[str] = None) -> TableError:
    """Create a configuration error.

    Args:
        message: Error message
        config_key: Configuration key that caused the error

    Returns:
        TableError with CONFIG_ERROR code
    """
    details = {"config_key": config_key} if config_key else {}
    return TableError(message, error_code=ErrorCode.CONFIG_ERROR, details=details)


def invalid_table_name_error(name: Any) -> TableError:
    return TableError(
        "Invalid table name",
        error_code=ErrorCode.INVALID_TABLE_NAME,
        details={"table": str(name)},
    )


def invalid_columns_error(columns: Iterable[Any]) -> QueryError:
    """Create an error citing every offending column name.

    Args:
        columns: The invalid column names, in the order they were found

    Returns:
        QueryError with INVALID_COLUMNS code
    """
    names = [str(col) for col in columns]
    return QueryError(
        f"Invalid columns: {', '.join(names)}",
        error_code=ErrorCode.INVALID_COLUMNS,
        details={"columns": names},
    )


def invalid_take_error(value: Any) -> QueryError:
    return QueryError(
        "Take must be > 0",
        error_code=ErrorCode.INVALID_TAKE,
        details={"value": repr(value)},
    )


def invalid_skip_error(value: Any) -> QueryError:
    return QueryError(
        "Skip must be >= 0",
        error_code=ErrorCode.INVALID_SKIP,
        details={"value": repr(value)},
    )


def invalid_field_error(field: Any) -> QueryError:
    return QueryError(
        f"Invalid field: {field}",
        error_code=ErrorCode.INVALID_FIELD,
        details={"field": str(field)},
    )


def invalid_in_error(field: str) -> QueryError:
    return QueryError(
        f"Invalid IN values: {field}",
        error_code=ErrorCode.INVALID_IN,
        details={"field": field, "operator": "IN"},
    )


def invalid_like_error(field: str, operator: str = "LIKE") -> QueryError:
    return QueryError(
        f"LIKE/ILIKE requires string: {field}",
        error_code=ErrorCode.INVALID_LIKE,
        details={"field": field, "operator": operator},
    )


def invalid_comparison_error(field: str, operator: str) -> QueryError:
    return QueryError(
        f"Invalid value for {operator}: {field}",
        error_code=ErrorCode.INVALID_COMPARISON,
        details={"field": field, "operator": operator},
    )


def invalid_null_check_error(field: str, operator: str) -> QueryError:
    return QueryError(
        f"{operator} does not take a value: {field}",
        error_code=ErrorCode.INVALID_NULL_CHECK,
        details={"field": field, "operator": operator},
    )


def unsupported_operator_error(field: Any, operator: Any) -> QueryError:
    return QueryError(
        f"Unsupported operator {operator}: {field}",
        error_code=ErrorCode.UNSUPPORTED_OPERATOR,
        details={"field": str(field), "operator": str(operator)},
    )


def invalid_condition_error(condition: Any, reason: str) -> QueryError:
    return QueryError(
        f"Invalid condition: {reason}",
        error_code=ErrorCode.INVALID_CONDITION,
        details={"condition": repr(condition)},
    )


def invalid_sort_error(direction: Any) -> QueryError:
    return QueryError(
        "Sort must be ASC/DESC",
        error_code=ErrorCode.INVALID_SORT,
        details={"direction": repr(direction)},
    )


def invalid_insert_data_error(index: Optional[int] = None) -> QueryError:
    details = {"index": index} if index is not None else {}
    return QueryError(
        "Invalid data to insert",
        error_code=ErrorCode.INSERT_INVALID_DATA,
        details=details,
    )


def inconsistent_columns_error(index: int, expected: Sequence[str], actual: Sequence[str]) -> QueryError:
    """Create an error for a batch whose records do not share one key set.

    Args:
        index: Position of the first mismatching record
        expected: Keys of the first record
        actual: Keys of the mismatching record

    Returns:
        QueryError with INSERT_INCONSISTENT_COLUMNS code
    """
    return QueryError(
        "Inconsistent columns across records",
        error_code=ErrorCode.INSERT_INCONSISTENT_COLUMNS,
        details={"index": index, "expected": list(expected), "actual": list(actual)},
    )


def insert_returned_empty_error(table: str) -> QueryError:
    return QueryError(
        "Insert returned no row",
        error_code=ErrorCode.INSERT_RETURNED_EMPTY,
        details={"table": table},
    )


def invalid_update_data_error() -> QueryError:
    return QueryError("Invalid data to update", error_code=ErrorCode.UPDATE_INVALID_DATA)


def missing_where_error(operation: str) -> QueryError:
    """Create an error for a mutation issued without a filter.

    Args:
        operation: "update" or "delete"

    Returns:
        QueryError with the matching NO_CONDITIONS code
    """
    code = ErrorCode.DELETE_NO_CONDITIONS if operation == "delete" else ErrorCode.UPDATE_NO_CONDITIONS
    return QueryError(
        "WHERE clause required",
        error_code=code,
        details={"operation": operation},
    )


def not_unique_error(table: str) -> QueryError:
    return QueryError(
        "Query returned more than one row",
        error_code=ErrorCode.NOT_UNIQUE,
        details={"table": table},
    )


def format_issues(issues: Sequence[Dict[str, str]]) -> str:
    return "; ".join(f"{issue['path']}: {issue['message']}" for issue in issues)


def schema_validation_error(context: str, issues: Sequence[Dict[str, str]]) -> SchemaValidationError:
    """Create an aggregated schema validation error.

    Args:
        context: What was being validated (e.g. "where value", "update data")
        issues: Every offending path with its reason

    Returns:
        SchemaValidationError with VALIDATION_ERROR code
    """
    return SchemaValidationError(
        f"Invalid {context}: {format_issues(issues)}",
        issues=issues,
        details={"context": context},
    )
