"""SQL and query-related constants.

This module contains the closed vocabularies the compilers are allowed to
render as raw SQL keywords: statement shapes, comparison operators, LIKE
pattern modes and sort directions.

These constants are in Layer 0 and have no dependencies on other chainsql
modules.
"""

from enum import Enum


class QueryType(str, Enum):
    """Statement shapes produced by the query builder.

    Each terminal operation of a table handle maps to exactly one of these.
    """

    SELECT = "SELECT"
    COUNT = "COUNT"
    INSERT = "INSERT"
    INSERT_MANY = "INSERT_MANY"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class SqlOperator(str, Enum):
    """Supported operators for WHERE conditions.

    Categories:
    - Comparison: =, !=, >, <, >=, <=
    - Pattern matching: LIKE, ILIKE
    - Membership: IN
    - Null checks: IS NULL, IS NOT NULL
    """

    EQ = "="
    NE = "!="
    GT = ">"
    LT = "<"
    GE = ">="
    LE = "<="
    LIKE = "LIKE"
    ILIKE = "ILIKE"
    IN = "IN"
    IS_NULL = "IS NULL"
    IS_NOT_NULL = "IS NOT NULL"


# Operator tokens by family, as plain strings
COMPARISON_OPERATORS = frozenset(
    op.value
    for op in (SqlOperator.EQ, SqlOperator.NE, SqlOperator.GT, SqlOperator.LT, SqlOperator.GE, SqlOperator.LE)
)
LIKE_OPERATORS = frozenset({SqlOperator.LIKE.value, SqlOperator.ILIKE.value})
NULL_OPERATORS = frozenset({SqlOperator.IS_NULL.value, SqlOperator.IS_NOT_NULL.value})


class LikePattern(str, Enum):
    """Wildcard placement for LIKE/ILIKE values.

    - startsWith: value%
    - endsWith: %value
    - contains: %value%
    - exact: value (no wildcard added)
    """

    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    CONTAINS = "contains"
    EXACT = "exact"


class SortDirection(str, Enum):
    """Sort direction for ORDER BY clauses."""

    ASC = "ASC"
    DESC = "DESC"


# Escape character used for LIKE/ILIKE patterns
LIKE_ESCAPE_CHAR = "\\"

# Marker for "all columns" in projections
ALL_COLUMNS = "*"
