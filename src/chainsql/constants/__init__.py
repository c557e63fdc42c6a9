"""Constants module for chainsql.

This module contains all constant values and enumerations used throughout
chainsql. As Layer 0 in the architecture, it has no dependencies on other
chainsql modules.
"""

from chainsql.constants.sql import (
    ALL_COLUMNS,
    COMPARISON_OPERATORS,
    LIKE_ESCAPE_CHAR,
    LIKE_OPERATORS,
    NULL_OPERATORS,
    LikePattern,
    QueryType,
    SortDirection,
    SqlOperator,
)

__all__ = [
    "ALL_COLUMNS",
    "COMPARISON_OPERATORS",
    "LIKE_ESCAPE_CHAR",
    "LIKE_OPERATORS",
    "NULL_OPERATORS",
    "LikePattern",
    "QueryType",
    "SortDirection",
    "SqlOperator",
]
