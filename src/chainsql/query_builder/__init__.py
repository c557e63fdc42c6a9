"""Query builder module for SQL generation.

Query builders translate a table handle's accumulated state into a
SQLAlchemy Core statement. They do NOT execute queries; that is handled by
engines.

Architecture:
    - conditions.py: WHERE compiler (equality maps and typed conditions)
    - sorting.py: ORDER BY compiler
    - base.py: projection, pagination and statement assembly

Design Principles:
    1. **SQL Generation Only**: Builders only produce statements
    2. **Security First**: Identifiers are quoted, values are bound
    3. **Stateless**: Builders don't keep state between calls

Example:
    >>> from chainsql.query_builder import BaseQueryBuilder, render
    >>> from chainsql.constants import QueryType
    >>> from chainsql.types import QueryState
    >>>
    >>> builder = BaseQueryBuilder()
    >>> state = QueryState(table_name="users", where={"status": "active"})
    >>> sql, params = render(builder.build_query(QueryType.SELECT, state))
"""

from chainsql.query_builder.base import BaseQueryBuilder, render
from chainsql.query_builder.conditions import ConditionCompiler, escape_like, like_pattern
from chainsql.query_builder.sorting import SortCompiler

__all__ = [
    "BaseQueryBuilder",
    "ConditionCompiler",
    "SortCompiler",
    "escape_like",
    "like_pattern",
    "render",
]
