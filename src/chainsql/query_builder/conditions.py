"""WHERE condition compiler.

Translates a WHERE spec into a single SQLAlchemy boolean expression. Two
spec shapes are supported:

1. Equality map: ``{"status": "active", "deleted_at": None}`` compiles to
   ``status = :p AND deleted_at IS NULL``.
2. Condition list: typed condition variants (or dicts coerced into them),
   AND-ed in list order.

Values are always bound parameters. Field names are quoted identifiers.
Operators are looked up in closed tables; free-form operator text never
reaches the SQL.
"""

import operator
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from sqlalchemy import and_
from sqlalchemy.sql.elements import ColumnElement

from chainsql.common.exceptions import (
    invalid_comparison_error,
    invalid_condition_error,
    invalid_field_error,
    invalid_in_error,
    invalid_like_error,
    invalid_null_check_error,
    unsupported_operator_error,
)
from chainsql.constants.sql import LIKE_ESCAPE_CHAR, LikePattern
from chainsql.types.conditions import (
    ComparisonCondition,
    InCondition,
    LikeCondition,
    NullCondition,
    to_condition,
)

if TYPE_CHECKING:
    from chainsql.query_builder.base import BaseQueryBuilder


_COMPARISONS: Dict[str, Callable[[Any, Any], ColumnElement]] = {
    "=": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    "<": operator.lt,
    ">=": operator.ge,
    "<=": operator.le,
}

_LIKE_SPECIALS = re.compile(r"([%_\\])")

_PATTERNS: Dict[Optional[str], Callable[[str], str]] = {
    LikePattern.STARTS_WITH.value: lambda value: f"{value}%",
    LikePattern.ENDS_WITH.value: lambda value: f"%{value}",
    LikePattern.CONTAINS.value: lambda value: f"%{value}%",
    LikePattern.EXACT.value: lambda value: value,
    None: lambda value: value,
}


def escape_like(value: str) -> str:
    """Escape every ``%``, ``_`` and ``\\`` so they match literally.

    Escaping is unconditional: a value that already contains wildcards is
    still escaped, so caller input can never widen a match.
    """
    return _LIKE_SPECIALS.sub(r"\\\1", value)


def like_pattern(value: str, pattern: Optional[str] = None) -> str:
    """Escape ``value`` and wrap it in the wildcards ``pattern`` asks for.

    Args:
        value: Raw caller value
        pattern: startsWith, endsWith, contains, exact, or None (same as exact)

    Returns:
        The final LIKE pattern to bind
    """
    if isinstance(pattern, LikePattern):
        pattern = pattern.value
    return _PATTERNS[pattern](escape_like(value))


class ConditionCompiler:
    """Compiles WHERE specs for one query builder.

    The builder supplies identifier handling (quoting and name validation);
    this class owns the operator semantics.
    """

    def __init__(self, builder: "BaseQueryBuilder"):
        self.builder = builder
        self._handlers = {
            ComparisonCondition: self._compile_comparison,
            LikeCondition: self._compile_like,
            InCondition: self._compile_in,
            NullCondition: self._compile_null_check,
        }

    def compile(self, where: Any) -> Optional[ColumnElement]:
        """Compile a WHERE spec.

        Args:
            where: Equality map, sequence of conditions, or None

        Returns:
            Boolean expression, or None when there is nothing to filter on

        Raises:
            QueryError: For invalid fields, operators or operator/value pairs
        """
        if where is None:
            return None

        if isinstance(where, Mapping):
            clauses = [self._compile_equality(field, value) for field, value in where.items()]
        elif isinstance(where, (list, tuple)):
            clauses = [self.compile_condition(item) for item in where]
        else:
            raise invalid_condition_error(where, "expected a mapping or a list of conditions")

        if not clauses:
            return None
        return and_(*clauses)

    def compile_condition(self, raw: Any) -> ColumnElement:
        """Compile a single condition (model instance or dict)."""
        condition = to_condition(raw)
        handler = self._handlers.get(type(condition))
        if handler is None:
            raise unsupported_operator_error(condition.field, getattr(condition, "operator", None))
        return handler(condition)

    def _column(self, field: Any):
        return self.builder.column(field, on_invalid=invalid_field_error)

    def _compile_equality(self, field: Any, value: Any) -> ColumnElement:
        column = self._column(field)
        if value is None:
            return column.is_(None)
        return column == value

    def _compile_null_check(self, condition: NullCondition) -> ColumnElement:
        if condition.value is not None:
            raise invalid_null_check_error(condition.field, condition.operator)
        column = self._column(condition.field)
        if condition.operator == "IS NULL":
            return column.is_(None)
        return column.is_not(None)

    def _compile_in(self, condition: InCondition) -> ColumnElement:
        values = condition.value
        if not isinstance(values, (list, tuple)) or not values:
            raise invalid_in_error(condition.field)
        return self._column(condition.field).in_(list(values))

    def _compile_comparison(self, condition: ComparisonCondition) -> ColumnElement:
        value = condition.value
        if value is None or isinstance(value, (list, tuple, set, Mapping)):
            raise invalid_comparison_error(condition.field, condition.operator)
        compare = _COMPARISONS[condition.operator]
        return compare(self._column(condition.field), value)

    def _compile_like(self, condition: LikeCondition) -> ColumnElement:
        if not isinstance(condition.value, str):
            raise invalid_like_error(condition.field, condition.operator)
        column = self._column(condition.field)
        pattern = like_pattern(condition.value, condition.pattern)
        if condition.operator == "ILIKE":
            return column.ilike(pattern, escape=LIKE_ESCAPE_CHAR)
        return column.like(pattern, escape=LIKE_ESCAPE_CHAR)
