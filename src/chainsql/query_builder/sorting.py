"""ORDER BY compiler."""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Iterable, List

from sqlalchemy.sql.elements import ColumnElement

from chainsql.common.exceptions import invalid_columns_error, invalid_sort_error
from chainsql.constants.sql import SortDirection
from chainsql.types.query import SortSpec

if TYPE_CHECKING:
    from chainsql.query_builder.base import BaseQueryBuilder


_DIRECTIONS = {
    SortDirection.ASC.value: lambda column: column.asc(),
    SortDirection.DESC.value: lambda column: column.desc(),
}


def _to_sort_spec(entry: Any) -> SortSpec:
    if isinstance(entry, SortSpec):
        return entry
    if isinstance(entry, Mapping):
        return SortSpec(entry.get("column"), entry.get("direction"))
    if isinstance(entry, tuple) and len(entry) == 2:
        return SortSpec(*entry)
    raise invalid_sort_error(entry)


class SortCompiler:
    """Compiles sort entries into ORDER BY expressions.

    Directions are matched case-sensitively against ``ASC``/``DESC``; this is
    the only place a caller-controlled token becomes a SQL keyword.
    """

    def __init__(self, builder: "BaseQueryBuilder"):
        self.builder = builder

    def compile(self, order_by: Iterable[Any]) -> List[ColumnElement]:
        """Compile sort entries in precedence order.

        Args:
            order_by: SortSpec tuples, ``{"column", "direction"}`` dicts or
                ``(column, direction)`` pairs

        Returns:
            ORDER BY expressions; empty when nothing is sorted

        Raises:
            QueryError: For an unknown direction or an invalid column
        """
        clauses = []
        for entry in order_by or ():
            spec = _to_sort_spec(entry)
            direction = spec.direction
            if isinstance(direction, SortDirection):
                direction = direction.value
            if not isinstance(direction, str) or direction not in _DIRECTIONS:
                raise invalid_sort_error(direction)

            column = self.builder.column(
                spec.column, on_invalid=lambda name: invalid_columns_error([name])
            )
            clauses.append(_DIRECTIONS[direction](column))
        return clauses
