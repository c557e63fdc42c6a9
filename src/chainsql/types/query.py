"""Immutable query state for table handles.

Every chain call on a table handle produces a new :class:`QueryState` with
exactly one field replaced; the previous state is never modified, so a
partially built query can safely serve as the base of several others.
"""

from collections.abc import Mapping
from typing import Any, NamedTuple, Optional, Tuple

from pydantic import ConfigDict, Field

from chainsql.constants.sql import ALL_COLUMNS
from chainsql.types.base import ChainSQLBaseModel


class SortSpec(NamedTuple):
    """One ORDER BY entry."""
    column: Any
    direction: Any


class QueryState(ChainSQLBaseModel):
    """Frozen snapshot of everything a table handle has accumulated.

    Attributes:
        table_name: Validated, trimmed table name (may be schema-qualified)
        projection: Column names, or None for all columns
        where: Read-only equality map, tuple of conditions, or None
        order_by: Sort entries in precedence order
        skip: OFFSET, validated when accepted
        take: LIMIT, validated when accepted
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    table_name: str = Field(..., min_length=1)
    projection: Optional[Tuple[Any, ...]] = None
    where: Any = None
    order_by: Tuple[Any, ...] = ()
    skip: Optional[int] = None
    take: Optional[int] = None


def with_state(state: QueryState, **patch: Any) -> QueryState:
    """Return a copy of ``state`` with the given fields replaced."""
    unknown = set(patch) - set(QueryState.model_fields)
    if unknown:
        raise TypeError(f"Unknown query state fields: {', '.join(sorted(unknown))}")
    return state.model_copy(update=patch)


def normalize_projection(fields: Any) -> Optional[Tuple[Any, ...]]:
    """Turn the argument of ``select()`` into stored projection state.

    ``None``, ``"*"`` and ``["*"]`` mean all columns; a single column name may
    be passed as a plain string. Names are validated at compile time.
    """
    if fields is None or fields == ALL_COLUMNS:
        return None
    if isinstance(fields, str):
        return (fields,)
    projection = tuple(fields)
    if projection == (ALL_COLUMNS,):
        return None
    return projection


def freeze_order_by(spec: Any) -> Tuple[Any, ...]:
    """Copy sort entries so later caller mutation cannot reach stored state."""
    if spec is None:
        return ()
    if isinstance(spec, (SortSpec, Mapping)) or (
        isinstance(spec, tuple) and len(spec) == 2 and isinstance(spec[0], str)
    ):
        spec = [spec]
    return tuple(dict(item) if isinstance(item, Mapping) else item for item in spec)
