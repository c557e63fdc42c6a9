"""Typed building blocks shared by the builder, the compilers and the overlay."""

from chainsql.types.base import ChainSQLBaseModel
from chainsql.types.conditions import (
    BaseCondition,
    ComparisonCondition,
    Condition,
    InCondition,
    LikeCondition,
    NullCondition,
    WhereSpec,
    freeze_where,
    to_condition,
)
from chainsql.types.query import (
    QueryState,
    SortSpec,
    freeze_order_by,
    normalize_projection,
    with_state,
)

__all__ = [
    "ChainSQLBaseModel",
    "BaseCondition",
    "ComparisonCondition",
    "Condition",
    "InCondition",
    "LikeCondition",
    "NullCondition",
    "WhereSpec",
    "freeze_where",
    "to_condition",
    "QueryState",
    "SortSpec",
    "freeze_order_by",
    "normalize_projection",
    "with_state",
]
