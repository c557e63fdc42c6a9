"""Utility functions and helpers for chainsql."""

from chainsql.utils.decorators import traced
from chainsql.utils.validators import (
    is_valid_data,
    is_valid_name,
    is_valid_where,
    validate_pagination,
)

__all__ = [
    "traced",
    "is_valid_data",
    "is_valid_name",
    "is_valid_where",
    "validate_pagination",
]
