"""Input validators shared by the table handle and the compilers.

These checks are deliberately small and side-effect free: each returns a
boolean or raises a QueryError, and none of them touch the executor.
"""

import re
from collections.abc import Mapping, Sequence
from typing import Any, Optional

from chainsql.common.exceptions import invalid_skip_error, invalid_take_error

_IDENTIFIER = r"[A-Za-z_][A-Za-z0-9_]*"
_STRICT_NAME = re.compile(rf"^{_IDENTIFIER}$")
_STRICT_QUALIFIED_NAME = re.compile(rf"^{_IDENTIFIER}(\.{_IDENTIFIER})?$")


def is_valid_name(name: Any, strict: bool = False, allow_schema: bool = False) -> bool:
    """Check whether a value can be used as a table or column name.

    Non-strict mode only requires a non-blank string. Strict mode requires a
    plain SQL identifier (letters, digits, underscore, not starting with a
    digit); with ``allow_schema`` a single ``schema.name`` qualifier is
    accepted as well.

    Args:
        name: Value to check
        strict: Enforce identifier syntax
        allow_schema: Accept one ``.`` qualifier in strict mode

    Returns:
        True if the name is usable
    """
    if not isinstance(name, str) or not name.strip():
        return False

    if not strict:
        return True

    pattern = _STRICT_QUALIFIED_NAME if allow_schema else _STRICT_NAME
    return pattern.match(name.strip()) is not None


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_pagination(skip: Optional[int] = None, take: Optional[int] = None) -> None:
    """Validate pagination parameters.

    Args:
        skip: Number of rows to skip, must be an integer >= 0
        take: Number of rows to take, must be an integer > 0

    Raises:
        QueryError: If either parameter is out of bounds
    """
    if take is not None and (not _is_int(take) or take <= 0):
        raise invalid_take_error(take)

    if skip is not None and (not _is_int(skip) or skip < 0):
        raise invalid_skip_error(skip)


def is_valid_data(data: Any) -> bool:
    """Validate a record for insert or update: a non-empty mapping."""
    return isinstance(data, Mapping) and len(data) > 0


def is_valid_where(where: Any) -> bool:
    """Validate that a WHERE spec actually filters something.

    ``None``, an empty mapping and an empty sequence all count as "no filter".
    """
    if isinstance(where, Mapping):
        return len(where) > 0
    if isinstance(where, Sequence) and not isinstance(where, (str, bytes)):
        return len(where) > 0
    return False
