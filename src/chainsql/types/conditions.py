"""WHERE condition variants.

A condition is a tagged union discriminated by ``operator``. Each operator
family has its own model, so the condition compiler dispatches on the model
class rather than on operator strings:

    - ComparisonCondition: =, !=, >, <, >=, <=
    - LikeCondition: LIKE, ILIKE (optional wildcard pattern)
    - InCondition: IN
    - NullCondition: IS NULL, IS NOT NULL

Plain dicts are accepted everywhere a condition is expected and are coerced
with :func:`to_condition`.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Annotated, Any, Dict, Literal, Optional, Sequence, Union

from pydantic import ConfigDict, Field, TypeAdapter, ValidationError

from chainsql.common.exceptions import (
    invalid_condition_error,
    invalid_field_error,
    unsupported_operator_error,
)
from chainsql.constants.sql import LikePattern, SqlOperator
from chainsql.types.base import ChainSQLBaseModel


class BaseCondition(ChainSQLBaseModel):
    """Common shape of every condition: the column it filters on."""
    model_config = ConfigDict(
        use_enum_values=True,
        frozen=True,
        extra="forbid",
    )

    field: str


class ComparisonCondition(BaseCondition):
    """``field <op> value``; value must not be None."""
    operator: Literal["=", "!=", ">", "<", ">=", "<="]
    value: Any = None


class LikeCondition(BaseCondition):
    """``field LIKE pattern``; value must be a string.

    Wildcards in ``value`` are always escaped before ``pattern`` adds its own.
    """
    operator: Literal["LIKE", "ILIKE"]
    value: Any = None
    pattern: Optional[LikePattern] = None


class InCondition(BaseCondition):
    """``field IN (...)``; value must be a non-empty list."""
    operator: Literal["IN"]
    value: Any = None


class NullCondition(BaseCondition):
    """``field IS [NOT] NULL``; value must be absent."""
    operator: Literal["IS NULL", "IS NOT NULL"]
    value: Any = None


Condition = Annotated[
    Union[ComparisonCondition, LikeCondition, InCondition, NullCondition],
    Field(discriminator="operator"),
]

# A WHERE spec is either an equality map or a sequence of conditions
WhereSpec = Union[Mapping, Sequence[Union[BaseCondition, Dict[str, Any]]]]

_CONDITION_ADAPTER: TypeAdapter = TypeAdapter(Condition)

_TAG_ERRORS = {"union_tag_invalid", "union_tag_not_found"}


def to_condition(raw: Any) -> BaseCondition:
    """Coerce a condition-like value into its typed variant.

    Args:
        raw: A condition model or a mapping with ``field``/``operator``/
            ``value``/``pattern`` keys

    Returns:
        The matching condition model

    Raises:
        QueryError: For unknown operators, bad field names or malformed input
    """
    if isinstance(raw, BaseCondition):
        return raw

    if not isinstance(raw, Mapping):
        raise invalid_condition_error(raw, "expected a mapping with field and operator")

    data = dict(raw)
    if isinstance(data.get("operator"), SqlOperator):
        data["operator"] = data["operator"].value

    try:
        return _CONDITION_ADAPTER.validate_python(data)
    except ValidationError as exc:
        errors = exc.errors()
        if any(error["type"] in _TAG_ERRORS for error in errors):
            raise unsupported_operator_error(raw.get("field"), raw.get("operator")) from None
        if any(error["loc"][-1:] == ("field",) for error in errors):
            raise invalid_field_error(raw.get("field")) from None
        reasons = ", ".join(
            f"{'.'.join(str(part) for part in error['loc'][1:]) or 'condition'}: {error['msg']}"
            for error in errors
        )
        raise invalid_condition_error(raw, reasons) from None


def freeze_where(where: Any) -> Any:
    """Copy a WHERE spec so later caller mutation cannot reach stored state.

    Mappings become read-only copies; sequences become tuples of read-only
    copies. Anything else is returned unchanged and rejected at compile time.
    """
    if where is None:
        return None
    if isinstance(where, Mapping):
        return MappingProxyType(dict(where))
    if isinstance(where, (list, tuple)):
        return tuple(
            MappingProxyType(dict(item)) if isinstance(item, Mapping) else item
            for item in where
        )
    return where
