"""Schema validation for filters and payloads.

A schema is a pydantic model: each model field is a column, its annotation
and constraints are the value rule for that column. Validation is a pure pass
that never raises for bad input; it returns a :class:`ValidationResult`
carrying either the validated data or every issue found. The overlay decides
what to do with it.

Example:
    >>> class User(BaseModel):
    ...     id: Optional[int] = None
    ...     email: EmailStr
    ...     status: Literal["active", "inactive"]
    >>>
    >>> schema = SchemaDescriptor(User)
    >>> schema.validate_where({"status": "archived"}).issues
    [{'path': 'status', 'message': "Input should be 'active' or 'inactive'"}]
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Annotated, Any, Dict, List, Optional, Tuple, Type

from pydantic import BaseModel, Field, TypeAdapter, ValidationError
from pydantic.fields import FieldInfo

from chainsql.constants.sql import COMPARISON_OPERATORS, LIKE_OPERATORS, NULL_OPERATORS, SqlOperator
from chainsql.types.base import ChainSQLBaseModel
from chainsql.types.conditions import BaseCondition

ROOT_PATH = "(root)"

Issue = Dict[str, str]


class ValidationResult(ChainSQLBaseModel):
    """Outcome of a validation pass.

    Attributes:
        data: The validated (and, for payloads, coerced) input
        issues: One ``{"path", "message"}`` entry per problem; empty on success
    """

    data: Any = None
    issues: List[Issue] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


def _issue(path: Any, message: str) -> Issue:
    path = str(path) if path not in (None, "") else ROOT_PATH
    return {"path": path, "message": message}


def issues_from_error(exc: ValidationError, prefix: Tuple[Any, ...] = ()) -> List[Issue]:
    """Flatten a pydantic ValidationError into path/message issues."""
    issues = []
    for error in exc.errors():
        loc = prefix + tuple(error.get("loc", ()))
        issues.append(_issue(".".join(str(part) for part in loc), error["msg"]))
    return issues


def _field_type(info: FieldInfo) -> Any:
    if info.metadata:
        return Annotated[(info.annotation, *info.metadata)]
    return info.annotation


def _condition_parts(condition: Any) -> Optional[Tuple[Any, Any, bool, Any]]:
    """Return (field, operator, has_value, value) for a condition-like item."""
    if isinstance(condition, BaseCondition):
        value = getattr(condition, "value", None)
        return condition.field, condition.operator, value is not None, value
    if isinstance(condition, Mapping):
        value = condition.get("value")
        return condition.get("field"), condition.get("operator"), value is not None, value
    return None


class SchemaDescriptor:
    """Per-field value rules derived from a pydantic model.

    Field adapters are built once here; the descriptor is read-only after
    construction.

    Attributes:
        model: The pydantic model describing a full row
    """

    def __init__(self, model: Type[BaseModel]):
        if not (isinstance(model, type) and issubclass(model, BaseModel)):
            raise TypeError(f"Schema must be a pydantic model class, got {model!r}")

        self.model = model
        self._adapters = MappingProxyType({
            name: TypeAdapter(_field_type(info))
            for name, info in model.model_fields.items()
        })

    @property
    def fields(self) -> Tuple[str, ...]:
        return tuple(self._adapters)

    def has_field(self, name: Any) -> bool:
        return isinstance(name, str) and name in self._adapters

    def check_value(self, field: str, value: Any, path: Any = None) -> List[Issue]:
        """Validate one value against one field's rule.

        Args:
            field: Known field name
            value: Value to check
            path: Path reported in issues (defaults to the field name)

        Returns:
            Issues found; empty if the value is valid
        """
        try:
            self._adapters[field].validate_python(value)
        except ValidationError as exc:
            return [_issue(path or field, error["msg"]) for error in exc.errors()]
        return []

    def validate_where(self, where: Any) -> ValidationResult:
        """Check a WHERE spec against the schema.

        Equality maps: every key is a known field and every non-None value
        satisfies its rule. Condition lists: every field is known, null checks
        carry no value, IN carries a non-empty list of valid members, LIKE and
        ILIKE carry a string, comparisons carry a valid value.
        """
        if where is None:
            return ValidationResult(data=None)

        issues: List[Issue] = []
        if isinstance(where, Mapping):
            for field, value in where.items():
                if not self.has_field(field):
                    issues.append(_issue(field, "Unknown field"))
                elif value is not None:
                    issues.extend(self.check_value(field, value))
        elif isinstance(where, (list, tuple)):
            for index, condition in enumerate(where):
                issues.extend(self._check_condition(index, condition))
        else:
            issues.append(_issue(ROOT_PATH, "Expected a mapping or a list of conditions"))

        return ValidationResult(data=where, issues=issues)

    def _check_condition(self, index: int, condition: Any) -> List[Issue]:
        parts = _condition_parts(condition)
        if parts is None:
            return [_issue(index, "Expected a condition")]

        field, operator, has_value, value = parts
        if isinstance(operator, SqlOperator):
            operator = operator.value
        if not self.has_field(field):
            return [_issue(f"{index}.field", f"Unknown field: {field}")]

        path = f"{index}.{field}"
        if not isinstance(operator, str):
            return [_issue(f"{index}.operator", f"Unsupported operator: {operator}")]
        if operator in NULL_OPERATORS:
            return [_issue(path, f"{operator} does not take a value")] if has_value else []

        if operator == SqlOperator.IN.value:
            if not isinstance(value, (list, tuple)) or not value:
                return [_issue(path, "IN requires a non-empty list")]
            issues = []
            for position, member in enumerate(value):
                issues.extend(self.check_value(field, member, f"{path}.{position}"))
            return issues

        if operator in LIKE_OPERATORS:
            return [] if isinstance(value, str) else [_issue(path, f"{operator} requires a string")]

        if operator not in COMPARISON_OPERATORS:
            return [_issue(f"{index}.operator", f"Unsupported operator: {operator}")]
        if value is None:
            return [_issue(path, f"{operator} requires a value")]
        return self.check_value(field, value, path)

    def validate_record(self, record: Any, prefix: Tuple[Any, ...] = ()) -> ValidationResult:
        """Validate a full record against the whole model.

        Returns the record as dumped by the model, limited to the fields the
        caller set (after coercion); model defaults are left to the database.
        Keys the model does not declare are reported, never dropped.
        """
        issues: List[Issue] = []
        if isinstance(record, Mapping):
            issues.extend(
                _issue(".".join(str(part) for part in prefix + (key,)), "Unknown field")
                for key in record
                if not self.has_field(key)
            )

        try:
            instance = self.model.model_validate(record)
        except ValidationError as exc:
            issues.extend(issues_from_error(exc, prefix))

        if issues:
            return ValidationResult(data=None, issues=issues)
        return ValidationResult(data=instance.model_dump(exclude_unset=True))

    def validate_records(self, records: Any) -> ValidationResult:
        """Validate every record of a batch, collecting issues for all of them."""
        if not isinstance(records, (list, tuple)):
            return ValidationResult(issues=[_issue(ROOT_PATH, "Expected a list of records")])

        validated: List[Dict[str, Any]] = []
        issues: List[Issue] = []
        for index, record in enumerate(records):
            result = self.validate_record(record, prefix=(index,))
            if result.ok:
                validated.append(result.data)
            issues.extend(result.issues)

        return ValidationResult(data=validated if not issues else None, issues=issues)

    def validate_partial(self, data: Any) -> ValidationResult:
        """Validate an update payload: any subset of known fields, each valid."""
        if not isinstance(data, Mapping):
            return ValidationResult(issues=[_issue(ROOT_PATH, "Expected a mapping")])

        validated: Dict[str, Any] = {}
        issues: List[Issue] = []
        for field, value in data.items():
            if not self.has_field(field):
                issues.append(_issue(field, "Unknown field"))
                continue
            try:
                validated[field] = self._adapters[field].validate_python(value)
            except ValidationError as exc:
                issues.extend(_issue(field, error["msg"]) for error in exc.errors())

        return ValidationResult(data=validated if not issues else None, issues=issues)
