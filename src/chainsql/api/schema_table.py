"""Schema-checked table handle.

:class:`SchemaTable` wraps a :class:`~chainsql.api.table.Table` one-to-one
and mirrors its surface. Filters and payloads are validated against a
pydantic model first; only the data of a successful validation reaches the
wrapped handle, and any failure raises a single
:class:`~chainsql.common.exceptions.SchemaValidationError` listing every
offending field.
"""

from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel

from chainsql.api.table import Table
from chainsql.common.exceptions import schema_validation_error
from chainsql.engines.base import Row
from chainsql.types.conditions import WhereSpec
from chainsql.validation.schema import SchemaDescriptor, ValidationResult

ModelT = TypeVar("ModelT", bound=BaseModel)


def _require(result: ValidationResult, context: str) -> Any:
    if not result.ok:
        raise schema_validation_error(context, result.issues)
    return result.data


class SchemaTable(Generic[ModelT]):
    """Table handle whose filters and payloads are checked against a model.

    Example:
        >>> class User(BaseModel):
        ...     id: Optional[int] = None
        ...     email: str
        ...     status: Literal["active", "inactive"]
        >>>
        >>> users = db.table("users", schema=User)
        >>> users.where({"status": "archived"})
        SchemaValidationError: Invalid where: status: Input should be 'active' or 'inactive'
    """

    def __init__(self, table: Table, schema: Union[Type[ModelT], SchemaDescriptor]):
        self._table = table
        self._schema = schema if isinstance(schema, SchemaDescriptor) else SchemaDescriptor(schema)

    @property
    def table(self) -> Table:
        return self._table

    @property
    def schema(self) -> SchemaDescriptor:
        return self._schema

    @property
    def name(self) -> str:
        return self._table.name

    def __repr__(self) -> str:
        return f"SchemaTable({self.name!r}, model={self._schema.model.__name__})"

    def _wrap(self, table: Table) -> "SchemaTable[ModelT]":
        return SchemaTable(table, self._schema)

    def select(self, fields: Any = None) -> "SchemaTable[ModelT]":
        return self._wrap(self._table.select(fields))

    def where(self, conditions: Optional[WhereSpec]) -> "SchemaTable[ModelT]":
        """Validate the filter against the model, then apply it.

        Raises:
            SchemaValidationError: For unknown fields or invalid values
        """
        _require(self._schema.validate_where(conditions), "where")
        return self._wrap(self._table.where(conditions))

    def order_by(self, spec: Any) -> "SchemaTable[ModelT]":
        return self._wrap(self._table.order_by(spec))

    def skip(self, count: int) -> "SchemaTable[ModelT]":
        return self._wrap(self._table.skip(count))

    def take(self, count: int) -> "SchemaTable[ModelT]":
        return self._wrap(self._table.take(count))

    def find_many(self) -> List[Row]:
        return self._table.find_many()

    def find_first(self) -> Optional[Row]:
        return self._table.find_first()

    def find_unique(self) -> Optional[Row]:
        return self._table.find_unique()

    def count(self) -> int:
        return self._table.count()

    def create(self, data: Dict[str, Any]) -> Row:
        """Validate a full record against the model, then insert it."""
        return self._table.create(_require(self._schema.validate_record(data), "data"))

    def create_many(self, records: Sequence[Dict[str, Any]]) -> List[Row]:
        """Validate every record against the model, then insert the batch."""
        return self._table.create_many(_require(self._schema.validate_records(records), "data"))

    def update(self, data: Dict[str, Any]) -> List[Row]:
        """Validate a partial record (any subset of fields), then update."""
        return self._table.update(_require(self._schema.validate_partial(data), "update data"))

    def delete(self) -> List[Row]:
        return self._table.delete()

    def to_sql(self, *args: Any, **kwargs: Any):
        return self._table.to_sql(*args, **kwargs)
