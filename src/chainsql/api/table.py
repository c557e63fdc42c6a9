"""Chainable table handle.

A :class:`Table` is a thin, immutable wrapper around a frozen
:class:`~chainsql.types.query.QueryState`. Chain methods (``select``,
``where``, ``order_by``, ``skip``, ``take``) return a new handle and never
touch the receiver, so a partially built query can be reused as the base of
several others:

    >>> active = db.table("users").where({"status": "active"})
    >>> newest = active.order_by([("created_at", "DESC")]).take(10)
    >>> total = active.count()

Terminal methods build exactly one statement and dispatch it to the executor.
Every precondition is checked while building, so an invalid query never
reaches the database.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.engine import Dialect

from chainsql.common.exceptions import insert_returned_empty_error, not_unique_error
from chainsql.constants.sql import QueryType
from chainsql.engines.base import Row, SQLExecutor
from chainsql.logging import get_logger
from chainsql.query_builder.base import BaseQueryBuilder, render
from chainsql.types.conditions import WhereSpec, freeze_where
from chainsql.types.query import QueryState, freeze_order_by, normalize_projection, with_state
from chainsql.utils.validators import validate_pagination

logger = get_logger(__name__)


class Table:
    """Immutable query handle bound to one table.

    Attributes:
        executor: Collaborator that runs built statements
        builder: Query builder carrying the handle's naming rules
        state: Accumulated query state
    """

    def __init__(self, executor: SQLExecutor, builder: BaseQueryBuilder, state: QueryState):
        self._executor = executor
        self._builder = builder
        self._state = state

    @property
    def executor(self) -> SQLExecutor:
        return self._executor

    @property
    def builder(self) -> BaseQueryBuilder:
        return self._builder

    @property
    def state(self) -> QueryState:
        return self._state

    @property
    def name(self) -> str:
        return self._state.table_name

    def __repr__(self) -> str:
        return f"Table({self.name!r}, state={self._state!r})"

    def _with(self, **patch: Any) -> "Table":
        return Table(self._executor, self._builder, with_state(self._state, **patch))

    # Chain operations

    def select(self, fields: Any = None) -> "Table":
        """Choose the returned columns; ``None`` or ``"*"`` selects all."""
        return self._with(projection=normalize_projection(fields))

    def where(self, conditions: Optional[WhereSpec]) -> "Table":
        """Replace the filter with an equality map or a list of conditions."""
        return self._with(where=freeze_where(conditions))

    def order_by(self, spec: Any) -> "Table":
        """Replace the sort; entries apply in list order."""
        return self._with(order_by=freeze_order_by(spec))

    def skip(self, count: int) -> "Table":
        """Set OFFSET.

        Raises:
            QueryError: If ``count`` is not an integer >= 0
        """
        validate_pagination(skip=count)
        return self._with(skip=count)

    def take(self, count: int) -> "Table":
        """Set LIMIT.

        Raises:
            QueryError: If ``count`` is not an integer > 0
        """
        validate_pagination(take=count)
        return self._with(take=count)

    # Terminal operations

    def _telemetry(self, query_type: QueryType) -> Dict[str, str]:
        return {"operation.object": self.name, "operation.type": query_type.value}

    def _build(self, query_type: QueryType, state: Optional[QueryState] = None, data: Any = None):
        return self._builder.build_query(query_type, state or self._state, data)

    def _fetch_all(self, query_type: QueryType, state: Optional[QueryState] = None, data: Any = None) -> List[Row]:
        statement = self._build(query_type, state, data)
        logger.debug("Dispatching query", extra=self._telemetry(query_type))
        return self._executor.fetch_all(statement, telemetry=self._telemetry(query_type))

    def find_many(self) -> List[Row]:
        """Return every row matching the current state."""
        return self._fetch_all(QueryType.SELECT)

    def find_first(self) -> Optional[Row]:
        """Return the first matching row, or None."""
        rows = self._fetch_all(QueryType.SELECT, with_state(self._state, take=1))
        return rows[0] if rows else None

    def find_unique(self) -> Optional[Row]:
        """Return the only matching row, or None when nothing matches.

        The query is capped at two rows so a second match can be detected.

        Raises:
            QueryError: If more than one row matches
        """
        rows = self._fetch_all(QueryType.SELECT, with_state(self._state, take=2))
        if len(rows) > 1:
            raise not_unique_error(self.name)
        return rows[0] if rows else None

    def count(self) -> int:
        """Count matching rows; only the filter applies."""
        statement = self._build(QueryType.COUNT)
        value = self._executor.fetch_scalar(statement, telemetry=self._telemetry(QueryType.COUNT))
        return int(value or 0)

    def create(self, data: Dict[str, Any]) -> Row:
        """Insert one record and return it as stored (per projection).

        Raises:
            QueryError: For an empty or non-mapping record, or if the
                database returns no row
        """
        rows = self._fetch_all(QueryType.INSERT, data=data)
        if not rows:
            raise insert_returned_empty_error(self.name)
        return rows[0]

    def create_many(self, records: Sequence[Dict[str, Any]]) -> List[Row]:
        """Insert a batch in one statement and return the inserted rows.

        Every record must have exactly the keys of the first one.
        """
        return self._fetch_all(QueryType.INSERT_MANY, data=records)

    def update(self, data: Dict[str, Any]) -> List[Row]:
        """Update matching rows and return them (per projection).

        Raises:
            QueryError: If there is no filter or the payload is empty
        """
        return self._fetch_all(QueryType.UPDATE, data=data)

    def delete(self) -> List[Row]:
        """Delete matching rows and return them (per projection).

        Raises:
            QueryError: If there is no filter
        """
        return self._fetch_all(QueryType.DELETE)

    def to_sql(
        self,
        query_type: QueryType = QueryType.SELECT,
        data: Any = None,
        dialect: Optional[Dialect] = None,
    ) -> Tuple[str, Dict[str, Any]]:
        """Render the statement a terminal call would dispatch, without running it.

        Uses the executor's dialect when it has an engine, PostgreSQL otherwise.
        """
        if dialect is None:
            engine = getattr(self._executor, "engine", None)
            dialect = getattr(engine, "dialect", None)
        return render(self._build(QueryType(query_type), data=data), dialect)
