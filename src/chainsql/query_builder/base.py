"""Statement assembly for table handles.

The query builder turns a frozen :class:`~chainsql.types.query.QueryState`
into one SQLAlchemy Core statement. It does NOT execute anything; that is the
executor's job.

Safety rules:
    1. Every identifier goes through :meth:`BaseQueryBuilder.quote_identifier`
       and is rendered by the dialect's identifier preparer.
    2. Every value is a bound parameter.
    3. Only closed vocabularies (comparison operators, sort directions) are
       rendered as SQL keywords.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import column, delete, func, insert, literal_column, select, table, update
from sqlalchemy.dialects import postgresql
from sqlalchemy.engine import Dialect
from sqlalchemy.sql.elements import ColumnElement, quoted_name
from sqlalchemy.sql.expression import ColumnClause, TableClause

from chainsql.common.exceptions import (
    ChainSQLError,
    inconsistent_columns_error,
    invalid_columns_error,
    invalid_field_error,
    invalid_insert_data_error,
    invalid_table_name_error,
    invalid_update_data_error,
    missing_where_error,
)
from chainsql.constants.sql import ALL_COLUMNS, QueryType
from chainsql.query_builder.conditions import ConditionCompiler
from chainsql.query_builder.sorting import SortCompiler
from chainsql.types.query import QueryState
from chainsql.utils.validators import is_valid_data, is_valid_name, is_valid_where


class BaseQueryBuilder:
    """Builds SELECT/COUNT/INSERT/UPDATE/DELETE statements from query state.

    One builder is bound to each table handle and carries its naming rules.
    Compilation of WHERE and ORDER BY is delegated to
    :class:`ConditionCompiler` and :class:`SortCompiler`, which call back into
    :meth:`column` for identifier handling.

    Attributes:
        strict_names: Enforce SQL identifier syntax for table and column names
        allow_schema: Accept a ``schema.table`` qualifier on table names
    """

    def __init__(self, strict_names: bool = False, allow_schema: bool = False):
        self.strict_names = strict_names
        self.allow_schema = allow_schema
        self.conditions = ConditionCompiler(self)
        self.sorting = SortCompiler(self)

    def quote_identifier(self, identifier: str) -> quoted_name:
        """Mark an identifier for unconditional quoting by the dialect."""
        return quoted_name(identifier.strip(), True)

    def column(
        self,
        name: Any,
        on_invalid: Callable[[Any], ChainSQLError] = invalid_field_error,
    ) -> ColumnClause:
        """Validate a column name and return its quoted column expression.

        Args:
            name: Caller-supplied column name
            on_invalid: Error factory used when the name is rejected

        Raises:
            ChainSQLError: Whatever ``on_invalid`` builds
        """
        if not is_valid_name(name, strict=self.strict_names):
            raise on_invalid(name)
        return column(self.quote_identifier(name))

    def table_clause(self, table_name: str, columns: Sequence[str] = ()) -> TableClause:
        """Build the table a statement targets.

        ``columns`` must list every key an INSERT or UPDATE assigns, so the
        statement can bind values to them.
        """
        if not is_valid_name(table_name, strict=self.strict_names, allow_schema=self.allow_schema):
            raise invalid_table_name_error(table_name)

        name = table_name.strip()
        schema = None
        if self.allow_schema and "." in name:
            schema, name = name.split(".", 1)

        return table(
            self.quote_identifier(name),
            *[column(self.quote_identifier(col)) for col in columns],
            schema=self.quote_identifier(schema) if schema else None,
        )

    def build_projection(self, projection: Optional[Sequence[Any]]) -> List[ColumnElement]:
        """Compile the SELECT/RETURNING column list.

        Raises:
            QueryError: Citing every invalid, duplicated or ``*``-mixed name
        """
        if not projection:
            return [literal_column(ALL_COLUMNS)]

        names = list(projection)
        invalid = [
            name for name in names
            if not is_valid_name(name, strict=self.strict_names) or name.strip() == ALL_COLUMNS
        ]
        if invalid:
            raise invalid_columns_error(invalid)

        stripped = [name.strip() for name in names]
        duplicates = [name for index, name in enumerate(stripped) if name in stripped[:index]]
        if duplicates:
            raise invalid_columns_error(duplicates)

        return [column(self.quote_identifier(name)) for name in stripped]

    def build_where(self, where: Any) -> Optional[ColumnElement]:
        return self.conditions.compile(where)

    def build_order_by(self, order_by: Sequence[Any]) -> List[ColumnElement]:
        return self.sorting.compile(order_by)

    def apply_pagination(self, stmt, skip: Optional[int] = None, take: Optional[int] = None):
        """Attach LIMIT/OFFSET. Bounds were validated when accepted into state."""
        if take is not None:
            stmt = stmt.limit(take)
        if skip is not None:
            stmt = stmt.offset(skip)
        return stmt

    def _payload(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Validate payload keys and return the record keyed by trimmed name."""
        invalid = [key for key in record if not is_valid_name(key, strict=self.strict_names)]
        if invalid:
            raise invalid_columns_error(invalid)

        payload: Dict[str, Any] = {}
        for key, value in record.items():
            name = key.strip()
            if name in payload:
                raise invalid_columns_error([name])
            payload[name] = value
        return payload

    def _filtered(self, stmt, where: Any):
        clause = self.build_where(where)
        return stmt if clause is None else stmt.where(clause)

    def _build_select(self, state: QueryState, data: Any = None):
        stmt = select(*self.build_projection(state.projection)).select_from(
            self.table_clause(state.table_name)
        )
        stmt = self._filtered(stmt, state.where)

        order_by = self.build_order_by(state.order_by)
        if order_by:
            stmt = stmt.order_by(*order_by)

        return self.apply_pagination(stmt, state.skip, state.take)

    def _build_count(self, state: QueryState, data: Any = None):
        stmt = select(func.count().label("count")).select_from(self.table_clause(state.table_name))
        return self._filtered(stmt, state.where)

    def _build_insert(self, state: QueryState, data: Any = None):
        if not is_valid_data(data):
            raise invalid_insert_data_error()

        payload = self._payload(data)
        target = self.table_clause(state.table_name, list(payload))
        return (
            insert(target)
            .values(payload)
            .returning(*self.build_projection(state.projection))
        )

    def _build_insert_many(self, state: QueryState, data: Any = None):
        if not isinstance(data, (list, tuple)) or not data:
            raise invalid_insert_data_error()

        for index, record in enumerate(data):
            if not is_valid_data(record):
                raise invalid_insert_data_error(index)

        expected = list(data[0])
        for index, record in enumerate(data[1:], start=1):
            if set(record) != set(expected):
                raise inconsistent_columns_error(index, expected, list(record))

        rows = [self._payload(record) for record in data]
        target = self.table_clause(state.table_name, list(rows[0]))
        return (
            insert(target)
            .values(rows)
            .returning(*self.build_projection(state.projection))
        )

    def _build_update(self, state: QueryState, data: Any = None):
        if not is_valid_where(state.where):
            raise missing_where_error("update")
        if not is_valid_data(data):
            raise invalid_update_data_error()

        payload = self._payload(data)
        target = self.table_clause(state.table_name, list(payload))
        stmt = update(target).values(payload)
        return self._filtered(stmt, state.where).returning(*self.build_projection(state.projection))

    def _build_delete(self, state: QueryState, data: Any = None):
        if not is_valid_where(state.where):
            raise missing_where_error("delete")

        stmt = delete(self.table_clause(state.table_name))
        return self._filtered(stmt, state.where).returning(*self.build_projection(state.projection))

    def build_query(self, query_type: QueryType, state: QueryState, data: Any = None):
        """Build the statement for one terminal operation.

        Args:
            query_type: Statement shape to build
            state: Accumulated query state
            data: Record (INSERT, UPDATE) or list of records (INSERT_MANY)

        Returns:
            SQLAlchemy Core statement

        Raises:
            QueryError: If any precondition is violated
            NotImplementedError: If the query type is not supported
        """
        query_mapping = {
            QueryType.SELECT: self._build_select,
            QueryType.COUNT: self._build_count,
            QueryType.INSERT: self._build_insert,
            QueryType.INSERT_MANY: self._build_insert_many,
            QueryType.UPDATE: self._build_update,
            QueryType.DELETE: self._build_delete,
        }

        builder_method = query_mapping.get(query_type)
        if builder_method:
            return builder_method(state, data)

        raise NotImplementedError(
            f"Query type {query_type} not supported by {self.__class__.__name__}"
        )


def render(statement, dialect: Optional[Dialect] = None) -> Tuple[str, Dict[str, Any]]:
    """Compile a statement to SQL text and its bound parameters.

    Defaults to the PostgreSQL dialect. Expanding ``IN`` parameters are
    rendered as individual placeholders.
    """
    compiled = statement.compile(
        dialect=dialect or postgresql.dialect(),
        compile_kwargs={"render_postcompile": True},
    )
    return str(compiled), dict(compiled.params)
