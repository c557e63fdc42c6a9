from typing import Optional, Type, Union

from pydantic import BaseModel
from sqlalchemy.engine import Engine

from chainsql.api.schema_table import SchemaTable
from chainsql.api.table import Table
from chainsql.common.exceptions import invalid_table_name_error
from chainsql.engines.base import SQLAlchemyExecutor, SQLExecutor, create_engine_from_settings
from chainsql.logging import get_logger
from chainsql.query_builder.base import BaseQueryBuilder
from chainsql.settings import ChainSQLSettings, get_settings
from chainsql.types.query import QueryState
from chainsql.utils.validators import is_valid_name
from chainsql.validation.schema import SchemaDescriptor

logger = get_logger(__name__)


class Client:
    """Entry point that hands out table handles.

    The client owns no connection state of its own: it holds an executor
    (injected, or wrapped around an injected SQLAlchemy engine) and shares it
    with every handle it creates.

    Example:
        >>> db = Client(create_engine("sqlite://"))
        >>> db.table("users").where({"status": "active"}).find_many()
        >>>
        >>> # Schema-checked handle
        >>> users = db.table("users", schema=User)
    """

    def __init__(
        self,
        executor: Union[SQLExecutor, Engine],
        *,
        strict_names: bool = False,
        allow_schema: bool = False,
    ):
        if isinstance(executor, Engine):
            executor = SQLAlchemyExecutor(executor)
        self.executor = executor
        self.strict_names = strict_names
        self.allow_schema = allow_schema

    @classmethod
    def from_settings(cls, settings: Optional[ChainSQLSettings] = None) -> "Client":
        """Build a client (and its SQLAlchemy engine) from settings.

        Args:
            settings: Explicit settings; defaults to the cached environment settings

        Raises:
            TableError: If no database URL is configured
        """
        settings = settings or get_settings()
        engine = create_engine_from_settings(settings)
        return cls(
            SQLAlchemyExecutor(engine),
            strict_names=settings.strict_names,
            allow_schema=settings.allow_schema,
        )

    def table(
        self,
        name: str,
        schema: Optional[Union[Type[BaseModel], SchemaDescriptor]] = None,
        *,
        strict_names: Optional[bool] = None,
        allow_schema: Optional[bool] = None,
    ) -> Union[Table, SchemaTable]:
        """Create a handle on one table.

        Args:
            name: Table name, optionally ``schema.table`` when ``allow_schema`` is set
            schema: Optional pydantic model; returns a schema-checked handle
            strict_names: Override the client's identifier strictness
            allow_schema: Override the client's schema-qualifier rule

        Returns:
            Table, or SchemaTable when ``schema`` is given

        Raises:
            TableError: If the table name is invalid
        """
        strict = self.strict_names if strict_names is None else strict_names
        qualified = self.allow_schema if allow_schema is None else allow_schema

        if not is_valid_name(name, strict=strict, allow_schema=qualified):
            raise invalid_table_name_error(name)

        builder = BaseQueryBuilder(strict_names=strict, allow_schema=qualified)
        handle = Table(self.executor, builder, QueryState(table_name=name.strip()))
        logger.debug("Created table handle", extra={"table": handle.name, "strict_names": strict})

        if schema is not None:
            return SchemaTable(handle, schema)
        return handle
