import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol, runtime_checkable

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.sql.base import Executable

from chainsql.common.exceptions import configuration_error
from chainsql.logging import get_logger
from chainsql.utils.decorators import traced

if TYPE_CHECKING:
    from chainsql.settings import ChainSQLSettings

logger = get_logger(__name__)

Row = Dict[str, Any]


@runtime_checkable
class SQLExecutor(Protocol):
    """Outbound contract of a table handle.

    An executor receives a fully built statement (identifiers quoted, values
    bound) and returns rows as plain dictionaries, or a single scalar for
    aggregates. Retries, pooling and timeouts belong to the executor.
    """

    def fetch_all(self, statement: Executable, telemetry: Optional[Dict[str, str]] = None) -> List[Row]:
        ...

    def fetch_scalar(self, statement: Executable, telemetry: Optional[Dict[str, str]] = None) -> Any:
        ...


class SQLAlchemyExecutor:
    """SQLAlchemy-based statement executor.

    Runs each statement in its own ``engine.begin()`` block, so mutations are
    committed when the call returns. The engine is injected and its lifecycle
    stays with the caller.

    Errors raised by the driver are logged and re-raised unchanged.

    Example:
        >>> engine = create_engine("postgresql+psycopg://localhost/app")
        >>> executor = SQLAlchemyExecutor(engine)
        >>> rows = executor.fetch_all(select(literal_column("*")).select_from(table("users")))
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._connection_info: Dict[str, Any] = {
            "platform": engine.dialect.name,
        }

    @contextmanager
    def _get_connection(self):
        """Yield a connection inside a transaction committed on success."""
        with self.engine.begin() as conn:
            yield conn

    def _render(self, statement: Executable) -> str:
        try:
            return str(statement.compile(dialect=self.engine.dialect))
        except Exception as exc:  # pragma: no cover
            logger.debug("statement rendering for telemetry failed: %s", exc)
            return ""

    def _span_attributes(
        self,
        statement: Executable,
        telemetry: Optional[Dict[str, str]] = None,
        *,
        operation: str,
    ) -> Dict[str, Any]:
        """Build OpenTelemetry span attributes for SQL operations."""
        sanitized_query = self._render(statement).strip()
        if sanitized_query and len(sanitized_query) > 4096:
            sanitized_query = f"{sanitized_query[:4093]}..."

        attributes: Dict[str, Any] = {
            "db.system": self._connection_info.get("platform", "sql"),
            "db.operation": operation,
        }

        if sanitized_query:
            attributes["db.statement"] = sanitized_query
            attributes["db.statement.length"] = len(sanitized_query)

        if telemetry:
            table_name = telemetry.get("operation.object")
            if table_name:
                attributes["db.sql.table"] = table_name
            for key, value in telemetry.items():
                attributes[f"chainsql.telemetry.{key}"] = value

        return attributes

    def _payload(self, telemetry: Optional[Dict[str, str]]) -> Dict[str, str]:
        payload: Dict[str, str] = dict(telemetry or {})
        payload.setdefault("db.platform", str(self._connection_info.get("platform", "sql")))
        return payload

    @traced(
        span_name="chainsql.sql.fetch_all",
        attribute_getter=lambda self, statement, telemetry=None: self._span_attributes(
            statement,
            telemetry,
            operation="fetch_all",
        ),
    )
    def fetch_all(self, statement: Executable, telemetry: Optional[Dict[str, str]] = None) -> List[Row]:
        """Execute a statement and fetch all rows as dictionaries.

        Used for SELECT and for INSERT/UPDATE/DELETE ... RETURNING.
        """
        start_time = time.time()
        payload = self._payload(telemetry)

        try:
            with self._get_connection() as conn:
                result = conn.execute(statement)
                rows = [dict(row) for row in result.mappings().all()]

            duration = time.time() - start_time
            payload["row_count"] = str(len(rows))
            logger.info(
                "Results fetched",
                extra={**payload, "duration.seconds": f"{duration:.6f}"},
            )
            return rows

        except Exception as exc:
            duration = time.time() - start_time
            logger.error(
                "Fetch all failed",
                extra={**payload, "duration.seconds": f"{duration:.6f}", "error": str(exc)},
                exc_info=True,
            )
            raise

    @traced(
        span_name="chainsql.sql.fetch_scalar",
        attribute_getter=lambda self, statement, telemetry=None: self._span_attributes(
            statement,
            telemetry,
            operation="fetch_scalar",
        ),
    )
    def fetch_scalar(self, statement: Executable, telemetry: Optional[Dict[str, str]] = None) -> Any:
        """Execute a statement and return its single scalar value.

        Used for aggregates such as COUNT.

        Args:
            statement: Statement that returns one value
            telemetry: Optional context for logging/telemetry

        Returns:
            The first column of the first row, or None when there is no row
        """
        start_time = time.time()
        payload = self._payload(telemetry)

        try:
            with self._get_connection() as conn:
                value = conn.execute(statement).scalar()

            duration = time.time() - start_time
            logger.info(
                "Scalar fetched",
                extra={**payload, "duration.seconds": f"{duration:.6f}", "value_is_null": str(value is None)},
            )
            return value

        except Exception as exc:
            duration = time.time() - start_time
            logger.error(
                "Scalar fetch failed",
                extra={**payload, "duration.seconds": f"{duration:.6f}", "error": str(exc)},
                exc_info=True,
            )
            raise


def create_engine_from_settings(settings: "ChainSQLSettings") -> Engine:
    """Create a SQLAlchemy engine from settings.

    Pool options are only passed to backends that use a queue pool; SQLite
    uses its own single-connection pools.

    Raises:
        TableError: If no database URL is configured
    """
    if not settings.is_configured:
        raise configuration_error("No database URL configured", config_key="database_url")

    url = make_url(settings.database_url)
    options: Dict[str, Any] = {"echo": settings.echo}
    if url.get_backend_name() != "sqlite":
        options.update(
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
            pool_timeout=settings.pool_timeout,
            pool_pre_ping=settings.pool_pre_ping,
        )

    engine = create_engine(url, **options)
    logger.info(
        "Created SQL engine",
        extra={"db.platform": url.get_backend_name(), "db.driver": url.get_driver_name()},
    )
    return engine
