"""Statement executors.

Engines run the statements the query builder produces. The core only
depends on the :class:`SQLExecutor` protocol; :class:`SQLAlchemyExecutor` is
the default implementation over a SQLAlchemy ``Engine``.
"""

from chainsql.engines.base import (
    Row,
    SQLAlchemyExecutor,
    SQLExecutor,
    create_engine_from_settings,
)

__all__ = [
    "Row",
    "SQLAlchemyExecutor",
    "SQLExecutor",
    "create_engine_from_settings",
]
