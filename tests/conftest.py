"""Shared fixtures: a mocked executor for unit tests and in-memory SQLite for integration tests."""

from typing import Any, Dict, Iterable, List, Optional
from unittest.mock import Mock

import pytest
from pydantic import BaseModel, Field
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from chainsql import Client
from chainsql.engines import SQLExecutor
from chainsql.query_builder import render

USERS_DDL = """
CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    email TEXT NOT NULL,
    status TEXT,
    score INTEGER,
    deleted_at TEXT
)
"""


class User(BaseModel):
    """Row model used by the schema-checked table tests."""
    id: Optional[int] = None
    email: str = Field(min_length=3)
    status: str = Field(pattern=r"^(active|inactive)$")
    score: Optional[int] = Field(default=None, ge=0)
    deleted_at: Optional[str] = None


def flatten_params(params: Dict[str, Any]) -> List[Any]:
    """Bound values in order, with expanded IN lists flattened."""
    values: List[Any] = []
    for value in params.values():
        if isinstance(value, (list, tuple)):
            values.extend(value)
        else:
            values.append(value)
    return values


def dispatched(executor: Mock, method: str = "fetch_all"):
    """Return (sql, params) of the statement last handed to the executor."""
    statement = getattr(executor, method).call_args[0][0]
    return render(statement)


def seed(db: Client, rows: Iterable[Dict[str, Any]]) -> None:
    for row in rows:
        db.table("users").create(row)


@pytest.fixture
def executor():
    """Executor double that records statements instead of running them."""
    executor = Mock(spec=SQLExecutor)
    executor.fetch_all.return_value = []
    executor.fetch_scalar.return_value = 0
    return executor


@pytest.fixture
def mock_db(executor):
    return Client(executor)


@pytest.fixture
def engine():
    """In-memory SQLite engine shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    with engine.begin() as conn:
        conn.execute(text(USERS_DDL))
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    return Client(engine)
