"""Unit tests for the SQLAlchemy executor and the tracing decorator."""

import logging
from unittest.mock import MagicMock, patch

import pytest
from opentelemetry.trace import SpanKind, StatusCode
from sqlalchemy import column, insert, literal_column, select, table
from sqlalchemy.exc import OperationalError

from chainsql.engines import SQLAlchemyExecutor, SQLExecutor
from chainsql.utils.decorators import traced


@pytest.fixture
def sql_executor(engine):
    return SQLAlchemyExecutor(engine)


def _users(*names):
    return table("users", *(column(name) for name in names))


class TestSQLAlchemyExecutor:
    """Test statement execution against in-memory SQLite."""

    def test_satisfies_protocol(self, sql_executor):
        """Test that the executor matches the outbound contract."""
        assert isinstance(sql_executor, SQLExecutor)

    def test_fetch_all_returns_dicts(self, sql_executor):
        """Test that rows come back as plain dictionaries."""
        users = _users("id", "email", "status")
        inserted = sql_executor.fetch_all(
            insert(users).values(email="a@x.com", status="active").returning(users.c.id, users.c.email)
        )
        assert inserted == [{"id": 1, "email": "a@x.com"}]

        rows = sql_executor.fetch_all(select(literal_column("email")).select_from(users))
        assert rows == [{"email": "a@x.com"}]
        assert all(type(row) is dict for row in rows)

    def test_fetch_scalar(self, sql_executor):
        """Test that aggregates return their single value."""
        value = sql_executor.fetch_scalar(select(literal_column("count(*)")).select_from(_users()))
        assert value == 0

    def test_success_is_logged_with_duration(self, sql_executor, caplog):
        """Test the info record emitted after a fetch."""
        with caplog.at_level(logging.INFO, logger="chainsql"):
            sql_executor.fetch_all(
                select(literal_column("id")).select_from(_users()),
                telemetry={"operation.object": "users", "operation.type": "SELECT"},
            )
        record = next(r for r in caplog.records if r.getMessage() == "Results fetched")
        assert record.row_count == "0"
        assert getattr(record, "operation.object") == "users"
        assert getattr(record, "db.platform") == "sqlite"
        assert float(getattr(record, "duration.seconds")) >= 0

    def test_errors_are_reraised_unchanged(self, sql_executor, caplog):
        """Test that driver errors keep their type and are logged once at error level."""
        with caplog.at_level(logging.ERROR, logger="chainsql"):
            with pytest.raises(OperationalError):
                sql_executor.fetch_scalar(select(literal_column("count(*)")).select_from(table("missing")))

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert [r.getMessage() for r in errors] == ["Scalar fetch failed"]
        assert "missing" in errors[0].error

    def test_span_attributes(self, sql_executor):
        """Test OpenTelemetry attributes derived from statement and telemetry."""
        attributes = sql_executor._span_attributes(
            select(literal_column("id")).select_from(_users()),
            {"operation.object": "users", "operation.type": "SELECT"},
            operation="fetch_all",
        )
        assert attributes["db.system"] == "sqlite"
        assert attributes["db.operation"] == "fetch_all"
        assert attributes["db.sql.table"] == "users"
        assert attributes["db.statement"].startswith("SELECT id")
        assert attributes["chainsql.telemetry.operation.type"] == "SELECT"

    def test_long_statements_are_truncated(self, sql_executor):
        """Test that span statements are capped."""
        wide = select(*(literal_column(f"column_{n}") for n in range(600))).select_from(_users())
        statement = sql_executor._span_attributes(wide, operation="fetch_all")["db.statement"]
        assert len(statement) == 4096
        assert statement.endswith("...")


class TestTraced:
    """Test the span decorator."""

    def _tracer(self):
        span = MagicMock()
        tracer = MagicMock()
        tracer.start_as_current_span.return_value.__enter__.return_value = span
        return tracer, span

    def test_span_name_and_attributes(self):
        """Test that static and dynamic attributes are set, dropping None values."""
        tracer, span = self._tracer()

        @traced("chainsql.test", attributes={"static": 1, "empty": None}, attribute_getter=lambda x: {"arg": x})
        def work(x):
            return x * 2

        with patch("chainsql.utils.decorators.get_tracer", return_value=tracer):
            assert work(4) == 8

        tracer.start_as_current_span.assert_called_once_with("chainsql.test", kind=SpanKind.CLIENT)
        span.set_attribute.assert_any_call("static", 1)
        span.set_attribute.assert_any_call("arg", 4)
        assert span.set_attribute.call_count == 2

    def test_exception_marks_span_and_propagates(self):
        """Test that failures are recorded on the span and re-raised."""
        tracer, span = self._tracer()

        @traced()
        def fail():
            raise ValueError("boom")

        with patch("chainsql.utils.decorators.get_tracer", return_value=tracer):
            with pytest.raises(ValueError, match="boom"):
                fail()

        span.record_exception.assert_called_once()
        status = span.set_status.call_args[0][0]
        assert status.status_code == StatusCode.ERROR
