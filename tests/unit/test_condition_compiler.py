"""Unit tests for the WHERE condition compiler."""

import pytest

from chainsql.common.exceptions import ErrorCode, QueryError
from chainsql.constants import LikePattern, SqlOperator
from chainsql.query_builder import BaseQueryBuilder, escape_like, like_pattern, render
from chainsql.types import ComparisonCondition, InCondition, LikeCondition, NullCondition

from conftest import flatten_params


@pytest.fixture
def builder():
    return BaseQueryBuilder()


def compile_where(builder, where):
    clause = builder.build_where(where)
    sql, params = render(clause)
    return sql, flatten_params(params)


class TestEqualityMap:
    """Test the equality-map form."""

    def test_none_value_compiles_to_is_null(self, builder):
        """Test that a None value uses IS NULL, never = NULL."""
        sql, params = compile_where(builder, {"deleted_at": None})
        assert sql == '"deleted_at" IS NULL'
        assert "= NULL" not in sql
        assert params == []

    def test_entries_are_and_joined_in_order(self, builder):
        """Test that entries are AND-ed in mapping order with bound values."""
        sql, params = compile_where(builder, {"status": "active", "deleted_at": None, "score": 5})
        assert sql.index('"status" =') < sql.index('"deleted_at" IS NULL') < sql.index('"score" =')
        assert sql.count(" AND ") == 2
        assert params == ["active", 5]

    def test_values_are_never_inlined(self, builder):
        """Test that hostile values travel as parameters."""
        sql, params = compile_where(builder, {"email": "x' OR '1'='1"})
        assert "OR" not in sql
        assert params == ["x' OR '1'='1"]

    @pytest.mark.parametrize("where", [None, {}, []])
    def test_empty_spec_compiles_to_nothing(self, builder, where):
        """Test that empty filters produce no clause."""
        assert builder.build_where(where) is None

    def test_invalid_field_name(self):
        """Test that strict names are enforced on equality keys."""
        builder = BaseQueryBuilder(strict_names=True)
        with pytest.raises(QueryError) as exc_info:
            builder.build_where({"bad name": 1})
        assert exc_info.value.error_code == ErrorCode.INVALID_FIELD
        assert str(exc_info.value) == "Invalid field: bad name"


class TestOperatorList:
    """Test the typed-condition form."""

    def test_null_checks(self, builder):
        """Test IS NULL and IS NOT NULL keyword forms."""
        sql, params = compile_where(builder, [
            {"field": "deleted_at", "operator": "IS NULL"},
            {"field": "email", "operator": "IS NOT NULL"},
        ])
        assert sql == '"deleted_at" IS NULL AND "email" IS NOT NULL'
        assert params == []

    def test_null_check_with_value_is_rejected(self, builder):
        """Test that a nullness check carrying a value is rejected."""
        with pytest.raises(QueryError) as exc_info:
            builder.build_where([{"field": "deleted_at", "operator": "IS NULL", "value": "x"}])
        assert exc_info.value.error_code == ErrorCode.INVALID_NULL_CHECK

    def test_in_binds_every_member(self, builder):
        """Test that IN members are bound parameters, not interpolated text."""
        sql, params = compile_where(builder, [{"field": "id", "operator": "IN", "value": [1, 2, 3]}])
        assert sql.startswith('"id" IN (')
        assert "1, 2, 3" not in sql
        assert params == [1, 2, 3]

    @pytest.mark.parametrize("value", [[], (), "1,2", 5, None])
    def test_in_requires_non_empty_list(self, builder, value):
        """Test that IN rejects empty or non-list values."""
        with pytest.raises(QueryError) as exc_info:
            builder.build_where([{"field": "id", "operator": "IN", "value": value}])
        assert exc_info.value.error_code == ErrorCode.INVALID_IN
        assert str(exc_info.value) == "Invalid IN values: id"

    @pytest.mark.parametrize("operator", ["=", "!=", ">", "<", ">=", "<="])
    def test_comparisons(self, builder, operator):
        """Test every comparison operator renders with a bound value."""
        sql, params = compile_where(builder, [{"field": "score", "operator": operator, "value": 10}])
        assert sql.startswith(f'"score" {operator} ')
        assert params == [10]

    def test_comparison_rejects_none(self, builder):
        """Test that a comparison without a value is rejected."""
        with pytest.raises(QueryError) as exc_info:
            builder.build_where([{"field": "score", "operator": ">", "value": None}])
        assert exc_info.value.error_code == ErrorCode.INVALID_COMPARISON

    def test_conditions_are_and_joined_in_list_order(self, builder):
        """Test that list order is preserved in the generated SQL."""
        sql, params = compile_where(builder, [
            {"field": "score", "operator": ">=", "value": 10},
            {"field": "status", "operator": "=", "value": "active"},
        ])
        assert sql.index('"score"') < sql.index('"status"')
        assert params == [10, "active"]

    def test_accepts_condition_models(self, builder):
        """Test that typed condition models compile like their dict forms."""
        sql, params = compile_where(builder, [
            ComparisonCondition(field="score", operator=">", value=1),
            LikeCondition(field="email", operator="ILIKE", value="x", pattern=LikePattern.ENDS_WITH),
            InCondition(field="id", operator="IN", value=[4]),
            NullCondition(field="deleted_at", operator="IS NULL"),
        ])
        assert '"email" ILIKE' in sql
        assert params == [1, "%x", 4]

    def test_accepts_operator_enum_in_dicts(self, builder):
        """Test that SqlOperator members are accepted as operator tokens."""
        sql, params = compile_where(builder, [{"field": "score", "operator": SqlOperator.LE, "value": 3}])
        assert '"score" <=' in sql
        assert params == [3]

    @pytest.mark.parametrize("operator", ["BETWEEN", "= 1 OR 1 =", "like", None])
    def test_unsupported_operator(self, builder, operator):
        """Test that free-form operator text is never accepted."""
        with pytest.raises(QueryError) as exc_info:
            builder.build_where([{"field": "score", "operator": operator, "value": 1}])
        assert exc_info.value.error_code == ErrorCode.UNSUPPORTED_OPERATOR

    def test_missing_field(self, builder):
        """Test that a condition without a field is rejected."""
        with pytest.raises(QueryError) as exc_info:
            builder.build_where([{"operator": "=", "value": 1}])
        assert exc_info.value.error_code == ErrorCode.INVALID_FIELD

    def test_non_mapping_condition(self, builder):
        """Test that list items must be conditions."""
        with pytest.raises(QueryError) as exc_info:
            builder.build_where(["score > 1"])
        assert exc_info.value.error_code == ErrorCode.INVALID_CONDITION

    def test_raw_string_spec_is_rejected(self, builder):
        """Test that a raw SQL string is not a valid filter."""
        with pytest.raises(QueryError) as exc_info:
            builder.build_where("1 = 1")
        assert exc_info.value.error_code == ErrorCode.INVALID_CONDITION


class TestLike:
    """Test LIKE/ILIKE pattern generation and escaping."""

    def test_escape_like_is_unconditional(self):
        """Test that every wildcard and backslash is escaped."""
        assert escape_like("100%_done") == "100\\%\\_done"
        assert escape_like("a\\b") == "a\\\\b"
        assert escape_like("plain") == "plain"

    @pytest.mark.parametrize("pattern,expected", [
        ("startsWith", "100\\%\\_done%"),
        ("endsWith", "%100\\%\\_done"),
        ("contains", "%100\\%\\_done%"),
        ("exact", "100\\%\\_done"),
        (None, "100\\%\\_done"),
        (LikePattern.CONTAINS, "%100\\%\\_done%"),
    ])
    def test_like_pattern(self, pattern, expected):
        """Test wildcard placement after escaping for every pattern mode."""
        assert like_pattern("100%_done", pattern) == expected

    def test_like_compiles_with_escape_clause(self, builder):
        """Test that the escaped pattern is bound and ESCAPE is explicit."""
        sql, params = compile_where(builder, [
            {"field": "email", "operator": "LIKE", "value": "100%_done", "pattern": "contains"},
        ])
        assert sql.startswith('"email" LIKE ')
        assert "ESCAPE" in sql
        assert params == ["%100\\%\\_done%"]

    def test_ilike(self, builder):
        """Test that ILIKE is rendered as such."""
        sql, params = compile_where(builder, [
            {"field": "email", "operator": "ILIKE", "value": "Bob", "pattern": "startsWith"},
        ])
        assert sql.startswith('"email" ILIKE ')
        assert params == ["Bob%"]

    @pytest.mark.parametrize("value", [5, None, ["a"]])
    def test_like_requires_string(self, builder, value):
        """Test that LIKE rejects non-string values."""
        with pytest.raises(QueryError) as exc_info:
            builder.build_where([{"field": "email", "operator": "LIKE", "value": value}])
        assert exc_info.value.error_code == ErrorCode.INVALID_LIKE
        assert str(exc_info.value) == "LIKE/ILIKE requires string: email"

    def test_unknown_pattern_is_rejected(self, builder):
        """Test that only the four pattern modes are accepted."""
        with pytest.raises(QueryError) as exc_info:
            builder.build_where([{"field": "email", "operator": "LIKE", "value": "a", "pattern": "fuzzy"}])
        assert exc_info.value.error_code == ErrorCode.INVALID_CONDITION
