"""Unit tests for the mutate step."""

import warnings

import duckdb
import pyarrow as pa
import pyarrow.compute as pc
import pytest

from prepbake.core.exceptions import StepError, StepNotTrainedError
from prepbake.steps import MutateStep, get_step, step_from_dict, step_mutate


@pytest.fixture
def table():
    return pa.table(
        {
            "x": pa.array([5, 6], type=pa.int64()),
            "w": pa.array([1.5, 2.5], type=pa.float32()),
            "label": ["a", "b"],
        }
    )


# ============================================================================
# Evaluation
# ============================================================================


class TestMutateStep:
    """Tests for MutateStep prep/bake."""

    def test_named_expression(self, table):
        baked = step_mutate(double="x * 2").prep(table).bake(table)

        assert baked.columns == ["x", "w", "label", "double"]
        assert baked.column_values("double") == [10, 12]

    def test_unnamed_expression_named_after_text(self, table):
        step = step_mutate("x + 1")
        assert list(step.inputs) == ["x + 1"]

        baked = step.prep(table).bake(table)
        assert baked.column_values("x + 1") == [6, 7]

    def test_sequential_evaluation(self, table):
        """Later expressions see columns created by earlier ones."""
        step = step_mutate(a="x + 1", b="a * 2")
        baked = step.prep(table).bake(table)

        assert baked.column_values("a") == [6, 7]
        assert baked.column_values("b") == [12, 14]

    def test_overwrite_keeps_position(self, table):
        baked = step_mutate(x="x * 10").prep(table).bake(table)

        assert baked.columns == ["x", "w", "label"]
        assert baked.column_values("x") == [50, 60]

    def test_untouched_columns_keep_types(self, table):
        baked = step_mutate(double="x * 2").prep(table).bake(table)
        schema = baked.to_arrow().schema
        assert schema.field("w").type == pa.float32()
        assert schema.field("label").type == pa.string()

    def test_sql_functions(self, table):
        baked = step_mutate(upper="upper(label)", pos="CASE WHEN x > 5 THEN 1 ELSE 0 END").prep(
            table
        ).bake(table)
        assert baked.column_values("upper") == ["A", "B"]
        assert baked.column_values("pos") == [0, 1]

    def test_callable_expression(self, table):
        def tripled(t):
            return pc.multiply(t.column("x"), 3)

        baked = step_mutate(triple=tripled).prep(table).bake(table)
        assert baked.column_values("triple") == [15, 18]

    def test_callable_scalar_is_broadcast(self, table):
        baked = step_mutate(const=lambda t: 1.5).prep(table).bake(table)
        assert baked.column_values("const") == [1.5, 1.5]

    def test_callable_wrong_length(self, table):
        trained = step_mutate(bad=lambda t: [1, 2, 3]).prep(table)
        with pytest.raises(StepError, match="returned 3 values"):
            trained.bake(table)

    def test_callable_single_value_is_broadcast(self, table):
        baked = step_mutate(first=lambda t: [7]).prep(table).bake(table)
        assert baked.column_values("first") == [7, 7]

    def test_sql_aggregate_is_broadcast(self, table):
        baked = step_mutate(mean_x="avg(x)").prep(table).bake(table)
        assert baked.column_values("mean_x") == [5.5, 5.5]

    def test_sql_aggregate_on_empty_table(self):
        empty = pa.table({"x": pa.array([], type=pa.int64())})
        baked = step_mutate(mean_x="avg(x)").prep(empty).bake(empty)
        assert baked.columns == ["x", "mean_x"]
        assert baked.row_count == 0

    def test_sql_wrong_length(self, table):
        trained = step_mutate(bad="unnest([1, 2, 3])").prep(table)
        with pytest.raises(StepError, match="returned 6 values"):
            trained.bake(table)

    def test_no_deprecation_warnings(self, table):
        trained = step_mutate(double="x * 2").prep(table)
        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            baked = trained.bake(table)
        assert baked.column_values("double") == [10, 12]

    def test_invalid_sql_propagates(self, table):
        trained = step_mutate(bad="no_such_column + 1").prep(table)
        with pytest.raises(duckdb.Error):
            trained.bake(table)

    def test_empty_table(self):
        empty = pa.table({"x": pa.array([], type=pa.int64())})
        baked = step_mutate(double="x * 2").prep(empty).bake(empty)
        assert baked.columns == ["x", "double"]
        assert baked.row_count == 0

    def test_bake_is_idempotent(self, table):
        trained = step_mutate(double="x * 2").prep(table)
        assert trained.bake(table).to_arrow().equals(trained.bake(table).to_arrow())

    def test_bake_untrained_raises(self, table):
        with pytest.raises(StepNotTrainedError):
            step_mutate(double="x * 2").bake(table)

    def test_input_not_modified(self, table):
        step_mutate(x="x * 10").prep(table).bake(table)
        assert table.column("x").to_pylist() == [5, 6]


# ============================================================================
# Metadata
# ============================================================================


class TestMutateMetadata:
    """Tests for tidy(), printing and serialization."""

    def test_tidy(self):
        step = step_mutate("x + 1", double="x * 2", id="mutate_abcde")
        assert step.tidy().to_pylist() == [
            {"terms": "x + 1", "value": "x + 1", "id": "mutate_abcde"},
            {"terms": "double", "value": "x * 2", "id": "mutate_abcde"},
        ]

    def test_tidy_callable_uses_function_name(self):
        def ratio(t):
            return t.column("x")

        assert step_mutate(r=ratio).tidy().column("value").to_pylist() == ["ratio"]

    def test_str(self, table):
        step = step_mutate(a="x + 1", b="a * 2")
        assert str(step) == "Variable mutation for a, b"
        assert str(step.prep(table)) == "Variable mutation for a, b [trained]"

    def test_round_trip(self, table):
        trained = step_mutate(double="x * 2").prep(table)
        restored = step_from_dict(trained.to_dict())

        assert isinstance(restored, MutateStep)
        assert restored.trained
        assert restored.inputs == {"double": "x * 2"}

    def test_callables_cannot_be_serialized(self):
        with pytest.raises(StepError, match="cannot be serialized"):
            step_mutate(c=lambda t: 1).to_dict()

    def test_factory_accepts_list_inputs(self):
        """YAML definitions may list expressions, named or not."""
        step = get_step("mutate", {"inputs": [{"ratio": "a / b"}, "a + b"]})
        assert step.inputs == {"ratio": "a / b", "a + b": "a + b"}

    def test_factory_accepts_mapping(self):
        step = get_step("mutate", {"inputs": {"ratio": "a / b"}})
        assert step.inputs == {"ratio": "a / b"}
