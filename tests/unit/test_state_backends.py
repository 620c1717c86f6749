"""Unit tests for the state backend and pipeline persistence."""

import json

import pyarrow as pa
import pytest

from prepbake import load_pipeline, save_pipeline
from prepbake.core.exceptions import StateError
from prepbake.core.state_backend import LocalStateBackend
from prepbake.steps import Pipeline, step_impute_median, step_mutate, step_ns


def test_local_state_backend(temp_dir):
    """Test LocalStateBackend basic operations."""
    backend = LocalStateBackend(temp_dir)

    state = {"name": "p", "steps": [{"type": "ns"}]}
    backend.save("p", state)

    assert backend.exists("p")
    assert backend.load("p") == state
    assert backend.load("nonexistent") == {}
    assert not (temp_dir / "p.json.tmp").exists()


def test_local_state_backend_creates_directory(temp_dir):
    backend = LocalStateBackend(temp_dir / "nested" / "state")
    backend.save("p", {"a": 1})
    assert (temp_dir / "nested" / "state" / "p.json").exists()


def test_local_state_backend_corrupt_file(temp_dir):
    (temp_dir / "bad.json").write_text("{not json")
    with pytest.raises(StateError, match="Failed to parse"):
        LocalStateBackend(temp_dir).load("bad")


def test_local_state_backend_unserializable(temp_dir):
    backend = LocalStateBackend(temp_dir)
    with pytest.raises(StateError, match="Failed to serialize"):
        backend.save("p", {"value": object()})
    assert not (temp_dir / "p.json.tmp").exists()


class TestPipelinePersistence:
    """Tests for save_pipeline() and load_pipeline()."""

    @pytest.fixture
    def trained(self, biomass_table):
        pipeline = Pipeline(
            [
                step_impute_median("all_numeric()", "-HHV"),
                step_mutate(ratio="carbon / hydrogen"),
                step_ns("hydrogen"),
            ],
            outcomes=["HHV"],
            name="biomass",
        )
        return pipeline.prep(biomass_table)

    def test_save_and_load(self, trained, biomass_table, temp_dir):
        backend = LocalStateBackend(temp_dir)
        assert save_pipeline(trained, backend) == "biomass"

        saved = json.loads((temp_dir / "biomass.json").read_text())
        assert [s["type"] for s in saved["steps"]] == ["impute_median", "mutate", "ns"]

        restored = load_pipeline("biomass", backend)
        assert restored.trained
        assert restored.bake(biomass_table).to_arrow().equals(
            trained.bake(biomass_table).to_arrow()
        )

    def test_integer_medians_survive_json(self, trained, temp_dir):
        backend = LocalStateBackend(temp_dir)
        save_pipeline(trained, backend)
        restored = load_pipeline("biomass", backend)

        assert restored.steps[0].medians["nitrogen"] == 3
        assert isinstance(restored.steps[0].medians["nitrogen"], int)

    def test_save_under_other_name(self, trained, temp_dir):
        backend = LocalStateBackend(temp_dir)
        assert save_pipeline(trained, backend, name="other") == "other"
        assert backend.exists("other")

    def test_untrained_cannot_be_saved(self, temp_dir):
        with pytest.raises(StateError, match="Only trained pipelines"):
            save_pipeline(Pipeline([], name="p"), LocalStateBackend(temp_dir))

    def test_unnamed_cannot_be_saved(self, temp_dir, biomass_table):
        trained = Pipeline([step_impute_median("carbon")]).prep(biomass_table)
        with pytest.raises(StateError, match="name is required"):
            save_pipeline(trained, LocalStateBackend(temp_dir))

    def test_load_missing(self, temp_dir):
        with pytest.raises(StateError, match="No saved pipeline"):
            load_pipeline("missing", LocalStateBackend(temp_dir))

    def test_load_invalid(self, temp_dir):
        backend = LocalStateBackend(temp_dir)
        backend.save("broken", {"name": "broken", "steps": [{"terms": ["x"]}]})
        with pytest.raises(StateError, match="is invalid"):
            load_pipeline("broken", backend)

    def test_new_data_with_unseen_values(self, trained, temp_dir):
        backend = LocalStateBackend(temp_dir)
        save_pipeline(trained, backend)
        restored = load_pipeline("biomass", backend)

        new_data = pa.table(
            {
                "sample": ["z"],
                "carbon": [60.0],
                "hydrogen": [None],
                "nitrogen": pa.array([None], type=pa.int64()),
                "HHV": [0.0],
            }
        )
        baked = restored.bake(new_data)
        assert baked.column_values("nitrogen") == [3]
        assert baked.column_values("hydrogen_ns_1")[0] is not None
