"""Pytest configuration and shared fixtures."""

import logging
import tempfile
from pathlib import Path

import pyarrow as pa
import pytest

from prepbake.core.batch import ArrowBatch
from prepbake.steps import registry


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def restore_step_registry():
    """Restore the step registry after each test.

    Tests that clear the registry or load custom steps must not leak
    registrations into other tests.
    """
    saved = dict(registry._step_registry)
    yield
    registry._step_registry.clear()
    registry._step_registry.update(saved)


@pytest.fixture
def biomass_table():
    """Small biomass-like training table with a few missing values."""
    return pa.table(
        {
            "sample": ["a", "b", "c", "d", "e", "f"],
            "carbon": [49.8, 49.5, None, 45.2, 50.0, 52.1],
            "hydrogen": [5.6, 5.7, 5.8, 6.1, None, 5.9],
            "nitrogen": pa.array([1, 3, None, 7, 2, 4], type=pa.int64()),
            "HHV": [20.0, 19.5, 18.7, 18.2, 20.3, 21.1],
        }
    )


@pytest.fixture
def simple_batch():
    """ArrowBatch with one numeric and one string column."""
    return ArrowBatch.from_rows(
        columns=["x", "label"],
        rows=[[5, "a"], [7, "b"]],
        metadata={"source": "test"},
    )


@pytest.fixture(autouse=True)
def reset_prepbake_logger():
    """Remove handlers added by configure_logging() (CLI commands call it)."""
    logger = logging.getLogger("prepbake")
    level = logger.level
    yield
    logger.handlers.clear()
    logger.setLevel(level)
