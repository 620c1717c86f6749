"""Core module for prepbake package."""

from prepbake.core.batch import ArrowBatch, ensure_batch
from prepbake.core.exceptions import (
    ColumnTypeError,
    MissingColumnError,
    PrepBakeError,
    RecipeError,
    SelectorError,
    StateError,
    StepError,
    StepNotTrainedError,
)
from prepbake.core.schema import ColumnInfo, SchemaInfo
from prepbake.core.splines import BasisModel, ns_basis, ns_predict, ns_statistics
from prepbake.core.state_backend import LocalStateBackend, StateBackend

__all__ = [
    "ArrowBatch",
    "ensure_batch",
    "ColumnInfo",
    "SchemaInfo",
    "BasisModel",
    "ns_basis",
    "ns_predict",
    "ns_statistics",
    "StateBackend",
    "LocalStateBackend",
    "PrepBakeError",
    "StepError",
    "StepNotTrainedError",
    "MissingColumnError",
    "ColumnTypeError",
    "SelectorError",
    "RecipeError",
    "StateError",
]
