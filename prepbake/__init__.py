"""prepbake - prep/bake preprocessing steps for Arrow tables.

Steps are declared up front, prepped once against training data to learn
what they need (medians, spline knots), and then baked onto any number of
new datasets using only what was learned.
"""

__version__ = "0.1.0"

# Public API
from prepbake.api import from_yaml, load_pipeline, save_pipeline

# Core classes
from prepbake.core.batch import ArrowBatch
from prepbake.core.schema import ColumnInfo, SchemaInfo
from prepbake.core.state_backend import LocalStateBackend, StateBackend

# Exceptions
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

# Selectors
from prepbake.core.selectors import (
    all_nominal,
    all_numeric,
    all_outcomes,
    all_predictors,
    contains,
    ends_with,
    everything,
    has_role,
    has_type,
    matches,
    starts_with,
)

# Steps
from prepbake.steps import (
    ImputeMedianStep,
    MutateStep,
    NaturalSplineStep,
    Pipeline,
    Step,
    step_impute_median,
    step_medianimpute,
    step_mutate,
    step_ns,
)

__all__ = [
    # Version
    "__version__",
    # Public API
    "from_yaml",
    "save_pipeline",
    "load_pipeline",
    # Core classes
    "ArrowBatch",
    "ColumnInfo",
    "SchemaInfo",
    "StateBackend",
    "LocalStateBackend",
    "Pipeline",
    # Steps
    "Step",
    "MutateStep",
    "NaturalSplineStep",
    "ImputeMedianStep",
    "step_mutate",
    "step_ns",
    "step_impute_median",
    "step_medianimpute",
    # Selectors
    "all_numeric",
    "all_nominal",
    "all_predictors",
    "all_outcomes",
    "everything",
    "has_role",
    "has_type",
    "starts_with",
    "ends_with",
    "contains",
    "matches",
    # Exceptions
    "PrepBakeError",
    "StepError",
    "StepNotTrainedError",
    "MissingColumnError",
    "ColumnTypeError",
    "SelectorError",
    "RecipeError",
    "StateError",
]
