"""Steps and the machinery to register, sequence and load them.

Provides:
- Step: base class for prep/bake steps
- Step registry: registration and lookup of step factories
- Built-in steps: mutate, ns, impute_median (legacy alias medianimpute)
- Pipeline: sequential prep/bake over a list of steps
"""

# Registry must be imported first (step modules use the register_step decorator)
from prepbake.steps.registry import (
    StepFactory,
    clear_registry,
    get_step,
    list_step_types,
    register_step,
    step_from_dict,
)

from prepbake.steps.base import Step, rand_id
from prepbake.steps.impute_median import (
    ImputeMedianStep,
    create_impute_median_step,
    create_medianimpute_step,
    step_impute_median,
    step_medianimpute,
)
from prepbake.steps.mutate import MutateStep, create_mutate_step, step_mutate
from prepbake.steps.ns import (
    NaturalSplineStep,
    SplineOptions,
    create_ns_step,
    step_ns,
)
from prepbake.steps.pipeline import Pipeline

__all__ = [
    # Pipeline
    "Pipeline",
    # Registry
    "register_step",
    "get_step",
    "step_from_dict",
    "list_step_types",
    "clear_registry",
    "StepFactory",
    # Steps
    "Step",
    "rand_id",
    "ImputeMedianStep",
    "MutateStep",
    "NaturalSplineStep",
    "SplineOptions",
    # Definition-time constructors
    "step_impute_median",
    "step_medianimpute",
    "step_mutate",
    "step_ns",
    # Factory functions
    "create_impute_median_step",
    "create_medianimpute_step",
    "create_mutate_step",
    "create_ns_step",
]
