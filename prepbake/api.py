"""Public Python API for prepbake package.

Entry points for building pipelines from YAML definitions and for saving
and restoring trained pipelines.
"""

from pydantic import ValidationError

from prepbake.core.exceptions import RecipeError, StateError, StepError
from prepbake.core.state_backend import StateBackend
from prepbake.models.loader import load_pipeline_config
from prepbake.steps.pipeline import Pipeline


def from_yaml(path: str) -> Pipeline:
    """Build an untrained pipeline from a YAML definition.

    Args:
        path: Path to pipeline YAML file

    Returns:
        Untrained Pipeline instance

    Raises:
        RecipeError: If the file is missing, invalid, or a step can't be built

    Example:
        >>> pipeline = from_yaml("examples/biomass/pipeline.yaml")
        >>> trained = pipeline.prep(training_table)
        >>> baked = trained.bake(test_table)
    """
    config = load_pipeline_config(path)
    try:
        return Pipeline.from_config(config)
    except (StepError, ValidationError) as e:
        raise RecipeError(
            f"Invalid step definition: {e}", context={"path": str(path)}
        ) from e


def save_pipeline(
    pipeline: Pipeline,
    state_backend: StateBackend,
    name: str | None = None,
) -> str:
    """Persist a trained pipeline and return the name it was saved under.

    Raises:
        StateError: If the pipeline is untrained, unnamed, or can't be saved
    """
    name = name or pipeline.name
    if not name:
        raise StateError("A name is required to save an unnamed pipeline")
    if not pipeline.trained:
        raise StateError(
            "Only trained pipelines can be saved", context={"name": name}
        )
    state_backend.save(name, pipeline.to_dict())
    return name


def load_pipeline(name: str, state_backend: StateBackend) -> Pipeline:
    """Restore a pipeline saved with :func:`save_pipeline`.

    Raises:
        StateError: If nothing is saved under ``name`` or the data is invalid
    """
    state = state_backend.load(name)
    if not state:
        raise StateError(f"No saved pipeline named '{name}'", context={"name": name})
    try:
        return Pipeline.from_dict(state)
    except (StepError, ValidationError) as e:
        raise StateError(
            f"Saved pipeline '{name}' is invalid: {e}", context={"name": name}
        ) from e
