"""Step registry mapping step type names to step factories."""

from typing import TYPE_CHECKING, Any, Callable, overload

from prepbake.core.exceptions import StepError

if TYPE_CHECKING:
    from prepbake.steps.base import Step

StepFactory = Callable[[dict[str, Any]], "Step"]

_step_registry: dict[str, StepFactory] = {}


@overload
def register_step(step_type: str) -> Callable[[StepFactory], StepFactory]: ...


@overload
def register_step(step_type: str, factory: StepFactory) -> None: ...


def register_step(
    step_type: str,
    factory: StepFactory | None = None,
) -> Callable[[StepFactory], StepFactory] | None:
    """Register a step factory.

    Can be used as a decorator or called directly:

        # As decorator
        @register_step("impute_median")
        def create_impute_median_step(config):
            return ImputeMedianStep.model_validate(config)

        # Direct call
        register_step("impute_median", create_impute_median_step)

    Args:
        step_type: Unique identifier for the step (e.g., 'impute_median').
        factory: Factory function (optional if used as decorator).

    Raises:
        StepError: If a step with the same type is already registered.
    """

    def _register(f: StepFactory) -> StepFactory:
        if step_type in _step_registry:
            raise StepError(
                f"Step '{step_type}' is already registered",
                context={"step_type": step_type},
            )
        _step_registry[step_type] = f
        return f

    if factory is not None:
        _register(factory)
        return None

    return _register


def get_step(step_type: str, config: dict[str, Any]) -> "Step":
    """Create a step using the registered factory.

    Args:
        step_type: The step type to instantiate.
        config: Step fields (definition-time arguments and, for trained
            steps, their fitted state).

    Raises:
        StepError: If the step type is not registered.
    """
    factory = _step_registry.get(step_type)
    if factory is None:
        available = ", ".join(sorted(_step_registry.keys())) or "(none)"
        raise StepError(
            f"Unknown step type: '{step_type}'",
            context={"step_type": step_type, "available_types": available},
        )
    return factory(config)


def step_from_dict(data: dict[str, Any]) -> "Step":
    """Rebuild a step from the output of ``Step.to_dict()``."""
    config = dict(data)
    step_type = config.pop("type", None)
    if not step_type:
        raise StepError(
            "Step data requires a 'type' field",
            context={"keys": sorted(data.keys())},
        )
    return get_step(step_type, config)


def list_step_types() -> list[str]:
    """Return a sorted list of all registered step types."""
    return sorted(_step_registry.keys())


def clear_registry() -> None:
    """Clear all registered steps.

    Intended for testing only.
    """
    _step_registry.clear()
