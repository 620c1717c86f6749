"""Exception hierarchy for the prepbake package."""


class PrepBakeError(Exception):
    """Base exception for all prepbake errors."""

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class StepError(PrepBakeError):
    """Raised when a step is misused or misconfigured."""

    pass


class StepNotTrainedError(StepError):
    """Raised when bake() is called on a step that has not been prepped."""

    pass


class MissingColumnError(StepError):
    """Raised when data passed to bake() lacks a column the step was trained on."""

    pass


class ColumnTypeError(PrepBakeError):
    """Raised at prep time when a selected column has an unsupported type."""

    pass


class SelectorError(PrepBakeError):
    """Raised when selectors cannot be resolved against a schema."""

    pass


class RecipeError(PrepBakeError):
    """Raised when pipeline definition parsing or validation fails."""

    pass


class StateError(PrepBakeError):
    """Raised when trained state cannot be saved or loaded."""

    pass
