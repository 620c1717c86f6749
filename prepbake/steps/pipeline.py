"""Pipeline: an ordered sequence of steps prepped and baked together."""

import logging
from typing import TYPE_CHECKING, Any, Iterable, Sequence

import pyarrow as pa

from prepbake.core.batch import ArrowBatch, ensure_batch
from prepbake.core.exceptions import StepError, StepNotTrainedError
from prepbake.core.schema import SchemaInfo
from prepbake.steps.base import Step
from prepbake.steps.loader import load_custom_steps
from prepbake.steps.registry import get_step, list_step_types, step_from_dict

if TYPE_CHECKING:
    from prepbake.models.pipeline_config import PipelineConfig

logger = logging.getLogger(__name__)


class Pipeline:
    """Executes steps sequentially.

    ``prep()`` trains each step on the output of the previous trained step
    and returns a new trained pipeline; ``bake()`` applies the trained steps
    to new data, leaving out steps marked ``skip``.
    """

    def __init__(
        self,
        steps: Sequence[Step] = (),
        outcomes: Iterable[str] = (),
        roles: dict[str, str | None] | None = None,
        name: str | None = None,
        trained: bool = False,
        custom_steps: Iterable[str] = (),
    ):
        """Initialize pipeline.

        Args:
            steps: Steps in the order they are applied.
            outcomes: Columns given the outcome role.
            roles: Explicit roles for columns, overriding the defaults.
            name: Pipeline name, used for logging and persistence.
            trained: Whether every step has been prepped together.
            custom_steps: Modules defining custom step types used by the
                steps; reloaded when a saved pipeline is restored.
        """
        self._steps = list(steps)
        self.outcomes = list(outcomes)
        self.roles = dict(roles or {})
        self.name = name
        self.trained = trained
        self.custom_steps = list(custom_steps)

    @classmethod
    def from_config(cls, config: "PipelineConfig") -> "Pipeline":
        """Build an untrained pipeline from a PipelineConfig."""
        steps = []
        for step_config in config.steps:
            step_dict = step_config.model_dump()
            step_type = step_dict.pop("type")
            steps.append(get_step(step_type, step_dict))
        return cls(
            steps,
            outcomes=config.outcomes,
            roles=config.roles,
            name=config.name,
            custom_steps=config.runtime.custom_steps,
        )

    @property
    def steps(self) -> list[Step]:
        return list(self._steps)

    def add_step(self, step: Step) -> "Pipeline":
        """Return a new untrained pipeline with ``step`` appended."""
        return Pipeline(
            [*self._steps, step],
            outcomes=self.outcomes,
            roles=self.roles,
            name=self.name,
            custom_steps=self.custom_steps,
        )

    def prep(self, training: ArrowBatch | pa.Table) -> "Pipeline":
        """Train every step in order and return the trained pipeline.

        Steps marked ``skip`` are still applied to the training data so
        that later steps see the columns they produce.
        """
        current = ensure_batch(training)
        info = SchemaInfo.from_table(current.to_arrow(), self.outcomes, self.roles)
        logger.info(
            "Prepping pipeline",
            extra={"context": {"pipeline": self.name, "steps": len(self._steps)}},
        )

        trained_steps = []
        for number, step in enumerate(self._steps, start=1):
            try:
                trained = step.prep(current, info)
                current = trained.bake(current)
            except Exception:
                logger.error(
                    "Step failed during prep",
                    extra={"context": {"number": number, "step": step.id}},
                )
                raise
            info = info.updated(current.to_arrow(), trained.role)
            trained_steps.append(trained)

        return Pipeline(
            trained_steps,
            outcomes=self.outcomes,
            roles=self.roles,
            name=self.name,
            trained=True,
            custom_steps=self.custom_steps,
        )

    def bake(self, new_data: ArrowBatch | pa.Table) -> ArrowBatch:
        """Apply all trained steps to new data.

        Raises:
            StepNotTrainedError: If the pipeline has not been prepped.
        """
        if not self.trained:
            raise StepNotTrainedError(
                "Pipeline must be prepped before it can be baked",
                context={"pipeline": self.name},
            )

        current = ensure_batch(new_data)
        logger.info(
            "Baking pipeline",
            extra={"context": {"pipeline": self.name, "rows": current.row_count}},
        )
        for number, step in enumerate(self._steps, start=1):
            if step.skip:
                continue
            try:
                current = step.bake(current)
            except Exception:
                logger.error(
                    "Step failed during bake",
                    extra={"context": {"number": number, "step": step.id}},
                )
                raise
        return current

    def tidy(self, number: int | None = None) -> pa.Table:
        """Summarize the steps, or the step at 1-based position ``number``.

        Raises:
            StepError: If ``number`` is out of range.
        """
        if number is not None:
            if not 1 <= number <= len(self._steps):
                raise StepError(
                    f"Step number {number} is out of range",
                    context={"number": number, "steps": len(self._steps)},
                )
            return self._steps[number - 1].tidy()

        return pa.table(
            {
                "number": pa.array(range(1, len(self._steps) + 1), type=pa.int64()),
                "operation": pa.array(["step"] * len(self._steps), type=pa.string()),
                "type": pa.array([s.step_type for s in self._steps], type=pa.string()),
                "trained": pa.array([s.trained for s in self._steps], type=pa.bool_()),
                "skip": pa.array([s.skip for s in self._steps], type=pa.bool_()),
                "id": pa.array([s.id for s in self._steps], type=pa.string()),
            }
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible representation of the pipeline and its steps."""
        return {
            "name": self.name,
            "outcomes": self.outcomes,
            "roles": self.roles,
            "trained": self.trained,
            "custom_steps": self.custom_steps,
            "steps": [step.to_dict() for step in self._steps],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Pipeline":
        """Rebuild a pipeline saved with ``to_dict()``.

        Custom step modules are imported only when a step type is not
        registered yet.
        """
        steps = data.get("steps", [])
        custom_steps = data.get("custom_steps") or []
        if any(step.get("type") not in list_step_types() for step in steps):
            load_custom_steps(custom_steps)
        return cls(
            [step_from_dict(step) for step in steps],
            outcomes=data.get("outcomes", []),
            roles=data.get("roles") or {},
            name=data.get("name"),
            trained=bool(data.get("trained", False)),
            custom_steps=custom_steps,
        )

    def __len__(self) -> int:
        return len(self._steps)

    def __str__(self) -> str:
        header = f"Pipeline {self.name}" if self.name else "Pipeline"
        lines = [f"{header} ({len(self._steps)} steps)"]
        lines.extend(f"  {n}. {step}" for n, step in enumerate(self._steps, start=1))
        return "\n".join(lines)
