"""Base class shared by all steps.

A step is an immutable specification. ``prep()`` resolves its selectors
against training data, learns whatever the step needs and returns a new,
trained copy; ``bake()`` applies a trained step to any data using only
what was learned.
"""

import logging
import random
import string
from typing import Any, ClassVar, Optional

import pyarrow as pa
from pydantic import BaseModel, ConfigDict, Field, model_validator

from prepbake.core.batch import ArrowBatch, ensure_batch
from prepbake.core.exceptions import (
    ColumnTypeError,
    MissingColumnError,
    StepNotTrainedError,
)
from prepbake.core.schema import SchemaInfo
from prepbake.core.selectors import SelectorInput, describe_selectors, resolve_selectors
from prepbake.core.type_mapping import is_numeric_type

logger = logging.getLogger(__name__)

TUNABLE_SCHEMA = pa.schema(
    [
        ("name", pa.string()),
        (
            "call_info",
            pa.struct(
                [
                    ("pkg", pa.string()),
                    ("fun", pa.string()),
                    ("range", pa.list_(pa.int64())),
                ]
            ),
        ),
        ("source", pa.string()),
        ("component", pa.string()),
        ("component_id", pa.string()),
    ]
)


def rand_id(prefix: str) -> str:
    """Return ``<prefix>_`` followed by five random letters or digits."""
    suffix = "".join(random.choices(string.ascii_letters + string.digits, k=5))
    return f"{prefix}_{suffix}"


class Step(BaseModel):
    """Common fields and lifecycle for steps.

    Subclasses set ``step_type`` and ``label`` and implement ``_prep``,
    ``_bake`` and ``tidy``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    step_type: ClassVar[str] = "step"
    label: ClassVar[str] = "Step"

    terms: list[SelectorInput] = Field(default_factory=list)
    role: Optional[str] = None
    trained: bool = False
    skip: bool = False
    id: str = ""

    @model_validator(mode="before")
    @classmethod
    def _default_id(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("id"):
            data = {**data, "id": rand_id(cls.step_type)}
        return data

    def prep(
        self,
        training: ArrowBatch | pa.Table,
        info: SchemaInfo | None = None,
    ) -> "Step":
        """Train the step and return the trained copy.

        Args:
            training: Training data.
            info: Schema info for ``training``; inferred when omitted.

        Raises:
            ColumnTypeError: If a selected column has the wrong type.
            SelectorError: If a selector names a column that doesn't exist.
        """
        table = ensure_batch(training).to_arrow()
        if info is None:
            info = SchemaInfo.from_table(table)
        trained = self._prep(table, info)
        logger.debug(
            "Prepped step",
            extra={"context": {"step": self.id, "type": self.step_type}},
        )
        return trained

    def bake(self, new_data: ArrowBatch | pa.Table) -> ArrowBatch:
        """Apply the trained step to new data.

        Raises:
            StepNotTrainedError: If the step has not been prepped.
            MissingColumnError: If a column the step was trained on is absent.
        """
        if not self.trained:
            raise StepNotTrainedError(
                f"Step '{self.id}' must be prepped before it can be baked",
                context={"step": self.id, "type": self.step_type},
            )
        batch = ensure_batch(new_data)
        return batch.with_table(self._bake(batch.to_arrow()))

    def _prep(self, table: pa.Table, info: SchemaInfo) -> "Step":
        raise NotImplementedError

    def _bake(self, table: pa.Table) -> pa.Table:
        raise NotImplementedError

    def tidy(self) -> pa.Table:
        raise NotImplementedError

    def tunable(self) -> pa.Table:
        """Parameters of this step that can be tuned (none by default)."""
        return TUNABLE_SCHEMA.empty_table()

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible representation, including fitted state."""
        return {"type": self.step_type, **self.model_dump(mode="json")}

    def _resolve_columns(self, info: SchemaInfo) -> list[str]:
        return resolve_selectors(self.terms, info)

    def _check_numeric(self, table: pa.Table, columns: list[str]) -> None:
        bad = {
            col: str(table.schema.field(col).type)
            for col in columns
            if not is_numeric_type(table.schema.field(col).type)
        }
        if bad:
            raise ColumnTypeError(
                f"All columns selected for step '{self.id}' should be numeric",
                context={"step": self.id, "columns": bad},
            )

    def _require_columns(self, table: pa.Table, columns: list[str]) -> None:
        missing = [col for col in columns if col not in table.column_names]
        if missing:
            raise MissingColumnError(
                f"Columns not found in data: {missing}",
                context={
                    "step": self.id,
                    "missing_columns": missing,
                    "available_columns": table.column_names,
                },
            )

    def _trained_columns(self) -> list[str]:
        return []

    def __str__(self) -> str:
        if self.trained:
            names = self._trained_columns()
            listed = ", ".join(names) if names else "<none>"
            return f"{self.label} for {listed} [trained]"
        return f"{self.label} for {', '.join(describe_selectors(self.terms))}"
