"""Natural spline basis expansion step."""

import logging
from typing import Any, ClassVar, Optional

import numpy as np
import pyarrow as pa
import pyarrow.compute as pc
from pydantic import BaseModel, ConfigDict, Field

from prepbake.core.exceptions import StepError
from prepbake.core.schema import PREDICTOR, SchemaInfo
from prepbake.core.splines import (
    BasisModel,
    basis_column_names,
    ns_predict,
    ns_statistics,
)
from prepbake.steps.base import TUNABLE_SCHEMA, Step
from prepbake.steps.registry import register_step

logger = logging.getLogger(__name__)


class SplineOptions(BaseModel):
    """Extra arguments for the spline basis (everything except data and df)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    intercept: bool = False
    boundary_knots: Optional[tuple[float, float]] = None
    knots: Optional[list[float]] = Field(
        default=None, description="Explicit interior knots; overrides deg_free"
    )


def _as_float_array(column: pa.ChunkedArray) -> np.ndarray:
    return pc.cast(column, pa.float64(), safe=False).to_numpy()


class NaturalSplineStep(Step):
    """Replaces numeric columns with natural spline basis columns.

    Each selected column ``x`` is removed and replaced by ``x_ns_1`` ...
    ``x_ns_k`` appended after the remaining columns.
    """

    step_type: ClassVar[str] = "ns"
    label: ClassVar[str] = "Natural Splines"

    role: Optional[str] = PREDICTOR
    deg_free: int = Field(default=2, ge=1)
    options: SplineOptions = Field(default_factory=SplineOptions)
    objects: Optional[dict[str, BasisModel]] = None

    def _prep(self, table: pa.Table, info: SchemaInfo) -> "NaturalSplineStep":
        columns = self._resolve_columns(info)
        self._check_numeric(table, columns)

        objects = {}
        for col in columns:
            try:
                objects[col] = ns_statistics(
                    _as_float_array(table.column(col)),
                    var=col,
                    deg_free=self.deg_free,
                    intercept=self.options.intercept,
                    boundary_knots=self.options.boundary_knots,
                    knots=self.options.knots,
                )
            except ValueError as e:
                raise StepError(
                    str(e), context={"step": self.id, "column": col}
                ) from e
        logger.debug(
            "Computed spline knots",
            extra={
                "context": {
                    "step": self.id,
                    "knots": {col: obj.knots for col, obj in objects.items()},
                }
            },
        )
        return self.model_copy(update={"trained": True, "objects": objects})

    def _bake(self, table: pa.Table) -> pa.Table:
        objects = self.objects or {}
        self._require_columns(table, list(objects))

        new_columns: list[tuple[str, pa.Array]] = []
        for col, model in objects.items():
            basis = ns_predict(model, _as_float_array(table.column(col)))
            for j, name in enumerate(basis_column_names(model.var, model.n_columns)):
                values = np.ascontiguousarray(basis[:, j])
                new_columns.append((name, pa.array(values, from_pandas=True)))
            table = table.remove_column(table.schema.get_field_index(col))

        for name, values in new_columns:
            table = table.append_column(name, values)
        return table

    def tidy(self) -> pa.Table:
        if self.trained:
            terms = list((self.objects or {}).keys())
        else:
            terms = [term.describe() for term in self.terms]
        return pa.table(
            {
                "terms": pa.array(terms, type=pa.string()),
                "id": pa.array([self.id] * len(terms), type=pa.string()),
            }
        )

    def tunable(self) -> pa.Table:
        return pa.Table.from_pylist(
            [
                {
                    "name": "deg_free",
                    "call_info": {"pkg": "dials", "fun": "spline_degree", "range": [1, 15]},
                    "source": "recipe",
                    "component": "step_ns",
                    "component_id": self.id,
                }
            ],
            schema=TUNABLE_SCHEMA,
        )

    def _trained_columns(self) -> list[str]:
        return list((self.objects or {}).keys())


def step_ns(
    *terms: Any,
    role: str | None = PREDICTOR,
    trained: bool = False,
    objects: dict[str, BasisModel] | None = None,
    deg_free: int = 2,
    options: SplineOptions | dict[str, Any] | None = None,
    skip: bool = False,
    id: str | None = None,
) -> NaturalSplineStep:
    """Specify a natural spline basis expansion for the selected columns."""
    return NaturalSplineStep(
        terms=list(terms),
        role=role,
        trained=trained,
        objects=objects,
        deg_free=deg_free,
        options=options or SplineOptions(),
        skip=skip,
        id=id or "",
    )


@register_step("ns")
def create_ns_step(config: dict[str, Any]) -> NaturalSplineStep:
    """Factory function for NaturalSplineStep."""
    return NaturalSplineStep.model_validate(config)
