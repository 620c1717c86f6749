"""Median imputation step."""

import logging
import warnings
from typing import Any, ClassVar, Optional, Union

import pyarrow as pa
import pyarrow.compute as pc

from prepbake.core.schema import SchemaInfo
from prepbake.core.type_mapping import cast_scalar_like
from prepbake.steps.base import Step
from prepbake.steps.registry import register_step

logger = logging.getLogger(__name__)


def column_median(column: pa.ChunkedArray) -> int | float | None:
    """Median of the non-missing (non-null, non-NaN) values, or None.

    Integer columns are kept exact: the median is the midpoint of the two
    middle values, truncated toward zero.
    """
    values = column.drop_null()
    if pa.types.is_integer(column.type):
        if len(values) == 0:
            return None
        low = pc.quantile(values, q=0.5, interpolation="lower")[0].as_py()
        high = pc.quantile(values, q=0.5, interpolation="higher")[0].as_py()
        total = low + high
        return total // 2 if total >= 0 else -(-total // 2)

    if not pa.types.is_floating(column.type):
        values = pc.cast(values, pa.float64(), safe=False)
    values = values.filter(pc.invert(pc.is_nan(values)))
    if len(values) == 0:
        return None
    return pc.quantile(values, q=0.5, interpolation="linear")[0].as_py()


def fill_missing(column: pa.ChunkedArray, value: Any) -> pa.ChunkedArray:
    """Replace nulls, and NaN in floating columns, with ``value``."""
    if pa.types.is_null(column.type):
        # all-null input without a type (e.g. an empty CSV column)
        column = column.cast(pa.scalar(value).type)
    fill = pa.scalar(value).cast(column.type)
    if pa.types.is_floating(column.type):
        column = pc.if_else(pc.is_nan(column), fill, column)
    return pc.fill_null(column, fill)


class ImputeMedianStep(Step):
    """Substitutes missing values of numeric columns by their training medians.

    Medians of integer columns are truncated to integers so imputed columns
    keep their type.
    """

    step_type: ClassVar[str] = "impute_median"
    label: ClassVar[str] = "Median Imputation"

    medians: Optional[dict[str, Optional[Union[int, float]]]] = None

    def _prep(self, table: pa.Table, info: SchemaInfo) -> "ImputeMedianStep":
        columns = self._resolve_columns(info)
        self._check_numeric(table, columns)

        medians = {}
        for col in columns:
            column = table.column(col)
            medians[col] = cast_scalar_like(column_median(column), column.type)

        logger.debug(
            "Computed medians",
            extra={"context": {"step": self.id, "medians": medians}},
        )
        return self.model_copy(update={"trained": True, "medians": medians})

    def _bake(self, table: pa.Table) -> pa.Table:
        medians = self.medians or {}
        self._require_columns(table, list(medians))
        for col, median in medians.items():
            if median is None:
                continue
            index = table.schema.get_field_index(col)
            filled = fill_missing(table.column(col), median)
            table = table.set_column(index, table.schema.field(index), filled)
        return table

    def tidy(self) -> pa.Table:
        if self.trained:
            terms = list((self.medians or {}).keys())
            model = [
                None if value is None else float(value)
                for value in (self.medians or {}).values()
            ]
        else:
            terms = [term.describe() for term in self.terms]
            model = [None] * len(terms)
        return pa.table(
            {
                "terms": pa.array(terms, type=pa.string()),
                "model": pa.array(model, type=pa.float64()),
                "id": pa.array([self.id] * len(terms), type=pa.string()),
            }
        )

    def _trained_columns(self) -> list[str]:
        return list((self.medians or {}).keys())


def step_impute_median(
    *terms: Any,
    role: str | None = None,
    trained: bool = False,
    medians: dict[str, int | float | None] | None = None,
    skip: bool = False,
    id: str | None = None,
) -> ImputeMedianStep:
    """Specify a median imputation step for the selected columns."""
    return ImputeMedianStep(
        terms=list(terms),
        role=role,
        trained=trained,
        medians=medians,
        skip=skip,
        id=id or "",
    )


def step_medianimpute(*terms: Any, **kwargs: Any) -> ImputeMedianStep:
    """Deprecated name for :func:`step_impute_median`."""
    warnings.warn(
        "step_medianimpute() is deprecated; use step_impute_median() instead",
        DeprecationWarning,
        stacklevel=2,
    )
    return step_impute_median(*terms, **kwargs)


@register_step("impute_median")
def create_impute_median_step(config: dict[str, Any]) -> ImputeMedianStep:
    """Factory function for ImputeMedianStep."""
    return ImputeMedianStep.model_validate(config)


@register_step("medianimpute")
def create_medianimpute_step(config: dict[str, Any]) -> ImputeMedianStep:
    """Factory for the legacy 'medianimpute' step type."""
    warnings.warn(
        "Step type 'medianimpute' is deprecated; use 'impute_median' instead",
        DeprecationWarning,
        stacklevel=2,
    )
    return ImputeMedianStep.model_validate(config)
