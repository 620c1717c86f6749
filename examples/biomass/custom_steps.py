"""Example custom step: clip numeric columns at an upper limit.

Loaded through ``runtime.custom_steps`` in pipeline.yaml; the class is
registered under its ``step_type``.
"""

from typing import ClassVar

import pyarrow as pa
import pyarrow.compute as pc

from prepbake.core.schema import SchemaInfo
from prepbake.steps import Step


class ClipUpperStep(Step):
    step_type: ClassVar[str] = "clip_upper"
    label: ClassVar[str] = "Upper clipping"

    limit: float
    columns: list[str] | None = None

    def _prep(self, table: pa.Table, info: SchemaInfo) -> "ClipUpperStep":
        columns = self._resolve_columns(info)
        self._check_numeric(table, columns)
        return self.model_copy(update={"trained": True, "columns": columns})

    def _bake(self, table: pa.Table) -> pa.Table:
        columns = self.columns or []
        self._require_columns(table, columns)
        for col in columns:
            index = table.schema.get_field_index(col)
            field = table.schema.field(index)
            limit = pa.scalar(self.limit).cast(field.type)
            table = table.set_column(index, field, pc.min_element_wise(table.column(col), limit, skip_nulls=False))
        return table

    def tidy(self) -> pa.Table:
        terms = self.columns if self.trained else [t.describe() for t in self.terms]
        return pa.table(
            {
                "terms": pa.array(terms or [], type=pa.string()),
                "value": pa.array([self.limit] * len(terms or []), type=pa.float64()),
                "id": pa.array([self.id] * len(terms or []), type=pa.string()),
            }
        )

    def _trained_columns(self) -> list[str]:
        return self.columns or []
