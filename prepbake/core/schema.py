"""Schema info describing the columns a step is prepped against.

The info table records, for every column of a batch, its coarse type,
its analysis role and whether it came from the original data or was
derived by an earlier step. Selectors resolve against it.
"""

from typing import Iterable, Literal, Optional

import pyarrow as pa
from pydantic import BaseModel, ConfigDict, Field

from prepbake.core.type_mapping import COLUMN_TYPES, column_type_of

PREDICTOR = "predictor"
OUTCOME = "outcome"

ColumnSource = Literal["original", "derived"]


class ColumnInfo(BaseModel):
    """Schema entry for a single column."""

    model_config = ConfigDict(frozen=True)

    variable: str = Field(description="Column name")
    type: str = Field(description=f"Coarse column type, one of {COLUMN_TYPES}")
    role: Optional[str] = Field(default=PREDICTOR, description="Analysis role")
    source: ColumnSource = Field(default="original")


class SchemaInfo(BaseModel):
    """Ordered column metadata for one batch."""

    model_config = ConfigDict(frozen=True)

    columns: list[ColumnInfo] = Field(default_factory=list)

    @classmethod
    def from_table(
        cls,
        table: pa.Table,
        outcomes: Iterable[str] = (),
        roles: dict[str, str | None] | None = None,
    ) -> "SchemaInfo":
        """Build info from an Arrow table.

        Outcome columns get the outcome role, explicit ``roles`` win over
        both defaults, every other column is a predictor.
        """
        outcomes = set(outcomes)
        roles = roles or {}
        columns = []
        for field in table.schema:
            if field.name in roles:
                role = roles[field.name]
            elif field.name in outcomes:
                role = OUTCOME
            else:
                role = PREDICTOR
            columns.append(
                ColumnInfo(
                    variable=field.name,
                    type=column_type_of(field.type),
                    role=role,
                )
            )
        return cls(columns=columns)

    def updated(self, table: pa.Table, new_role: str | None) -> "SchemaInfo":
        """Info for the table a step produced from the table this info describes.

        Surviving columns keep their role and source (their type is re-read),
        new columns are marked derived with ``new_role``, dropped columns vanish.
        """
        known = {col.variable: col for col in self.columns}
        columns = []
        for field in table.schema:
            col_type = column_type_of(field.type)
            previous = known.get(field.name)
            if previous is not None:
                columns.append(previous.model_copy(update={"type": col_type}))
            else:
                columns.append(
                    ColumnInfo(
                        variable=field.name,
                        type=col_type,
                        role=new_role,
                        source="derived",
                    )
                )
        return SchemaInfo(columns=columns)

    @property
    def variables(self) -> list[str]:
        return [col.variable for col in self.columns]

    def get(self, variable: str) -> ColumnInfo | None:
        for col in self.columns:
            if col.variable == variable:
                return col
        return None

    def to_arrow(self) -> pa.Table:
        """Return the info as a table with variable/type/role/source columns."""
        return pa.table(
            {
                "variable": [c.variable for c in self.columns],
                "type": [c.type for c in self.columns],
                "role": pa.array([c.role for c in self.columns], type=pa.string()),
                "source": [c.source for c in self.columns],
            }
        )
