"""Arrow-backed batch wrapper passed between steps."""

from typing import Any

import pyarrow as pa


class ArrowBatch:
    """Tabular data flowing through steps, backed by a PyArrow Table.

    Steps never modify a batch in place: every operation returns a new
    ArrowBatch wrapping a new table, with a copy of the metadata.
    """

    def __init__(self, table: pa.Table, metadata: dict[str, Any] | None = None):
        """Initialize from Arrow table.

        Args:
            table: PyArrow Table containing the data
            metadata: Optional metadata dictionary
        """
        self._table = table
        self._metadata = metadata or {}

    @classmethod
    def from_rows(
        cls,
        columns: list[str],
        rows: list[list[Any]],
        metadata: dict[str, Any] | None = None,
    ) -> "ArrowBatch":
        """Create ArrowBatch from column names and row values.

        Raises:
            ValueError: If a row length doesn't match the column count
        """
        for i, row in enumerate(rows):
            if len(row) != len(columns):
                raise ValueError(
                    f"Row {i} length {len(row)} does not match column count {len(columns)}"
                )

        if rows:
            data = {name: [row[i] for row in rows] for i, name in enumerate(columns)}
            table = pa.table(data)
        else:
            table = pa.Table.from_arrays(
                [pa.array([], type=pa.null()) for _ in columns], names=columns
            )
        return cls(table, metadata)

    @classmethod
    def from_pydict(
        cls,
        mapping: dict[str, Any],
        metadata: dict[str, Any] | None = None,
    ) -> "ArrowBatch":
        """Create ArrowBatch from a column name -> values mapping."""
        return cls(pa.table(mapping), metadata)

    @property
    def columns(self) -> list[str]:
        """Return column names from Arrow schema."""
        return self._table.column_names

    @property
    def rows(self) -> list[list[Any]]:
        """Return rows as list of lists in column order."""
        column_names = self.columns
        return [[row[col] for col in column_names] for row in self._table.to_pylist()]

    @property
    def row_count(self) -> int:
        return self._table.num_rows

    @property
    def metadata(self) -> dict[str, Any]:
        return self._metadata

    def column_values(self, name: str) -> list[Any]:
        """Return the values of one column as a Python list."""
        return self._table.column(name).to_pylist()

    def to_arrow(self) -> pa.Table:
        """Return underlying Arrow table."""
        return self._table

    def with_table(self, table: pa.Table) -> "ArrowBatch":
        """Return a new batch with the given table and a copy of this metadata."""
        return ArrowBatch(table, metadata=self._metadata.copy())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict representation (for debugging/CLI output).

        Returns:
            Dictionary with keys: columns, rows, metadata
        """
        return {
            "columns": self.columns,
            "rows": self.rows,
            "metadata": self.metadata,
        }


def ensure_batch(data: "ArrowBatch | pa.Table") -> ArrowBatch:
    """Wrap a bare Arrow table in an ArrowBatch; pass batches through."""
    if isinstance(data, ArrowBatch):
        return data
    if isinstance(data, pa.Table):
        return ArrowBatch(data)
    raise TypeError(
        f"Expected ArrowBatch or pyarrow.Table, got {type(data).__name__}"
    )
