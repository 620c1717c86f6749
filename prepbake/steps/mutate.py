"""Mutate step: add or overwrite columns from expressions.

Expressions are DuckDB SQL scalar expressions over the batch's columns
(``"x * 2"``, ``"ln(x)"``, ``"CASE WHEN x > 0 THEN 'pos' END"``) or Python
callables that take the current ``pyarrow.Table`` and return an array or a
scalar. They are evaluated one at a time, in declaration order, each against
the table produced by the previous one.
"""

from typing import Any, Callable, ClassVar, Union

import duckdb
import numpy as np
import pyarrow as pa
from pydantic import Field

from prepbake.core.exceptions import StepError
from prepbake.core.schema import PREDICTOR, SchemaInfo
from prepbake.steps.base import Step
from prepbake.steps.registry import register_step

Expression = Union[str, Callable[[pa.Table], Any]]

_VIEW_NAME = "prepbake_batch"


def expression_text(expression: Expression) -> str:
    """Display text of an expression; also the name of unnamed expressions."""
    if isinstance(expression, str):
        return expression.strip()
    return getattr(expression, "__name__", repr(expression))


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _as_column(result: Any, num_rows: int, name: str) -> pa.ChunkedArray:
    """Coerce an expression result to a column of ``num_rows`` values.

    Scalars and single-value results (e.g. SQL aggregates) are broadcast.
    """
    if isinstance(result, pa.ChunkedArray):
        column = result
    elif isinstance(result, pa.Array):
        column = pa.chunked_array([result])
    elif result is None or isinstance(result, pa.Scalar) or np.isscalar(result):
        scalar = result if isinstance(result, pa.Scalar) else pa.scalar(result)
        column = pa.chunked_array([pa.repeat(scalar, num_rows)])
    else:
        column = pa.chunked_array([pa.array(result)])

    if len(column) == 1 and num_rows != 1:
        column = pa.chunked_array([pa.repeat(column[0], num_rows)])
    if len(column) != num_rows:
        raise StepError(
            f"Expression for '{name}' returned {len(column)} values, expected {num_rows}",
            context={"column": name, "expected": num_rows, "actual": len(column)},
        )
    return column


class MutateStep(Step):
    """Adds or overwrites columns using named expressions."""

    step_type: ClassVar[str] = "mutate"
    label: ClassVar[str] = "Variable mutation"

    role: str | None = PREDICTOR
    inputs: dict[str, Expression] = Field(default_factory=dict)

    def _prep(self, table: pa.Table, info: SchemaInfo) -> "MutateStep":
        return self.model_copy(update={"trained": True})

    def _bake(self, table: pa.Table) -> pa.Table:
        with duckdb.connect() as conn:
            for name, expression in self.inputs.items():
                if isinstance(expression, str):
                    column = self._evaluate_sql(conn, table, name, expression)
                else:
                    column = _as_column(expression(table), table.num_rows, name)
                table = _put_column(table, name, column)
        return table

    def _evaluate_sql(
        self,
        conn: duckdb.DuckDBPyConnection,
        table: pa.Table,
        name: str,
        expression: str,
    ) -> pa.ChunkedArray:
        conn.register(_VIEW_NAME, table)
        try:
            result = conn.execute(
                f"SELECT {expression} AS {quote_identifier(name)} FROM {_VIEW_NAME}"
            )
            return _as_column(result.fetch_arrow_table().column(0), table.num_rows, name)
        finally:
            conn.unregister(_VIEW_NAME)

    def tidy(self) -> pa.Table:
        names = list(self.inputs.keys())
        return pa.table(
            {
                "terms": pa.array(names, type=pa.string()),
                "value": pa.array(
                    [expression_text(expr) for expr in self.inputs.values()],
                    type=pa.string(),
                ),
                "id": pa.array([self.id] * len(names), type=pa.string()),
            }
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible representation.

        Raises:
            StepError: If any expression is a Python callable.
        """
        callables = [name for name, expr in self.inputs.items() if not isinstance(expr, str)]
        if callables:
            raise StepError(
                "Mutate steps with callable expressions cannot be serialized",
                context={"step": self.id, "columns": callables},
            )
        return super().to_dict()

    def __str__(self) -> str:
        text = f"{self.label} for {', '.join(self.inputs)}"
        return f"{text} [trained]" if self.trained else text


def _put_column(table: pa.Table, name: str, column: pa.ChunkedArray) -> pa.Table:
    """Overwrite ``name`` in place if it exists, otherwise append it."""
    index = table.schema.get_field_index(name)
    if index == -1:
        return table.append_column(name, column)
    return table.set_column(index, name, column)


def step_mutate(
    *expressions: Expression,
    role: str | None = PREDICTOR,
    trained: bool = False,
    skip: bool = False,
    id: str | None = None,
    **named: Expression,
) -> MutateStep:
    """Specify a mutate step.

    Unnamed expressions are named after their text:

        step_mutate("x + 1", double="x * 2")
        # inputs: {"x + 1": "x + 1", "double": "x * 2"}
    """
    inputs: dict[str, Expression] = {expression_text(e): e for e in expressions}
    inputs.update(named)
    return MutateStep(
        inputs=inputs,
        role=role,
        trained=trained,
        skip=skip,
        id=id or "",
    )


@register_step("mutate")
def create_mutate_step(config: dict[str, Any]) -> MutateStep:
    """Factory function for MutateStep.

    Accepts ``inputs`` either as a mapping of name -> expression or as a
    list whose entries are expression strings (named after their text) or
    single-entry mappings.
    """
    inputs = config.get("inputs")
    if isinstance(inputs, list):
        normalized: dict[str, Expression] = {}
        for entry in inputs:
            if isinstance(entry, dict):
                normalized.update(entry)
            else:
                normalized[expression_text(entry)] = entry
        config = {**config, "inputs": normalized}
    return MutateStep.model_validate(config)
