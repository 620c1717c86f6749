"""Shared type helpers for Arrow columns.

Centralizes how Arrow types map onto the coarse column types used by
schema info and selectors, and how fitted scalars are cast back onto
column types.
"""

import math
from typing import Any

import pyarrow as pa

NUMERIC = "numeric"
NOMINAL = "nominal"
LOGICAL = "logical"
DATE = "date"
OTHER = "other"

COLUMN_TYPES = (NUMERIC, NOMINAL, LOGICAL, DATE, OTHER)


def is_numeric_type(arrow_type: pa.DataType) -> bool:
    """Integers, floats and decimals count as numeric; booleans do not."""
    return (
        pa.types.is_integer(arrow_type)
        or pa.types.is_floating(arrow_type)
        or pa.types.is_decimal(arrow_type)
    )


def column_type_of(arrow_type: pa.DataType) -> str:
    """Map an Arrow type to its coarse column type name."""
    if pa.types.is_dictionary(arrow_type):
        return NOMINAL
    if is_numeric_type(arrow_type):
        return NUMERIC
    if pa.types.is_boolean(arrow_type):
        return LOGICAL
    if pa.types.is_string(arrow_type) or pa.types.is_large_string(arrow_type):
        return NOMINAL
    if pa.types.is_temporal(arrow_type):
        return DATE
    return OTHER


def cast_scalar_like(value: int | float | None, arrow_type: pa.DataType) -> int | float | None:
    """Cast a computed statistic to match a column's element type.

    Integer columns truncate toward zero so they keep integer values.
    """
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    if pa.types.is_integer(arrow_type):
        return int(math.trunc(value))
    return float(value)
