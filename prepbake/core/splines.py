"""Natural cubic spline basis.

Training computes only the parameters of the basis (interior and boundary
knots, intercept); the basis itself is evaluated later from those
parameters alone. B-spline evaluation is delegated to
``scipy.interpolate.BSpline``.

The basis matches the classic ``ns()`` construction: cubic B-splines on
the boundary knots (each repeated four times) plus the interior knots,
projected onto the space where the second derivative vanishes at both
boundary knots. Beyond the boundary knots the basis continues linearly.
"""

from typing import Sequence

import numpy as np
from pydantic import BaseModel, ConfigDict, Field
from scipy.interpolate import BSpline

# Natural splines are linear beyond the boundary knots; the degree used to
# count interior knots from the degrees of freedom is therefore 1.
NS_DEGREE = 1
_ORDER = 4


class BasisModel(BaseModel):
    """Fitted parameters of a natural spline basis for one column."""

    model_config = ConfigDict(frozen=True)

    var: str = Field(description="Source column name")
    knots: list[float] = Field(default_factory=list, description="Interior knots")
    boundary_knots: tuple[float, float]
    intercept: bool = False
    degree: int = NS_DEGREE

    @property
    def n_columns(self) -> int:
        return self.degree + len(self.knots) + int(self.intercept)


def ns_statistics(
    values: np.ndarray,
    var: str,
    deg_free: int | None = 2,
    intercept: bool = False,
    boundary_knots: Sequence[float] | None = None,
    knots: Sequence[float] | None = None,
) -> BasisModel:
    """Compute basis parameters from training values without evaluating it.

    Interior knots sit at evenly spaced quantiles of the non-missing values
    inside the boundary knots. When ``deg_free`` leaves fewer than one
    interior knot, no interior knots are used (no warning, no fallback).
    Explicit ``knots`` are used as given.

    Raises:
        ValueError: If boundary knots are needed but there are no observed
            values, or if the two boundary knots are equal.
    """
    x = np.asarray(values, dtype=float)
    observed = x[~np.isnan(x)]

    if boundary_knots is not None:
        low, high = sorted(float(k) for k in boundary_knots)
    else:
        if observed.size == 0:
            raise ValueError(
                f"Cannot compute boundary knots for '{var}': no non-missing values"
            )
        low, high = float(observed.min()), float(observed.max())

    if low == high:
        raise ValueError(
            f"Cannot build a spline basis for '{var}': both boundary knots are {low}"
        )

    if knots is not None:
        interior = sorted(float(k) for k in knots)
    elif deg_free is not None and deg_free - NS_DEGREE - int(intercept) >= 1:
        num_knots = deg_free - NS_DEGREE - int(intercept)
        inside = observed[(observed >= low) & (observed <= high)]
        probs = np.arange(1, num_knots + 1) / (num_knots + 1)
        interior = [float(k) for k in np.quantile(inside, probs, method="linear")]
    else:
        interior = []

    return BasisModel(
        var=var,
        knots=interior,
        boundary_knots=(low, high),
        intercept=intercept,
    )


def _spline_design(all_knots: np.ndarray, x: np.ndarray, derivative: int = 0) -> np.ndarray:
    """Evaluate every cubic B-spline on ``all_knots`` (or a derivative) at x."""
    n_basis = len(all_knots) - _ORDER
    splines = BSpline(all_knots, np.eye(n_basis), _ORDER - 1, extrapolate=False)
    return np.atleast_2d(splines(x, nu=derivative))


def ns_basis(x: np.ndarray, model: BasisModel) -> np.ndarray:
    """Evaluate the natural spline basis of ``model`` at x.

    Returns an array of shape (len(x), model.n_columns); missing inputs give
    rows of NaN.
    """
    x = np.asarray(x, dtype=float)
    low, high = model.boundary_knots
    all_knots = np.sort(
        np.concatenate([[low] * _ORDER, model.knots, [high] * _ORDER])
    )
    n_basis = len(all_knots) - _ORDER

    missing = np.isnan(x)
    below = ~missing & (x < low)
    above = ~missing & (x > high)
    inside = ~missing & ~below & ~above

    basis = np.full((len(x), n_basis), np.nan)
    if inside.any():
        basis[inside] = _spline_design(all_knots, x[inside])
    for mask, pivot in ((below, low), (above, high)):
        if mask.any():
            at_pivot = np.array([pivot, pivot])
            value = _spline_design(all_knots, at_pivot[:1])[0]
            slope = _spline_design(all_knots, at_pivot[1:], derivative=1)[0]
            offset = (x[mask] - pivot)[:, None]
            basis[mask] = value[None, :] + offset * slope[None, :]

    constraints = _spline_design(all_knots, np.array([low, high]), derivative=2)
    if not model.intercept:
        constraints = constraints[:, 1:]
        basis = basis[:, 1:]

    q, _ = np.linalg.qr(constraints.T, mode="complete")
    return (basis @ q)[:, 2:]


def ns_predict(model: BasisModel, x: np.ndarray) -> np.ndarray:
    """Evaluate the basis once per distinct value and broadcast to rows."""
    x = np.asarray(x, dtype=float)
    if x.size == 0:
        return np.empty((0, model.n_columns))
    unique_values, inverse = np.unique(x, return_inverse=True)
    return ns_basis(unique_values, model)[inverse.reshape(-1)]


def basis_column_names(var: str, n_columns: int) -> list[str]:
    """Names of basis columns: ``<var>_ns_<k>``, zero-padded to the count."""
    width = len(str(n_columns))
    return [f"{var}_ns_{str(k).zfill(width)}" for k in range(1, n_columns + 1)]
