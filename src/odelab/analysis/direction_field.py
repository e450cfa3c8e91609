# Copyright (C) 2025 Gil Benezer
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Direction Field Sampler

Samples dy/dx = f(x, y) on an interior grid of a rectangle and emits short
line segments tangent to the solution curves.

Grid
----
With dx = (x_max - x_min) / (grid_count_x + 1), abscissas are
x_min + i*dx for i = 1..grid_count_x (the boundary is excluded); the same
holds for ordinates. Samples are ordered by x first, then y.

Segments
--------
The axes of a plot of this rectangle are scaled independently, so the
segment angle is computed in normalized coordinates:

    angle = atan(slope * x_range / y_range)

and the segment spans dx*arrow_scale*cos(angle) horizontally and
dy*arrow_scale*sin(angle) vertically, centered on the grid point.

Points with a non-finite slope or |slope| > SLOPE_THRESHOLD are omitted:
near-vertical segments carry no visual information and would cross
neighbouring cells.
"""

import math
from typing import Callable, List, Optional

import numpy as np

from odelab.config import (
    DEFAULT_ARROW_SCALE,
    DEFAULT_GRID_COUNT_X,
    DEFAULT_GRID_COUNT_Y,
    SLOPE_THRESHOLD,
)
from odelab.types.core import ArrayLike, FieldBounds, SlopeFunction
from odelab.types.trajectories import DirectionFieldVector


def _grid_axis(lo: float, hi: float, count: int):
    step = (hi - lo) / (count + 1)
    return lo + step * np.arange(1, count + 1), step


def _slopes_on_grid(f: SlopeFunction, X: ArrayLike, Y: ArrayLike) -> ArrayLike:
    """
    Evaluate f on meshgrid arrays.

    Compiled evaluators are called once on the whole grid; plain callables
    point by point, where ArithmeticError and ValueError mark the point as
    undefined (nan).
    """
    evaluate_grid: Optional[Callable] = getattr(f, "evaluate_grid", None)
    if evaluate_grid is not None:
        return np.asarray(evaluate_grid(X, Y), dtype=np.float64)

    slopes = np.empty(X.shape, dtype=np.float64)
    with np.errstate(all="ignore"):
        for index in np.ndindex(X.shape):
            try:
                slopes[index] = float(f(float(X[index]), float(Y[index])))
            except (ArithmeticError, ValueError):
                slopes[index] = np.nan
    return slopes


def sample_direction_field(
    f: SlopeFunction,
    bounds: FieldBounds,
    grid_count_x: int = DEFAULT_GRID_COUNT_X,
    grid_count_y: int = DEFAULT_GRID_COUNT_Y,
    arrow_scale: float = DEFAULT_ARROW_SCALE,
) -> List[DirectionFieldVector]:
    """
    Sample slope segments on the interior grid of bounds.

    Parameters
    ----------
    f : SlopeFunction
        Slope function f(x, y); a CompiledEvaluator is evaluated vectorized
    bounds : FieldBounds
        Sampled rectangle
    grid_count_x, grid_count_y : int
        Number of interior grid points per axis (>= 1)
    arrow_scale : float
        Segment length as a fraction of the grid spacing (> 0)

    Returns
    -------
    List[DirectionFieldVector]
        At most grid_count_x * grid_count_y samples

    Raises
    ------
    ValueError
        If a grid count is not a positive integer or arrow_scale <= 0

    Examples
    --------
    >>> field = sample_direction_field(lambda x, y: 0.0, FieldBounds(0, 4, 0, 4), 3, 3, 0.5)
    >>> len(field), field[0]["x"], field[0]["y"]
    (9, 1.0, 1.0)
    >>> field[0]["segment_start"], field[0]["segment_end"]
    ((0.75, 1.0), (1.25, 1.0))
    """
    for name, count in (("grid_count_x", grid_count_x), ("grid_count_y", grid_count_y)):
        if isinstance(count, bool) or not isinstance(count, (int, np.integer)) or count < 1:
            raise ValueError(f"{name} must be a positive integer, got {count!r}")
    if not (arrow_scale > 0 and math.isfinite(arrow_scale)):
        raise ValueError(f"arrow_scale must be positive and finite, got {arrow_scale!r}")

    xs, dx = _grid_axis(bounds.x_min, bounds.x_max, int(grid_count_x))
    ys, dy = _grid_axis(bounds.y_min, bounds.y_max, int(grid_count_y))

    # indexing="ij": row i is one abscissa, samples come out x-major
    X, Y = np.meshgrid(xs, ys, indexing="ij")
    slopes = _slopes_on_grid(f, X, Y)

    aspect = bounds.x_range / bounds.y_range
    half_x = dx * arrow_scale / 2
    half_y = dy * arrow_scale / 2

    samples: List[DirectionFieldVector] = []
    for i in range(X.shape[0]):
        for j in range(X.shape[1]):
            slope = slopes[i, j]
            if not math.isfinite(slope) or abs(slope) > SLOPE_THRESHOLD:
                continue

            angle = math.atan(slope * aspect)
            offset_x = half_x * math.cos(angle)
            offset_y = half_y * math.sin(angle)
            x, y = float(X[i, j]), float(Y[i, j])

            samples.append(
                DirectionFieldVector(
                    x=x,
                    y=y,
                    slope=float(slope),
                    segment_start=(x - offset_x, y - offset_y),
                    segment_end=(x + offset_x, y + offset_y),
                )
            )

    return samples


def field_segments(samples: List[DirectionFieldVector]) -> ArrayLike:
    """
    Stack sample segments into an array for line-collection renderers.

    Parameters
    ----------
    samples : List[DirectionFieldVector]
        Output of sample_direction_field()

    Returns
    -------
    ArrayLike
        Shape (n, 2, 2): segment, endpoint (start, end), coordinate (x, y)
    """
    if not samples:
        return np.empty((0, 2, 2))
    return np.array(
        [[s["segment_start"], s["segment_end"]] for s in samples], dtype=np.float64
    )


__all__ = [
    "sample_direction_field",
    "field_segments",
]
