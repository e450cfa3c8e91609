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
Core Types

Basic building blocks shared by every component:
- Scalar and array aliases
- Slope function signature f(x, y) -> dy/dx
- InitialValueProblem (validated, immutable)
- FieldBounds (rectangle for direction field sampling)

Mathematical Context
-------------------
A first-order initial-value problem is

    dy/dx = f(x, y),    y(x0) = y0,    x in [x0, xf]

solved numerically with a fixed step h > 0.

Usage
-----
>>> from odelab.types.core import InitialValueProblem
>>> problem = InitialValueProblem(f=lambda x, y: y, x0=0.0, y0=1.0, xf=1.0, h=0.1)
>>> problem.num_steps
10
"""

import math
from dataclasses import dataclass
from typing import Callable, Union

import numpy as np

from odelab.config import MAX_STEPS, STEP_SNAP_FRACTION

# ============================================================================
# Basic Aliases
# ============================================================================

ScalarLike = Union[float, int, np.number]
"""
Scalar value: Python float/int or NumPy scalar.

Examples
--------
>>> h: ScalarLike = 0.01
"""

ArrayLike = np.ndarray
"""NumPy array (abscissas, ordinates, grids)."""

SlopeFunction = Callable[[float, float], float]
"""
Right-hand side of dy/dx = f(x, y).

Called with (independent, dependent) and returns the slope. Compiled
evaluators satisfy this signature; so does any plain Python callable.

Examples
--------
>>> f: SlopeFunction = lambda x, y: -0.2 * (y - 20)
>>> f(0.0, 100.0)
-16.0
"""

ExactSolution = Callable[[float], float]
"""Closed-form solution y(x) used to build reference trajectories."""


# ============================================================================
# Initial-Value Problem
# ============================================================================


def _require_finite(name: str, value: ScalarLike) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value}")
    return value


@dataclass(frozen=True)
class InitialValueProblem:
    """
    First-order initial-value problem with a fixed step size.

    Attributes
    ----------
    f : SlopeFunction
        Slope function f(x, y)
    x0 : float
        Initial abscissa
    y0 : float
        Initial ordinate y(x0)
    xf : float
        Final abscissa, must satisfy xf > x0
    h : float
        Step size, must satisfy h > 0

    Raises
    ------
    ValueError
        If f is not callable, a bound is not finite, xf <= x0, h <= 0,
        or the problem would need more than MAX_STEPS steps

    Examples
    --------
    >>> problem = InitialValueProblem(lambda x, y: y, 0.0, 1.0, 1.5, 0.5)
    >>> problem.num_steps
    3
    >>> InitialValueProblem(lambda x, y: y, 1.0, 1.0, 0.0, 0.1)
    Traceback (most recent call last):
        ...
    ValueError: xf must be greater than x0 (x0=1.0, xf=0.0)
    """

    f: SlopeFunction
    x0: float
    y0: float
    xf: float
    h: float

    def __post_init__(self):
        if not callable(self.f):
            raise ValueError(f"f must be callable, got {type(self.f).__name__}")

        # Frozen dataclass: normalize numeric fields through object.__setattr__
        for name in ("x0", "y0", "xf", "h"):
            object.__setattr__(self, name, _require_finite(name, getattr(self, name)))

        if self.xf <= self.x0:
            raise ValueError(f"xf must be greater than x0 (x0={self.x0}, xf={self.xf})")
        if self.h <= 0:
            raise ValueError(f"Step size h must be positive, got {self.h}")

        # The ratio may overflow for finite bounds; check it before num_steps
        ratio = (self.xf - self.x0) / self.h
        if not math.isfinite(ratio) or ratio > MAX_STEPS + 1:
            raise ValueError(
                f"Problem requires about {ratio:.3g} steps, exceeding the limit of "
                f"{MAX_STEPS}. Increase h or shorten [x0, xf]."
            )
        if self.num_steps > MAX_STEPS:
            raise ValueError(
                f"Problem requires {self.num_steps} steps, exceeding the limit of "
                f"{MAX_STEPS}. Increase h or shorten [x0, xf]."
            )

    @property
    def num_steps(self) -> int:
        """
        Number of steps a fixed-step integrator takes on this problem.

        Matches the integrator loop: full steps of size h followed by one
        final step clipped to land on xf.
        """
        n = max(1, int(np.ceil((self.xf - self.x0) / self.h)))
        if n > 1 and self.x0 + (n - 1) * self.h >= self.xf - STEP_SNAP_FRACTION * self.h:
            n -= 1
        return n

    @property
    def span(self) -> float:
        """Length of the integration interval xf - x0."""
        return self.xf - self.x0


# ============================================================================
# Direction Field Bounds
# ============================================================================


@dataclass(frozen=True)
class FieldBounds:
    """
    Rectangle [x_min, x_max] x [y_min, y_max] sampled by the direction field.

    Raises
    ------
    ValueError
        If a bound is not finite or an axis has non-positive extent

    Examples
    --------
    >>> bounds = FieldBounds(0.0, 5.0, -2.0, 2.0)
    >>> bounds.x_range, bounds.y_range
    (5.0, 4.0)
    """

    x_min: float
    x_max: float
    y_min: float
    y_max: float

    def __post_init__(self):
        for name in ("x_min", "x_max", "y_min", "y_max"):
            object.__setattr__(self, name, _require_finite(name, getattr(self, name)))

        if self.x_max <= self.x_min:
            raise ValueError(f"x_max must exceed x_min (got {self.x_min}, {self.x_max})")
        if self.y_max <= self.y_min:
            raise ValueError(f"y_max must exceed y_min (got {self.y_min}, {self.y_max})")

    @property
    def x_range(self) -> float:
        return self.x_max - self.x_min

    @property
    def y_range(self) -> float:
        return self.y_max - self.y_min


__all__ = [
    "ScalarLike",
    "ArrayLike",
    "SlopeFunction",
    "ExactSolution",
    "InitialValueProblem",
    "FieldBounds",
]
