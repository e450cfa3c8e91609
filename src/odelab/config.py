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
Global Configuration

Default simulation parameters, allowed parameter ranges, computation limits
and rendering safeguards shared across the package.

Usage
-----
>>> from odelab.config import DEFAULT_SIMULATION, recommended_step_size
>>> DEFAULT_SIMULATION["h"]
0.1
>>> recommended_step_size(20.0)
0.5
"""

from typing import Dict

# ============================================================================
# Variable Names
# ============================================================================

DEFAULT_INDEPENDENT = "x"
"""Default symbol of the independent variable (horizontal axis)."""

DEFAULT_DEPENDENT = "y"
"""Default symbol of the dependent variable (vertical axis)."""

INDEPENDENT_ALIASES = ("t", "x")
"""Symbols accepted as the independent variable besides the configured one."""

# ============================================================================
# Simulation Defaults
# ============================================================================

DEFAULT_SIMULATION: Dict = {
    "x0": 0.0,
    "y0": 1.0,
    "xf": 5.0,
    "h": 0.1,
    "equation": "y",
}

PARAMETER_RANGES: Dict[str, Dict[str, float]] = {
    "x0": {"min": -10.0, "max": 10.0, "step": 0.1},
    "y0": {"min": -100.0, "max": 100.0, "step": 0.1},
    "xf": {"min": 0.1, "max": 100.0, "step": 0.1},
    "h": {"min": 0.001, "max": 1.0, "step": 0.001},
}

COMPUTATION_LIMITS: Dict[str, int] = {
    "MAX_STEPS": 100000,
}

MAX_STEPS = COMPUTATION_LIMITS["MAX_STEPS"]

# Final step is snapped to xf when the remaining distance is below this
# fraction of h (absorbs rounding in x0 + n*h).
STEP_SNAP_FRACTION = 1e-9

# ============================================================================
# Direction Field
# ============================================================================

SLOPE_THRESHOLD = 1000.0
"""Grid points with |slope| above this value are omitted from the field."""

DEFAULT_GRID_COUNT_X = 20
DEFAULT_GRID_COUNT_Y = 15
DEFAULT_ARROW_SCALE = 0.7


def recommended_step_size(xf: float, x0: float = 0.0) -> float:
    """
    Suggest a step size for the interval [x0, xf].

    Parameters
    ----------
    xf : float
        Final abscissa
    x0 : float
        Initial abscissa

    Returns
    -------
    float
        Step size that keeps the number of steps moderate

    Examples
    --------
    >>> recommended_step_size(1.0)
    0.01
    >>> recommended_step_size(100.0)
    1.0
    """
    interval = abs(xf - x0)

    if interval <= 1:
        return 0.01
    if interval <= 5:
        return 0.05
    if interval <= 10:
        return 0.1
    if interval <= 50:
        return 0.5
    return 1.0


__all__ = [
    "DEFAULT_INDEPENDENT",
    "DEFAULT_DEPENDENT",
    "INDEPENDENT_ALIASES",
    "DEFAULT_SIMULATION",
    "PARAMETER_RANGES",
    "COMPUTATION_LIMITS",
    "MAX_STEPS",
    "STEP_SNAP_FRACTION",
    "SLOPE_THRESHOLD",
    "DEFAULT_GRID_COUNT_X",
    "DEFAULT_GRID_COUNT_Y",
    "DEFAULT_ARROW_SCALE",
    "recommended_step_size",
]
