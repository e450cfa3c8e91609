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
Trajectory and Result Types

Defines the result records produced and consumed by the numerical core:
- Trajectory (integrator output)
- StepRecord (per-step detail for tables)
- ReferenceSolution (exact values supplied by a closed form or a service)
- ErrorReport and EfficiencyComparison (analyzer output)
- DirectionFieldVector (direction field sample)
- SimulationResult (facade output)

All result types are TypedDict: plain dictionaries with typed keys, so they
serialize trivially and can be consumed by rendering collaborators as-is.

Usage
-----
>>> result: Trajectory = integrator.integrate(problem)
>>> result["x"][-1] == problem.xf
True
>>> print(f"{result['solver']}: {result['nsteps']} steps, {result['nfev']} evaluations")
"""

from typing import Dict, List, Optional, Tuple

from typing_extensions import TypedDict

from .core import ArrayLike
from .symbolic import EquationProfile

# ============================================================================
# Integration Results
# ============================================================================


class Trajectory(TypedDict, total=False):
    """
    Ordered sample path produced by a fixed-step integrator.

    Attributes
    ----------
    x : ArrayLike
        Abscissas (N+1,), x[0] = x0, strictly increasing, x[-1] = xf exactly
    y : ArrayLike
        Ordinates (N+1,), y[0] = y0
    success : bool
        False if a non-finite ordinate appeared
    message : str
        Status message
    nfev : int
        Number of slope evaluations (Euler: N, RK4: 4N)
    nsteps : int
        Number of steps N
    integration_time : float
        Wall-clock time in seconds
    solver : str
        Integrator name

    Examples
    --------
    >>> traj = euler.integrate(problem)
    >>> traj["nfev"] == traj["nsteps"]
    True
    """

    x: ArrayLike
    y: ArrayLike
    success: bool
    message: str
    nfev: int
    nsteps: int
    integration_time: float
    solver: str


class StepRecord(TypedDict, total=False):
    """
    Detailed record of one integration step.

    Euler records carry ``slope`` (f evaluated at the new point, as shown in
    step tables). RK4 records carry the four stage values ``k1``-``k4``
    (``None`` for the initial row). ``exact`` and ``error`` are ``None`` when
    no exact solution was supplied.
    """

    step: int
    x: float
    y: float
    slope: float
    k1: Optional[float]
    k2: Optional[float]
    k3: Optional[float]
    k4: Optional[float]
    exact: Optional[float]
    error: Optional[float]


class ReferenceSolution(TypedDict, total=False):
    """
    Reference values standing in for the exact solution.

    Attributes
    ----------
    grid : ArrayLike
        Abscissas at which the reference was evaluated
    exact : ArrayLike
        Reference ordinates (NaN where undefined)
    formula : str
        Human-readable closed form, empty if unknown
    """

    grid: ArrayLike
    exact: ArrayLike
    formula: str


# ============================================================================
# Analysis Results
# ============================================================================


class ErrorReport(TypedDict):
    """
    Absolute error of a trajectory against a reference.

    Attributes
    ----------
    max_error : float
        Largest absolute error over the valid pairs
    avg_error : float
        Mean absolute error over the valid pairs
    final_error : float
        Absolute error of the last valid pair
    n_points : int
        Number of valid pairs used
    """

    max_error: float
    avg_error: float
    final_error: float
    n_points: int


class EfficiencyComparison(TypedDict):
    """
    Error-per-evaluation comparison of two integrators.

    Attributes
    ----------
    efficiencies : Dict[str, float]
        Solver name -> max_error / nfev (lower is better)
    winner : str
        Solver name with the lower efficiency value
    improvement : float
        Percent reduction of the winner's value relative to the loser's
    """

    efficiencies: Dict[str, float]
    winner: str
    improvement: float


class DirectionFieldVector(TypedDict):
    """
    One sampled slope segment of a direction field.

    Attributes
    ----------
    x, y : float
        Grid point
    slope : float
        f(x, y)
    segment_start, segment_end : Tuple[float, float]
        Segment endpoints, centered on (x, y), in data coordinates
    """

    x: float
    y: float
    slope: float
    segment_start: Tuple[float, float]
    segment_end: Tuple[float, float]


class SimulationResult(TypedDict, total=False):
    """
    Output of a full simulation run (both integrators plus analysis).

    Attributes
    ----------
    expression : str
        Canonical expression that was compiled
    profile : EquationProfile
        Structural tags of the expression
    euler, rk4 : Trajectory
        Integrator outputs on the same problem
    reference : Optional[ReferenceSolution]
        Reference on the RK4 grid, if any
    euler_error, rk4_error : Optional[ErrorReport]
        Errors against the reference
    efficiency : Optional[EfficiencyComparison]
        Error-per-evaluation comparison
    """

    expression: str
    profile: EquationProfile
    euler: Trajectory
    rk4: Trajectory
    reference: Optional[ReferenceSolution]
    euler_error: Optional[ErrorReport]
    rk4_error: Optional[ErrorReport]
    efficiency: Optional[EfficiencyComparison]


StepTable = List[StepRecord]


__all__ = [
    "Trajectory",
    "StepRecord",
    "StepTable",
    "ReferenceSolution",
    "ErrorReport",
    "EfficiencyComparison",
    "DirectionFieldVector",
    "SimulationResult",
]
