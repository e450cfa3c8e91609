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
Integrator Base - Abstract Interface for Fixed-Step Integration

Defines the stepping contract shared by every integrator and implements the
integration loop once:

- Loop while the current abscissa is strictly below xf
- Non-final steps use exactly h, with abscissa x0 + n*h (no accumulation)
- The final step is clipped so the last abscissa is xf exactly
- Non-finite ordinates propagate to the end of the trajectory

Subclasses provide the single-step formula (step_with_stages), the display
fields of detailed step records, a name, and the number of slope
evaluations per step.

Result Types
------------
integrate() returns a Trajectory TypedDict; integrate_detailed() returns a
list of StepRecord TypedDicts (see odelab.types.trajectories).
"""

import math
import time
import warnings
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from odelab.config import STEP_SNAP_FRACTION
from odelab.types.core import ExactSolution, InitialValueProblem, SlopeFunction
from odelab.types.trajectories import StepRecord, StepTable, Trajectory


class IntegrationError(RuntimeError):
    """Raised by fail-fast integrators when an ordinate becomes non-finite"""

    pass


class IntegratorBase(ABC):
    """
    Abstract base class for fixed-step integrators of dy/dx = f(x, y).

    All integrators must implement:
    - step_with_stages(): one step, returning the stage values it used
    - name: integrator name for display
    - evaluations_per_step: slope evaluations per step

    Statistics (steps, slope evaluations, wall time) accumulate across
    calls until reset_stats().

    Examples
    --------
    >>> integrator = RK4Integrator()
    >>> problem = InitialValueProblem(lambda x, y: y, 0.0, 1.0, 1.0, 0.1)
    >>> result = integrator.integrate(problem)
    >>> result["x"][-1] == problem.xf
    True
    >>> print(f"Steps: {result['nsteps']}, Function evals: {result['nfev']}")
    Steps: 10, Function evals: 40
    """

    def __init__(self, fail_fast: bool = False, **options):
        """
        Initialize integrator.

        Parameters
        ----------
        fail_fast : bool
            If True, raise IntegrationError at the first non-finite
            ordinate instead of propagating it
        **options : dict
            Stored as-is for subclasses
        """
        self.fail_fast = fail_fast
        self.options = options

        # Statistics
        self._stats = {
            "total_steps": 0,
            "total_fev": 0,  # Slope evaluations
            "total_time": 0.0,
        }

    # ========================================================================
    # Subclass Interface
    # ========================================================================

    @abstractmethod
    def step_with_stages(
        self, f: SlopeFunction, x: float, y: float, h: float
    ) -> Tuple[float, Dict[str, float]]:
        """
        Take one step y(x) -> y(x + h).

        Parameters
        ----------
        f : SlopeFunction
            Slope function
        x, y : float
            Current point
        h : float
            Step size

        Returns
        -------
        Tuple[float, Dict[str, float]]
            Next ordinate and the named stage values of this step
        """
        pass

    @abstractmethod
    def _detail_fields(
        self, f: SlopeFunction, x: float, y: float, stages: Optional[Dict[str, float]]
    ) -> Dict[str, Optional[float]]:
        """Method-specific fields of a StepRecord (stages is None on row 0)."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable integrator name."""
        pass

    @property
    @abstractmethod
    def evaluations_per_step(self) -> int:
        """Number of slope evaluations per step."""
        pass

    # ========================================================================
    # Stepping
    # ========================================================================

    def step(self, f: SlopeFunction, x: float, y: float, h: float) -> float:
        """
        Take one step and return the next ordinate.

        Examples
        --------
        >>> ExplicitEulerIntegrator().step(lambda x, y: y, 0.0, 1.0, 0.5)
        1.5
        """
        y_next, _ = self.step_with_stages(f, x, y, h)
        return y_next

    def _evaluate(self, f: SlopeFunction, x: float, y: float) -> float:
        """
        Evaluate the slope with statistics tracking.

        Arithmetic errors raised by plain Python callables (1/0, float
        overflow) are mapped to nan so they propagate like NumPy results.
        """
        self._stats["total_fev"] += 1
        try:
            return float(f(x, y))
        except ArithmeticError:
            return math.nan

    def _grid_point(self, problem: InitialValueProblem, n: int) -> float:
        # Abscissa after n steps; snapped onto xf when within rounding of it
        x = problem.x0 + n * problem.h
        if x >= problem.xf - STEP_SNAP_FRACTION * problem.h:
            return problem.xf
        return x

    def _run(self, problem: InitialValueProblem, on_step=None):
        """
        Shared integration loop.

        Returns (xs, ys, nfev, first_nonfinite_x, elapsed). on_step, if
        given, is called as on_step(n, x, y, stages) after each step.
        """
        start_time = time.time()
        fev_before = self._stats["total_fev"]

        f = problem.f
        x, y = problem.x0, problem.y0
        xs = [x]
        ys = [y]
        first_nonfinite = None
        n = 0

        while x < problem.xf:
            x_next = self._grid_point(problem, n + 1)
            # Full steps use h itself; only the step landing on xf is clipped
            h = problem.xf - x if x_next == problem.xf else problem.h
            y, stages = self.step_with_stages(f, x, y, h)
            x = x_next
            n += 1
            self._stats["total_steps"] += 1

            xs.append(x)
            ys.append(y)

            if first_nonfinite is None and not math.isfinite(y):
                first_nonfinite = x
                if self.fail_fast:
                    self._stats["total_time"] += time.time() - start_time
                    raise IntegrationError(
                        f"{self.name}: ordinate became non-finite ({y}) at x={x} "
                        f"after {n} steps"
                    )

            if on_step is not None:
                on_step(n, x, y, stages)

        elapsed = time.time() - start_time
        self._stats["total_time"] += elapsed

        nfev = self._stats["total_fev"] - fev_before
        return np.array(xs), np.array(ys), nfev, first_nonfinite, elapsed

    # ========================================================================
    # Integration
    # ========================================================================

    def integrate(self, problem: InitialValueProblem) -> Trajectory:
        """
        Integrate an initial-value problem with fixed steps.

        Parameters
        ----------
        problem : InitialValueProblem
            Slope function, initial point, final abscissa and step size

        Returns
        -------
        Trajectory
            TypedDict containing:
            - x: Abscissas (N+1,), x[-1] == problem.xf exactly
            - y: Ordinates (N+1,)
            - success: False if an ordinate became non-finite
            - message: Status message
            - nfev: Slope evaluations (evaluations_per_step * N)
            - nsteps: Number of steps N
            - integration_time: Computation time
            - solver: Integrator name

        Raises
        ------
        IntegrationError
            Only with fail_fast=True, at the first non-finite ordinate

        Warns
        -----
        RuntimeWarning
            When a non-finite ordinate appeared (fail_fast=False)

        Examples
        --------
        >>> problem = InitialValueProblem(lambda x, y: y, 0.0, 1.0, 1.5, 0.5)
        >>> ExplicitEulerIntegrator().integrate(problem)["y"]
        array([1.   , 1.5  , 2.25 , 3.375])
        """
        xs, ys, nfev, first_nonfinite, elapsed = self._run(problem)

        if first_nonfinite is None:
            success = True
            message = f"{self.name} integration completed"
        else:
            success = False
            message = (
                f"{self.name} integration produced a non-finite ordinate "
                f"at x={first_nonfinite}; values propagated to xf"
            )
            warnings.warn(message, RuntimeWarning, stacklevel=2)

        result: Trajectory = {
            "x": xs,
            "y": ys,
            "success": success,
            "message": message,
            "nfev": nfev,
            "nsteps": len(xs) - 1,
            "integration_time": elapsed,
            "solver": self.name,
        }

        return result

    def integrate_detailed(
        self, problem: InitialValueProblem, exact_solution: Optional[ExactSolution] = None
    ) -> StepTable:
        """
        Integrate and record every step for tabular display.

        Row 0 holds the initial point. Slope values shown in the rows are
        display-only and are not counted in the statistics.

        Parameters
        ----------
        problem : InitialValueProblem
            Problem to integrate
        exact_solution : Optional[ExactSolution]
            Closed form y(x); fills ``exact`` and ``error`` when given

        Returns
        -------
        StepTable
            List of StepRecord, one per abscissa

        Examples
        --------
        >>> problem = InitialValueProblem(lambda x, y: y, 0.0, 1.0, 1.0, 0.5)
        >>> rows = ExplicitEulerIntegrator().integrate_detailed(problem, np.exp)
        >>> [row["y"] for row in rows]
        [1.0, 1.5, 2.25]
        """
        f = problem.f
        rows: List[StepRecord] = []

        def record(n, x, y, stages):
            exact = _exact_value(exact_solution, x)
            row: StepRecord = {
                "step": n,
                "x": float(x),
                "y": float(y),
                "exact": exact,
                "error": abs(y - exact) if exact is not None else None,
            }
            row.update(self._detail_fields(f, x, y, stages))
            rows.append(row)

        record(0, problem.x0, problem.y0, None)
        self._run(problem, on_step=record)
        return rows

    # ========================================================================
    # Statistics
    # ========================================================================

    def get_stats(self) -> Dict[str, Any]:
        """
        Get integration statistics.

        Returns
        -------
        dict
            Statistics with keys:
            - 'total_steps': Total integration steps taken
            - 'total_fev': Total slope evaluations
            - 'total_time': Total integration time
            - 'avg_fev_per_step': Average slope evaluations per step
        """
        avg_fev = self._stats["total_fev"] / max(1, self._stats["total_steps"])

        return {
            **self._stats,
            "avg_fev_per_step": avg_fev,
        }

    def reset_stats(self):
        """
        Reset integration statistics to zero.

        Examples
        --------
        >>> integrator.reset_stats()
        >>> integrator.get_stats()['total_steps']
        0
        """
        self._stats["total_steps"] = 0
        self._stats["total_fev"] = 0
        self._stats["total_time"] = 0.0

    def __repr__(self) -> str:
        """String representation for debugging"""
        return f"{self.__class__.__name__}(fail_fast={self.fail_fast})"

    def __str__(self) -> str:
        """Human-readable string"""
        return f"{self.name} ({self.evaluations_per_step} evaluation(s)/step)"


def _exact_value(exact_solution: Optional[ExactSolution], x: float) -> Optional[float]:
    if exact_solution is None:
        return None
    try:
        value = float(exact_solution(x))
    except (ArithmeticError, ValueError):
        return None
    return value if math.isfinite(value) else None


__all__ = [
    "IntegrationError",
    "IntegratorBase",
]
