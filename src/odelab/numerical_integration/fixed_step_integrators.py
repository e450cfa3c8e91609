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
Fixed-Step Integrators

Implements classic fixed-step methods for scalar first-order ODEs
dy/dx = f(x, y):
- Explicit Euler (1st order)
- RK4 (4th order)

Both share the integration loop of IntegratorBase and differ only in the
single-step formula and in what a detailed step record shows.
"""

from typing import Dict, Optional, Tuple

from odelab.numerical_integration.integrator_base import IntegratorBase
from odelab.types.core import SlopeFunction


class ExplicitEulerIntegrator(IntegratorBase):
    """
    Explicit Euler integrator (Forward Euler).

    First-order method: y_{n+1} = y_n + h * f(x_n, y_n)

    Characteristics:
    - Order: 1 (global error ∝ h, local error ∝ h²)
    - Function evaluations: 1 per step
    - Stability: Conditionally stable (small h required)

    Best for:
    - Teaching and visualizing the tangent-line idea
    - Very smooth right-hand sides

    Examples
    --------
    >>> integrator = ExplicitEulerIntegrator()
    >>> problem = InitialValueProblem(lambda x, y: y, 0.0, 1.0, 1.5, 0.5)
    >>> result = integrator.integrate(problem)
    >>> print(f"Final: {result['y'][-1]}, evaluations: {result['nfev']}")
    Final: 3.375, evaluations: 3
    """

    def step_with_stages(
        self, f: SlopeFunction, x: float, y: float, h: float
    ) -> Tuple[float, Dict[str, float]]:
        """
        Take one Euler step: y_{n+1} = y_n + h * f(x_n, y_n).

        Returns
        -------
        Tuple[float, Dict[str, float]]
            Next ordinate and {'k1': f(x_n, y_n)}
        """
        k1 = self._evaluate(f, x, y)
        return y + h * k1, {"k1": k1}

    def _detail_fields(
        self, f: SlopeFunction, x: float, y: float, stages: Optional[Dict[str, float]]
    ) -> Dict[str, Optional[float]]:
        # Step tables show the slope at the point just reached
        try:
            slope = float(f(x, y))
        except ArithmeticError:
            slope = float("nan")
        return {"slope": slope}

    @property
    def name(self) -> str:
        return "Explicit Euler"

    @property
    def evaluations_per_step(self) -> int:
        return 1


class RK4Integrator(IntegratorBase):
    """
    Classic 4th-order Runge-Kutta integrator.

    Algorithm:
        k1 = f(x_n, y_n)
        k2 = f(x_n + h/2, y_n + h/2*k1)
        k3 = f(x_n + h/2, y_n + h/2*k2)
        k4 = f(x_n + h, y_n + h*k3)
        y_{n+1} = y_n + (h/6) * (k1 + 2*k2 + 2*k3 + k4)

    Characteristics:
    - Order: 4 (global error ∝ h⁴, local error ∝ h⁵)
    - Function evaluations: 4 per step
    - Accuracy: Excellent for smooth dynamics

    Examples
    --------
    >>> integrator = RK4Integrator()
    >>> problem = InitialValueProblem(lambda x, y: y, 0.0, 1.0, 1.0, 0.5)
    >>> result = integrator.integrate(problem)
    >>> print(f"RK4: {result['nfev']} evaluations for {result['nsteps']} steps")
    RK4: 8 evaluations for 2 steps
    """

    def step_with_stages(
        self, f: SlopeFunction, x: float, y: float, h: float
    ) -> Tuple[float, Dict[str, float]]:
        """
        Take one RK4 step using four slope evaluations.

        Returns
        -------
        Tuple[float, Dict[str, float]]
            Next ordinate and the stage values k1..k4
        """
        k1 = self._evaluate(f, x, y)
        k2 = self._evaluate(f, x + 0.5 * h, y + 0.5 * h * k1)
        k3 = self._evaluate(f, x + 0.5 * h, y + 0.5 * h * k2)
        k4 = self._evaluate(f, x + h, y + h * k3)

        # Weighted combination
        y_next = y + (h / 6.0) * (k1 + 2 * k2 + 2 * k3 + k4)

        return y_next, {"k1": k1, "k2": k2, "k3": k3, "k4": k4}

    def _detail_fields(
        self, f: SlopeFunction, x: float, y: float, stages: Optional[Dict[str, float]]
    ) -> Dict[str, Optional[float]]:
        if stages is not None:
            return dict(stages)

        # Initial row: only the first stage at (x0, y0) is meaningful
        try:
            k1 = float(f(x, y))
        except ArithmeticError:
            k1 = float("nan")
        return {"k1": k1, "k2": None, "k3": None, "k4": None}

    @property
    def name(self) -> str:
        return "RK4 (Classic)"

    @property
    def evaluations_per_step(self) -> int:
        return 4


# ============================================================================
# Utility: Quick Integrator Creation
# ============================================================================


def create_fixed_step_integrator(method: str, fail_fast: bool = False) -> IntegratorBase:
    """
    Quick factory for fixed-step integrators.

    Parameters
    ----------
    method : str
        'euler' or 'rk4' (case-insensitive)
    fail_fast : bool
        Raise IntegrationError at the first non-finite ordinate

    Returns
    -------
    IntegratorBase
        Configured integrator

    Raises
    ------
    ValueError
        If method is unknown

    Examples
    --------
    >>> integrator = create_fixed_step_integrator('rk4')
    >>> integrator.name
    'RK4 (Classic)'
    """
    method_map = {
        "euler": ExplicitEulerIntegrator,
        "rk4": RK4Integrator,
    }

    key = str(method).lower()
    if key not in method_map:
        raise ValueError(f"Unknown method '{method}'. Choose from: {list(method_map.keys())}")

    integrator_class = method_map[key]
    return integrator_class(fail_fast=fail_fast)


# ============================================================================
# Module Exports
# ============================================================================

__all__ = [
    "ExplicitEulerIntegrator",
    "RK4Integrator",
    "create_fixed_step_integrator",
]
