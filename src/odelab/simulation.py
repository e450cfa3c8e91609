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
Simulation Facade

One call from user text to a full comparison: compile the equation once,
run Euler and RK4 on the same problem, build a reference on the shared grid
when a closed form (or external reference) is available, and analyze both.

Examples
--------
>>> result = simulate("y", x0=0.0, y0=1.0, xf=1.0, h=0.1, exact_solution=np.exp)
>>> result["rk4_error"]["max_error"] < result["euler_error"]["max_error"]
True
>>> result["efficiency"]["winner"]
'RK4 (Classic)'
"""

from typing import Optional

import numpy as np

from odelab.analysis.error_analysis import analyze, compare_efficiency, reference_from_exact
from odelab.builtin.problems import get_problem
from odelab.config import DEFAULT_DEPENDENT, DEFAULT_INDEPENDENT, DEFAULT_SIMULATION
from odelab.expressions.classifier import classify
from odelab.expressions.compiler import parse_equation
from odelab.numerical_integration.fixed_step_integrators import (
    ExplicitEulerIntegrator,
    RK4Integrator,
)
from odelab.types.core import ExactSolution, InitialValueProblem
from odelab.types.trajectories import ReferenceSolution, SimulationResult


def simulate(
    expression: str = DEFAULT_SIMULATION["equation"],
    x0: float = DEFAULT_SIMULATION["x0"],
    y0: float = DEFAULT_SIMULATION["y0"],
    xf: float = DEFAULT_SIMULATION["xf"],
    h: float = DEFAULT_SIMULATION["h"],
    exact_solution: Optional[ExactSolution] = None,
    reference: Optional[ReferenceSolution] = None,
    exact_formula: str = "",
    independent: str = DEFAULT_INDEPENDENT,
    dependent: str = DEFAULT_DEPENDENT,
    fail_fast: bool = False,
) -> SimulationResult:
    """
    Solve dy/dx = f(x, y) with Euler and RK4 and compare them.

    Parameters
    ----------
    expression : str
        Right-hand side as user text (plain or LaTeX)
    x0, y0, xf, h : float
        Initial point, final abscissa, step size
    exact_solution : Optional[ExactSolution]
        Closed form y(x); evaluated on the integration grid
    reference : Optional[ReferenceSolution]
        Externally supplied reference on the integration grid; takes
        precedence over exact_solution
    exact_formula : str
        Text of the closed form, carried into the reference
    independent, dependent : str
        Variable names
    fail_fast : bool
        Raise IntegrationError on the first non-finite ordinate

    Returns
    -------
    SimulationResult
        Both trajectories, the profile of the expression, and (when a
        reference exists) both error reports and the efficiency comparison

    Raises
    ------
    ExpressionSyntaxError, CompileError
        If the expression is invalid
    ValueError
        If the problem parameters are invalid
    """
    f = parse_equation(expression, independent, dependent)
    problem = InitialValueProblem(f=f, x0=x0, y0=y0, xf=xf, h=h)

    profile = classify(f.expression, independent, dependent)
    profile["original"] = expression

    euler = ExplicitEulerIntegrator(fail_fast=fail_fast).integrate(problem)
    rk4 = RK4Integrator(fail_fast=fail_fast).integrate(problem)

    if reference is None and exact_solution is not None:
        reference = reference_from_exact(exact_solution, rk4, exact_formula)

    euler_error = analyze(euler, reference)
    rk4_error = analyze(rk4, reference)

    result: SimulationResult = {
        "expression": f.expression,
        "profile": profile,
        "euler": euler,
        "rk4": rk4,
        "reference": reference,
        "euler_error": euler_error,
        "rk4_error": rk4_error,
        "efficiency": compare_efficiency(euler, euler_error, rk4, rk4_error),
    }

    return result


def simulate_problem(problem_id: str, **overrides: float) -> SimulationResult:
    """
    Run simulate() on a predefined problem.

    Parameters
    ----------
    problem_id : str
        Catalog id, see odelab.builtin.problems
    **overrides : float
        Replacements for x0, y0, xf or h

    Raises
    ------
    ValueError
        On an unknown problem id or parameter name

    Examples
    --------
    >>> result = simulate_problem("exponential_decay", h=0.5)
    >>> result["rk4"]["nsteps"]
    10
    """
    problem = get_problem(problem_id)

    unknown = set(overrides) - set(problem.parameters)
    if unknown:
        raise ValueError(
            f"Unknown parameter(s) {sorted(unknown)} for problem '{problem_id}'. "
            f"Valid: {sorted(problem.parameters)}"
        )
    params = {**problem.parameters, **overrides}

    return simulate(
        problem.equation,
        x0=params["x0"],
        y0=params["y0"],
        xf=params["xf"],
        h=params["h"],
        exact_solution=problem.exact_solution_for(params["y0"], params["x0"]),
        exact_formula=problem.exact_formula,
    )


__all__ = ["simulate", "simulate_problem"]
