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
Predefined Problems

Catalog of classic first-order ODEs with parameters chosen for teaching and,
where one exists, the closed-form solution used as error reference.

Equations are written in the independent variable t (accepted by the
compiler as an alias of x).

Usage
-----
>>> problem = get_problem("newton_cooling")
>>> problem.equation
'-0.2 * (y - 20)'
>>> ivp = problem.to_problem()
>>> ivp.y0, ivp.xf, ivp.h
(100.0, 20.0, 0.2)
>>> round(problem.exact_solution(5.0), 4)
49.4304
"""

import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from odelab.analysis.error_analysis import reference_from_exact
from odelab.expressions.compiler import parse_equation
from odelab.types.core import ExactSolution, InitialValueProblem
from odelab.types.trajectories import ReferenceSolution, Trajectory

# Closed form y(x; y0, x0)
ParametricSolution = Callable[[float, float, float], float]


@dataclass(frozen=True)
class Problem:
    """
    Catalog entry: an equation with default parameters.

    Attributes
    ----------
    id : str
        Unique identifier
    name : str
        Display name
    category : str
        Grouping for listings ('Basic', 'Biology', ...)
    equation : str
        Right-hand side f(t, y) as user text
    description : str
        One-line summary
    context : str
        Where the model comes from
    parameters : Dict[str, float]
        Defaults for x0, y0, xf, h
    solution : Optional[ParametricSolution]
        Closed form y(x, y0, x0), or None
    exact_formula : str
        Closed form as text ('' if none)
    note : str
        Caveats
    """

    id: str
    name: str
    category: str
    equation: str
    description: str
    context: str
    parameters: Dict[str, float]
    solution: Optional[ParametricSolution] = None
    exact_formula: str = ""
    note: str = ""

    @property
    def has_exact_solution(self) -> bool:
        return self.solution is not None

    @property
    def exact_solution(self) -> Optional[ExactSolution]:
        """Closed form bound to the default y0 and x0, or None."""
        return self.exact_solution_for(self.parameters["y0"], self.parameters["x0"])

    def exact_solution_for(self, y0: float, x0: float) -> Optional[ExactSolution]:
        """Closed form bound to the given initial point, or None."""
        if self.solution is None:
            return None
        solution = self.solution
        return lambda x: solution(x, y0, x0)

    def to_problem(self, **overrides: float) -> InitialValueProblem:
        """
        Compile the equation and build the initial-value problem.

        Parameters
        ----------
        **overrides : float
            Replacements for x0, y0, xf or h

        Raises
        ------
        ValueError
            On an unknown parameter name, or if the resulting problem is
            invalid
        """
        unknown = set(overrides) - set(self.parameters)
        if unknown:
            raise ValueError(
                f"Unknown parameter(s) {sorted(unknown)} for problem '{self.id}'. "
                f"Valid: {sorted(self.parameters)}"
            )
        params = {**self.parameters, **overrides}
        return InitialValueProblem(f=parse_equation(self.equation), **params)

    def reference(self, trajectory: Trajectory) -> Optional[ReferenceSolution]:
        """
        Closed-form values on a trajectory's abscissas, or None.

        The initial point is taken from the trajectory itself, so overridden
        parameters are honoured.
        """
        if self.solution is None:
            return None
        exact = self.exact_solution_for(float(trajectory["y"][0]), float(trajectory["x"][0]))
        return reference_from_exact(exact, trajectory, self.exact_formula)


# ============================================================================
# Closed Forms
# ============================================================================


def _logistic(rate: float, capacity: float) -> ParametricSolution:
    def solution(x, y0, x0):
        return capacity / (1 + ((capacity - y0) / y0) * math.exp(-rate * (x - x0)))

    return solution


def _newton_cooling(k: float, ambient: float) -> ParametricSolution:
    def solution(x, y0, x0):
        return ambient + (y0 - ambient) * math.exp(-k * (x - x0))

    return solution


# ============================================================================
# Catalog
# ============================================================================

PREDEFINED_PROBLEMS: List[Problem] = [
    Problem(
        id="exponential_growth",
        name="Exponential Growth",
        category="Basic",
        equation="y",
        description="The simplest exponential growth: dy/dt = y",
        context="Unbounded population growth and continuously compounded interest.",
        parameters={"x0": 0.0, "y0": 1.0, "xf": 3.0, "h": 0.1},
        solution=lambda x, y0, x0: y0 * math.exp(x - x0),
        exact_formula="y(t) = y0 * e^t",
    ),
    Problem(
        id="exponential_decay",
        name="Exponential Decay",
        category="Basic",
        equation="-y",
        description="Exponential decay: dy/dt = -y",
        context="Radioactive decay, capacitor discharge, basic cooling.",
        parameters={"x0": 0.0, "y0": 10.0, "xf": 5.0, "h": 0.1},
        solution=lambda x, y0, x0: y0 * math.exp(-(x - x0)),
        exact_formula="y(t) = y0 * e^(-t)",
    ),
    Problem(
        id="logistic_growth",
        name="Logistic Growth",
        category="Biology",
        equation="0.5 * y * (1 - y/100)",
        description="Population growth with a limited carrying capacity",
        context="Growth rate r=0.5, carrying capacity K=100.",
        parameters={"x0": 0.0, "y0": 10.0, "xf": 15.0, "h": 0.1},
        solution=_logistic(rate=0.5, capacity=100.0),
        exact_formula="y(t) = K / (1 + ((K - y0)/y0) * e^(-r t))",
    ),
    Problem(
        id="newton_cooling",
        name="Newton's Law of Cooling",
        category="Physics",
        equation="-0.2 * (y - 20)",
        description="An object cooling towards room temperature",
        context="Ambient temperature 20, cooling coefficient k=0.2.",
        parameters={"x0": 0.0, "y0": 100.0, "xf": 20.0, "h": 0.2},
        solution=_newton_cooling(k=0.2, ambient=20.0),
        exact_formula="y(t) = T_amb + (y0 - T_amb) * e^(-k t)",
    ),
    Problem(
        id="linear_growth",
        name="Linear Growth",
        category="Basic",
        equation="2",
        description="Constant rate of change: dy/dt = 2",
        context="Filling a tank at a constant rate.",
        parameters={"x0": 0.0, "y0": 0.0, "xf": 10.0, "h": 0.5},
        solution=lambda x, y0, x0: y0 + 2.0 * (x - x0),
        exact_formula="y(t) = y0 + 2t",
    ),
    Problem(
        id="nonlinear_1",
        name="Classic Textbook ODE",
        category="Advanced",
        equation="y - t^2 + 1",
        description="Standard test equation from numerical analysis texts",
        context="Used throughout textbooks to compare one-step methods.",
        parameters={"x0": 0.0, "y0": 0.5, "xf": 2.0, "h": 0.1},
        note="No closed form is used as reference for this problem",
    ),
    Problem(
        id="time_dependent",
        name="Time-Dependent Growth",
        category="Intermediate",
        equation="t * y",
        description="Growth rate proportional to time and to the current value",
        context="Processes whose rate of change increases over time.",
        parameters={"x0": 0.0, "y0": 1.0, "xf": 2.0, "h": 0.05},
        solution=lambda x, y0, x0: y0 * math.exp((x * x - x0 * x0) / 2),
        exact_formula="y(t) = y0 * e^(t^2/2)",
    ),
    Problem(
        id="competitive",
        name="Intraspecific Competition",
        category="Biology",
        equation="y * (3 - y)",
        description="Simple model of competition within a species",
        context="Growth limited by competition; equilibrium at y=3.",
        parameters={"x0": 0.0, "y0": 0.5, "xf": 5.0, "h": 0.1},
        solution=_logistic(rate=3.0, capacity=3.0),
        exact_formula="y(t) = 3 / (1 + ((3 - y0)/y0) * e^(-3t))",
        note="Logistic equation with r=3, K=3",
    ),
]

_BY_ID: Dict[str, Problem] = {p.id: p for p in PREDEFINED_PROBLEMS}


def get_problem(problem_id: str) -> Problem:
    """
    Look up a predefined problem.

    Raises
    ------
    ValueError
        If problem_id is unknown
    """
    try:
        return _BY_ID[problem_id]
    except KeyError:
        raise ValueError(
            f"Unknown problem '{problem_id}'. Available: {list(_BY_ID)}"
        ) from None


def get_problems_by_category(category: str) -> List[Problem]:
    return [p for p in PREDEFINED_PROBLEMS if p.category == category]


def get_categories() -> List[str]:
    """Unique categories in catalog order."""
    return list(dict.fromkeys(p.category for p in PREDEFINED_PROBLEMS))


def get_problems_with_exact_solution() -> List[Problem]:
    return [p for p in PREDEFINED_PROBLEMS if p.has_exact_solution]


__all__ = [
    "Problem",
    "PREDEFINED_PROBLEMS",
    "get_problem",
    "get_problems_by_category",
    "get_categories",
    "get_problems_with_exact_solution",
]
