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
odelab - Symbolic First-Order ODE Laboratory

Type dy/dx = f(x, y) as text, get a compiled evaluator, two fixed-step
solutions (Explicit Euler and RK4), error and efficiency analysis, and a
direction field.

Subpackages
-----------
- expressions: normalizer, compiler, classifier, validator
- numerical_integration: fixed-step integrators
- analysis: error analysis, direction field
- builtin: predefined problems
- types: TypedDict results and validated dataclasses

Quick Start
-----------
>>> from odelab import parse_equation, InitialValueProblem, RK4Integrator
>>> f = parse_equation("y")
>>> problem = InitialValueProblem(f, x0=0.0, y0=1.0, xf=1.0, h=0.5)
>>> round(RK4Integrator().integrate(problem)["y"][-1], 4)
2.7173
"""

__version__ = "0.1.0"

from .analysis import (
    analyze,
    compare_efficiency,
    field_segments,
    reference_from_arrays,
    reference_from_exact,
    sample_direction_field,
)
from .builtin import PREDEFINED_PROBLEMS, Problem, get_problem
from .expressions import (
    CompileError,
    CompiledEvaluator,
    ExpressionSyntaxError,
    analyze_equation,
    classify,
    compile_expression,
    normalize,
    parse_equation,
    validate_expression,
)
from .numerical_integration import (
    ExplicitEulerIntegrator,
    IntegrationError,
    IntegratorBase,
    RK4Integrator,
    create_fixed_step_integrator,
)
from .simulation import simulate, simulate_problem
from .types import (
    EquationProfile,
    EquationType,
    ErrorReport,
    FieldBounds,
    InitialValueProblem,
    Trajectory,
)

__all__ = [
    "__version__",
    # Expressions
    "normalize",
    "compile_expression",
    "parse_equation",
    "classify",
    "analyze_equation",
    "validate_expression",
    "CompiledEvaluator",
    "ExpressionSyntaxError",
    "CompileError",
    # Integration
    "IntegratorBase",
    "ExplicitEulerIntegrator",
    "RK4Integrator",
    "create_fixed_step_integrator",
    "IntegrationError",
    # Analysis
    "analyze",
    "compare_efficiency",
    "reference_from_exact",
    "reference_from_arrays",
    "sample_direction_field",
    "field_segments",
    # Problems and simulation
    "Problem",
    "PREDEFINED_PROBLEMS",
    "get_problem",
    "simulate",
    "simulate_problem",
    # Types
    "InitialValueProblem",
    "FieldBounds",
    "Trajectory",
    "ErrorReport",
    "EquationProfile",
    "EquationType",
]
