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
Types Module - Type Definitions for odelab

Central import point for all type definitions.

Module Organization
------------------
- core: scalars, slope functions, InitialValueProblem, FieldBounds
- symbolic: canonical expressions, EquationType, EquationProfile
- trajectories: Trajectory, ErrorReport, direction field and simulation results
"""

from .core import (
    ArrayLike,
    ExactSolution,
    FieldBounds,
    InitialValueProblem,
    ScalarLike,
    SlopeFunction,
)
from .symbolic import (
    CanonicalExpression,
    EquationProfile,
    EquationType,
    ExpressionValidationResult,
)
from .trajectories import (
    DirectionFieldVector,
    EfficiencyComparison,
    ErrorReport,
    ReferenceSolution,
    SimulationResult,
    StepRecord,
    StepTable,
    Trajectory,
)

__all__ = [
    # Core
    "ArrayLike",
    "ExactSolution",
    "FieldBounds",
    "InitialValueProblem",
    "ScalarLike",
    "SlopeFunction",
    # Symbolic
    "CanonicalExpression",
    "EquationProfile",
    "EquationType",
    "ExpressionValidationResult",
    # Trajectories
    "DirectionFieldVector",
    "EfficiencyComparison",
    "ErrorReport",
    "ReferenceSolution",
    "SimulationResult",
    "StepRecord",
    "StepTable",
    "Trajectory",
]
