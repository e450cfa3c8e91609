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
Numerical Integration Module

Fixed-step integrators for dy/dx = f(x, y):
- ExplicitEulerIntegrator: 1st order, 1 evaluation/step
- RK4Integrator: 4th order, 4 evaluations/step
"""

from .fixed_step_integrators import (
    ExplicitEulerIntegrator,
    RK4Integrator,
    create_fixed_step_integrator,
)
from .integrator_base import IntegrationError, IntegratorBase

__all__ = [
    "IntegratorBase",
    "IntegrationError",
    "ExplicitEulerIntegrator",
    "RK4Integrator",
    "create_fixed_step_integrator",
]
