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
Analysis Module

- error_analysis: error statistics and efficiency comparison
- direction_field: slope segments for direction field plots
"""

from .direction_field import field_segments, sample_direction_field
from .error_analysis import (
    analyze,
    compare_efficiency,
    reference_from_arrays,
    reference_from_exact,
)

__all__ = [
    "analyze",
    "compare_efficiency",
    "reference_from_exact",
    "reference_from_arrays",
    "sample_direction_field",
    "field_segments",
]
