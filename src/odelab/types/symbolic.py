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
Symbolic Expression Types

Types describing user-entered equations after normalization:
- CanonicalExpression: normalized infix text
- EquationType: closed classification enumeration
- EquationProfile: structural tags of an expression
- ExpressionValidationResult: non-raising validation outcome
"""

from enum import Enum
from typing import List, Optional

from typing_extensions import TypedDict

CanonicalExpression = str
"""
Normalized infix expression.

Grammar: numbers, the variable symbols, ``+ - * / ^``, parentheses,
whitelisted function names and the constants ``pi``, ``e``, ``inf``.
Every multiplication is explicit and no whitespace remains.

Examples
--------
>>> expr: CanonicalExpression = "2*x+sin(x)*y"
"""


class EquationType(Enum):
    """
    Structural class of dy/dx = f(x, y).

    Attributes
    ----------
    EXPONENTIAL_GROWTH : str
        f = y, -y or c*y
    LINEAR_HOMOGENEOUS : str
        Linear in y, no independent variable
    LINEAR_NONHOMOGENEOUS : str
        Linear in y, independent variable present
    NONLINEAR_QUADRATIC : str
        Contains y^2 or y*y
    NONLINEAR_OTHER : str
        Other non-linear dependence on y
    UNKNOWN : str
        Nothing matched
    """

    EXPONENTIAL_GROWTH = "exponential-growth"
    LINEAR_HOMOGENEOUS = "linear-homogeneous"
    LINEAR_NONHOMOGENEOUS = "linear-nonhomogeneous"
    NONLINEAR_QUADRATIC = "nonlinear-quadratic"
    NONLINEAR_OTHER = "nonlinear-other"
    UNKNOWN = "unknown"


class EquationProfile(TypedDict):
    """
    Structural tags derived from a canonical expression.

    Attributes
    ----------
    original : str
        Text as supplied by the caller
    normalized : CanonicalExpression
        Canonical form that was inspected
    type : EquationType
        First matching class
    is_linear : bool
        No squared or higher power of the dependent variable
    has_independent_variable : bool
        Independent variable occurs as an identifier
    has_trigonometric : bool
        A trigonometric or inverse trigonometric function occurs
    has_exponential : bool
        exp(...) or e^... occurs
    degree : int
        Highest literal power of the dependent variable (1 if none)
    """

    original: str
    normalized: CanonicalExpression
    type: EquationType
    is_linear: bool
    has_independent_variable: bool
    has_trigonometric: bool
    has_exponential: bool
    degree: int


class ExpressionValidationResult(TypedDict):
    """
    Outcome of validating user input without raising.

    Attributes
    ----------
    valid : bool
        True if the expression normalizes and compiles
    error : Optional[str]
        Human-readable error message when invalid
    normalized : Optional[CanonicalExpression]
        Canonical form when normalization succeeded
    warnings : List[str]
        Non-fatal issues (e.g. slope does not depend on the dependent
        variable, slope undefined at a probe point)
    """

    valid: bool
    error: Optional[str]
    normalized: Optional[CanonicalExpression]
    warnings: List[str]


__all__ = [
    "CanonicalExpression",
    "EquationType",
    "EquationProfile",
    "ExpressionValidationResult",
]
