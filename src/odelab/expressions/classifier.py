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
Equation Classifier

Structural tagging of canonical expressions by pattern inspection only (the
expression is never evaluated or compiled).

Decision list, first match wins:
1. ``y`` or ``-y``                              -> EXPONENTIAL_GROWTH
2. ``c*y`` for a numeric literal c              -> EXPONENTIAL_GROWTH
3. linear, no independent variable             -> LINEAR_HOMOGENEOUS
4. linear, independent variable present        -> LINEAR_NONHOMOGENEOUS
5. ``y^2`` or ``y*y`` present                    -> NONLINEAR_QUADRATIC
6. dependent variable present                  -> NONLINEAR_OTHER
7. otherwise                                   -> UNKNOWN

Linearity is decided on literal powers only: ``y^2``, ``y*y`` or ``y^n``
with n >= 3 make an expression non-linear. Other non-linear dependence
(``sin(y)``, ``exp(y)``) is not detected and stays "linear", as the tags are
meant for display, not for choosing a solver.
"""

import re
from typing import Pattern

from odelab.config import DEFAULT_DEPENDENT, DEFAULT_INDEPENDENT, INDEPENDENT_ALIASES
from odelab.expressions.normalizer import normalize
from odelab.types.symbolic import CanonicalExpression, EquationProfile, EquationType

_TRIGONOMETRIC = re.compile(r"(?<![A-Za-z])a?(sin|cos|tan|cot|sec|csc)(?![A-Za-z])")
_EXPONENTIAL = re.compile(r"(?<![A-Za-z])exp\(|(?<![A-Za-z])e\^")
_NUMERIC_LITERAL = r"((?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)"


def _identifier(name: str) -> str:
    # Whole identifier only: the x in exp or the t in sqrt do not count
    return rf"(?<![A-Za-z0-9_]){re.escape(name)}(?![A-Za-z0-9_])"


def _powers(dependent: str) -> Pattern:
    return re.compile(_identifier(dependent) + r"\^\(?" + _NUMERIC_LITERAL + r"\)?")


def _self_product(dependent: str) -> Pattern:
    var = _identifier(dependent)
    return re.compile(rf"{var}\*{var}(?!\^)")


def literal_degree(expr: CanonicalExpression, dependent: str = DEFAULT_DEPENDENT) -> int:
    """
    Highest literal power of the dependent variable.

    Integer exponents count at face value; ``y*y`` counts as 2; anything
    else (including fractional exponents) leaves the degree at 1.

    Examples
    --------
    >>> literal_degree("y^3-y^2")
    3
    >>> literal_degree("y*y+1")
    2
    >>> literal_degree("sqrt(y)")
    1
    """
    degree = 1
    for match in _powers(dependent).finditer(expr):
        exponent = float(match.group(1))
        if exponent.is_integer() and exponent > degree:
            degree = int(exponent)
    if degree < 2 and _self_product(dependent).search(expr):
        degree = 2
    return degree


def classify(
    expr: CanonicalExpression,
    independent: str = DEFAULT_INDEPENDENT,
    dependent: str = DEFAULT_DEPENDENT,
) -> EquationProfile:
    """
    Tag a canonical expression with its structural properties.

    Parameters
    ----------
    expr : CanonicalExpression
        Output of normalize()
    independent : str
        Name of the independent variable ('t' also counts, as in the
        compiler)
    dependent : str
        Name of the dependent variable

    Returns
    -------
    EquationProfile
        Tags; ``original`` and ``normalized`` both hold expr

    Examples
    --------
    >>> classify("-y")["type"]
    <EquationType.EXPONENTIAL_GROWTH: 'exponential-growth'>
    >>> classify("x+y")["type"]
    <EquationType.LINEAR_NONHOMOGENEOUS: 'linear-nonhomogeneous'>
    >>> profile = classify("y*y+1")
    >>> profile["type"], profile["is_linear"], profile["degree"]
    (<EquationType.NONLINEAR_QUADRATIC: 'nonlinear-quadratic'>, False, 2)
    """
    independent_names = {independent}
    independent_names.update(a for a in INDEPENDENT_ALIASES if a != dependent)

    has_independent = any(
        re.search(_identifier(name), expr) for name in independent_names
    )
    has_dependent = re.search(_identifier(dependent), expr) is not None

    degree = literal_degree(expr, dependent)
    is_linear = degree < 2
    # A squared term makes the expression quadratic even next to a higher power
    has_squared = (
        _self_product(dependent).search(expr) is not None
        or re.search(_identifier(dependent) + r"\^\(?2(?![\d.])", expr) is not None
    )

    var = re.escape(dependent)
    if re.fullmatch(rf"-?{var}", expr):
        equation_type = EquationType.EXPONENTIAL_GROWTH
    elif re.fullmatch(rf"-?{_NUMERIC_LITERAL}\*{var}", expr):
        equation_type = EquationType.EXPONENTIAL_GROWTH
    elif is_linear and not has_independent:
        equation_type = EquationType.LINEAR_HOMOGENEOUS
    elif is_linear:
        equation_type = EquationType.LINEAR_NONHOMOGENEOUS
    elif has_squared:
        equation_type = EquationType.NONLINEAR_QUADRATIC
    elif has_dependent:
        equation_type = EquationType.NONLINEAR_OTHER
    else:
        equation_type = EquationType.UNKNOWN

    return EquationProfile(
        original=expr,
        normalized=expr,
        type=equation_type,
        is_linear=is_linear,
        has_independent_variable=has_independent,
        has_trigonometric=_TRIGONOMETRIC.search(expr) is not None,
        has_exponential=_EXPONENTIAL.search(expr) is not None,
        degree=degree,
    )


def analyze_equation(
    raw: str,
    independent: str = DEFAULT_INDEPENDENT,
    dependent: str = DEFAULT_DEPENDENT,
) -> EquationProfile:
    """
    Normalize user input and classify it.

    Raises
    ------
    ExpressionSyntaxError
        If normalization fails

    Examples
    --------
    >>> profile = analyze_equation(r"\\sin\\left(t\\right)\\cdot y")
    >>> profile["normalized"], profile["has_trigonometric"]
    ('sin(t)*y', True)
    """
    profile = classify(normalize(raw), independent, dependent)
    profile["original"] = raw
    return profile


__all__ = [
    "classify",
    "analyze_equation",
    "literal_degree",
]
