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
Expression Validator

Checks user input before it reaches an integrator:
- Normalization succeeds (ExpressionSyntaxError otherwise)
- Canonical form compiles (CompileError otherwise)
- Slope is defined at a few probe points (warning only)
- Slope depends on the dependent variable (warning only)

Input problems are reported in the result, not raised, so the validator can
back an input field that re-validates on every keystroke.
"""

import warnings
from typing import List, Optional

import numpy as np

from odelab.config import DEFAULT_DEPENDENT, DEFAULT_INDEPENDENT
from odelab.expressions.compiler import CompileError, compile_expression
from odelab.expressions.normalizer import ExpressionSyntaxError, normalize
from odelab.types.symbolic import ExpressionValidationResult

# (x, y) points where a well-formed slope is expected to be defined
_PROBE_POINTS = np.array([[0.0, 1.0], [1.0, 1.0], [0.5, 2.0]])


def validate_expression(
    raw: str,
    independent: str = DEFAULT_INDEPENDENT,
    dependent: str = DEFAULT_DEPENDENT,
    issue_warnings: bool = False,
) -> ExpressionValidationResult:
    """
    Validate user input without raising.

    Parameters
    ----------
    raw : str
        User-entered expression (plain text or LaTeX)
    independent, dependent : str
        Variable names, see compile_expression()
    issue_warnings : bool
        If True, also emit each non-fatal issue through warnings.warn

    Returns
    -------
    ExpressionValidationResult
        ``valid`` is False with a message in ``error`` when the input does
        not normalize or compile

    Examples
    --------
    >>> validate_expression("2x + y")["valid"]
    True
    >>> result = validate_expression("foo(y)")
    >>> result["valid"], result["normalized"]
    (False, 'f*o*o*(y)')
    >>> validate_expression("")["error"]
    "Expression '' is empty after normalization"
    """
    normalized: Optional[str] = None
    issues: List[str] = []

    try:
        normalized = normalize(raw)
        evaluator = compile_expression(normalized, independent, dependent)
    except (ExpressionSyntaxError, CompileError) as e:
        return ExpressionValidationResult(
            valid=False, error=str(e), normalized=normalized, warnings=issues
        )

    if dependent not in {s.name for s in evaluator.sympy_expr.free_symbols}:
        issues.append(
            f"Slope '{normalized}' does not depend on '{dependent}'; "
            f"the solution is a plain antiderivative"
        )

    slopes = evaluator.evaluate_grid(_PROBE_POINTS[:, 0], _PROBE_POINTS[:, 1])
    if not np.all(np.isfinite(slopes)):
        undefined = [
            f"({x:g}, {y:g})"
            for (x, y), s in zip(_PROBE_POINTS, slopes)
            if not np.isfinite(s)
        ]
        issues.append(
            f"Slope '{normalized}' is undefined at {', '.join(undefined)}; "
            f"trajectories through these points will not be finite"
        )

    if issue_warnings:
        for issue in issues:
            warnings.warn(issue, RuntimeWarning, stacklevel=2)

    return ExpressionValidationResult(
        valid=True, error=None, normalized=normalized, warnings=issues
    )


__all__ = ["validate_expression"]
