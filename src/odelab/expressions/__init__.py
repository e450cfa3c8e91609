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
Expressions Module

User input -> canonical text -> evaluator, plus structural tagging.

- normalizer: LaTeX / plain text -> CanonicalExpression
- compiler: CanonicalExpression -> CompiledEvaluator (SymPy + NumPy)
- classifier: CanonicalExpression -> EquationProfile
- validator: non-raising validation for input fields

Examples
--------
>>> from odelab.expressions import parse_equation, analyze_equation
>>> f = parse_equation(r"-0.2\\cdot\\left(y-20\\right)")
>>> f(0.0, 100.0)
-16.0
>>> analyze_equation("y*y-y")["is_linear"]
False
"""

from .classifier import analyze_equation, classify, literal_degree
from .compiler import (
    CompileError,
    CompiledEvaluator,
    clear_compile_cache,
    compile_expression,
    parse_equation,
)
from .normalizer import (
    CONSTANT_NAMES,
    FUNCTION_NAMES,
    ExpressionSyntaxError,
    normalize,
    tokenize,
)
from .validator import validate_expression

__all__ = [
    # Normalizer
    "ExpressionSyntaxError",
    "FUNCTION_NAMES",
    "CONSTANT_NAMES",
    "normalize",
    "tokenize",
    # Compiler
    "CompileError",
    "CompiledEvaluator",
    "compile_expression",
    "parse_equation",
    "clear_compile_cache",
    # Classifier
    "classify",
    "analyze_equation",
    "literal_degree",
    # Validator
    "validate_expression",
]
