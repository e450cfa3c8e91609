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
Expression Compiler

Compiles a canonical expression into an evaluator f(independent, dependent).

Pipeline
--------
1. Lexical checks on the canonical text: allowed characters, known
   identifiers, balanced parentheses
2. SymPy parse in a closed namespace (arity-checked function table,
   pi, e, inf, the two variable symbols)
3. NumPy code generation via lambdify (see codegen_utils)

The resulting CompiledEvaluator is stateless and re-entrant. Evaluation never
raises for numerical reasons: log of a non-positive number, division by zero
and overflow yield nan or +-inf, which downstream components filter.
Integer literals too large for float64 (10^400) evaluate to +-inf.

SymPy canonicalizes while parsing, so removable singularities are
simplified away before evaluation: y/y compiles to 1 and (x-x)/x to 0,
and neither yields nan at the removed point.

Examples
--------
>>> f = compile_expression("sin(x)*y")
>>> f(0.0, 2.0)
0.0
>>> f = parse_equation(r"-0.2\\cdot\\left(y-20\\right)")
>>> f(0.0, 100.0)
-16.0
"""

import functools
import re
from tokenize import TokenError
from typing import Dict

import numpy as np
import sympy as sp
from sympy.parsing.sympy_parser import (
    convert_xor,
    parse_expr,
    standard_transformations,
)

from odelab.config import DEFAULT_DEPENDENT, DEFAULT_INDEPENDENT, INDEPENDENT_ALIASES
from odelab.expressions.codegen_utils import generate_numpy_function
from odelab.expressions.normalizer import (
    FUNCTION_NAMES,
    ExpressionSyntaxError,
    normalize,
)
from odelab.types.core import ArrayLike, ScalarLike
from odelab.types.symbolic import CanonicalExpression

# ============================================================================
# Exceptions
# ============================================================================


class CompileError(ValueError):
    """Raised when a canonical expression cannot be compiled"""

    pass


# ============================================================================
# Function and Constant Table
# ============================================================================


def _unary(name: str, func):
    """Wrap a SymPy function so that a wrong argument count is a CompileError."""

    def apply(*args):
        if len(args) != 1:
            raise CompileError(
                f"Function '{name}' takes exactly 1 argument ({len(args)} given)"
            )
        return func(args[0])

    apply.__name__ = name
    return apply


_SYMPY_FUNCTIONS = {
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "cot": sp.cot,
    "sec": sp.sec,
    "csc": sp.csc,
    "asin": sp.asin,
    "acos": sp.acos,
    "atan": sp.atan,
    "sinh": sp.sinh,
    "cosh": sp.cosh,
    "tanh": sp.tanh,
    "log": sp.log,
    "log10": lambda arg: sp.log(arg, 10),
    "exp": sp.exp,
    "sqrt": sp.sqrt,
    "abs": sp.Abs,
}

FUNCTION_TABLE = {name: _unary(name, _SYMPY_FUNCTIONS[name]) for name in FUNCTION_NAMES}

CONSTANT_TABLE = {
    "pi": sp.pi,
    "e": sp.E,
    "inf": sp.oo,
}

_ALLOWED_CHARACTERS = re.compile(r"^[0-9A-Za-z_.+\-*/^(),]*$")
_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z_0-9]*")
_NUMERIC_LITERAL = re.compile(r"(?<![A-Za-z_0-9.])(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_VARIABLE_NAME = re.compile(r"^[A-Za-z]$")


# ============================================================================
# Compiled Evaluator
# ============================================================================


class CompiledEvaluator:
    """
    Evaluator for dy/dx = f(independent, dependent).

    Holds no mutable state: safe to call repeatedly and from several
    integrators or the direction field sampler at once.

    Attributes
    ----------
    expression : CanonicalExpression
        Canonical text that was compiled
    sympy_expr : sp.Expr
        Parsed SymPy expression
    independent : str
        Name of the independent variable
    dependent : str
        Name of the dependent variable

    Examples
    --------
    >>> f = compile_expression("x*y")
    >>> f(2.0, 3.0)
    6.0
    >>> f.evaluate_grid(np.array([1.0, 2.0]), np.array([3.0, 4.0]))
    array([3., 8.])
    """

    def __init__(
        self,
        expression: CanonicalExpression,
        sympy_expr: sp.Expr,
        independent: sp.Symbol,
        dependent: sp.Symbol,
    ):
        self.expression = expression
        self.sympy_expr = sympy_expr
        self.independent = independent.name
        self.dependent = dependent.name
        self._func = generate_numpy_function(sympy_expr, [independent, dependent])

    def __call__(self, independent: ScalarLike, dependent: ScalarLike) -> float:
        """Evaluate f at one point; non-finite results are returned, not raised."""
        return float(self._func(independent, dependent))

    def evaluate_grid(self, independent: ArrayLike, dependent: ArrayLike) -> ArrayLike:
        """
        Evaluate f element-wise on broadcastable arrays.

        Parameters
        ----------
        independent, dependent : ArrayLike
            Abscissas and ordinates (broadcast against each other)

        Returns
        -------
        ArrayLike
            float64 slopes with the broadcast shape
        """
        return self._func(independent, dependent)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}('{self.expression}', "
            f"independent='{self.independent}', dependent='{self.dependent}')"
        )


# ============================================================================
# Compilation
# ============================================================================


def _check_lexical(expr: str, allowed_names: Dict[str, object]) -> None:
    if not expr:
        raise CompileError("Cannot compile an empty expression")

    if not _ALLOWED_CHARACTERS.match(expr):
        bad = sorted({c for c in expr if not _ALLOWED_CHARACTERS.match(c)})
        raise CompileError(f"Invalid character(s) {', '.join(map(repr, bad))} in '{expr}'")

    # Exponent markers of numeric literals (1e-3) are not identifiers
    for identifier in _IDENTIFIER.findall(_NUMERIC_LITERAL.sub(" ", expr)):
        if identifier not in allowed_names:
            raise CompileError(
                f"Unknown identifier '{identifier}' in '{expr}'. "
                f"Allowed variables: {sorted(n for n in allowed_names if len(n) == 1 and n != 'e')}"
            )

    depth = 0
    for char in expr:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise CompileError(f"Unbalanced parentheses in '{expr}': unexpected ')'")
    if depth != 0:
        raise CompileError(f"Unbalanced parentheses in '{expr}': {depth} unclosed '('")


@functools.lru_cache(maxsize=128)
def _compile_cached(expr: str, independent: str, dependent: str) -> CompiledEvaluator:
    x = sp.Symbol(independent, real=True)
    y = sp.Symbol(dependent, real=True)

    namespace: Dict[str, object] = {}
    namespace.update(FUNCTION_TABLE)
    namespace.update(CONSTANT_TABLE)
    for alias in INDEPENDENT_ALIASES:
        if alias != dependent:
            namespace[alias] = x
    namespace[independent] = x
    namespace[dependent] = y

    _check_lexical(expr, namespace)

    try:
        parsed = parse_expr(
            expr,
            local_dict=namespace,
            transformations=standard_transformations + (convert_xor,),
        )
    except CompileError:
        raise
    except (SyntaxError, TokenError, TypeError, ValueError, AttributeError) as e:
        raise CompileError(f"Could not parse '{expr}': {e}") from e

    if not isinstance(parsed, sp.Expr):
        raise CompileError(
            f"'{expr}' is not a single scalar expression (got {type(parsed).__name__})"
        )

    return CompiledEvaluator(expr, parsed, x, y)


def compile_expression(
    expr: CanonicalExpression,
    independent: str = DEFAULT_INDEPENDENT,
    dependent: str = DEFAULT_DEPENDENT,
) -> CompiledEvaluator:
    """
    Compile a canonical expression into an evaluator.

    Parameters
    ----------
    expr : CanonicalExpression
        Output of normalize()
    independent : str
        Single-letter name of the independent variable ('t' is also
        accepted as an alias unless it is the dependent variable)
    dependent : str
        Single-letter name of the dependent variable

    Returns
    -------
    CompiledEvaluator
        Callable f(independent, dependent) -> float. Evaluators are cached by
        (expr, independent, dependent).

    Raises
    ------
    CompileError
        Unknown identifier, invalid character, unbalanced parentheses,
        wrong function arity, or any other parse failure

    Examples
    --------
    >>> compile_expression("y-t^2+1")(1.0, 2.0)
    2.0
    >>> compile_expression("log(x)")(-1.0, 0.0)
    nan
    """
    for name in (independent, dependent):
        if not isinstance(name, str) or not _VARIABLE_NAME.match(name) or name == "e":
            raise CompileError(f"Variable names must be single letters other than 'e', got {name!r}")
    if independent == dependent:
        raise CompileError(f"Independent and dependent variables must differ, both are '{independent}'")

    if not isinstance(expr, str):
        raise CompileError(f"Expression must be a string, got {type(expr).__name__}")

    return _compile_cached(expr, independent, dependent)


def parse_equation(
    raw: str,
    independent: str = DEFAULT_INDEPENDENT,
    dependent: str = DEFAULT_DEPENDENT,
) -> CompiledEvaluator:
    """
    Normalize and compile user input in one call.

    Parameters
    ----------
    raw : str
        User-entered expression (plain text or LaTeX)
    independent, dependent : str
        Variable names, see compile_expression()

    Returns
    -------
    CompiledEvaluator

    Raises
    ------
    ExpressionSyntaxError
        If nothing usable remains after normalization
    CompileError
        If the canonical form does not compile

    Examples
    --------
    >>> f = parse_equation("2x + y")
    >>> f(1.0, 1.0)
    3.0
    """
    try:
        canonical = normalize(raw)
    except ExpressionSyntaxError as e:
        raise ExpressionSyntaxError(f"Error parsing equation: {e}") from e

    try:
        return compile_expression(canonical, independent, dependent)
    except CompileError as e:
        raise CompileError(f"Error parsing equation: {e}") from e


def clear_compile_cache() -> None:
    """Drop all cached evaluators."""
    _compile_cached.cache_clear()


__all__ = [
    "CompileError",
    "CompiledEvaluator",
    "FUNCTION_TABLE",
    "CONSTANT_TABLE",
    "compile_expression",
    "parse_equation",
    "clear_compile_cache",
]
