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
Expression Normalizer

Rewrites user-entered notation (plain math text or LaTeX as emitted by math
input widgets) into the canonical infix form accepted by the compiler.

Passes, in order (later passes assume earlier ones ran):
 1. Strip layout-only spacing commands
 2. Multiplication operators -> '*', Python '**' -> '^'
 3. Division operators -> '/'
 4. Grouped constructs (\\frac, \\sqrt[n]) expanded to a fixed point
 5. Delimiters -> parentheses, absolute-value bars -> abs(...)
 6. Function-name spellings -> canonical names
 7. Named constants -> pi, e, inf
 8. Exponent groups ^{...} -> ^(...), ^(d) -> ^d
 9. Subscripts dropped, remaining braces -> parentheses
10. Unknown backslash commands removed
11. Whitespace collapsed
12. Implicit multiplication made explicit (known names are never split)
13. Repeated / leading '*' cleaned up

Examples
--------
>>> normalize(r"-0.2\\cdot\\left(y-20\\right)")
'-0.2*(y-20)'
>>> normalize(r"\\frac{x}{y}")
'((x)/(y))'
>>> normalize("2(x+1)")
'2*(x+1)'
>>> normalize("sin(x)y")
'sin(x)*y'
"""

import re
from typing import Callable, List, Optional, Pattern, Tuple

from odelab.types.symbolic import CanonicalExpression

# ============================================================================
# Exceptions
# ============================================================================


class ExpressionSyntaxError(ValueError):
    """Raised when an expression is empty or degenerate after normalization"""

    pass


# ============================================================================
# Function and Constant Tables
# ============================================================================

FUNCTION_NAMES = (
    "sin",
    "cos",
    "tan",
    "cot",
    "sec",
    "csc",
    "asin",
    "acos",
    "atan",
    "sinh",
    "cosh",
    "tanh",
    "log",
    "log10",
    "exp",
    "sqrt",
    "abs",
)
"""Canonical names of the unary functions known to the compiler."""

CONSTANT_NAMES = ("pi", "e", "inf")
"""Canonical names of the named constants."""

# Multi-letter names are matched longest-first so that 'sinh' wins over 'sin'
# and no known name is ever split by implicit multiplication.
_PROTECTED_NAMES = re.compile(
    "|".join(
        re.escape(name)
        for name in sorted(FUNCTION_NAMES + CONSTANT_NAMES, key=len, reverse=True)
        if len(name) > 1
    )
)

# ============================================================================
# Rewrite Tables (passes 1-3, 5-7)
# ============================================================================

_SPACING = [
    (re.compile(r"\\q?quad(?![a-zA-Z])"), " "),
    (re.compile(r"\\[,;:! ]"), ""),
]

_MULTIPLICATION = [
    (re.compile(r"\\cdot(?![a-zA-Z])"), "*"),
    (re.compile(r"\\times(?![a-zA-Z])"), "*"),
    (re.compile(r"\\ast(?![a-zA-Z])"), "*"),
    (re.compile("[\u00b7\u00d7\u22c5\u2219]"), "*"),
    (re.compile(r"\*\*"), "^"),
]

_DIVISION = [
    (re.compile(r"\\div(?![a-zA-Z])"), "/"),
    (re.compile("\u00f7"), "/"),
]

_DELIMITERS = [
    (re.compile(r"\\left\s*\("), "("),
    (re.compile(r"\\right\s*\)"), ")"),
    (re.compile(r"\\left\s*\["), "("),
    (re.compile(r"\\right\s*\]"), ")"),
    (re.compile(r"\\left\s*\\\{"), "("),
    (re.compile(r"\\right\s*\\\}"), ")"),
    (re.compile(r"\\left\s*(\\\||\\vert|\|)"), "abs("),
    (re.compile(r"\\right\s*(\\\||\\vert|\|)"), ")"),
    (re.compile(r"\\left\s*\.|\\right\s*\."), ""),
    (re.compile(r"\\lvert(?![a-zA-Z])"), "abs("),
    (re.compile(r"\\rvert(?![a-zA-Z])"), ")"),
    (re.compile(r"\\\{"), "("),
    (re.compile(r"\\\}"), ")"),
    (re.compile(r"\["), "("),
    (re.compile(r"\]"), ")"),
]

_FUNCTIONS = [
    (re.compile(r"\\(sinh|cosh|tanh|sin|cos|tan|cot|sec|csc|exp)(?![a-zA-Z])"), r"\1"),
    (re.compile(r"\\?(?<![a-zA-Z])arc(sin|cos|tan)(?![a-zA-Z])"), r"a\1"),
    (re.compile(r"\\ln(?![a-zA-Z])"), "log"),
    (re.compile(r"(?<![a-zA-Z\\])ln(?![a-zA-Z])"), "log"),
    (re.compile(r"\\(log|lg)(?![a-zA-Z])"), "log10"),
    (re.compile(r"\\sqrt(?![a-zA-Z])"), "sqrt"),
    (re.compile("\u221a"), "sqrt"),
    (re.compile(r"\\abs(?![a-zA-Z])"), "abs"),
    (re.compile(r"(?<![a-zA-Z])Abs(?![a-zA-Z])"), "abs"),
]

_CONSTANTS = [
    (re.compile(r"\\pi(?![a-zA-Z])"), "pi"),
    (re.compile("\u03c0"), "pi"),
    (re.compile(r"\\e(?![a-zA-Z])"), "e"),
    (re.compile(r"\\infty(?![a-zA-Z])"), "inf"),
    (re.compile("\u221e"), "inf"),
    (re.compile(r"(?<![a-zA-Z])Infinity(?![a-zA-Z])"), "inf"),
]

_SUPERSCRIPTS = [
    (re.compile("\u00b2"), "^2"),
    (re.compile("\u00b3"), "^3"),
]

_SINGLE_DIGIT_EXPONENT = re.compile(r"\^\((\d)\)")
_SIMPLE_SUBSCRIPT = re.compile(r"_[a-zA-Z0-9]")
_UNKNOWN_COMMAND = re.compile(r"\\[a-zA-Z]+")
_WHITESPACE = re.compile(r"\s+")

# Grouped constructs handled by _rewrite_command
_FRAC = re.compile(r"\\[dt]?frac(?![a-zA-Z])")
_ROOT_WITH_INDEX = re.compile(r"\\sqrt\s*\[([^\[\]]*)\]")
_SQRT = re.compile(r"\\sqrt(?![a-zA-Z])")
_OPERATORNAME = re.compile(r"\\operatorname\*?(?![a-zA-Z])")
_EXPONENT_GROUP = re.compile(r"\^\s*(?=\{)")
_SUBSCRIPT_GROUP = re.compile(r"_\s*(?=\{)")


def _apply(expr: str, rules: List[Tuple[Pattern, str]]) -> str:
    for pattern, replacement in rules:
        expr = pattern.sub(replacement, expr)
    return expr


# ============================================================================
# Grouped Constructs
# ============================================================================


def _read_argument(expr: str, pos: int, allow_bare: bool) -> Optional[Tuple[str, int]]:
    """
    Read one command argument starting at pos.

    A braced group returns its (balanced) content. With allow_bare, a single
    alphanumeric character or a backslash command is also accepted, as in
    ``\\frac12`` or ``\\sqrt x``.

    Returns
    -------
    Optional[Tuple[str, int]]
        (argument, position after it), or None if no argument is present
        or braces are unbalanced
    """
    while pos < len(expr) and expr[pos].isspace():
        pos += 1
    if pos >= len(expr):
        return None

    if expr[pos] == "{":
        depth = 0
        for i in range(pos, len(expr)):
            if expr[i] == "{":
                depth += 1
            elif expr[i] == "}":
                depth -= 1
                if depth == 0:
                    return expr[pos + 1 : i], i + 1
        return None

    if not allow_bare:
        return None
    if expr[pos] == "\\":
        command = _UNKNOWN_COMMAND.match(expr, pos)
        if command:
            return command.group(), command.end()
        return None
    if expr[pos].isalnum():
        return expr[pos], pos + 1
    return None


def _rewrite_command(
    expr: str,
    pattern: Pattern,
    n_args: int,
    build: Callable[[re.Match, List[str]], str],
    allow_bare: bool = False,
) -> str:
    """
    Rewrite every occurrence of a command taking n_args arguments.

    Runs as an explicit loop until no rewritable occurrence remains (fixed
    point). The outermost occurrence is rewritten first; nested occurrences
    inside its arguments are picked up on later iterations. Malformed
    occurrences are skipped and left for the cleanup passes.
    """
    start = 0
    while True:
        match = pattern.search(expr, start)
        if match is None:
            return expr

        pos = match.end()
        args = []
        for _ in range(n_args):
            argument = _read_argument(expr, pos, allow_bare)
            if argument is None:
                break
            arg, pos = argument
            args.append(arg)

        if len(args) < n_args:
            start = match.end()
            continue

        expr = expr[: match.start()] + build(match, args) + expr[pos:]
        start = match.start()


def _expand_groups(expr: str) -> str:
    expr = _rewrite_command(
        expr, _FRAC, 2, lambda m, a: f"(({a[0]})/({a[1]}))", allow_bare=True
    )
    expr = _rewrite_command(
        expr, _ROOT_WITH_INDEX, 1, lambda m, a: f"(({a[0]})^(1/({m.group(1)})))"
    )
    return expr


def _absolute_value_bars(expr: str) -> str:
    """Rewrite paired bare bars |a| to abs(a); an odd count is left alone."""
    if expr.count("|") % 2:
        return expr

    parts = expr.split("|")
    rebuilt = [parts[0]]
    for index, part in enumerate(parts[1:]):
        rebuilt.append("abs(" if index % 2 == 0 else ")")
        rebuilt.append(part)
    return "".join(rebuilt)


# ============================================================================
# Implicit Multiplication (passes 12-13)
# ============================================================================

NUMBER = "number"
VARIABLE = "variable"
CONSTANT = "constant"
FUNCTION = "function"
LPAREN = "("
RPAREN = ")"
OPERATOR = "operator"
OTHER = "other"

_NUMBER = re.compile(r"(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_ATOMS = (NUMBER, VARIABLE, CONSTANT)
_LEFT_OPERANDS = (NUMBER, VARIABLE, CONSTANT, RPAREN)
_RIGHT_OPERANDS = (NUMBER, VARIABLE, CONSTANT, FUNCTION, LPAREN)


def tokenize(expr: str) -> List[Tuple[str, str]]:
    """
    Split text into (kind, text) tokens.

    Known function and constant names are matched longest-first; any other
    letter is a single-letter variable, so ``xy`` yields two variables while
    ``sinh`` stays one function. Numbers may carry an exponent (``1e-3``);
    an ``e`` not followed by exponent digits is the constant.

    Examples
    --------
    >>> tokenize("2xsin(y)")
    [('number', '2'), ('variable', 'x'), ('function', 'sin'), ('(', '('), ('variable', 'y'), (')', ')')]
    """
    tokens = []
    pos = 0
    while pos < len(expr):
        char = expr[pos]

        if char.isspace():
            pos += 1
            continue

        number = _NUMBER.match(expr, pos)
        if number:
            tokens.append((NUMBER, number.group()))
            pos = number.end()
            continue

        if char.isalpha():
            name = _PROTECTED_NAMES.match(expr, pos)
            if name:
                text = name.group()
                kind = FUNCTION if text in FUNCTION_NAMES else CONSTANT
            else:
                text = char
                kind = CONSTANT if char in CONSTANT_NAMES else VARIABLE
            tokens.append((kind, text))
            pos += len(text)
            continue

        if char in "()":
            tokens.append((char, char))
        elif char in "+-*/^,":
            tokens.append((OPERATOR, char))
        else:
            tokens.append((OTHER, char))
        pos += 1

    return tokens


def _insert_multiplication(tokens: List[Tuple[str, str]]) -> str:
    out: List[str] = []
    previous = None
    i = 0
    while i < len(tokens):
        kind, text = tokens[i]

        if text == "*":
            # Collapse repeats; drop a '*' at the start, after '(' or after
            # another operator (e.g. a leading unary minus)
            if not out or previous in (OPERATOR, LPAREN):
                i += 1
                continue

        if previous in _LEFT_OPERANDS and kind in _RIGHT_OPERANDS:
            out.append("*")

        # Function applied without parentheses to a single atom: sin x -> sin(x)
        if kind == FUNCTION and i + 1 < len(tokens) and tokens[i + 1][0] in _ATOMS:
            out.append(f"{text}({tokens[i + 1][1]})")
            previous = RPAREN
            i += 2
            continue

        out.append(text)
        previous = kind
        i += 1

    return "".join(out)


# ============================================================================
# Public API
# ============================================================================


def normalize(raw: str) -> CanonicalExpression:
    """
    Rewrite user notation into a canonical infix expression.

    Parameters
    ----------
    raw : str
        User-entered expression (plain text or LaTeX)

    Returns
    -------
    CanonicalExpression
        Normalized expression with explicit multiplication and no whitespace

    Raises
    ------
    ExpressionSyntaxError
        If raw is not a string, or nothing usable remains after normalization

    Examples
    --------
    >>> normalize("2x + y") == normalize("2*x + y")
    True
    >>> normalize(r"\\sin\\left(x\\right)")
    'sin(x)'
    >>> normalize("xy")
    'x*y'
    """
    if not isinstance(raw, str):
        raise ExpressionSyntaxError(
            f"Expression must be a string, got {type(raw).__name__}"
        )

    expr = raw.strip()

    expr = _apply(expr, _SPACING)  # 1
    expr = _apply(expr, _MULTIPLICATION)  # 2
    expr = _apply(expr, _DIVISION)  # 3
    expr = _expand_groups(expr)  # 4
    expr = _apply(expr, _DELIMITERS)  # 5
    expr = _absolute_value_bars(expr)

    # 6
    expr = _rewrite_command(expr, _OPERATORNAME, 1, lambda m, a: a[0].strip())
    expr = _rewrite_command(
        expr, _SQRT, 1, lambda m, a: f"sqrt({a[0]})", allow_bare=True
    )
    expr = _apply(expr, _FUNCTIONS)

    expr = _apply(expr, _CONSTANTS)  # 7

    # 8
    expr = _apply(expr, _SUPERSCRIPTS)
    expr = _rewrite_command(expr, _EXPONENT_GROUP, 1, lambda m, a: f"^({a[0]})")
    expr = _SINGLE_DIGIT_EXPONENT.sub(r"^\1", expr)

    # 9
    expr = _rewrite_command(expr, _SUBSCRIPT_GROUP, 1, lambda m, a: "")
    expr = _SIMPLE_SUBSCRIPT.sub("", expr)
    expr = expr.replace("{", "(").replace("}", ")")

    # 10
    expr = _UNKNOWN_COMMAND.sub("", expr)
    expr = expr.replace("\\", "")

    expr = _WHITESPACE.sub(" ", expr).strip()  # 11

    tokens = tokenize(expr)
    if not any(kind in _ATOMS for kind, _ in tokens):
        raise ExpressionSyntaxError(
            f"Expression {raw!r} is empty after normalization"
            if not tokens
            else f"Expression {raw!r} contains no numbers, variables or constants"
        )

    return _insert_multiplication(tokens)  # 12, 13


__all__ = [
    "ExpressionSyntaxError",
    "FUNCTION_NAMES",
    "CONSTANT_NAMES",
    "tokenize",
    "normalize",
]
