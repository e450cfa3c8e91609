"""
NumPy code generation for slope expressions.

Turns a SymPy expression in the two ODE variables into a NumPy function with
IEEE semantics: invalid operations produce nan and overflow/division by zero
produce +-inf instead of raising. Complex intermediate results (e.g. the
SymPy simplification of log(-1)) are mapped to nan, since slopes are real.

Scalar and array inputs are supported; constant expressions are broadcast
to the input shape.
"""

from typing import Callable, Sequence

import numpy as np
import sympy as sp

# Helper functions


def _numpy_cot(x):
    """Cotangent (not provided by NumPy)."""
    return 1.0 / np.tan(x)


def _numpy_sec(x):
    """Secant (not provided by NumPy)."""
    return 1.0 / np.cos(x)


def _numpy_csc(x):
    """Cosecant (not provided by NumPy)."""
    return 1.0 / np.sin(x)


# NumPy mappings (only functions NumPy lacks)

SYMPY_TO_NUMPY_LAMBDIFY = {
    "cot": _numpy_cot,
    "sec": _numpy_sec,
    "csc": _numpy_csc,
}


_FLOAT64_MAX = float(np.finfo(np.float64).max)


def _float_overflowing_constants(expr: sp.Expr) -> sp.Expr:
    """
    Replace constants beyond the float64 range with SymPy Floats.

    SymPy keeps exact integers such as 10**400; lambdify would emit them as
    Python ints, which NumPy cannot convert. As Floats they are printed as
    float literals and evaluate to a signed infinity.
    """
    candidates = expr.atoms(sp.Number) | {p for p in expr.atoms(sp.Pow) if not p.free_symbols}
    replacements = {}
    for constant in candidates:
        value = sp.N(constant)
        if value.is_real and abs(value) > _FLOAT64_MAX:
            replacements[constant] = sp.Float(value)
    return expr.xreplace(replacements) if replacements else expr


def _real_or_nan(result):
    """
    Drop the imaginary part of a result, or replace it with nan.

    Args:
        result: Scalar or array returned by the lambdified function

    Returns:
        Real float64 array with nan where the imaginary part was non-zero
    """
    result = np.asarray(result)
    if np.iscomplexobj(result):
        result = np.where(result.imag == 0, result.real, np.nan)
    return result.astype(np.float64)


def generate_numpy_function(expr: sp.Expr, symbols: Sequence[sp.Symbol]) -> Callable:
    """
    Generate a NumPy function from a scalar SymPy expression.

    Args:
        expr: SymPy expression
        symbols: Input symbols in order

    Returns:
        Function of len(symbols) arguments returning a float64 array with
        the broadcast shape of its inputs (0-d for scalar inputs)

    Examples:
        >>> x, y = sp.symbols('x y')
        >>> f = generate_numpy_function(x * y, [x, y])
        >>> float(f(2.0, 3.0))
        6.0
        >>> g = generate_numpy_function(1 / y, [x, y])
        >>> float(g(1.0, 0.0))
        inf
    """
    expr = _float_overflowing_constants(sp.sympify(expr))
    func = sp.lambdify(symbols, expr, modules=[SYMPY_TO_NUMPY_LAMBDIFY, "numpy"])

    def wrapped_func(*args):
        # float64 inputs give IEEE behaviour (Python floats raise on 1/0)
        arrays = np.broadcast_arrays(*[np.asarray(a, dtype=np.float64) for a in args])

        with np.errstate(all="ignore"):
            try:
                result = _real_or_nan(func(*arrays))
            except (ZeroDivisionError, OverflowError, TypeError):
                result = np.float64(np.nan)

        return np.broadcast_to(result, arrays[0].shape).copy()

    return wrapped_func


__all__ = [
    "SYMPY_TO_NUMPY_LAMBDIFY",
    "generate_numpy_function",
]
