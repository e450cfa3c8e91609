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
Unit tests for the expression compiler

Tests cover:
1. Evaluation of arithmetic, functions and constants
2. Variable binding (x/y, t alias, custom names)
3. Numerical anomalies returned as nan/inf
4. Compile errors (identifiers, characters, parentheses, arity)
5. Vectorized evaluation
6. parse_equation end-to-end and caching
"""

import math

import numpy as np
import pytest
import sympy as sp

from odelab.expressions.codegen_utils import generate_numpy_function
from odelab.expressions.compiler import (
    CompileError,
    CompiledEvaluator,
    clear_compile_cache,
    compile_expression,
    parse_equation,
)
from odelab.expressions.normalizer import ExpressionSyntaxError

# ============================================================================
# Test Class 1: Evaluation
# ============================================================================


class TestEvaluation:
    """Test values of compiled expressions"""

    @pytest.mark.parametrize(
        "expr, x, y, expected",
        [
            ("x+y", 1.0, 2.0, 3.0),
            ("x*y", 2.0, 3.0, 6.0),
            ("y^2", 0.0, 3.0, 9.0),
            ("-0.2*(y-20)", 0.0, 100.0, -16.0),
            ("y-x^2+1", 1.0, 2.0, 2.0),
            ("sin(x)*y", 0.0, 5.0, 0.0),
            ("exp(x)", 1.0, 0.0, math.e),
            ("log(y)", 0.0, math.e, 1.0),
            ("log10(y)", 0.0, 100.0, 2.0),
            ("sqrt(y)", 0.0, 16.0, 4.0),
            ("abs(y)", 0.0, -3.0, 3.0),
            ("pi", 0.0, 0.0, math.pi),
            ("e^x", 2.0, 0.0, math.e**2),
            ("cot(x)", math.pi / 4, 0.0, 1.0),
            ("sec(x)", 0.0, 0.0, 1.0),
            ("csc(x)", math.pi / 2, 0.0, 1.0),
            ("atan(x)", 1.0, 0.0, math.pi / 4),
            ("tanh(x)", 0.0, 0.0, 0.0),
        ],
    )
    def test_values(self, expr, x, y, expected):
        f = compile_expression(expr)
        assert f(x, y) == pytest.approx(expected)

    def test_returns_python_float(self):
        f = compile_expression("x+y")
        assert isinstance(f(1.0, 2.0), float)

    def test_constant_expression(self):
        f = compile_expression("2")
        assert f(5.0, 7.0) == 2.0

    def test_integer_division_is_true_division(self):
        f = compile_expression("1/2*y")
        assert f(0.0, 1.0) == pytest.approx(0.5)

    def test_repr(self):
        f = compile_expression("x+y")
        assert "x+y" in repr(f)
        assert isinstance(f, CompiledEvaluator)


# ============================================================================
# Test Class 2: Variable Binding
# ============================================================================


class TestVariables:
    """Test binding of independent/dependent variables"""

    def test_t_alias_for_independent(self):
        f = compile_expression("t*y")
        assert f(2.0, 3.0) == 6.0

    def test_custom_variable_names(self):
        f = compile_expression("t*u", independent="t", dependent="u")
        assert f(2.0, 5.0) == 10.0
        assert f.independent == "t"
        assert f.dependent == "u"

    def test_x_alias_when_independent_is_t(self):
        f = compile_expression("x+y", independent="t")
        assert f(1.0, 2.0) == 3.0

    def test_alias_not_applied_when_it_is_dependent(self):
        """If t is the dependent variable it is not an alias of x"""
        f = compile_expression("x+t", independent="x", dependent="t")
        assert f(1.0, 10.0) == 11.0

    def test_same_names_rejected(self):
        with pytest.raises(CompileError):
            compile_expression("x", independent="x", dependent="x")

    def test_e_not_allowed_as_variable(self):
        with pytest.raises(CompileError):
            compile_expression("e", independent="e")

    def test_multi_letter_variable_rejected(self):
        with pytest.raises(CompileError):
            compile_expression("x", dependent="yy")


# ============================================================================
# Test Class 3: Numerical Anomalies
# ============================================================================


class TestNumericalAnomalies:
    """Test that evaluation never raises for numerical reasons"""

    def test_log_of_negative_is_nan(self):
        f = compile_expression("log(y)")
        assert math.isnan(f(0.0, -1.0))

    def test_division_by_zero_is_inf(self):
        f = compile_expression("1/y")
        assert math.isinf(f(0.0, 0.0))

    def test_zero_over_zero_is_nan(self):
        f = compile_expression("x/y")
        assert math.isnan(f(0.0, 0.0))

    def test_overflow_is_inf(self):
        f = compile_expression("exp(y)")
        assert f(0.0, 1000.0) == math.inf

    def test_sqrt_of_negative_is_nan(self):
        f = compile_expression("sqrt(y)")
        assert math.isnan(f(0.0, -4.0))

    def test_huge_integer_literal_is_inf(self):
        f = parse_equation("10^400")
        assert f(0.0, 1.0) == math.inf

    @pytest.mark.parametrize("y, expected", [(1.0, math.inf), (-1.0, -math.inf)])
    def test_huge_coefficient_keeps_sign(self, y, expected):
        f = compile_expression("2^2000*y")
        assert f(0.0, y) == expected

    def test_huge_coefficient_on_grid(self):
        f = compile_expression("-10^400+x")
        result = f.evaluate_grid(np.zeros(3), np.zeros(3))
        assert np.all(result == -np.inf)

    def test_removable_singularity_simplified(self):
        f = parse_equation("y/y")
        assert f(0.0, 0.0) == 1.0

    def test_no_warnings_emitted(self, recwarn):
        compile_expression("log(y)")(0.0, -1.0)
        compile_expression("1/y")(0.0, 0.0)
        assert len(recwarn) == 0


# ============================================================================
# Test Class 4: Compile Errors
# ============================================================================


class TestCompileErrors:
    """Test rejection of invalid canonical text"""

    def test_unknown_identifier(self):
        with pytest.raises(CompileError, match="Unknown identifier 'z'"):
            compile_expression("z+y")

    def test_unknown_function(self):
        with pytest.raises(CompileError, match="foo"):
            compile_expression("foo(x)")

    def test_python_builtins_not_reachable(self):
        with pytest.raises(CompileError):
            compile_expression("__import__(os)")

    def test_invalid_character(self):
        with pytest.raises(CompileError, match="Invalid character"):
            compile_expression("x;y")

    def test_unbalanced_open(self):
        with pytest.raises(CompileError, match="Unbalanced"):
            compile_expression("(x+y")

    def test_unbalanced_close(self):
        with pytest.raises(CompileError, match="Unbalanced"):
            compile_expression("x+y)")

    def test_wrong_arity(self):
        with pytest.raises(CompileError, match="exactly 1 argument"):
            compile_expression("sin(x,y)")

    def test_dangling_operator(self):
        with pytest.raises(CompileError):
            compile_expression("x+")

    def test_tuple_rejected(self):
        with pytest.raises(CompileError):
            compile_expression("x,y")

    def test_function_without_argument(self):
        with pytest.raises(CompileError):
            compile_expression("sin")

    def test_empty(self):
        with pytest.raises(CompileError):
            compile_expression("")

    def test_compile_error_is_value_error(self):
        with pytest.raises(ValueError):
            compile_expression("z")


# ============================================================================
# Test Class 5: Vectorized Evaluation
# ============================================================================


class TestEvaluateGrid:
    """Test array evaluation"""

    def test_matches_scalar_calls(self):
        f = compile_expression("sin(x)*y+1")
        xs = np.linspace(0, 3, 7)
        ys = np.linspace(-1, 1, 7)
        grid = f.evaluate_grid(xs, ys)
        expected = [f(x, y) for x, y in zip(xs, ys)]
        assert np.allclose(grid, expected)

    def test_broadcast_meshgrid(self):
        f = compile_expression("x+y")
        X, Y = np.meshgrid(np.arange(3.0), np.arange(2.0), indexing="ij")
        result = f.evaluate_grid(X, Y)
        assert result.shape == (3, 2)
        assert np.allclose(result, X + Y)

    def test_constant_broadcast_to_grid(self):
        f = compile_expression("2")
        result = f.evaluate_grid(np.zeros(4), np.zeros(4))
        assert result.shape == (4,)
        assert np.all(result == 2.0)

    def test_nan_where_undefined(self):
        f = compile_expression("log(y)")
        result = f.evaluate_grid(np.zeros(3), np.array([-1.0, 1.0, 0.0]))
        assert math.isnan(result[0])
        assert result[1] == 0.0
        assert result[2] == -np.inf


# ============================================================================
# Test Class 6: parse_equation
# ============================================================================


class TestParseEquation:
    """Test normalize + compile"""

    def test_latex_input(self):
        f = parse_equation(r"-0.2\cdot\left(y-20\right)")
        assert f(0.0, 100.0) == pytest.approx(-16.0)

    def test_implicit_multiplication(self):
        f = parse_equation("2x + y")
        assert f(1.0, 1.0) == 3.0

    def test_textbook_problem(self):
        f = parse_equation("y - t^2 + 1")
        assert f(1.0, 2.0) == 2.0

    @pytest.mark.parametrize(
        "raw, expected",
        [("1e-3*y", 0.002), ("2.5E+4y", 50000.0), ("2e^y", 2.0 * math.e**2)],
    )
    def test_scientific_notation(self, raw, expected):
        f = parse_equation(raw)
        assert f(0.0, 2.0) == pytest.approx(expected)

    def test_frac_input(self):
        f = parse_equation(r"\frac{y}{2}")
        assert f(0.0, 3.0) == 1.5

    def test_syntax_error_propagates(self):
        with pytest.raises(ExpressionSyntaxError, match="Error parsing equation"):
            parse_equation("   ")

    def test_compile_error_propagates(self):
        with pytest.raises(CompileError, match="Error parsing equation"):
            parse_equation("z + y")

    def test_compile_error_chained(self):
        with pytest.raises(CompileError) as excinfo:
            parse_equation("z + y")
        assert isinstance(excinfo.value.__cause__, CompileError)

    def test_cached_evaluator_reused(self):
        assert compile_expression("x*y+3") is compile_expression("x*y+3")

    def test_clear_cache(self):
        first = compile_expression("x*y+4")
        clear_compile_cache()
        second = compile_expression("x*y+4")
        assert first is not second
        assert second(1.0, 1.0) == 5.0


# ============================================================================
# Test Class 7: Code Generation
# ============================================================================


class TestCodegen:
    """Test the NumPy code generation helper directly"""

    def test_scalar_output_is_zero_dim(self):
        x, y = sp.symbols("x y")
        func = generate_numpy_function(x * y, [x, y])
        assert np.ndim(func(2.0, 3.0)) == 0

    def test_complex_result_becomes_nan(self):
        x, y = sp.symbols("x y")
        func = generate_numpy_function(sp.log(-1) + x, [x, y])
        assert math.isnan(float(func(0.0, 0.0)))
