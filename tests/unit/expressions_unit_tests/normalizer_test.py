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
Unit tests for the expression normalizer

Tests cover:
1. Implicit multiplication (numbers, variables, parentheses, functions)
2. Protection of function and constant names
3. LaTeX operators, delimiters, fractions, roots, exponents
4. Function and constant spellings
5. Cleanup of stray operators and whitespace
6. Empty / degenerate input
"""

import pytest

from odelab.expressions.normalizer import (
    ExpressionSyntaxError,
    normalize,
    tokenize,
)

# ============================================================================
# Test Class 1: Implicit Multiplication
# ============================================================================


class TestImplicitMultiplication:
    """Test insertion of explicit '*'"""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("2(x+1)", "2*(x+1)"),
            ("xy", "x*y"),
            ("sin(x)y", "sin(x)*y"),
            ("2x", "2*x"),
            ("(x+1)(y-1)", "(x+1)*(y-1)"),
            ("(x+1)2", "(x+1)*2"),
            ("x(y+1)", "x*(y+1)"),
            ("3sin(x)", "3*sin(x)"),
            ("2pi", "2*pi"),
        ],
    )
    def test_insertion(self, raw, expected):
        assert normalize(raw) == expected

    def test_equivalent_spellings(self):
        """2x + y and 2*x + y normalize identically"""
        assert normalize("2x + y") == normalize("2*x + y") == "2*x+y"

    def test_function_call_result_times_variable(self):
        """sin(x)y is sin(x)*y, not sin(x*y)"""
        result = normalize("sin(x)y")
        assert result == "sin(x)*y"
        assert "x*y" not in result


# ============================================================================
# Test Class 2: Name Protection
# ============================================================================


class TestNameProtection:
    """Test that known names are never split into products"""

    @pytest.mark.parametrize(
        "name", ["sin", "cos", "tan", "sinh", "cosh", "tanh", "exp", "sqrt", "log", "abs"]
    )
    def test_function_not_split(self, name):
        result = normalize(f"{name}(x)")
        assert result == f"{name}(x)"

    def test_longest_name_wins(self):
        """sinh is one function, not sin*h"""
        assert normalize("sinh(y)") == "sinh(y)"
        assert normalize("log10(x)") == "log10(x)"

    def test_pi_constant_not_split(self):
        assert normalize("pi*y") == "pi*y"

    def test_variable_next_to_function(self):
        assert normalize("ysin(x)") == "y*sin(x)"

    def test_function_without_parentheses(self):
        assert normalize("sin x") == "sin(x)"

    def test_bare_function_takes_single_atom(self):
        """Only the next atom is wrapped: sin x^2 is sin(x)^2"""
        assert normalize("sin x^2") == "sin(x)^2"
        assert normalize("sin(x^2)") == "sin(x^2)"

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("1e-3*y", "1e-3*y"),
            ("2.5E+4y", "2.5E+4*y"),
            ("3e2x", "3e2*x"),
            (".5e1", ".5e1"),
        ],
    )
    def test_scientific_notation_is_one_number(self, raw, expected):
        assert normalize(raw) == expected

    def test_e_without_exponent_digits_is_constant(self):
        assert normalize("2e^x") == "2*e^x"
        assert normalize("2e-y") == "2*e-y"

    def test_tokenizer_classifies_names(self):
        kinds = [kind for kind, _ in tokenize("2xsinh(pi)")]
        assert kinds == ["number", "variable", "function", "(", "constant", ")"]


# ============================================================================
# Test Class 3: LaTeX
# ============================================================================


class TestLatex:
    """Test LaTeX rewriting"""

    def test_cdot_and_left_right(self):
        assert normalize(r"-0.2\cdot\left(y-20\right)") == "-0.2*(y-20)"

    def test_times_and_div(self):
        assert normalize(r"x\times y\div 2") == "x*y/2"

    def test_frac(self):
        assert normalize(r"\frac{x}{y}") == "((x)/(y))"

    def test_nested_frac(self):
        assert normalize(r"\frac{\frac{1}{x}}{y}") == "((((1)/(x)))/(y))"

    def test_frac_bare_arguments(self):
        assert normalize(r"\frac12 y") == "((1)/(2))*y"

    def test_sqrt(self):
        assert normalize(r"\sqrt{x+1}") == "sqrt(x+1)"

    def test_nth_root(self):
        assert normalize(r"\sqrt[3]{y}") == "((y)^(1/(3)))"

    def test_exponent_group(self):
        assert normalize(r"y^{2}") == "y^2"
        assert normalize(r"e^{-x}") == "e^(-x)"

    def test_trig_commands(self):
        assert normalize(r"\sin\left(x\right)\cdot y") == "sin(x)*y"

    def test_ln_is_natural_log(self):
        assert normalize(r"\ln(y)") == "log(y)"
        assert normalize("ln(y)") == "log(y)"

    def test_latex_log_is_base_ten(self):
        assert normalize(r"\log(y)") == "log10(y)"

    def test_arc_functions(self):
        assert normalize(r"\arctan(x)") == "atan(x)"

    def test_constants(self):
        assert normalize(r"\pi y") == "pi*y"
        assert normalize("πy") == "pi*y"
        assert normalize(r"\infty") == "inf"

    def test_absolute_value(self):
        assert normalize(r"\left|y\right|") == "abs(y)"
        assert normalize("|y|") == "abs(y)"

    def test_spacing_commands_removed(self):
        assert normalize(r"x\,y\quad+1") == "x*y+1"

    def test_subscripts_dropped(self):
        assert normalize(r"y_{0}+y") == "y+y"

    def test_unknown_command_removed(self):
        assert normalize(r"\mathrm{y}") == "(y)"

    def test_python_power_operator(self):
        assert normalize("y**2") == "y^2"

    def test_unicode_superscript(self):
        assert normalize("y²") == "y^2"


# ============================================================================
# Test Class 4: Cleanup and Errors
# ============================================================================


class TestCleanupAndErrors:
    """Test operator cleanup and degenerate input"""

    def test_leading_multiplication_dropped(self):
        assert normalize("*y") == "y"

    def test_repeated_multiplication_collapsed(self):
        assert normalize("x* *y") == "x*y"

    def test_whitespace_removed(self):
        assert normalize("  x   +   y  ") == "x+y"

    def test_empty_raises(self):
        with pytest.raises(ExpressionSyntaxError, match="empty"):
            normalize("")

    def test_whitespace_only_raises(self):
        with pytest.raises(ExpressionSyntaxError):
            normalize("   ")

    def test_only_operators_raises(self):
        with pytest.raises(ExpressionSyntaxError):
            normalize("+-*/")

    def test_only_latex_layout_raises(self):
        with pytest.raises(ExpressionSyntaxError):
            normalize(r"\quad \,")

    def test_non_string_raises(self):
        with pytest.raises(ExpressionSyntaxError):
            normalize(None)

    def test_syntax_error_is_value_error(self):
        with pytest.raises(ValueError):
            normalize("")

    def test_idempotent(self):
        once = normalize(r"2x\cdot\sin(y) + \frac{1}{2}")
        assert normalize(once) == once
