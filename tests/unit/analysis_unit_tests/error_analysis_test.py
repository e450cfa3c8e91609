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
Unit tests for error and efficiency analysis

Tests cover:
1. Error reports against closed-form and trajectory references
2. Missing, mismatched and undefined references
3. Efficiency comparison, ties and degenerate inputs
4. Reference construction
"""

import math

import numpy as np
import pytest

from odelab.analysis.error_analysis import (
    analyze,
    compare_efficiency,
    reference_from_arrays,
    reference_from_exact,
)

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def euler_trajectory():
    """Explicit Euler on dy/dx = y, y(0) = 1, h = 0.5, xf = 1.5"""
    return {
        "x": np.array([0.0, 0.5, 1.0, 1.5]),
        "y": np.array([1.0, 1.5, 2.25, 3.375]),
        "nfev": 3,
        "solver": "Explicit Euler",
    }


@pytest.fixture
def exact_reference(euler_trajectory):
    return reference_from_exact(np.exp, euler_trajectory, "e^x")


# ============================================================================
# Test Class 1: Error Reports
# ============================================================================


class TestAnalyze:
    """Test ErrorReport computation"""

    def test_hand_computed_errors(self, euler_trajectory, exact_reference):
        report = analyze(euler_trajectory, exact_reference)
        errors = np.abs(euler_trajectory["y"] - np.exp(euler_trajectory["x"]))
        assert report["final_error"] == pytest.approx(1.1067, abs=1e-4)
        assert report["max_error"] == pytest.approx(errors.max())
        assert report["avg_error"] == pytest.approx(errors.mean())
        assert report["n_points"] == 4

    def test_ordering_of_statistics(self, euler_trajectory, exact_reference):
        report = analyze(euler_trajectory, exact_reference)
        assert report["avg_error"] <= report["max_error"]
        assert report["final_error"] <= report["max_error"]

    def test_trajectory_as_reference(self, euler_trajectory):
        reference = {"y": euler_trajectory["y"] + 0.5}
        report = analyze(euler_trajectory, reference)
        assert report["max_error"] == pytest.approx(0.5)
        assert report["avg_error"] == pytest.approx(0.5)

    def test_perfect_match(self, euler_trajectory):
        report = analyze(euler_trajectory, {"exact": euler_trajectory["y"].copy()})
        assert report["max_error"] == 0.0

    def test_undefined_reference_points_skipped(self, euler_trajectory):
        reference = {"exact": [1.0, None, float("nan"), 3.0]}
        report = analyze(euler_trajectory, reference)
        assert report["n_points"] == 2
        assert report["final_error"] == pytest.approx(0.375)
        assert report["max_error"] == pytest.approx(0.375)

    def test_diverged_candidate_reports_inf(self, euler_trajectory, exact_reference):
        diverged = dict(euler_trajectory, y=np.array([1.0, 1.5, np.nan, np.nan]))
        report = analyze(diverged, exact_reference)
        assert report["max_error"] == math.inf
        assert report["final_error"] == math.inf


# ============================================================================
# Test Class 2: Missing or Invalid References
# ============================================================================


class TestAnalyzeWithoutReference:
    """Test that analyze() returns None instead of raising"""

    def test_no_reference(self, euler_trajectory):
        assert analyze(euler_trajectory, None) is None

    def test_no_candidate(self, exact_reference):
        assert analyze(None, exact_reference) is None

    def test_length_mismatch(self, euler_trajectory):
        assert analyze(euler_trajectory, {"exact": [1.0, 2.0]}) is None

    def test_all_reference_values_undefined(self, euler_trajectory):
        assert analyze(euler_trajectory, {"exact": [None] * 4}) is None

    def test_reference_without_values(self, euler_trajectory):
        assert analyze(euler_trajectory, {"formula": "e^x"}) is None

    def test_non_numeric_candidate(self, exact_reference):
        assert analyze({"y": ["a", "b", "c", "d"]}, exact_reference) is None


# ============================================================================
# Test Class 3: Efficiency Comparison
# ============================================================================


class TestCompareEfficiency:
    """Test max error per evaluation comparison"""

    def test_rk4_wins(self):
        euler = {"solver": "Explicit Euler", "nfev": 10}
        rk4 = {"solver": "RK4 (Classic)", "nfev": 40}
        result = compare_efficiency(euler, {"max_error": 0.1}, rk4, {"max_error": 0.0004})
        assert result["winner"] == "RK4 (Classic)"
        assert result["improvement"] == 99.9
        assert result["efficiencies"]["Explicit Euler"] == pytest.approx(0.01)
        assert result["efficiencies"]["RK4 (Classic)"] == pytest.approx(1e-5)

    def test_euler_wins(self):
        euler = {"solver": "Explicit Euler", "nfev": 10}
        rk4 = {"solver": "RK4 (Classic)", "nfev": 40}
        result = compare_efficiency(euler, {"max_error": 0.01}, rk4, {"max_error": 0.2})
        assert result["winner"] == "Explicit Euler"
        assert result["improvement"] == 80.0

    def test_tie_goes_to_fewer_evaluations(self):
        euler = {"solver": "Explicit Euler", "nfev": 10}
        rk4 = {"solver": "RK4 (Classic)", "nfev": 40}
        result = compare_efficiency(rk4, {"max_error": 0.4}, euler, {"max_error": 0.1})
        assert result["winner"] == "Explicit Euler"
        assert result["improvement"] == 0.0

    def test_both_exact(self):
        a = {"solver": "Explicit Euler", "nfev": 20}
        b = {"solver": "RK4 (Classic)", "nfev": 80}
        result = compare_efficiency(a, {"max_error": 0.0}, b, {"max_error": 0.0})
        assert result["winner"] == "Explicit Euler"
        assert result["improvement"] == 0.0

    def test_infinite_error_loses(self):
        a = {"solver": "Explicit Euler", "nfev": 10}
        b = {"solver": "RK4 (Classic)", "nfev": 40}
        result = compare_efficiency(a, {"max_error": math.inf}, b, {"max_error": 1.0})
        assert result["winner"] == "RK4 (Classic)"
        assert result["improvement"] == 0.0

    def test_duplicate_solver_names(self):
        a = {"solver": "RK4 (Classic)", "nfev": 40}
        b = {"solver": "RK4 (Classic)", "nfev": 80}
        result = compare_efficiency(a, {"max_error": 1e-3}, b, {"max_error": 1e-5})
        assert set(result["efficiencies"]) == {"RK4 (Classic) (a)", "RK4 (Classic) (b)"}
        assert result["winner"] == "RK4 (Classic) (b)"

    def test_missing_report(self):
        a = {"solver": "Explicit Euler", "nfev": 10}
        b = {"solver": "RK4 (Classic)", "nfev": 40}
        assert compare_efficiency(a, None, b, {"max_error": 0.1}) is None
        assert compare_efficiency(a, {"max_error": 0.1}, b, None) is None

    def test_no_evaluations(self):
        a = {"solver": "Explicit Euler", "nfev": 0}
        b = {"solver": "RK4 (Classic)", "nfev": 40}
        assert compare_efficiency(a, {"max_error": 0.1}, b, {"max_error": 0.1}) is None


# ============================================================================
# Test Class 4: Reference Construction
# ============================================================================


class TestReferenceConstruction:
    """Test reference_from_exact and reference_from_arrays"""

    def test_from_exact(self, euler_trajectory):
        reference = reference_from_exact(np.exp, euler_trajectory, "e^x")
        assert np.allclose(reference["exact"], np.exp(euler_trajectory["x"]))
        assert np.array_equal(reference["grid"], euler_trajectory["x"])
        assert reference["formula"] == "e^x"

    def test_domain_error_becomes_nan(self):
        reference = reference_from_exact(lambda x: math.log(x - 0.5), {"x": [0.0, 1.0]})
        assert math.isnan(reference["exact"][0])
        assert reference["exact"][1] == pytest.approx(math.log(0.5))

    def test_overflow_becomes_nan(self):
        reference = reference_from_exact(lambda x: np.exp(1000.0 * x), {"x": [0.0, 1.0]})
        assert reference["exact"][0] == 1.0
        assert math.isnan(reference["exact"][1])

    def test_from_arrays(self):
        reference = reference_from_arrays([0.0, 1.0, 2.0], [1.0, None, 3.0], "y = 1 + x")
        assert reference["exact"][0] == 1.0
        assert math.isnan(reference["exact"][1])
        assert reference["formula"] == "y = 1 + x"

    def test_from_arrays_length_mismatch(self):
        with pytest.raises(ValueError, match="differ in length"):
            reference_from_arrays([0.0, 1.0], [1.0])
