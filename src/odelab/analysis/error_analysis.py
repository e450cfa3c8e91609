"""
Error and Efficiency Analysis

Compares integrator output against a reference:
- Absolute error statistics (max, mean, final) over aligned samples
- Error per slope evaluation, to compare methods of different cost

Samples are paired positionally; aligning the grids is the caller's job
(both integrators and the reference run on the same abscissas). Reference
values that are missing or non-finite are skipped, not treated as errors.
"""

import math
from typing import Optional, Sequence, Union

import numpy as np

from odelab.types.core import ArrayLike, ExactSolution
from odelab.types.trajectories import (
    EfficiencyComparison,
    ErrorReport,
    ReferenceSolution,
    Trajectory,
)

Reference = Union[Trajectory, ReferenceSolution]


def _reference_values(reference: Reference) -> Optional[Sequence]:
    if "exact" in reference:
        return reference["exact"]
    if "y" in reference:
        return reference["y"]
    return None


def _to_float(value) -> float:
    """Convert a reference entry to float; None or non-numeric -> nan"""
    if value is None:
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def analyze(candidate: Trajectory, reference: Optional[Reference]) -> Optional[ErrorReport]:
    """
    Absolute error of a trajectory against a reference.

    Args:
        candidate: Integrator output (uses its 'y')
        reference: Trajectory ('y') or ReferenceSolution ('exact'), or None

    Returns:
        ErrorReport over the valid pairs, or None when there is no reference,
        the lengths differ, or no pair is valid. Never raises.

    Example:
        >>> euler = {"y": np.array([1.0, 1.5, 2.25, 3.375])}
        >>> exact = {"exact": np.exp([0.0, 0.5, 1.0, 1.5])}
        >>> report = analyze(euler, exact)
        >>> round(report["final_error"], 4)
        1.1067
    """
    if candidate is None or reference is None:
        return None

    values = _reference_values(reference)
    if values is None or "y" not in candidate:
        return None

    try:
        y = np.asarray(candidate["y"], dtype=np.float64)
        ref = np.array([_to_float(v) for v in values], dtype=np.float64)
    except (TypeError, ValueError):
        return None
    if y.shape != ref.shape:
        return None

    valid = np.isfinite(ref)
    if not np.any(valid):
        return None

    with np.errstate(invalid="ignore"):
        errors = np.abs(y[valid] - ref[valid])

    # A diverged candidate yields inf/nan errors; report them as inf
    errors = np.where(np.isnan(errors), np.inf, errors)

    return ErrorReport(
        max_error=float(np.max(errors)),
        avg_error=float(np.mean(errors)),
        final_error=float(errors[-1]),
        n_points=int(errors.size),
    )


def compare_efficiency(
    a: Trajectory,
    a_report: Optional[ErrorReport],
    b: Trajectory,
    b_report: Optional[ErrorReport],
) -> Optional[EfficiencyComparison]:
    """
    Compare two integrators by maximum error per slope evaluation.

    Lower is better. When both values are numerically equal the method with
    fewer evaluations wins.

    Args:
        a, b: Trajectories (uses 'solver' and 'nfev')
        a_report, b_report: Their error reports

    Returns:
        EfficiencyComparison, or None if a report is missing or a method
        made no evaluations

    Example:
        >>> euler = {"solver": "Explicit Euler", "nfev": 10}
        >>> rk4 = {"solver": "RK4 (Classic)", "nfev": 40}
        >>> result = compare_efficiency(
        ...     euler, {"max_error": 0.1}, rk4, {"max_error": 0.0004}
        ... )
        >>> result["winner"], result["improvement"]
        ('RK4 (Classic)', 99.9)
    """
    if a_report is None or b_report is None:
        return None

    a_fev, b_fev = int(a.get("nfev", 0)), int(b.get("nfev", 0))
    if a_fev <= 0 or b_fev <= 0:
        return None

    a_name = a.get("solver", "a")
    b_name = b.get("solver", "b")
    if a_name == b_name:
        a_name, b_name = f"{a_name} (a)", f"{b_name} (b)"

    a_eff = a_report["max_error"] / a_fev
    b_eff = b_report["max_error"] / b_fev

    if math.isclose(a_eff, b_eff, rel_tol=1e-12):
        a_wins = a_fev <= b_fev
    else:
        a_wins = a_eff < b_eff

    winner, winner_eff, loser_eff = (
        (a_name, a_eff, b_eff) if a_wins else (b_name, b_eff, a_eff)
    )

    if loser_eff > 0 and math.isfinite(loser_eff):
        improvement = round((loser_eff - winner_eff) / loser_eff * 100.0, 1)
    else:
        improvement = 0.0

    return EfficiencyComparison(
        efficiencies={a_name: a_eff, b_name: b_eff},
        winner=winner,
        improvement=improvement,
    )


# ============================================================================
# Reference Construction
# ============================================================================


def reference_from_exact(
    exact: ExactSolution, trajectory: Trajectory, formula: str = ""
) -> ReferenceSolution:
    """
    Evaluate a closed-form solution on a trajectory's abscissas.

    Points where the closed form raises an arithmetic/domain error or is
    non-finite become nan (skipped by analyze()).

    Example:
        >>> traj = {"x": np.array([0.0, 1.0])}
        >>> reference_from_exact(np.exp, traj)["exact"]
        array([1.        , 2.71828183])
    """
    grid = np.asarray(trajectory["x"], dtype=np.float64)
    values = np.empty_like(grid)

    with np.errstate(all="ignore"):
        for i, x in enumerate(grid):
            try:
                values[i] = float(exact(float(x)))
            except (ArithmeticError, ValueError):
                values[i] = np.nan

    values[~np.isfinite(values)] = np.nan
    return ReferenceSolution(grid=grid, exact=values, formula=formula)


def reference_from_arrays(
    grid: ArrayLike, exact: ArrayLike, formula: str = ""
) -> ReferenceSolution:
    """
    Wrap externally supplied reference values (e.g. from a symbolic service).

    Raises:
        ValueError: If grid and exact have different lengths
    """
    grid = np.asarray(grid, dtype=np.float64)
    exact = np.array([_to_float(v) for v in exact], dtype=np.float64)
    if grid.shape != exact.shape:
        raise ValueError(
            f"Reference grid and values differ in length ({grid.size} vs {exact.size})"
        )
    return ReferenceSolution(grid=grid, exact=exact, formula=formula)


__all__ = [
    "analyze",
    "compare_efficiency",
    "reference_from_exact",
    "reference_from_arrays",
]
