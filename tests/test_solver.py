"""Tests for the natural cubic coefficient solver."""

from __future__ import annotations

import math

import pytest

from curvedit.core import Anchor, CubicCoefficients, sample_at, solve_natural_cubic


class TestSolveNaturalCubic:
    """Tests for solve_natural_cubic."""

    def test_fewer_than_two_points_is_empty(self) -> None:
        assert len(solve_natural_cubic([])) == 0
        assert len(solve_natural_cubic([Anchor(0.0, 5.0)])) == 0

    def test_two_points_is_linear(self) -> None:
        coeffs = solve_natural_cubic([Anchor(0.0, 0.0), Anchor(10.0, 20.0)])
        assert len(coeffs) == 1
        assert coeffs.b[0] == pytest.approx(2.0)
        assert coeffs.c[0] == pytest.approx(0.0)
        assert coeffs.d[0] == pytest.approx(0.0)
        assert coeffs.evaluate(0, 5.0) == pytest.approx(10.0)

    def test_interpolates_every_knot(self, peak_points) -> None:
        coeffs = solve_natural_cubic(peak_points)
        assert len(coeffs) == len(peak_points) - 1
        for i, p in enumerate(peak_points[:-1]):
            assert coeffs.evaluate(i, p.x) == p.y
        last = peak_points[-1]
        assert coeffs.evaluate(len(coeffs) - 1, last.x) == pytest.approx(last.y, abs=1e-9)

    def test_peak_coefficients(self, peak_points) -> None:
        """Symmetric peak: y(25) = 3*25 - 0.0004*25**3."""
        coeffs = solve_natural_cubic(peak_points)
        assert coeffs.c[0] == pytest.approx(0.0)
        assert coeffs.b[0] == pytest.approx(3.0)
        assert coeffs.evaluate(0, 25.0) == pytest.approx(68.75)

    def test_natural_end_conditions(self, peak_points) -> None:
        coeffs = solve_natural_cubic(peak_points)
        # second derivative 2*c is zero at the first knot
        assert coeffs.c[0] == pytest.approx(0.0)
        # and at the last knot: c_last + 3*d_last*h == 0
        h = peak_points[-1].x - peak_points[-2].x
        assert coeffs.c[-1] + 3.0 * coeffs.d[-1] * h == pytest.approx(0.0, abs=1e-12)

    def test_duplicate_x_does_not_raise(self) -> None:
        """Zero-width intervals degrade to a flat segment instead of NaN."""
        pts = [Anchor(0.0, 0.0), Anchor(50.0, 10.0), Anchor(50.0, 30.0), Anchor(100.0, 0.0)]
        coeffs = solve_natural_cubic(pts)
        assert len(coeffs) == 3
        for values in (coeffs.a, coeffs.b, coeffs.c, coeffs.d):
            assert all(math.isfinite(v) for v in values)
        assert coeffs.b[1] == 0.0
        assert coeffs.d[1] == 0.0


class TestCubicCoefficients:
    """Tests for the derived-cache helpers."""

    def test_empty(self) -> None:
        empty = CubicCoefficients.empty()
        assert len(empty) == 0
        assert not empty.matches([Anchor(0.0, 0.0), Anchor(1.0, 1.0)])

    def test_matches_solved_points(self, peak_points) -> None:
        coeffs = solve_natural_cubic(peak_points)
        assert coeffs.matches(peak_points)

    def test_stale_after_y_change(self, peak_points) -> None:
        coeffs = solve_natural_cubic(peak_points)
        moved = [p.copy() for p in peak_points]
        moved[1].y = 90.0
        assert not coeffs.matches(moved)

    def test_stale_after_last_y_change(self, peak_points) -> None:
        """Moving only the right endpoint invalidates the cache."""
        coeffs = solve_natural_cubic(peak_points)
        moved = [p.copy() for p in peak_points]
        moved[2].y = 500.0
        assert not coeffs.matches(moved)
        # stale coefficients fall back to linear interpolation
        assert sample_at(75, "naturalCubic", moved, coeffs) == pytest.approx(300.0)

    def test_stale_after_point_count_change(self, peak_points) -> None:
        coeffs = solve_natural_cubic(peak_points)
        assert not coeffs.matches(peak_points + [Anchor(150.0, 0.0)])
