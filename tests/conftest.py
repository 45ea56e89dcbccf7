"""Shared pytest fixtures for curve editor tests."""

from __future__ import annotations

from typing import Callable

import pytest

from curvedit.core import Anchor, Control, CurvePoint, StepPoint


@pytest.fixture
def step_points() -> list[CurvePoint]:
    """Step curve that jumps from 0 to 10 at x=50."""
    return [StepPoint(0.0, 0.0), StepPoint(50.0, 10.0), StepPoint(100.0, 10.0)]


@pytest.fixture
def peak_points() -> list[CurvePoint]:
    """Three sorted anchors with a single peak in the middle."""
    return [Anchor(0.0, 0.0), Anchor(50.0, 100.0), Anchor(100.0, 0.0)]


@pytest.fixture
def flat_spline() -> list[CurvePoint]:
    """Five-node flat Bezier spline: anchors at 0, 50, 100 and controls at 25, 75."""
    return [
        Anchor(0.0, 0.0),
        Control(25.0, 0.0),
        Anchor(50.0, 0.0),
        Control(75.0, 0.0),
        Anchor(100.0, 0.0),
    ]


@pytest.fixture
def uneven_spline() -> list[CurvePoint]:
    """Bezier spline with its interior anchor at x=40."""
    return [
        Anchor(0.0, 0.0),
        Control(20.0, 10.0),
        Anchor(40.0, 20.0),
        Control(70.0, 30.0),
        Anchor(100.0, 0.0),
    ]


@pytest.fixture
def assert_spline_structure() -> Callable[[list[CurvePoint], float], None]:
    """Check the anchor/control alternation and pinned endpoints of a spline."""

    def check(points: list[CurvePoint], x_max: float) -> None:
        assert len(points) >= 3
        assert len(points) % 2 == 1
        for i, p in enumerate(points):
            assert p.kind == ("anchor" if i % 2 == 0 else "control"), f"node {i} is {p.kind}"
        assert points[0].x == 0.0
        assert points[-1].x == x_max

    return check
