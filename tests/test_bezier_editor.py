"""Tests for the quadratic Bezier spline editor and its C1 handling."""

from __future__ import annotations

import math

import pytest

from curvedit.core import Anchor, BezierSplineEditor, Control, get_curve_editor


@pytest.fixture
def editor() -> BezierSplineEditor:
    return BezierSplineEditor()


def coords(points) -> list[tuple[float, float]]:
    return [(p.x, p.y) for p in points]


class TestDefaults:
    """Tests for fresh spline state."""

    def test_registered_as_spline(self) -> None:
        assert isinstance(get_curve_editor("spline"), BezierSplineEditor)

    def test_default_points(self, editor, assert_spline_structure) -> None:
        pts = editor.default_points(100)
        assert_spline_structure(pts, 100.0)
        assert coords(pts) == [(0.0, 0.0), (50.0, 0.0), (100.0, 0.0)]


class TestDrag:
    """Tests for dragging anchors and controls."""

    def test_control_drag_keeps_partner_collinear(self, editor, flat_spline) -> None:
        """Dragging control 1 swings control 3 to the opposite side of anchor 2."""
        anchor = flat_spline[2]
        before = math.dist(flat_spline[3].as_tuple(), anchor.as_tuple())

        grab = editor.grab(flat_spline, 1)
        pts, idx = editor.drag(flat_spline, 1, 20, -40, 100, grab)

        assert idx == 1
        c1, a2, c3 = pts[1], pts[2], pts[3]
        assert (c1.x, c1.y) == (20.0, -40.0)
        assert (c3.x, c3.y) == (65.0, 20.0)
        assert math.dist(c3.as_tuple(), a2.as_tuple()) == pytest.approx(before)

        # c3 lies on the ray from c1 through a2
        ray = (a2.x - c1.x, a2.y - c1.y)
        arm = (c3.x - a2.x, c3.y - a2.y)
        assert ray[0] * arm[1] - ray[1] * arm[0] == pytest.approx(0.0)
        assert ray[0] * arm[0] + ray[1] * arm[1] > 0

    def test_partner_distance_is_fixed_at_grab_time(self, editor, flat_spline) -> None:
        grab = editor.grab(flat_spline, 1)
        pts, _ = editor.drag(flat_spline, 1, 20, -40, 100, grab)
        pts, _ = editor.drag(pts, 1, 10, 30, 100, grab)
        assert math.dist(pts[3].as_tuple(), pts[2].as_tuple()) == pytest.approx(25.0, abs=1.0)

    def test_control_x_is_clamped_between_anchors(self, editor, flat_spline) -> None:
        pts, _ = editor.drag(flat_spline, 1, 80, 0, 100)
        assert pts[1].x == 50.0

    def test_zero_length_reflection_is_noop(self, editor, flat_spline) -> None:
        """A control dropped onto its anchor leaves the partner where it was."""
        pts, _ = editor.drag(flat_spline, 1, 80, 0, 100)
        assert (pts[3].x, pts[3].y) == (75.0, 0.0)

    def test_anchor_drag_carries_controls(self, editor, flat_spline) -> None:
        grab = editor.grab(flat_spline, 2)
        pts, idx = editor.drag(flat_spline, 2, 60, 10, 100, grab)
        assert idx == 2
        assert coords(pts) == [(0.0, 0.0), (35.0, 10.0), (60.0, 10.0), (85.0, 10.0), (100.0, 0.0)]

    def test_anchor_cannot_pass_neighbour_anchor(self, editor, flat_spline) -> None:
        pts, _ = editor.drag(flat_spline, 2, 150, 0, 100)
        assert pts[2].x == 99.0

    def test_endpoint_x_is_pinned(self, editor, flat_spline, assert_spline_structure) -> None:
        pts, _ = editor.drag(flat_spline, 4, 40, 25, 100)
        assert (pts[4].x, pts[4].y) == (100.0, 25.0)
        assert_spline_structure(pts, 100.0)

    def test_out_of_range_index_is_noop(self, editor, flat_spline) -> None:
        pts, idx = editor.drag(flat_spline, 9, 40, 25, 100)
        assert idx == 9
        assert pts == flat_spline


class TestInsert:
    """Tests for splitting a segment."""

    def test_split_default_spline(self, editor, assert_spline_structure) -> None:
        pts, idx = editor.insert(editor.default_points(100), 0, 30, 100)
        assert idx == 2
        assert_spline_structure(pts, 100.0)
        assert coords(pts) == [(0.0, 0.0), (25.0, 0.0), (50.0, 0.0), (75.0, 0.0), (100.0, 0.0)]

    def test_new_anchor_is_on_the_curve(self, editor) -> None:
        hump = [Anchor(0.0, 0.0), Control(50.0, 100.0), Anchor(100.0, 0.0)]
        pts, idx = editor.insert(hump, 0, 50, 100)
        assert (pts[idx].x, pts[idx].y) == (50.0, 50.0)

    def test_second_segment(self, editor, flat_spline, assert_spline_structure) -> None:
        pts, idx = editor.insert(flat_spline, 1, 80, 100)
        assert idx == 4
        assert len(pts) == 7
        assert pts[idx].x == 75.0
        assert_spline_structure(pts, 100.0)

    def test_narrow_segment_is_rejected(self, editor) -> None:
        narrow = [Anchor(0.0, 0.0), Control(1.0, 0.0), Anchor(1.0, 0.0)]
        pts, idx = editor.insert(narrow, 0, 0.5, 1)
        assert idx is None
        assert pts == narrow

    def test_bad_segment_is_rejected(self, editor, flat_spline) -> None:
        assert editor.insert(flat_spline, 2, 50, 100)[1] is None
        assert editor.insert(flat_spline, -1, 50, 100)[1] is None


class TestRemove:
    """Tests for deleting nodes."""

    def test_interior_anchor_is_bridged(self, editor, uneven_spline, assert_spline_structure) -> None:
        pts = editor.remove(uneven_spline, 2, 100)
        assert_spline_structure(pts, 100.0)
        assert len(pts) == 3
        assert pts[1].x == 50.0
        assert 0.0 <= pts[1].x <= 100.0

    def test_control_is_reset_to_midpoint(self, editor, flat_spline, assert_spline_structure) -> None:
        bent = [p.copy() for p in flat_spline]
        bent[1].y = 40.0
        bent[3].y = -40.0
        pts = editor.remove(bent, 1, 100)
        assert_spline_structure(pts, 100.0)
        assert len(pts) == 5
        assert (pts[1].x, pts[1].y) == (25.0, 0.0)
        # partner realigned opposite the new control, at its old distance
        assert pts[3].y == 0.0
        assert pts[3].x == pytest.approx(50.0 + math.hypot(25.0, 40.0), abs=0.5)

    @pytest.mark.parametrize("idx", [0, 4, -1, 7])
    def test_endpoints_and_bad_indexes_are_noops(self, editor, flat_spline, idx) -> None:
        assert editor.remove(flat_spline, idx, 100) == flat_spline

    def test_minimal_spline_keeps_structure(self, editor, assert_spline_structure) -> None:
        pts = editor.remove(editor.default_points(100), 1, 100)
        assert_spline_structure(pts, 100.0)
        assert len(pts) == 3


class TestResize:
    """Tests for clipping the spline to a new domain."""

    def test_same_domain_is_idempotent(self, editor, uneven_spline) -> None:
        assert editor.resize(uneven_spline, 100) == uneven_spline

    def test_shrink_drops_trailing_segment(self, editor, flat_spline, assert_spline_structure) -> None:
        pts = editor.resize(flat_spline, 60)
        assert_spline_structure(pts, 60.0)
        assert coords(pts) == [(0.0, 0.0), (25.0, 0.0), (60.0, 0.0)]

    def test_shrink_below_first_anchor_regrows(self, editor, flat_spline, assert_spline_structure) -> None:
        pts = editor.resize(flat_spline, 30)
        assert_spline_structure(pts, 30.0)
        assert coords(pts) == [(0.0, 0.0), (15.0, 0.0), (30.0, 0.0)]

    def test_grow_stretches_last_anchor(self, editor, flat_spline, assert_spline_structure) -> None:
        pts = editor.resize(flat_spline, 200)
        assert_spline_structure(pts, 200.0)
        assert pts[-1].x == 200.0
        assert pts[3].x == 75.0

    def test_shrink_past_last_anchor_regrows(self, editor) -> None:
        pts = [Anchor(0.0, 0.0), Control(90.0, 5.0), Anchor(100.0, 0.0)]
        shrunk = editor.resize(pts, 95)
        # 100 is outside, so a fresh minimal spline is grown from the first anchor
        assert coords(shrunk) == [(0.0, 0.0), (48.0, 0.0), (95.0, 0.0)]


class TestNormalize:
    """Tests for rebuilding structure from untyped pairs."""

    def test_two_pairs_gain_a_control(self, editor, assert_spline_structure) -> None:
        pts = editor.normalize([(0.0, 0.0), (100.0, 20.0)], 100)
        assert_spline_structure(pts, 100.0)
        assert coords(pts) == [(0.0, 0.0), (50.0, 10.0), (100.0, 20.0)]

    def test_dangling_control_is_dropped(self, editor, assert_spline_structure) -> None:
        pts = editor.normalize([(0.0, 0.0), (20.0, 5.0), (40.0, 0.0), (60.0, 0.0)], 60)
        assert_spline_structure(pts, 60.0)
        assert coords(pts) == [(0.0, 0.0), (20.0, 5.0), (60.0, 0.0)]

    def test_types_follow_parity(self, editor) -> None:
        pts = editor.normalize([(0, 0), (25, 0), (50, 0), (75, 0), (100, 0)], 100)
        assert [type(p) for p in pts] == [Anchor, Control, Anchor, Control, Anchor]


class TestGeometry:
    """Tests for hit-testing and drawing helpers."""

    def test_segment_at(self, editor, flat_spline) -> None:
        assert editor.segment_at(flat_spline, 10) == 0
        assert editor.segment_at(flat_spline, 70) == 1
        assert editor.segment_at(flat_spline, 120) is None

    def test_polylines_per_segment(self, editor, flat_spline) -> None:
        lines = editor.segment_polylines(flat_spline)
        assert len(lines) == 2
        assert lines[0][0] == (0.0, 0.0)
        assert lines[1][-1] == (100.0, 0.0)

    def test_path_ops_are_quadratic(self, editor, flat_spline) -> None:
        ops = editor.path_ops(flat_spline)
        assert ops == [
            ("M", (0.0, 0.0)),
            ("Q", ((25.0, 0.0), (50.0, 0.0))),
            ("Q", ((75.0, 0.0), (100.0, 0.0))),
        ]
