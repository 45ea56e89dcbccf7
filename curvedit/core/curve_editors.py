import logging
import math
from abc import ABC, abstractmethod
from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence

from typing_extensions import override

from . import settings
from .math import (
    Anchor, Control, CurvePoint, Op, Point, StepPoint,
    clamp, cubic_bezier, dist, index_of, lerp_y, midpoint, quad_bezier,
    retype_by_parity, snap,
)
from .registries import register_curve_editor
from .solver import CubicCoefficients, solve_natural_cubic

logger = logging.getLogger(__name__)


@dataclass
class LinkedPartner:
    """A control point kept opposite the dragged one through a shared anchor."""
    index: int
    pivot: int
    distance: float


@dataclass
class DragGrab:
    """
    State captured when a drag starts:
      - partners:    C1 partners of a dragged control, with their distances at grab time
      - arm_offsets: offsets of the flanking controls of a dragged anchor
    """
    index: int
    partners: list[LinkedPartner] = field(default_factory=list)
    arm_offsets: dict[int, Point] = field(default_factory=dict)


def catmull_rom_segments(pts: Sequence[Point]) -> Iterator[tuple[Point, Point, Point]]:
    """
    Yield (c1, c2, p2) cubic Bezier controls for each open Catmull-Rom segment,
    duplicating the boundary points at both ends.
    """
    if len(pts) < 2:
        return
    p = [pts[0]] + list(pts) + [pts[-1]]
    for i in range(1, len(p) - 2):
        p0 = p[i - 1]; p1 = p[i]; p2 = p[i + 1]; p3 = p[i + 2]
        c1 = (p1[0] + (p2[0] - p0[0]) / 6.0,
              p1[1] + (p2[1] - p0[1]) / 6.0)
        c2 = (p2[0] - (p3[0] - p1[0]) / 6.0,
              p2[1] - (p3[1] - p1[1]) / 6.0)
        yield c1, c2, p2


class CurveEditor(ABC):
    """
    Strategy for one curve type. Every operation copies the incoming points
    and returns a new list that satisfies the type's invariants.
    Invalid requests (bad index, pinned endpoint, no room) are no-ops.
    """
    name: str = ""
    point_cls: type[CurvePoint] = Anchor

    @abstractmethod
    def default_points(self, x_max: float) -> list[CurvePoint]:
        """Fresh point list for a new or reset curve."""

    @abstractmethod
    def sample(self, points: Sequence[CurvePoint], x: float,
               coeffs: Optional[CubicCoefficients] = None) -> float:
        """
        Return y at x. Defined for every x: outside the points it clamps to the
        nearest boundary point's y.
        """

    def grab(self, points: Sequence[CurvePoint], idx: int) -> DragGrab:
        return DragGrab(idx)

    @abstractmethod
    def drag(self, points: Sequence[CurvePoint], idx: int, x: float, y: float,
             x_max: float, grab: Optional[DragGrab] = None) -> tuple[list[CurvePoint], int]:
        """
        Move point idx toward (x, y); returns the new list and the point's index.
        """

    @abstractmethod
    def insert(self, points: Sequence[CurvePoint], segment: int, x: float,
               x_max: float) -> tuple[list[CurvePoint], Optional[int]]:
        """
        Split `segment` near x; returns the new list and the index of the new
        point, or None when the insertion was rejected.
        """

    @abstractmethod
    def remove(self, points: Sequence[CurvePoint], idx: int, x_max: float) -> list[CurvePoint]:
        """Delete point idx. Endpoints are never removed."""

    @abstractmethod
    def resize(self, points: Sequence[CurvePoint], x_max: float) -> list[CurvePoint]:
        """Clip/extend the points to the domain [0, x_max]."""

    def normalize(self, pairs: Sequence[Point], x_max: float) -> list[CurvePoint]:
        """Build a valid point list from untyped (x, y) pairs."""
        return self.resize([self.point_cls(float(x), float(y)) for x, y in pairs], x_max)

    @abstractmethod
    def segment_at(self, points: Sequence[CurvePoint], x: float) -> Optional[int]:
        """Index of the segment whose x range contains x."""

    def derive(self, points: Sequence[CurvePoint]) -> Optional[CubicCoefficients]:
        """Derived cache to keep alongside the points, if the type has one."""
        return None

    @abstractmethod
    def segment_polylines(self, points: Sequence[CurvePoint],
                          coeffs: Optional[CubicCoefficients] = None) -> list[list[Point]]:
        """World-space polyline per segment, used for hover hit-testing."""

    @abstractmethod
    def path_ops(self, points: Sequence[CurvePoint],
                 coeffs: Optional[CubicCoefficients] = None) -> list[Op]:
        """
        Convert points to simple drawing ops:
          - ("M", (x,y))        moveTo
          - ("L", (x,y))        lineTo
          - ("Q", (c, p2))      quadTo
          - ("C", (c1, c2, p2)) cubicTo
        """


class SortedCurveEditor(CurveEditor):
    """
    Shared structural editing for curve types whose points are kept sorted by
    x with pinned endpoints at 0 and x_max.
    """

    @override
    def default_points(self, x_max: float) -> list[CurvePoint]:
        return [self.point_cls(0.0, settings.DEFAULT_Y),
                self.point_cls(float(x_max), settings.DEFAULT_Y)]

    def _sorted(self, points: Sequence[CurvePoint]) -> list[CurvePoint]:
        return sorted((self.point_cls(p.x, p.y) for p in points), key=lambda p: p.x)

    def _insert_y(self, pts: Sequence[CurvePoint], segment: int, x: float) -> float:
        return lerp_y(pts[segment], pts[segment + 1], x)

    @override
    def drag(self, points, idx, x, y, x_max, grab=None):
        pts = [p.copy() for p in points]
        if not 0 <= idx < len(pts):
            return pts, idx
        target = pts[idx]
        x = snap(clamp(x, 0.0, x_max))
        if idx == 0:
            x = 0.0
        elif idx == len(pts) - 1:
            x = float(x_max)
        else:
            lo = pts[idx - 1].x + settings.MIN_SEPARATION
            hi = pts[idx + 1].x - settings.MIN_SEPARATION
            x = clamp(x, lo, hi) if lo <= hi else target.x
        target.x = x
        target.y = snap(y)
        pts.sort(key=lambda p: p.x)
        return pts, index_of(pts, target)

    @override
    def insert(self, points, segment, x, x_max):
        pts = [p.copy() for p in points]
        if not 0 <= segment < len(pts) - 1:
            return pts, None
        p1, p2 = pts[segment], pts[segment + 1]
        nx = clamp(snap(x), p1.x + settings.MIN_SEPARATION, p2.x - settings.MIN_SEPARATION)
        if not p1.x < nx < p2.x:
            logger.debug("No room to insert between x=%s and x=%s", p1.x, p2.x)
            return pts, None
        new_point = self.point_cls(nx, snap(self._insert_y(pts, segment, nx)))
        pts.insert(segment + 1, new_point)
        return pts, segment + 1

    @override
    def remove(self, points, idx, x_max):
        pts = [p.copy() for p in points]
        if idx <= 0 or idx >= len(pts) - 1:
            logger.debug("Refusing to remove point %s of %s", idx, len(pts))
            return pts
        pts.pop(idx)
        pts.sort(key=lambda p: p.x)
        return pts

    @override
    def resize(self, points, x_max):
        x_max = float(x_max)
        pts = self._sorted(points)
        if not pts:
            return self.default_points(x_max)

        if pts[-1].x > x_max:
            # shrink: keep what fits, the last kept y carries to the new end
            kept = [p for p in pts if p.x <= x_max]
            y_end = kept[-1].y if kept else settings.DEFAULT_Y
            if not kept or kept[-1].x < x_max:
                kept.append(self.point_cls(x_max, y_end))
            pts = kept
        else:
            pts[-1].x = x_max

        pts = [p for p in pts if p.x >= 0.0]
        if not pts:
            return self.default_points(x_max)
        if pts[0].x != 0.0:
            pts.insert(0, self.point_cls(0.0, pts[0].y))

        out: list[CurvePoint] = []
        for p in pts:
            if out and out[-1].x == p.x:
                continue
            out.append(p)
        return out

    @override
    def segment_at(self, points, x):
        xs = [p.x for p in points]
        if len(xs) < 2 or x < xs[0] or x > xs[-1]:
            return None
        return min(bisect_right(xs, x) - 1, len(xs) - 2)


@register_curve_editor("step")
class StepEditor(SortedCurveEditor):
    """
    Piecewise-constant curve: each interval [x_i, x_i+1) takes the y of its
    left point.
      - insert: new breakpoint takes the left point's y
      - level drag: moving a horizontal step changes only its left point's y
    """
    point_cls = StepPoint

    @override
    def sample(self, points, x, coeffs=None):
        pts = sorted(points, key=lambda p: p.x)
        if not pts:
            return settings.DEFAULT_Y
        if x < pts[0].x:
            return pts[0].y
        i = bisect_right([p.x for p in pts], x) - 1
        return pts[min(i, len(pts) - 1)].y

    @override
    def _insert_y(self, pts, segment, x):
        return pts[segment].y

    def drag_level(self, points: Sequence[CurvePoint], segment: int, y: float) -> list[CurvePoint]:
        pts = [p.copy() for p in points]
        if 0 <= segment < len(pts) - 1:
            pts[segment].y = snap(y)
        return pts

    @override
    def segment_polylines(self, points, coeffs=None):
        return [[(a.x, a.y), (b.x, a.y)] for a, b in zip(points, points[1:])]

    @override
    def path_ops(self, points, coeffs=None):
        if not points:
            return []
        ops: list[Op] = [("M", points[0].as_tuple())]
        for a, b in zip(points, points[1:]):
            ops.append(("L", (b.x, a.y)))
            ops.append(("L", (b.x, b.y)))
        return ops


@register_curve_editor("natural")
class CatmullRomEditor(SortedCurveEditor):
    """
    Interpolating Catmull-Rom curve through sorted anchors, drawn as cubic
    Bezier segments. New points take linearly interpolated y.
    """
    point_cls = Anchor

    @override
    def sample(self, points, x, coeffs=None):
        pts = sorted(points, key=lambda p: p.x)
        if not pts:
            return settings.DEFAULT_Y
        if len(pts) == 1 or x <= pts[0].x:
            return pts[0].y
        if x >= pts[-1].x:
            return pts[-1].y
        if len(pts) == 2:
            return lerp_y(pts[0], pts[1], x)

        tuples = [p.as_tuple() for p in pts]
        for i, (c1, c2, p2) in enumerate(catmull_rom_segments(tuples)):
            a, b = pts[i], pts[i + 1]
            if not a.x <= x <= b.x:
                continue
            if x == a.x:
                return a.y
            if x == b.x:
                return b.y
            for k in range(settings.SAMPLE_STEPS + 1):
                xt, yt = cubic_bezier(tuples[i], c1, c2, p2, k / settings.SAMPLE_STEPS)
                if abs(xt - x) < settings.CATMULL_ROM_X_TOLERANCE:
                    return yt
            return lerp_y(a, b, x)
        return settings.DEFAULT_Y

    @override
    def segment_polylines(self, points, coeffs=None):
        tuples = [p.as_tuple() for p in points]
        out: list[list[Point]] = []
        for i, (c1, c2, p2) in enumerate(catmull_rom_segments(tuples)):
            out.append([cubic_bezier(tuples[i], c1, c2, p2, k / 20) for k in range(21)])
        return out

    @override
    def path_ops(self, points, coeffs=None):
        if not points:
            return []
        tuples = [p.as_tuple() for p in points]
        ops: list[Op] = [("M", tuples[0])]
        for c1, c2, p2 in catmull_rom_segments(tuples):
            ops.append(("C", (c1, c2, p2)))
        return ops


@register_curve_editor("naturalCubic")
class NaturalCubicEditor(CatmullRomEditor):
    """
    Natural cubic spline through sorted anchors. The coefficients are a
    derived cache: callers must refresh them through `derive` after every
    mutation. Sampling with stale or missing coefficients falls back to
    linear interpolation.
    """

    @override
    def derive(self, points):
        return solve_natural_cubic(sorted(points, key=lambda p: p.x))

    @override
    def _insert_y(self, pts, segment, x):
        coeffs = solve_natural_cubic(pts)
        if len(coeffs) > segment:
            return coeffs.evaluate(segment, x)
        return lerp_y(pts[segment], pts[segment + 1], x)

    @override
    def sample(self, points, x, coeffs=None):
        pts = sorted(points, key=lambda p: p.x)
        if not pts:
            return settings.DEFAULT_Y
        if len(pts) == 1 or x <= pts[0].x:
            return pts[0].y
        if x >= pts[-1].x:
            return pts[-1].y
        i = min(bisect_right([p.x for p in pts], x) - 1, len(pts) - 2)
        if coeffs is None or not coeffs.matches(pts):
            return lerp_y(pts[i], pts[i + 1], x)
        return coeffs.evaluate(i, x)

    def _segment_samples(self, points, coeffs, i) -> list[Point]:
        a, b = points[i], points[i + 1]
        if coeffs is None or not coeffs.matches(points):
            return [a.as_tuple(), b.as_tuple()]
        steps = max(10, round(b.x - a.x))
        xs = [a.x + (b.x - a.x) * k / steps for k in range(steps + 1)]
        return [(sx, coeffs.evaluate(i, sx)) for sx in xs]

    @override
    def segment_polylines(self, points, coeffs=None):
        return [self._segment_samples(points, coeffs, i) for i in range(len(points) - 1)]

    @override
    def path_ops(self, points, coeffs=None):
        if not points:
            return []
        ops: list[Op] = [("M", points[0].as_tuple())]
        for i in range(len(points) - 1):
            for q in self._segment_samples(points, coeffs, i)[1:]:
                ops.append(("L", q))
        return ops


@register_curve_editor("spline")
class BezierSplineEditor(CurveEditor):
    """
    Chain of quadratic Bezier segments stored as Anchor, Control, Anchor, ...
    Sequence order is structural and never re-sorted.

    C1 continuity: an interior anchor's two controls stay collinear with it.
    Dragging a control swings its partner(s) to the opposite side of the
    shared anchor at their grab-time distance; dragging an anchor carries
    its controls along by their grab-time offsets.
    """
    point_cls = Anchor

    @override
    def default_points(self, x_max):
        return [
            Anchor(0.0, settings.DEFAULT_Y),
            Control(snap(x_max / 2), settings.DEFAULT_Y),
            Anchor(float(x_max), settings.DEFAULT_Y),
        ]

    @staticmethod
    def _triple(points, j) -> Optional[tuple[CurvePoint, CurvePoint, CurvePoint]]:
        if j < 0 or j + 2 >= len(points):
            return None
        a, c, b = points[j], points[j + 1], points[j + 2]
        if isinstance(a, Anchor) and isinstance(c, Control) and isinstance(b, Anchor):
            return a, c, b
        return None

    @override
    def sample(self, points, x, coeffs=None):
        n = len(points)
        if n == 0:
            return settings.DEFAULT_Y
        if n == 1:
            return points[0].y
        for j in range(0, n - 2, 2):
            triple = self._triple(points, j)
            if triple is None:
                continue
            a, c, b = triple
            if not a.x <= x <= b.x:
                continue
            if x == a.x:
                return a.y
            if x == b.x:
                return b.y
            target = snap(x)
            for k in range(settings.SAMPLE_STEPS + 1):
                xt, yt = quad_bezier(a.as_tuple(), c.as_tuple(), b.as_tuple(), k / settings.SAMPLE_STEPS)
                if snap(xt) == target:
                    return yt
            return lerp_y(a, b, x)
        if x <= points[0].x:
            return points[0].y
        if x >= points[-1].x:
            return points[-1].y
        return settings.DEFAULT_Y

    # ---- constraint helpers -------------------------------------------------
    @staticmethod
    def _clamp_control_x(pts, idx, x) -> float:
        if 0 < idx < len(pts) - 1:
            left, right = pts[idx - 1], pts[idx + 1]
            return clamp(x, min(left.x, right.x), max(left.x, right.x))
        return x

    @staticmethod
    def _clamp_anchor_x(pts, idx, x, x_max) -> float:
        prev_x = pts[idx - 2].x if idx >= 2 else 0.0
        next_x = pts[idx + 2].x if idx + 2 < len(pts) else float(x_max)
        lo = prev_x + settings.MIN_SEPARATION
        hi = next_x - settings.MIN_SEPARATION
        if lo > hi:
            x = clamp(x, prev_x, next_x)
        else:
            x = clamp(x, lo, hi)
        return clamp(x, 0.0, x_max)

    def _reflect(self, pts, partner: int, pivot: int, ref: int, distance: float) -> None:
        # place `partner` opposite `ref` through `pivot`, `distance` away
        p, r = pts[pivot], pts[ref]
        vx, vy = r.x - p.x, r.y - p.y
        length = math.hypot(vx, vy)
        if length <= settings.EPSILON:
            return
        c = pts[partner]
        c.x = snap(p.x - vx / length * distance)
        c.y = snap(p.y - vy / length * distance)
        c.x = self._clamp_control_x(pts, partner, c.x)

    def _links(self, pts, ctrl: int) -> Iterator[tuple[int, int]]:
        n = len(pts)
        for pivot, partner in ((ctrl - 1, ctrl - 2), (ctrl + 1, ctrl + 2)):
            if 0 < pivot < n - 1 and isinstance(pts[pivot], Anchor) and isinstance(pts[partner], Control):
                yield pivot, partner

    def _smooth_around(self, pts, ctrl: int) -> None:
        """Re-establish C1 at both anchors of control `ctrl`, moving the partners."""
        if not (0 <= ctrl < len(pts)) or not isinstance(pts[ctrl], Control):
            return
        for pivot, partner in self._links(pts, ctrl):
            d = dist(pts[partner].as_tuple(), pts[pivot].as_tuple())
            if d <= settings.EPSILON:
                continue
            self._reflect(pts, partner, pivot, ctrl, d)

    @staticmethod
    def _order_anchors(pts: list[CurvePoint], x_max: float) -> None:
        """Sweep interior anchors left to right so each sits past its left neighbour."""
        sep = settings.MIN_SEPARATION
        for i in range(2, len(pts) - 1, 2):
            remaining = (len(pts) - 1 - i) // 2  # anchors to the right, end included
            lo = pts[i - 2].x + sep
            hi = x_max - remaining * sep
            if lo <= hi:
                pts[i].x = clamp(pts[i].x, lo, hi)
            else:
                pts[i].x = clamp(pts[i].x, pts[i - 2].x, x_max)

    @staticmethod
    def _repair(pts: list[CurvePoint], x_max: float) -> list[CurvePoint]:
        if len(pts) == 2:
            pts.insert(1, Control(*midpoint(pts[0], pts[1])))
        pts = retype_by_parity(pts)
        pts[0].x = 0.0
        pts[-1].x = float(x_max)
        return pts

    # ---- editing --------------------------------------------------------------
    @override
    def grab(self, points, idx):
        g = DragGrab(idx)
        if not 0 <= idx < len(points):
            return g
        p = points[idx]
        if isinstance(p, Control):
            for pivot, partner in self._links(points, idx):
                d = dist(points[partner].as_tuple(), points[pivot].as_tuple())
                g.partners.append(LinkedPartner(partner, pivot, d))
        elif isinstance(p, Anchor):
            for arm in (idx - 1, idx + 1):
                if 0 <= arm < len(points) and isinstance(points[arm], Control):
                    g.arm_offsets[arm] = (points[arm].x - p.x, points[arm].y - p.y)
        return g

    @override
    def drag(self, points, idx, x, y, x_max, grab=None):
        pts = [p.copy() for p in points]
        n = len(pts)
        if not 0 <= idx < n:
            return pts, idx
        if grab is None or grab.index != idx:
            grab = self.grab(points, idx)

        target = pts[idx]
        x = snap(clamp(x, 0.0, x_max))
        if idx == 0:
            x = 0.0
        elif idx == n - 1:
            x = float(x_max)
        elif isinstance(target, Anchor):
            x = self._clamp_anchor_x(pts, idx, x, x_max)
        else:
            x = self._clamp_control_x(pts, idx, x)
        target.x = x
        target.y = snap(y)

        if isinstance(target, Anchor):
            for arm, (dx, dy) in grab.arm_offsets.items():
                c = pts[arm]
                c.x = self._clamp_control_x(pts, arm, snap(target.x + dx))
                c.y = snap(target.y + dy)
        else:
            for link in grab.partners:
                self._reflect(pts, link.index, link.pivot, idx, link.distance)
        return pts, idx

    @override
    def insert(self, points, segment, x, x_max):
        pts = [p.copy() for p in points]
        triple = self._triple(pts, 2 * segment) if segment >= 0 else None
        if triple is None:
            return pts, None
        a, c, b = triple
        if b.x - a.x < 2 * settings.MIN_SEPARATION:
            logger.debug("Segment %s too narrow to split", segment)
            return pts, None

        # curve midpoint, t = 0.5
        mx, my = quad_bezier(a.as_tuple(), c.as_tuple(), b.as_tuple(), 0.5)
        mx = clamp(snap(mx), a.x + settings.MIN_SEPARATION, b.x - settings.MIN_SEPARATION)
        new_anchor = Anchor(mx, snap(my))

        c1 = Control(*midpoint(a, new_anchor))
        c1.x = clamp(c1.x, min(a.x, new_anchor.x), max(a.x, new_anchor.x))
        c2 = Control(*midpoint(new_anchor, b))
        c2.x = clamp(c2.x, min(new_anchor.x, b.x), max(new_anchor.x, b.x))

        ctrl = 2 * segment + 1
        pts[ctrl:ctrl + 1] = [c1, new_anchor, c2]
        self._smooth_around(pts, ctrl)
        self._smooth_around(pts, ctrl + 2)
        return pts, ctrl + 1

    @override
    def remove(self, points, idx, x_max):
        pts = [p.copy() for p in points]
        n = len(pts)
        if idx <= 0 or idx >= n - 1:
            logger.debug("Refusing to remove spline endpoint %s", idx)
            return pts

        if isinstance(pts[idx], Control):
            left, right = pts[idx - 1], pts[idx + 1]
            bridge = Control(*midpoint(left, right))
            bridge.x = clamp(bridge.x, min(left.x, right.x), max(left.x, right.x))
            pts[idx] = bridge
            self._smooth_around(pts, idx)
        elif idx % 2 == 0 and 2 <= idx <= n - 3:
            left, right = pts[idx - 2], pts[idx + 2]
            bridge = Control(*midpoint(left, right))
            bridge.x = clamp(bridge.x, min(left.x, right.x), max(left.x, right.x))
            pts[idx - 1:idx + 2] = [bridge]
            self._smooth_around(pts, idx - 1)
        else:
            logger.debug("Anchor %s has no flanking controls, not removed", idx)
            return pts
        return self._repair(pts, x_max)

    @override
    def resize(self, points, x_max):
        x_max = float(x_max)
        pts = retype_by_parity(points)
        if not pts:
            return self.default_points(x_max)

        pts[0].x = 0.0
        kept = [pts[0]]
        for p in pts[1:]:
            if p.x > x_max:
                break
            kept.append(p)
        if len(kept) % 2 == 0:
            # drop the control whose right anchor fell outside
            kept.pop()
        if len(kept) == 1:
            y0 = kept[0].y
            kept += [Control(snap(x_max / 2), y0), Anchor(x_max, y0)]
        kept[-1].x = x_max
        self._order_anchors(kept, x_max)

        for i in range(1, len(kept) - 1, 2):
            kept[i].x = self._clamp_control_x(kept, i, kept[i].x)
        return kept

    @override
    def normalize(self, pairs, x_max):
        pts = [Anchor(float(x), float(y)) for x, y in pairs]
        if len(pts) == 2:
            pts.insert(1, Control(*midpoint(pts[0], pts[1])))
        return self.resize(pts, x_max)

    @override
    def segment_at(self, points, x):
        for k in range((len(points) - 1) // 2):
            if points[2 * k].x <= x <= points[2 * k + 2].x:
                return k
        return None

    @override
    def segment_polylines(self, points, coeffs=None):
        out: list[list[Point]] = []
        for j in range(0, len(points) - 2, 2):
            triple = self._triple(points, j)
            if triple is None:
                out.append([])
                continue
            a, c, b = (p.as_tuple() for p in triple)
            out.append([quad_bezier(a, c, b, k / 50) for k in range(51)])
        return out

    @override
    def path_ops(self, points, coeffs=None):
        if not points:
            return []
        ops: list[Op] = [("M", points[0].as_tuple())]
        if len(points) == 2:
            ops.append(("L", points[1].as_tuple()))
            return ops
        for j in range(0, len(points) - 2, 2):
            ops.append(("Q", (points[j + 1].as_tuple(), points[j + 2].as_tuple())))
        return ops
