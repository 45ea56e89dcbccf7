import math
from dataclasses import dataclass, replace
from typing import ClassVar, Literal, Optional, Sequence

Point = tuple[float, float]
PointKind = Literal["anchor", "control"]
Op = tuple[Literal["M", "L", "Q", "C"], tuple]


@dataclass
class CurvePoint:
    """
    A mutable world-space point. Subclasses tag the role the point plays:
      - StepPoint: untyped step breakpoint
      - Anchor:    the curve passes through it
      - Control:   shapes a Bezier segment without being on it
    """
    x: float
    y: float
    kind: ClassVar[Optional[PointKind]] = None

    def as_tuple(self) -> Point:
        return self.x, self.y

    def copy(self) -> "CurvePoint":
        return replace(self)

    def to_dict(self) -> dict:
        d = {"x": self.x, "y": self.y}
        if self.kind is not None:
            d["type"] = self.kind
        return d


class StepPoint(CurvePoint):
    pass


class Anchor(CurvePoint):
    kind = "anchor"


class Control(CurvePoint):
    kind = "control"


def snap(v: float) -> float:
    # world grid is integer units, halves round up
    return float(math.floor(v + 0.5))


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def dist2(a: Point, b: Point) -> float:
    dx = a[0] - b[0]
    dy = a[1] - b[1]
    return dx * dx + dy * dy


def dist(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def lerp_y(p0: CurvePoint, p1: CurvePoint, x: float) -> float:
    if p1.x == p0.x:
        return p0.y
    return p0.y + (x - p0.x) * (p1.y - p0.y) / (p1.x - p0.x)


def midpoint(a: CurvePoint, b: CurvePoint) -> Point:
    return snap((a.x + b.x) / 2), snap((a.y + b.y) / 2)


def quad_bezier(p0: Point, c: Point, p1: Point, t: float) -> Point:
    u = 1.0 - t
    x = u * u * p0[0] + 2.0 * u * t * c[0] + t * t * p1[0]
    y = u * u * p0[1] + 2.0 * u * t * c[1] + t * t * p1[1]
    return x, y


def cubic_bezier(p0: Point, c1: Point, c2: Point, p3: Point, t: float) -> Point:
    u = 1.0 - t
    uu = u * u
    tt = t * t
    uuu = uu * u
    ttt = tt * t
    x = uuu * p0[0] + 3.0 * uu * t * c1[0] + 3.0 * u * tt * c2[0] + ttt * p3[0]
    y = uuu * p0[1] + 3.0 * uu * t * c1[1] + 3.0 * u * tt * c2[1] + ttt * p3[1]
    return x, y


def project_point_to_segment(p: Point, a: Point, b: Point) -> tuple[Point, float]:
    ax, ay = a; bx, by = b; px, py = p
    vx, vy = bx - ax, by - ay
    denom = vx * vx + vy * vy
    if denom == 0.0:
        dx = px - ax; dy = py - ay
        return a, dx * dx + dy * dy
    t = ((px - ax) * vx + (py - ay) * vy) / denom
    if t < 0.0:
        qx, qy = ax, ay
    elif t > 1.0:
        qx, qy = bx, by
    else:
        qx, qy = ax + t * vx, ay + t * vy
    dx = px - qx; dy = py - qy
    return (qx, qy), dx * dx + dy * dy


def retype_by_parity(points: Sequence[CurvePoint]) -> list[CurvePoint]:
    """
    Rebuild a spline node list as Anchor, Control, Anchor, ... by position.
    """
    return [
        (Anchor if i % 2 == 0 else Control)(p.x, p.y)
        for i, p in enumerate(points)
    ]


def index_of(points: Sequence[CurvePoint], target: CurvePoint) -> int:
    for i, p in enumerate(points):
        if p is target:
            return i
    return -1
