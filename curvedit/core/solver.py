from dataclasses import dataclass, field
from typing import Sequence

from .math import CurvePoint


@dataclass(frozen=True)
class CubicCoefficients:
    """
    Per-segment polynomials of a natural cubic spline:
        y = a[i] + b[i]*dx + c[i]*dx**2 + d[i]*dx**3,   dx = x - knots[i]
    There is one entry per segment, i.e. len(points) - 1. `knots` and
    `values` hold every point the system was solved for.
    """
    knots: tuple[float, ...] = field(default_factory=tuple)
    values: tuple[float, ...] = field(default_factory=tuple)
    a: tuple[float, ...] = field(default_factory=tuple)
    b: tuple[float, ...] = field(default_factory=tuple)
    c: tuple[float, ...] = field(default_factory=tuple)
    d: tuple[float, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> "CubicCoefficients":
        return cls()

    def __len__(self) -> int:
        return len(self.a)

    def matches(self, points: Sequence[CurvePoint]) -> bool:
        """True when these coefficients were solved for exactly these points."""
        n = len(points) - 1
        if n < 1 or len(self.a) != n or len(self.knots) != n + 1 or len(self.values) != n + 1:
            return False
        for i, p in enumerate(points):
            if self.knots[i] != p.x:
                return False
            if self.values[i] != p.y:
                return False
        return True

    def evaluate(self, i: int, x: float) -> float:
        dx = x - self.knots[i]
        return self.a[i] + self.b[i] * dx + self.c[i] * dx * dx + self.d[i] * dx * dx * dx


def solve_natural_cubic(points: Sequence[CurvePoint]) -> CubicCoefficients:
    """
    Solve the tridiagonal system of a natural cubic spline (zero second
    derivative at both ends) through `points`, which must be sorted by x.

    Zero-width intervals do not raise: they get alpha = 0 and b = d = 0,
    leaving a flat segment.
    """
    n = len(points) - 1
    if n < 1:
        return CubicCoefficients.empty()

    x = [p.x for p in points]
    y = [p.y for p in points]
    h = [x[i + 1] - x[i] for i in range(n)]

    alpha = [0.0] * (n + 1)
    for i in range(1, n):
        if h[i - 1] == 0 or h[i] == 0:
            continue
        alpha[i] = (3.0 / h[i]) * (y[i + 1] - y[i]) - (3.0 / h[i - 1]) * (y[i] - y[i - 1])

    c = [0.0] * (n + 1)
    l = [0.0] * (n + 1)
    mu = [0.0] * (n + 1)
    z = [0.0] * (n + 1)

    l[0] = 1.0
    for i in range(1, n):
        l[i] = 2.0 * (x[i + 1] - x[i - 1]) - h[i - 1] * mu[i - 1]
        if l[i] == 0:
            continue
        mu[i] = h[i] / l[i]
        z[i] = (alpha[i] - h[i - 1] * z[i - 1]) / l[i]
    l[n] = 1.0

    b = [0.0] * n
    d = [0.0] * n
    for j in range(n - 1, -1, -1):
        c[j] = z[j] - mu[j] * c[j + 1]
        if h[j] == 0:
            continue
        b[j] = (y[j + 1] - y[j]) / h[j] - h[j] * (c[j + 1] + 2.0 * c[j]) / 3.0
        d[j] = (c[j + 1] - c[j]) / (3.0 * h[j])

    return CubicCoefficients(
        knots=tuple(x),
        values=tuple(y),
        a=tuple(y[:n]),
        b=tuple(b),
        c=tuple(c[:n]),
        d=tuple(d),
    )
