from typing import Iterator, Optional, Sequence

from .math import CurvePoint, Point
from .registries import get_curve_editor
from .solver import CubicCoefficients


def sample_at(x: float, curve_type: str, points: Sequence[CurvePoint],
              coeffs: Optional[CubicCoefficients] = None) -> float:
    """
    Evaluate the curve of `curve_type` through `points` at x.

    Pure: nothing is cached. For natural cubic curves pass the session's
    coefficients to avoid a solve per call; when omitted they are solved here.
    """
    editor = get_curve_editor(curve_type)
    if coeffs is None:
        coeffs = editor.derive(points)
    return editor.sample(points, x, coeffs)


def sample_range(curve_type: str, points: Sequence[CurvePoint], x_max: float,
                 coeffs: Optional[CubicCoefficients] = None) -> Iterator[Point]:
    """Yield (x, y) for every integer x in [0, x_max]."""
    editor = get_curve_editor(curve_type)
    if coeffs is None:
        coeffs = editor.derive(points)
    for x in range(int(x_max) + 1):
        yield float(x), editor.sample(points, float(x), coeffs)
