"""
Graph files: JSON save/load and CSV sample export.

JSON layout:
    {"curveType": "step" | "spline" | "natural" | "naturalCubic",
     "xMax": number,
     "points": [{"x": number, "y": number, "type"?: "anchor" | "control"}, ...]}

`type` is written for typed points but ignored on load; x, y and xMax are rounded
to integers when read.
"""
import csv
import io
import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Sequence, Union

from .math import CurvePoint, Point, snap
from .registries import curve_editor_registry
from .sampling import sample_range
from .solver import CubicCoefficients

if TYPE_CHECKING:
    from .session import EditSession

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

CSV_HEADER = "# x, y"


class GraphFormatError(ValueError):
    """A graph file is not valid JSON or misses required fields."""


@dataclass(frozen=True)
class GraphData:
    curve_type: str
    x_max: float
    points: tuple[Point, ...]


def graph_to_dict(session: "EditSession") -> dict:
    return session.to_dict()


def save_graph(session: "EditSession", path: PathLike) -> None:
    text = json.dumps(graph_to_dict(session), indent=2)
    Path(path).write_text(text, encoding="utf-8")
    logger.info("Saved %s graph to %s", session.curve_type, path)


def _number(value: Any, what: str) -> float:
    if isinstance(value, bool):
        raise GraphFormatError(f"{what} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise GraphFormatError(f"{what} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise GraphFormatError(f"{what} must be finite, got {value!r}")
    return number


def parse_graph(data: Any) -> GraphData:
    if not isinstance(data, dict):
        raise GraphFormatError("Graph must be a JSON object")

    curve_type = data.get("curveType")
    if not isinstance(curve_type, str):
        raise GraphFormatError("curveType must be a string")
    if curve_type not in curve_editor_registry:
        raise GraphFormatError(f"Unknown curveType '{curve_type}'")

    x_max = data.get("xMax")
    if isinstance(x_max, bool) or not isinstance(x_max, (int, float)):
        raise GraphFormatError("xMax must be a number")
    if not math.isfinite(x_max) or snap(x_max) <= 0:
        raise GraphFormatError(f"xMax must be positive, got {x_max!r}")
    # same integer domain as EditSession.resize_domain
    x_max = int(snap(x_max))

    raw_points = data.get("points")
    if not isinstance(raw_points, list):
        raise GraphFormatError("points must be a list")

    pairs: list[Point] = []
    for i, p in enumerate(raw_points):
        if not isinstance(p, dict) or "x" not in p or "y" not in p:
            raise GraphFormatError(f"Point {i} must be an object with x and y")
        x = snap(_number(p["x"], f"Point {i} x"))
        y = snap(_number(p["y"], f"Point {i} y"))
        pairs.append((x, y))

    return GraphData(curve_type=curve_type, x_max=x_max, points=tuple(pairs))


def load_graph(path: PathLike) -> GraphData:
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise GraphFormatError(f"Not a valid JSON graph file: {e}") from e
    return parse_graph(data)


def csv_text(curve_type: str, points: Sequence[CurvePoint], x_max: float,
             coeffs: Optional[CubicCoefficients] = None) -> str:
    buf = io.StringIO()
    buf.write(CSV_HEADER + "\n")
    writer = csv.writer(buf, lineterminator="\n")
    for x, y in sample_range(curve_type, points, x_max, coeffs):
        writer.writerow([int(snap(x)), int(snap(y))])
    return buf.getvalue()


def export_csv(session: "EditSession", path: PathLike) -> None:
    text = csv_text(session.curve_type, session.points, session.x_max, session.coeffs)
    Path(path).write_text(text, encoding="utf-8")
    logger.info("Exported %d samples to %s", int(session.x_max) + 1, path)
