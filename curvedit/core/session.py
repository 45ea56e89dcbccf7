import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from . import settings
from .curve_editors import CurveEditor, DragGrab, StepEditor
from .math import CurvePoint, Point, snap
from .registries import curve_editor_registry, get_curve_editor
from .sampling import sample_range
from .solver import CubicCoefficients

if TYPE_CHECKING:
    from .graph_io import GraphData

logger = logging.getLogger(__name__)


@dataclass()
class EditSession:
    """
      - curve_type: registry name of the active curve editor
      - x_max:      the domain is [0, x_max]
      - points:     current point list, only replaced through `_commit`
      - coeffs:     derived cache (natural cubic), refreshed on every commit
      - selected:   index of the selected point, or None
    """
    curve_type: str = "spline"
    x_max: float = settings.DEFAULT_X_MAX
    points: list[CurvePoint] = field(default_factory=list)
    coeffs: Optional[CubicCoefficients] = None
    selected: Optional[int] = None
    _editor: CurveEditor = field(init=False, repr=False)
    _grab: Optional[DragGrab] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        self._editor = get_curve_editor(self.curve_type)
        if self.points:
            self._commit(self._editor.resize(self.points, self.x_max))
        else:
            self.reset()

    @property
    def editor(self) -> CurveEditor:
        return self._editor

    @property
    def dragging(self) -> bool:
        return self._grab is not None

    def _commit(self, points: list[CurvePoint]) -> None:
        self.points = points
        self.coeffs = self._editor.derive(points)

    # ---- lifecycle -------------------------------------------------------------
    def reset(self) -> "EditSession":
        self._commit(self._editor.default_points(self.x_max))
        self.selected = None
        self._grab = None
        return self

    def set_curve_type(self, name: str) -> "EditSession":
        if name not in curve_editor_registry:
            raise ValueError(f"Unknown curve type '{name}'")
        self.curve_type = name
        self._editor = get_curve_editor(name)
        return self.reset()

    # ---- dragging -------------------------------------------------------------
    def begin_drag(self, index: int) -> bool:
        if not 0 <= index < len(self.points):
            return False
        self.selected = index
        self._grab = self._editor.grab(self.points, index)
        return True

    def drag_to(self, x: float, y: float) -> Optional[int]:
        if self._grab is None or self.selected is None:
            return None
        pts, idx = self._editor.drag(self.points, self.selected, x, y, self.x_max, self._grab)
        self._commit(pts)
        self._grab.index = idx
        self.selected = idx
        return idx

    def end_drag(self) -> None:
        self._grab = None

    def drag_point(self, index: int, x: float, y: float) -> Optional[int]:
        if not self.begin_drag(index):
            return None
        try:
            return self.drag_to(x, y)
        finally:
            self.end_drag()

    def drag_level(self, segment: int, y: float) -> bool:
        """Move the horizontal step `segment` to y (step curves only)."""
        if not isinstance(self._editor, StepEditor):
            return False
        self._commit(self._editor.drag_level(self.points, segment, y))
        self.selected = segment
        return True

    # ---- structural edits --------------------------------------------------------
    def insert_at_segment(self, segment: int, x: float) -> Optional[int]:
        pts, idx = self._editor.insert(self.points, segment, x, self.x_max)
        if idx is None:
            return None
        self._commit(pts)
        self.selected = idx
        return idx

    def insert_near(self, x: float) -> Optional[int]:
        segment = self._editor.segment_at(self.points, x)
        if segment is None:
            return None
        return self.insert_at_segment(segment, x)

    def delete_point(self, index: int) -> bool:
        pts = self._editor.remove(self.points, index, self.x_max)
        if pts == self.points:
            return False
        self._commit(pts)
        self.selected = None
        return True

    def resize_domain(self, value: Any) -> float:
        """
        Set a new x_max from user input (number or numeric string). Invalid
        input raises ValueError and leaves the session untouched.
        """
        try:
            new_max = float(value)
        except (TypeError, ValueError):
            raise ValueError(f"X-Max must be a positive number, got {value!r}") from None
        if not math.isfinite(new_max) or snap(new_max) <= 0:
            raise ValueError(f"X-Max must be a positive number, got {value!r}")
        new_max = int(snap(new_max))

        self._commit(self._editor.resize(self.points, new_max))
        self.x_max = new_max
        self.selected = None
        self._grab = None
        return new_max

    # ---- evaluation ---------------------------------------------------------------
    def sample_at(self, x: float) -> float:
        return self._editor.sample(self.points, x, self.coeffs)

    def samples(self) -> list[Point]:
        return list(sample_range(self.curve_type, self.points, self.x_max, self.coeffs))

    # ---- serialization ------------------------------------------------------------
    def to_dict(self) -> dict:
        return {
            "curveType": self.curve_type,
            "xMax": self.x_max,
            "points": [p.to_dict() for p in self.points],
        }

    def apply_graph(self, graph: "GraphData") -> "EditSession":
        """
        Replace the whole session state with a parsed graph. Anchor/control
        roles are not stored in files, so spline structure is re-derived
        from position parity.
        """
        editor = get_curve_editor(graph.curve_type)
        points = editor.normalize(graph.points, graph.x_max)
        self.curve_type = graph.curve_type
        self.x_max = graph.x_max
        self._editor = editor
        self._commit(points)
        self.selected = None
        self._grab = None
        logger.info("Loaded %s curve with %d points", graph.curve_type, len(points))
        return self

    def load_dict(self, data: Any) -> "EditSession":
        """Validate a decoded graph document and apply it; GraphFormatError leaves state untouched."""
        from .graph_io import parse_graph
        return self.apply_graph(parse_graph(data))
