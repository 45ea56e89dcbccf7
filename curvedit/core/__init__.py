from .math import (
    Point, CurvePoint, StepPoint, Anchor, Control,
    snap, clamp, dist2, project_point_to_segment,
)
from .solver import CubicCoefficients, solve_natural_cubic
from .curve_editors import (
    CurveEditor, StepEditor, BezierSplineEditor, CatmullRomEditor, NaturalCubicEditor, DragGrab,
)
from .registries import curve_editor_registry, get_curve_editor
from .sampling import sample_at, sample_range
from .session import EditSession
from .graph_io import GraphData, GraphFormatError, load_graph, save_graph, parse_graph, export_csv, csv_text
from .viewport import Viewport

CURVE_TYPE_LABELS = {
    "spline": "Bezier spline",
    "step": "Step",
    "natural": "Natural (Catmull-Rom)",
    "naturalCubic": "Natural cubic",
}
