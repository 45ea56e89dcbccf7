from dataclasses import dataclass, field
from typing import Optional

from . import settings
from .math import Point, clamp


@dataclass
class Viewport:
    """
    Maps world coordinates (x in [0, x_max], open y) onto a padded canvas.
    The x view always stays inside the domain; y can be panned freely.
    """
    width: float = 800.0
    height: float = 600.0
    x_max: float = settings.DEFAULT_X_MAX
    x_center: float = settings.DEFAULT_X_MAX / 2
    x_zoom: float = 1.0
    y_center: float = 0.0
    y_range: float = 2000.0
    y_zoom: float = 1.0
    padding: float = settings.PADDING
    _pan_start: Optional[tuple[Point, float, float]] = field(default=None, repr=False)

    # ---- geometry -------------------------------------------------------------
    @property
    def plot_width(self) -> float:
        return max(1.0, self.width - 2 * self.padding)

    @property
    def plot_height(self) -> float:
        return max(1.0, self.height - 2 * self.padding)

    @property
    def x_bounds(self) -> tuple[float, float]:
        visible = self.x_max / self.x_zoom
        return self.x_center - visible / 2, self.x_center + visible / 2

    @property
    def y_bounds(self) -> tuple[float, float]:
        visible = self.y_range / self.y_zoom
        return self.y_center - visible / 2, self.y_center + visible / 2

    def resize(self, width: float, height: float) -> None:
        self.width = width
        self.height = height

    def world_to_canvas(self, x: float, y: float) -> Point:
        x0, x1 = self.x_bounds
        y0, y1 = self.y_bounds
        cx = self.padding + (x - x0) / (x1 - x0) * self.plot_width
        cy = self.padding + self.plot_height - (y - y0) / (y1 - y0) * self.plot_height
        return cx, cy

    def canvas_to_world(self, cx: float, cy: float) -> Point:
        x0, x1 = self.x_bounds
        y0, y1 = self.y_bounds
        x = x0 + (cx - self.padding) / self.plot_width * (x1 - x0)
        y = y0 + (self.plot_height - (cy - self.padding)) / self.plot_height * (y1 - y0)
        return x, y

    def contains(self, cx: float, cy: float) -> bool:
        return (self.padding < cx < self.width - self.padding
                and self.padding < cy < self.height - self.padding)

    def x_ticks(self) -> list[float]:
        x0, x1 = self.x_bounds
        return [x0 + i / settings.AXIS_TICKS * (x1 - x0) for i in range(settings.AXIS_TICKS + 1)]

    def y_ticks(self) -> list[float]:
        y0, y1 = self.y_bounds
        return [y0 + i / settings.AXIS_TICKS * (y1 - y0) for i in range(settings.AXIS_TICKS + 1)]

    # ---- view state ----------------------------------------------------------
    def _clamp_x_center(self, center: float) -> float:
        visible = self.x_max / self.x_zoom
        lo = visible / 2
        hi = self.x_max - visible / 2
        if hi < lo:
            return self.x_max / 2
        return clamp(center, lo, hi)

    def reset(self, curve_type: str, x_max: float) -> None:
        self.y_center, self.y_range = settings.VIEW_DEFAULTS[curve_type]
        self.y_zoom = 1.0
        self.set_x_max(x_max)

    def set_x_max(self, x_max: float) -> None:
        self.x_max = x_max
        self.x_zoom = 1.0
        self.x_center = x_max / 2

    def set_x_zoom(self, zoom: float) -> None:
        self.x_zoom = clamp(zoom, *settings.X_ZOOM_RANGE)
        self.x_center = self._clamp_x_center(self.x_center)

    def set_y_zoom(self, zoom: float) -> None:
        self.y_zoom = clamp(zoom, *settings.Y_ZOOM_RANGE)

    # ---- panning -------------------------------------------------------------
    @property
    def panning(self) -> bool:
        return self._pan_start is not None

    def begin_pan(self, cx: float, cy: float) -> None:
        self._pan_start = ((cx, cy), self.x_center, self.y_center)

    def pan_to(self, cx: float, cy: float) -> bool:
        """Pan relative to `begin_pan`; returns True when the view moved."""
        if self._pan_start is None:
            return False
        (sx, sy), start_x, start_y = self._pan_start
        moved = False

        dy_world = (cy - sy) / self.plot_height * (self.y_range / self.y_zoom)
        if abs(dy_world) > 1e-3:
            self.y_center = start_y + dy_world
            moved = True

        dx_world = (cx - sx) / self.plot_width * (self.x_max / self.x_zoom)
        new_x = self._clamp_x_center(start_x - dx_world)
        if abs(new_x - self.x_center) > 1e-3:
            self.x_center = new_x
            moved = True
        return moved

    def end_pan(self) -> None:
        self._pan_start = None
