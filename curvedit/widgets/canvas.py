from typing import Optional

from typing_extensions import override

from PySide6 import QtCore, QtGui, QtWidgets

from curvedit.core import EditSession, Viewport, Point, dist2, project_point_to_segment
from curvedit.core import settings
from curvedit.core.math import Control
from curvedit.widgets.utils import point_to_qpoint


class CurveCanvasWidget(QtWidgets.QWidget):
    """
    View/controller for an EditSession.
      - press on a point: drag it (C1 partners follow on splines)
      - press on a step level: drag that level vertically
      - press on empty plot area: pan
      - double-click: delete the hovered point, or split the hovered segment
    """

    pointsChanged = QtCore.Signal()   # emitted whenever the session's points change
    viewChanged = QtCore.Signal()     # emitted when pan/zoom changes

    def __init__(self, session: EditSession, parent=None):
        super().__init__(parent)
        self._session = session
        self._view = Viewport(x_max=session.x_max)
        self._view.reset(session.curve_type, session.x_max)

        self._hover_index: Optional[int] = None
        self._hover_segment: Optional[int] = None
        self._level_drag: Optional[int] = None
        self._readout: Optional[tuple[str, Point]] = None

        self.setMouseTracking(True)
        self.setMinimumSize(400, 300)

        self.pointsChanged.connect(self.update)
        self.viewChanged.connect(self.update)

    # ---------- binding ----------
    @property
    def session(self) -> EditSession:
        return self._session

    @property
    def view(self) -> Viewport:
        return self._view

    def reset_view(self) -> None:
        self._view.reset(self._session.curve_type, self._session.x_max)
        self._clear_interaction()
        self.viewChanged.emit()

    def notify_session_replaced(self) -> None:
        """Called after curve type changes, loads or resizes."""
        self._clear_interaction()
        self.reset_view()
        self.pointsChanged.emit()

    def set_x_zoom(self, zoom: float) -> None:
        self._view.set_x_zoom(zoom)
        self.viewChanged.emit()

    def set_y_zoom(self, zoom: float) -> None:
        self._view.set_y_zoom(zoom)
        self.viewChanged.emit()

    # ---------- helpers ----------
    def _clear_interaction(self) -> None:
        self._session.end_drag()
        self._view.end_pan()
        self._hover_index = None
        self._hover_segment = None
        self._level_drag = None
        self._readout = None

    def _canvas_points(self) -> list[Point]:
        return [self._view.world_to_canvas(p.x, p.y) for p in self._session.points]

    def _index_at(self, pos: Point) -> Optional[int]:
        r2 = settings.POINT_HIT_RADIUS ** 2
        for i, cp in enumerate(self._canvas_points()):
            if dist2(cp, pos) < r2:
                return i
        return None

    def _segment_at(self, pos: Point) -> Optional[int]:
        s = self._session
        threshold = settings.SEGMENT_HIT_RADIUS.get(s.curve_type, settings.POINT_HIT_RADIUS) ** 2
        best: Optional[int] = None
        best_d2 = float("inf")
        for i, line in enumerate(s.editor.segment_polylines(s.points, s.coeffs)):
            pts = [self._view.world_to_canvas(x, y) for x, y in line]
            for a, b in zip(pts, pts[1:]):
                _, d2 = project_point_to_segment(pos, a, b)
                if d2 < best_d2:
                    best_d2 = d2
                    best = i
        return best if best_d2 < threshold else None

    def _update_hover(self, pos: Point) -> bool:
        old = (self._hover_index, self._hover_segment)
        self._hover_index = self._index_at(pos)
        self._hover_segment = self._segment_at(pos) if self._hover_index is None else None
        return old != (self._hover_index, self._hover_segment)

    # ---------- Qt events ----------
    @override
    def resizeEvent(self, e: QtGui.QResizeEvent):
        self._view.resize(self.width(), self.height())
        super().resizeEvent(e)

    @override
    def mousePressEvent(self, e: QtGui.QMouseEvent):
        if e.button() != QtCore.Qt.MouseButton.LeftButton:
            return
        pos: Point = e.position().toTuple()
        self._update_hover(pos)

        if self._hover_index is not None:
            self._session.begin_drag(self._hover_index)
        elif self._session.curve_type == "step" and self._hover_segment is not None:
            self._level_drag = self._hover_segment
            self._session.selected = self._hover_segment
        elif self._view.contains(*pos):
            self._view.begin_pan(*pos)
        self.update()

    @override
    def mouseMoveEvent(self, e: QtGui.QMouseEvent):
        pos: Point = e.position().toTuple()
        wx, wy = self._view.canvas_to_world(*pos)
        s = self._session

        if s.dragging:
            idx = s.drag_to(wx, wy)
            if idx is not None:
                p = s.points[idx]
                self._readout = (f"X: {p.x:g}, Y: {p.y:g}", self._view.world_to_canvas(p.x, p.y))
            self.pointsChanged.emit()
            return

        if self._level_drag is not None:
            s.drag_level(self._level_drag, wy)
            self._readout = (f"Y: {s.points[self._level_drag].y:g}", pos)
            self.pointsChanged.emit()
            return

        if self._view.panning:
            if self._view.pan_to(*pos):
                x_c, y_c = self._view.x_center, self._view.y_center
                self._readout = (f"View X: {x_c:.1f}  Y: {y_c:.1f}", pos)
                self.viewChanged.emit()
            return

        changed = self._readout is not None
        self._readout = None
        if self._update_hover(pos) or changed:
            self.update()
        self.setCursor(
            QtCore.Qt.CursorShape.SizeAllCursor if self._hover_index is not None
            else QtCore.Qt.CursorShape.CrossCursor
        )

    @override
    def mouseReleaseEvent(self, e: QtGui.QMouseEvent):
        if e.button() == QtCore.Qt.MouseButton.LeftButton:
            self._session.end_drag()
            self._view.end_pan()
            self._level_drag = None
            self._readout = None
            self.update()

    @override
    def mouseDoubleClickEvent(self, e: QtGui.QMouseEvent):
        pos: Point = e.position().toTuple()
        self._update_hover(pos)
        s = self._session
        changed = False
        if self._hover_index is not None:
            changed = s.delete_point(self._hover_index)
        elif self._hover_segment is not None:
            wx, _ = self._view.canvas_to_world(*pos)
            changed = s.insert_at_segment(self._hover_segment, wx) is not None
        if changed:
            self._update_hover(pos)
            self.pointsChanged.emit()

    @override
    def leaveEvent(self, e: QtCore.QEvent):
        self._clear_interaction()
        self.update()
        super().leaveEvent(e)

    # ---------- painting ----------
    def _draw_axes(self, painter: QtGui.QPainter):
        v = self._view
        pad = v.padding
        painter.setPen(QtGui.QPen(QtGui.QColor(0, 0, 0), 1.0))
        painter.drawLine(QtCore.QPointF(pad, pad), QtCore.QPointF(pad, v.height - pad))
        painter.drawLine(QtCore.QPointF(pad, v.height - pad), QtCore.QPointF(v.width - pad, v.height - pad))

        fm = painter.fontMetrics()
        for val in v.y_ticks():
            _, y = v.world_to_canvas(0.0, val)
            painter.drawLine(QtCore.QPointF(pad - 5, y), QtCore.QPointF(pad + 5, y))
            label = f"{val:.1f}"
            painter.drawText(QtCore.QPointF(pad - 10 - fm.horizontalAdvance(label), y + fm.ascent() / 2), label)
        for val in v.x_ticks():
            x, _ = v.world_to_canvas(val, 0.0)
            y = v.height - pad
            painter.drawLine(QtCore.QPointF(x, y - 5), QtCore.QPointF(x, y + 5))
            label = f"{val:.0f}"
            painter.drawText(QtCore.QPointF(x - fm.horizontalAdvance(label) / 2, y + 10 + fm.ascent()), label)

    def _make_qpath(self, ops) -> QtGui.QPainterPath:
        qp = QtGui.QPainterPath()
        to_q = lambda t: point_to_qpoint(self._view.world_to_canvas(*t))
        for op, data in ops:
            if op == "M":
                qp.moveTo(to_q(data))
            elif op == "L":
                qp.lineTo(to_q(data))
            elif op == "Q":
                c, p2 = data
                qp.quadTo(to_q(c), to_q(p2))
            elif op == "C":
                c1, c2, p2 = data
                qp.cubicTo(to_q(c1), to_q(c2), to_q(p2))
        return qp

    def _draw_curve(self, painter: QtGui.QPainter):
        s = self._session
        painter.setBrush(QtCore.Qt.BrushStyle.NoBrush)
        painter.setPen(QtGui.QPen(QtGui.QColor(0, 0, 0), 2.0))
        painter.drawPath(self._make_qpath(s.editor.path_ops(s.points, s.coeffs)))

        if self._hover_segment is not None:
            lines = s.editor.segment_polylines(s.points, s.coeffs)
            if self._hover_segment < len(lines) and lines[self._hover_segment]:
                painter.setPen(QtGui.QPen(QtGui.QColor(255, 0, 0), 4.0))
                poly = QtGui.QPolygonF([point_to_qpoint(self._view.world_to_canvas(x, y))
                                        for x, y in lines[self._hover_segment]])
                painter.drawPolyline(poly)

    def _draw_handles(self, painter: QtGui.QPainter):
        s = self._session
        if s.curve_type == "spline" and len(s.points) >= 3:
            painter.setPen(QtGui.QPen(QtGui.QColor(0, 0, 0, 60), 1.0, QtCore.Qt.PenStyle.DashLine))
            cps = self._canvas_points()
            for a, b in zip(cps, cps[1:]):
                painter.drawLine(point_to_qpoint(a), point_to_qpoint(b))

        painter.setPen(QtCore.Qt.PenStyle.NoPen)
        for i, (p, (cx, cy)) in enumerate(zip(s.points, self._canvas_points())):
            is_control = isinstance(p, Control)
            radius = 4.0 if is_control else (6.0 if p.kind == "anchor" else 5.0)
            selected, hovered = i == s.selected, i == self._hover_index
            if selected and hovered:
                radius *= 1.5
                color = QtGui.QColor("#33FF33") if is_control else QtGui.QColor("#FF4444")
            elif selected:
                radius *= 1.2
                color = QtGui.QColor("darkgreen") if is_control else QtGui.QColor("red")
            elif hovered:
                radius *= 1.2
                color = QtGui.QColor("lightgreen") if is_control else QtGui.QColor("pink")
            else:
                color = QtGui.QColor("green") if is_control else QtGui.QColor("blue")
            painter.setBrush(color)
            rect = QtCore.QRectF(cx - radius, cy - radius, 2 * radius, 2 * radius)
            if is_control:
                painter.drawRect(rect)
            else:
                painter.drawEllipse(rect)

    @override
    def paintEvent(self, event: QtGui.QPaintEvent):
        v = self._view
        painter = QtGui.QPainter(self)
        painter.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing, True)
        self._draw_axes(painter)

        plot = QtCore.QRectF(v.padding, v.padding, v.plot_width, v.plot_height)
        painter.save()
        painter.setClipRect(plot)
        painter.fillRect(plot, QtGui.QColor("#f0f0f0"))
        self._draw_curve(painter)
        self._draw_handles(painter)
        painter.restore()

        if self._readout is not None:
            text, (x, y) = self._readout
            painter.setPen(QtGui.QColor(0, 0, 0))
            painter.drawText(QtCore.QPointF(x + 10, y - 10), text)
        painter.end()
