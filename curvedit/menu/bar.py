import logging

from PySide6 import QtCore, QtWidgets

from curvedit.core import GraphFormatError, export_csv, load_graph, save_graph
from curvedit.core import settings
from curvedit.menu.tools import CurveTypeSelectorWidget, ZoomSlider
from curvedit.widgets import CurveCanvasWidget

logger = logging.getLogger(__name__)


class EditorBar(QtWidgets.QToolBar):
    def __init__(self, canvas: CurveCanvasWidget):
        super().__init__()

        self.canvas = canvas
        self.setObjectName("EditorBar")
        self.setMovable(False)
        self.setFloatable(False)
        self.setIconSize(QtCore.QSize(18, 18))

        self.type_selector = CurveTypeSelectorWidget(self.canvas.session.curve_type)

        self.x_max_edit = QtWidgets.QLineEdit(str(self.canvas.session.x_max))
        self.x_max_edit.setFixedWidth(70)
        self.x_max_button = QtWidgets.QPushButton("Update")

        self.x_zoom = ZoomSlider("X zoom", *settings.X_ZOOM_RANGE)
        self.y_zoom = ZoomSlider("Y zoom", *settings.Y_ZOOM_RANGE)
        self.reset_button = QtWidgets.QPushButton("Reset view")

        self.filename_edit = QtWidgets.QLineEdit("graph")
        self.filename_edit.setFixedWidth(110)
        self.load_button = QtWidgets.QPushButton("Load JSON")
        self.save_button = QtWidgets.QPushButton("Save JSON")
        self.csv_button = QtWidgets.QPushButton("Export CSV")

        self.addWidget(self.type_selector)
        self.addSeparator()
        self.addWidget(QtWidgets.QLabel("X-Max: "))
        self.addWidget(self.x_max_edit)
        self.addWidget(self.x_max_button)
        self.addSeparator()
        self.addWidget(self.x_zoom)
        self.addWidget(self.y_zoom)
        self.addWidget(self.reset_button)
        self.addSeparator()
        self.addWidget(QtWidgets.QLabel("File: "))
        self.addWidget(self.filename_edit)
        self.addWidget(self.load_button)
        self.addWidget(self.save_button)
        self.addWidget(self.csv_button)

        self.type_selector.curveTypeChanged.connect(self._on_curve_type_changed)
        self.x_max_button.clicked.connect(self._apply_x_max)
        self.x_max_edit.returnPressed.connect(self._apply_x_max)
        self.x_zoom.zoomChanged.connect(self.canvas.set_x_zoom)
        self.y_zoom.zoomChanged.connect(self.canvas.set_y_zoom)
        self.reset_button.clicked.connect(self._reset_view)
        self.load_button.clicked.connect(self._load)
        self.save_button.clicked.connect(self._save)
        self.csv_button.clicked.connect(self._export_csv)

    # ---- sync ----------------------------------------------------------------
    def refresh(self):
        session = self.canvas.session
        self.type_selector.set_curve_type(session.curve_type)
        self.x_max_edit.setText(str(session.x_max))
        self.x_zoom.set_zoom(self.canvas.view.x_zoom)
        self.y_zoom.set_zoom(self.canvas.view.y_zoom)

    def _warn(self, title: str, message: str):
        QtWidgets.QMessageBox.warning(self, title, message)

    def _file_stem(self) -> str:
        return self.filename_edit.text().strip() or "graph"

    # ---- slots ---------------------------------------------------------------
    @QtCore.Slot(str)
    def _on_curve_type_changed(self, name: str):
        try:
            self.canvas.session.set_curve_type(name)
        except ValueError as e:
            self._warn("Curve type", str(e))
        self.canvas.notify_session_replaced()
        self.refresh()

    @QtCore.Slot()
    def _apply_x_max(self):
        try:
            self.canvas.session.resize_domain(self.x_max_edit.text())
        except ValueError as e:
            logger.debug("Rejected X-Max %r: %s", self.x_max_edit.text(), e)
            self._warn("X-Max", "Please enter a valid positive number for X-Max.")
            self.x_max_edit.setText(str(self.canvas.session.x_max))
            return
        self.canvas.notify_session_replaced()
        self.refresh()

    @QtCore.Slot()
    def _reset_view(self):
        session = self.canvas.session
        if session.curve_type in ("natural", "naturalCubic"):
            session.reset()
        self.canvas.notify_session_replaced()
        self.refresh()

    @QtCore.Slot()
    def _load(self):
        path, _ = QtWidgets.QFileDialog.getOpenFileName(
            self, "Load graph", f"{self._file_stem()}.json", "JSON files (*.json)"
        )
        if not path:
            return
        try:
            graph = load_graph(path)
        except (GraphFormatError, OSError) as e:
            self._warn("Load graph", f"Could not load {path}:\n{e}")
            return
        self.canvas.session.apply_graph(graph)
        self.filename_edit.setText(QtCore.QFileInfo(path).completeBaseName())
        self.canvas.notify_session_replaced()
        self.refresh()

    @QtCore.Slot()
    def _save(self):
        path, _ = QtWidgets.QFileDialog.getSaveFileName(
            self, "Save graph", f"{self._file_stem()}.json", "JSON files (*.json)"
        )
        if not path:
            return
        try:
            save_graph(self.canvas.session, path)
        except OSError as e:
            self._warn("Save graph", f"Could not save {path}:\n{e}")

    @QtCore.Slot()
    def _export_csv(self):
        path, _ = QtWidgets.QFileDialog.getSaveFileName(
            self, "Export CSV", f"{self._file_stem()}.csv", "CSV files (*.csv)"
        )
        if not path:
            return
        try:
            export_csv(self.canvas.session, path)
        except OSError as e:
            self._warn("Export CSV", f"Could not export {path}:\n{e}")
