from PySide6 import QtCore, QtWidgets
from PySide6.QtCore import Qt, Signal

from curvedit.core import CURVE_TYPE_LABELS, curve_editor_registry


class CurveTypeSelectorWidget(QtWidgets.QWidget):

    curveTypeChanged = Signal(str)

    def __init__(self, current: str = "spline", parent=None):
        super().__init__(parent)

        self.select_box = QtWidgets.QComboBox()
        for name in CURVE_TYPE_LABELS:
            if name in curve_editor_registry:
                self.select_box.addItem(CURVE_TYPE_LABELS[name], name)
        self.text = QtWidgets.QLabel("Curve: ")
        self.layout = QtWidgets.QHBoxLayout(self)
        self.layout.setContentsMargins(0, 0, 0, 0)

        self.layout.addWidget(self.text, alignment=Qt.AlignmentFlag.AlignLeft)
        self.layout.addWidget(self.select_box, alignment=Qt.AlignmentFlag.AlignLeft)

        self.set_curve_type(current)
        self.select_box.currentIndexChanged.connect(self._on_index_changed)

    @property
    def curve_type(self) -> str:
        return self.select_box.currentData()

    def set_curve_type(self, name: str) -> None:
        idx = self.select_box.findData(name)
        if idx >= 0 and idx != self.select_box.currentIndex():
            with QtCore.QSignalBlocker(self.select_box):
                self.select_box.setCurrentIndex(idx)

    def _on_index_changed(self, _index: int):
        self.curveTypeChanged.emit(self.curve_type)


class ZoomSlider(QtWidgets.QWidget):
    """Labelled slider over a float range; the slider itself works in steps of 1/scale."""

    zoomChanged = Signal(float)

    def __init__(self, label: str, lo: float, hi: float, scale: int = 10, parent=None):
        super().__init__(parent)
        self._scale = scale
        self.slider = QtWidgets.QSlider(Qt.Orientation.Horizontal)
        self.slider.setRange(round(lo * scale), round(hi * scale))
        self.slider.setFixedWidth(120)
        self.value_label = QtWidgets.QLabel()
        self.value_label.setMinimumWidth(36)

        lay = QtWidgets.QHBoxLayout(self)
        lay.setContentsMargins(0, 0, 0, 0)
        lay.addWidget(QtWidgets.QLabel(label))
        lay.addWidget(self.slider)
        lay.addWidget(self.value_label)

        self.slider.valueChanged.connect(self._on_value_changed)
        self.set_zoom(1.0)

    @property
    def zoom(self) -> float:
        return self.slider.value() / self._scale

    def set_zoom(self, zoom: float) -> None:
        with QtCore.QSignalBlocker(self.slider):
            self.slider.setValue(round(zoom * self._scale))
        self.value_label.setText(f"{self.zoom:.1f}x")

    def _on_value_changed(self, _value: int):
        self.value_label.setText(f"{self.zoom:.1f}x")
        self.zoomChanged.emit(self.zoom)
