import logging
import sys

from PySide6 import QtCore, QtWidgets

from curvedit.core import EditSession
from curvedit.menu import EditorBar
from curvedit.widgets import CurveCanvasWidget


class MainWindow(QtWidgets.QWidget):
    def __init__(self, session: EditSession | None = None):
        super().__init__()
        self.setWindowTitle("Curve editor")

        self.layout = QtWidgets.QVBoxLayout(self)

        self.session = session or EditSession()
        self.canvas = CurveCanvasWidget(self.session, parent=self)
        self.top_bar = EditorBar(self.canvas)

        self.layout.addWidget(self.top_bar, alignment=QtCore.Qt.AlignmentFlag.AlignTop)
        self.layout.addWidget(self.canvas, stretch=1)


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    app = QtWidgets.QApplication(sys.argv)

    widget = MainWindow()
    widget.resize(1100, 700)
    widget.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
