from PySide6 import QtCore

from curvedit.core import Point


def point_to_qpoint(p: Point) -> QtCore.QPointF:
    return QtCore.QPointF(p[0], p[1])
