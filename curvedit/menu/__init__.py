from .bar import EditorBar
from .tools import CurveTypeSelectorWidget, ZoomSlider

__all__ = [
    "EditorBar",
    "CurveTypeSelectorWidget",
    "ZoomSlider",
]
