from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from .curve_editors import CurveEditor

curve_editor_registry: dict[str, type["CurveEditor"]] = {}


def register_curve_editor(name: str):
    def _decorator(cls: type["CurveEditor"]) -> type["CurveEditor"]:
        if not name or name in curve_editor_registry:
            raise ValueError(f"Invalid or duplicate curve editor name '{name}'")
        cls.name = name
        curve_editor_registry[name] = cls
        return cls
    return _decorator


def get_curve_editor(name: str) -> "CurveEditor":
    try:
        cls = curve_editor_registry[name]
    except KeyError:
        raise KeyError(f"Unknown curve type '{name}'") from None
    return cls()
