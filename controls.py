# controls.py v1.0
# Part of Project Tesseract: 4D Projection Lab
# v1.0: "Declarative Controls"
# - A simulation describes its tunable parameters as plain data; whatever UI
#   sits on top decides how to draw them.

from dataclasses import dataclass
from typing import Optional, Union

@dataclass(frozen=True)
class UIControl:
    """One tunable parameter: identifier, bounds and default value."""
    type: str
    id: str
    label: str
    default: Union[float, bool]
    min: Optional[float] = None
    max: Optional[float] = None
    step: Optional[float] = None

    def clamp(self, value):
        """Clamps a slider value to its bounds. Checkboxes pass through."""
        if self.type != 'slider':
            return value
        return max(self.min, min(self.max, value))

def slider(control_id: str, label: str, min_value: float, max_value: float,
           step: float, default: float) -> UIControl:
    return UIControl('slider', control_id, label, default, min_value, max_value, step)

def checkbox(control_id: str, label: str, default: bool) -> UIControl:
    return UIControl('checkbox', control_id, label, default)
