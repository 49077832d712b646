# styling.py v2.0
# Part of Project Tesseract: 4D Projection Lab
# v2.0: "Centralized Styling"
# - Consolidates console colors and the simulation palette into one place.
# - Adds a vectorized HSL -> RGB conversion so simulations can recolor
#   thousands of points per frame without a Python-level loop.

import numpy as np
from termcolor import cprint

# --- Console Colors (using termcolor names) ---
# Usage: cprint("Hello", C.INFO)
class C:
    HEADER = 'magenta'
    SUBHEADER = 'cyan'
    SUCCESS = 'green'
    WARNING = 'yellow'
    ERROR = 'red'
    INFO = 'white'
    DEBUG = 'grey'
    BOLD_ATTR = ['bold']

# --- Simulation Palette ---
COLOR_BACKGROUND = '#05030c'
COLOR_TESSERACT_EDGES = '#00ddff'
COLOR_TESSERACT_VERTICES = '#ffaa00'
COLOR_CLASSIC_EDGES = '#00ffff'
COLOR_SLICE_MESH = '#ff00ff'

# --- Frame Rendering ---
FONT_SIZE_TITLE = 14
FIG_SIZE_INCHES = (12.8, 7.2)
FIG_DPI = 100


def hex_to_rgb(hex_color: str) -> tuple:
    """'#rrggbb' -> (r, g, b) floats in [0, 1]."""
    value = hex_color.lstrip('#')
    return tuple(int(value[i:i + 2], 16) / 255.0 for i in (0, 2, 4))


def hsl_to_rgb(h, s, l) -> np.ndarray:
    """
    Converts HSL to RGB. Accepts scalars or arrays (broadcast together).

    Hue wraps around modulo 1; saturation and lightness are clamped to [0, 1].
    This matches the behaviour of the usual `setHSL` found in 3D engines, so a
    hue of 1.2 is the same color as 0.2.

    Returns:
        np.ndarray: array of shape (..., 3) with RGB components in [0, 1].
    """
    h = np.mod(np.asarray(h, dtype=float), 1.0)
    s = np.clip(np.asarray(s, dtype=float), 0.0, 1.0)
    l = np.clip(np.asarray(l, dtype=float), 0.0, 1.0)
    h, s, l = np.broadcast_arrays(h, s, l)

    a = s * np.minimum(l, 1.0 - l)
    channels = []
    for n in (0, 8, 4):
        k = np.mod(n + h * 12.0, 12.0)
        channels.append(l - a * np.clip(np.minimum(k - 3.0, 9.0 - k), -1.0, 1.0))
    return np.stack(channels, axis=-1)


if __name__ == "__main__":
    cprint("--- styling.py loaded ---", C.SUCCESS)
    cprint("Example usage:", C.SUBHEADER, attrs=C.BOLD_ATTR)
    cprint("  from styling import C, hsl_to_rgb", C.DEBUG)
    cprint(f"  hsl_to_rgb(0.0, 1.0, 0.5) -> {hsl_to_rgb(0.0, 1.0, 0.5)}", C.DEBUG)
