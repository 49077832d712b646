# math4d.py v1.3
# Part of Project Tesseract: 4D Projection Lab
# v1.3: "Vectorized Buffers"
# - Scalar functions (`rotate_plane`, `rotate_composed`, `project`) operate on
#   immutable Vec4/Vec3 values and are the reference behaviour.
# - Vectorized twins (`rotate_points`, `project_points`) work on (N, 4) numpy
#   arrays and can write straight into a caller-owned buffer, so simulations
#   update their render buffers in place every frame.
# - All functions are total: bad planes are ignored and a near-zero projection
#   divisor is clamped instead of producing inf/NaN.

import math
from typing import NamedTuple, Iterable, Mapping, Optional, Sequence, Tuple

import numpy as np

W_PERSPECTIVE_DISTANCE = 4.0   # Default viewpoint distance along W
PROJECTION_EPSILON = 1e-5      # Keeps the divisor away from an exact zero
MIN_DIVISOR = 0.01             # At or behind the viewpoint below this
FAR_AWAY = 10000.0             # Where clamped points are pushed to

# Each plane maps to the (first, second) axis indices it rotates.
PLANE_AXES = {
    'xy': (0, 1),
    'xz': (0, 2),
    'xw': (0, 3),
    'yz': (1, 2),
    'yw': (1, 3),
    'zw': (2, 3),
}
PLANES = tuple(PLANE_AXES)

# Rotations in different 4D planes do not commute. This order is part of the
# contract: changing it changes every rendered frame.
ROTATION_ORDER = ('xy', 'xz', 'yz', 'xw', 'yw', 'zw')


class Vec4(NamedTuple):
    x: float
    y: float
    z: float
    w: float

    def norm(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z + self.w * self.w)


class Vec3(NamedTuple):
    x: float
    y: float
    z: float


def as_vec4(v: Sequence[float]) -> Vec4:
    if isinstance(v, Vec4):
        return v
    x, y, z, w = v
    return Vec4(float(x), float(y), float(z), float(w))


def _sign(value: float) -> float:
    if value > 0:
        return 1.0
    if value < 0:
        return -1.0
    return 0.0


# --- SCALAR FUNCTIONS ---

def rotate_plane(v: Sequence[float], plane: str, angle: float) -> Vec4:
    """
    Rotates a 4D point by `angle` radians in one coordinate plane.

    The two coordinates named by `plane` go through the standard 2D rotation
    (a' = a*cos - b*sin, b' = a*sin + b*cos); the other two are untouched.
    An unrecognized plane returns the point unchanged.
    """
    v = as_vec4(v)
    axes = PLANE_AXES.get(plane)
    if axes is None:
        return v

    a, b = axes
    c = math.cos(angle)
    s = math.sin(angle)
    coords = list(v)
    coords[a] = v[a] * c - v[b] * s
    coords[b] = v[a] * s + v[b] * c
    return Vec4(*coords)


def rotate_sequence(v: Sequence[float], steps: Iterable[Tuple[str, float]]) -> Vec4:
    """Applies an explicit, ordered list of (plane, angle) rotations."""
    result = as_vec4(v)
    for plane, angle in steps:
        result = rotate_plane(result, plane, angle)
    return result


def _ordered_steps(angles: Mapping[str, float], order: Sequence[str]):
    for plane in order:
        angle = angles.get(plane)
        if angle is not None:
            yield plane, angle


def rotate_composed(v: Sequence[float], angles: Mapping[str, float],
                    order: Sequence[str] = ROTATION_ORDER) -> Vec4:
    """
    Rotates a 4D point in every plane present in `angles`.

    Planes are applied in ROTATION_ORDER (xy, xz, yz, xw, yw, zw). Planes that
    are absent (or None) are skipped, keys that are not planes are ignored.
    """
    return rotate_sequence(v, _ordered_steps(angles, order))


def project(v: Sequence[float], w_distance: float = W_PERSPECTIVE_DISTANCE) -> Vec3:
    """
    Perspective projection from 4D to 3D, viewpoint at w = w_distance.

    A point at or behind the viewpoint (divisor <= MIN_DIVISOR) is pushed to
    FAR_AWAY along the sign of each coordinate instead of blowing up.
    """
    x, y, z, w = as_vec4(v)
    divisor = w_distance - w + PROJECTION_EPSILON
    if divisor <= MIN_DIVISOR:
        return Vec3(_sign(x) * FAR_AWAY, _sign(y) * FAR_AWAY, _sign(z) * FAR_AWAY)
    return Vec3(x * w_distance / divisor, y * w_distance / divisor, z * w_distance / divisor)


# --- VECTORIZED FUNCTIONS ---

def plane_rotation_matrix(plane: str, angle: float) -> np.ndarray:
    """4x4 matrix R such that R @ v == rotate_plane(v, plane, angle)."""
    matrix = np.eye(4)
    axes = PLANE_AXES.get(plane)
    if axes is None:
        return matrix
    a, b = axes
    c, s = math.cos(angle), math.sin(angle)
    matrix[a, a] = c
    matrix[a, b] = -s
    matrix[b, a] = s
    matrix[b, b] = c
    return matrix


def composed_rotation_matrix(angles: Mapping[str, float],
                             order: Sequence[str] = ROTATION_ORDER) -> np.ndarray:
    """Single 4x4 matrix equivalent to rotate_composed with the same order."""
    matrix = np.eye(4)
    for plane, angle in _ordered_steps(angles, order):
        # Later rotations act on the result of earlier ones.
        matrix = plane_rotation_matrix(plane, angle) @ matrix
    return matrix


def rotate_points(points: np.ndarray, angles: Mapping[str, float],
                  out: Optional[np.ndarray] = None,
                  order: Sequence[str] = ROTATION_ORDER) -> np.ndarray:
    """Rotates an (N, 4) array of points. Writes into `out` if given."""
    matrix = composed_rotation_matrix(angles, order)
    if out is None:
        return points @ matrix.T
    np.matmul(points, matrix.T, out=out)
    return out


def project_points(points: np.ndarray, w_distance: float = W_PERSPECTIVE_DISTANCE,
                   out: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Projects an (N, 4) array to (N, 3), point-for-point identical to `project`.

    Args:
        points: rotated 4D points.
        w_distance: viewpoint distance along W.
        out: optional (N, 3) float buffer that receives the result in place.
    """
    points = np.asarray(points, dtype=float)
    if out is None:
        out = np.empty((len(points), 3), dtype=float)

    divisor = w_distance - points[:, 3] + PROJECTION_EPSILON
    clamped = divisor <= MIN_DIVISOR
    safe_divisor = np.where(clamped, 1.0, divisor)

    np.multiply(points[:, :3], w_distance, out=out)
    np.divide(out, safe_divisor[:, None], out=out)
    if np.any(clamped):
        out[clamped] = np.sign(points[clamped, :3]) * FAR_AWAY
    return out
