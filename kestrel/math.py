# kestrel/math.py
import math
from typing import Iterable

import numpy as np

from kestrel.types import Mat4, Scalar, Vec3, Vec4


def vec3(x: Scalar = 0.0, y: Scalar = 0.0, z: Scalar = 0.0) -> Vec3:
    return np.array([x, y, z], dtype=np.float64)


def vec4(
    x: Scalar = 0.0, y: Scalar = 0.0, z: Scalar = 0.0, w: Scalar = 0.0
) -> Vec4:
    return np.array([x, y, z, w], dtype=np.float64)


def as_vec3(values: Iterable[float]) -> Vec3:
    arr = np.asarray(list(values), dtype=np.float64)
    if arr.shape != (3,):
        raise ValueError(f"Expected 3 components, got shape {arr.shape}")
    return arr


def extend(v: Vec3, w: Scalar) -> Vec4:
    return np.array([v[0], v[1], v[2], w], dtype=np.float64)


# -- Vector Math --
def length_squared(v: np.ndarray) -> Scalar:
    return float(np.dot(v, v))


def normalize(v: np.ndarray) -> np.ndarray:
    mag = math.sqrt(length_squared(v))
    if mag == 0:
        return np.zeros_like(v, dtype=np.float64)
    return v / mag


def is_finite(v: np.ndarray) -> bool:
    return bool(np.all(np.isfinite(v)))


# -- Matrix Math --
def identity() -> Mat4:
    return np.eye(4, dtype=np.float64)


def translation_matrix(x: Scalar, y: Scalar, z: Scalar) -> Mat4:
    mat = identity()
    mat[0, 3] = x
    mat[1, 3] = y
    mat[2, 3] = z
    return mat


def rotation_y_matrix(radians: Scalar) -> Mat4:
    """
    Rotation about the vertical (Y) axis.
    Column-vector convention: p' = M @ p.
    """
    cos_a = math.cos(radians)
    sin_a = math.sin(radians)

    mat = identity()
    mat[0, 0] = cos_a
    mat[2, 0] = sin_a
    mat[0, 2] = -sin_a
    mat[2, 2] = cos_a
    return mat


def perspective_rh(
    fov_y: Scalar, aspect: Scalar, near: Scalar, far: Scalar
) -> Mat4:
    """
    Right-handed perspective projection with a [0, 1] depth range.

    fov_y: vertical field of view in radians
    aspect: width / height
    near, far: clip plane distances; they are used as given, so negative
    values are accepted.

    Raises:
        ValueError: if the parameters produce an undefined matrix.
    """
    sin_fov = math.sin(0.5 * fov_y)
    cos_fov = math.cos(0.5 * fov_y)

    if sin_fov == 0:
        raise ValueError(f"Field of view must be non-zero, got {fov_y}")
    if aspect == 0:
        raise ValueError("Aspect ratio must be non-zero")
    if near == far:
        raise ValueError(f"Near and far planes coincide at {near}")

    h = cos_fov / sin_fov
    w = h / aspect
    r = far / (near - far)

    mat = np.zeros((4, 4), dtype=np.float64)
    mat[0, 0] = w
    mat[1, 1] = h
    mat[2, 2] = r
    mat[2, 3] = r * near

    # Perspective Division (w = -z)
    mat[3, 2] = -1.0

    return mat


def inverse_transpose(mat: Mat4) -> Mat4:
    """Normal matrix for `mat`. Raises numpy.linalg.LinAlgError if singular."""
    return np.linalg.inv(mat).T


def transform_point(mat: Mat4, p: Vec4) -> Vec4:
    return mat @ p


def transform_direction(mat: Mat4, d: Vec3) -> Vec3:
    return (mat @ extend(d, 0.0))[:3]
