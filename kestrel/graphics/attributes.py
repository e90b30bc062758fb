# kestrel/graphics/attributes.py
"""
Records that flow through the software pipeline:

    VertexAttributes      vertex stage in/out, interpolated per pixel
    FragmentAttributes    fragment stage out, consumed by blending
    FrameBufferAttributes one frame buffer cell (8-bit RGBA + depth)
    UniformAttributes     per-render constants (light, material, camera,
                          transform) plus the matrices derived from them
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

import numpy as np

from kestrel.math import (
    as_vec3,
    extend,
    identity,
    inverse_transpose,
    normalize,
    perspective_rh,
    rotation_y_matrix,
    translation_matrix,
    vec3,
    vec4,
)
from kestrel.types import Mat4, Rgba8, Scalar, Vec3, Vec4

# Stored depth of an untouched cell. A sentinel, not a distance.
DEFAULT_DEPTH = 100.0
DEFAULT_COLOR: Rgba8 = (255, 255, 255, 255)

# Clip planes handed to the perspective projection.
Z_NEAR = -1.0
Z_FAR = 1.0


@dataclass(slots=True)
class VertexAttributes:
    position: Vec4 = field(default_factory=vec4)  # homogeneous clip space
    normal: Vec3 = field(default_factory=vec3)
    frag_pos: Vec3 = field(default_factory=vec3)  # world space

    @staticmethod
    def from_mesh(position: Vec3, normal: Vec3) -> VertexAttributes:
        return VertexAttributes(
            position=extend(np.asarray(position, dtype=np.float64), 1.0),
            normal=np.array(normal, dtype=np.float64),
            frag_pos=vec3(),
        )

    @staticmethod
    def interpolate(
        a: VertexAttributes,
        b: VertexAttributes,
        c: VertexAttributes,
        alpha: Scalar,
        beta: Scalar,
        gamma: Scalar,
    ) -> VertexAttributes:
        """
        Blend three vertices with barycentric weights.

        Positions are divided by their own w before weighting. This is
        screen-space (affine) interpolation, not perspective-correct.
        The normal is renormalized after weighting.
        """
        position = (
            alpha * (a.position / a.position[3])
            + beta * (b.position / b.position[3])
            + gamma * (c.position / c.position[3])
        )
        normal = normalize(alpha * a.normal + beta * b.normal + gamma * c.normal)
        frag_pos = alpha * a.frag_pos + beta * b.frag_pos + gamma * c.frag_pos
        return VertexAttributes(
            position=position, normal=normal, frag_pos=frag_pos
        )


@dataclass(slots=True)
class FragmentAttributes:
    color: Vec4 = field(default_factory=vec4)  # RGBA in [0, 1]
    position: Vec3 = field(default_factory=vec3)
    normal: Vec3 = field(default_factory=vec3)


def _to_u8(channel: float) -> int:
    # Saturating cast: NaN -> 0, clamp to [0, 255], truncate.
    if math.isnan(channel):
        return 0
    return int(min(max(channel * 255.0, 0.0), 255.0))


@dataclass(frozen=True, slots=True)
class FrameBufferAttributes:
    color: Rgba8 = DEFAULT_COLOR
    depth: float = DEFAULT_DEPTH

    @staticmethod
    def from_color(color: Vec4, depth: float) -> FrameBufferAttributes:
        """Pack a float RGBA color in [0, 1] into 8 bits per channel."""
        r, g, b, a = (_to_u8(float(c)) for c in color)
        return FrameBufferAttributes(color=(r, g, b, a), depth=float(depth))

    def get_color(self) -> Vec4:
        return np.array(self.color, dtype=np.float64) / 255.0


def _scalar_field(data: Mapping[str, Any], key: str) -> Scalar:
    value = data.get(key, 0.0)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"'{key}' must be a number, got {value!r}")
    return float(value)


def _vec3_field(data: Mapping[str, Any], key: str) -> Vec3:
    """A 3-vector given as [x, y, z] or {"x": .., "y": .., "z": ..}."""
    value = data.get(key)
    if value is None:
        return vec3()
    if isinstance(value, Mapping):
        return vec3(
            _scalar_field(value, "x"),
            _scalar_field(value, "y"),
            _scalar_field(value, "z"),
        )
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise ValueError(f"'{key}' must be a 3-vector, got {value!r}")
    try:
        return as_vec3(value)
    except TypeError as e:
        raise ValueError(f"'{key}' must hold numbers, got {value!r}") from e


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(
            f"Section '{key}' must be an object, got {type(value).__name__}"
        )
    return value


@dataclass(slots=True)
class Light:
    position: Vec3 = field(default_factory=vec3)
    intensity: Vec3 = field(default_factory=vec3)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> Light:
        return Light(
            position=_vec3_field(data, "position"),
            intensity=_vec3_field(data, "intensity"),
        )


@dataclass(slots=True)
class Material:
    ambient_color: Vec3 = field(default_factory=vec3)
    diffuse_color: Vec3 = field(default_factory=vec3)
    specular_color: Vec3 = field(default_factory=vec3)
    shininess: Scalar = 0.0

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> Material:
        return Material(
            ambient_color=_vec3_field(data, "ambient_color"),
            diffuse_color=_vec3_field(data, "diffuse_color"),
            specular_color=_vec3_field(data, "specular_color"),
            shininess=_scalar_field(data, "shininess"),
        )


@dataclass(slots=True)
class Camera:
    is_perspective: bool = False
    position: Vec3 = field(default_factory=vec3)
    field_of_view: Scalar = 0.0  # radians, vertical
    aspect_ratio: Scalar = 0.0  # width / height

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> Camera:
        return Camera(
            is_perspective=bool(data.get("is_perspective", False)),
            position=_vec3_field(data, "position"),
            field_of_view=_scalar_field(data, "field_of_view"),
            aspect_ratio=_scalar_field(data, "aspect_ratio"),
        )


@dataclass(slots=True)
class Transform:
    angle: Scalar = 0.0  # in units of pi radians
    distance: Scalar = 0.0

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> Transform:
        return Transform(
            angle=_scalar_field(data, "angle"),
            distance=_scalar_field(data, "distance"),
        )


@dataclass(slots=True)
class UniformAttributes:
    """
    Per-render constants.

    The four matrices are only valid after calc_matrices(); nothing here
    tracks whether camera or transform changed since, so callers must
    re-derive before every render that follows a mutation.
    """

    light: Light = field(default_factory=Light)
    material: Material = field(default_factory=Material)
    camera: Camera = field(default_factory=Camera)
    transform: Transform = field(default_factory=Transform)

    model_matrix: Mat4 = field(default_factory=identity)
    view_matrix: Mat4 = field(default_factory=identity)
    projection_matrix: Mat4 = field(default_factory=identity)
    normal_matrix: Mat4 = field(default_factory=identity)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> UniformAttributes:
        """
        Build from a parsed scene config. Missing sections default to zero.
        Serialized matrices are ignored; call calc_matrices() instead.
        """
        return UniformAttributes(
            light=Light.from_dict(_section(data, "light")),
            material=Material.from_dict(_section(data, "material")),
            camera=Camera.from_dict(_section(data, "camera")),
            transform=Transform.from_dict(_section(data, "transform")),
        )

    def calc_model_matrix(self) -> None:
        """Spin about Y by angle * pi, then push back along z by distance."""
        rotation = rotation_y_matrix(self.transform.angle * math.pi)
        model = rotation.copy()
        model[2, 3] = -self.transform.distance
        self.model_matrix = model
        self.normal_matrix = inverse_transpose(model)

    def calc_view_matrix(self) -> None:
        # Axis-aligned camera: translation only, no look-at.
        x, y, z = self.camera.position
        self.view_matrix = translation_matrix(-x, -y, -z)

    def calc_projection_matrix(self) -> None:
        if self.camera.is_perspective:
            self.projection_matrix = perspective_rh(
                self.camera.field_of_view,
                self.camera.aspect_ratio,
                Z_NEAR,
                Z_FAR,
            )
        else:
            self.projection_matrix = identity()

    def calc_matrices(self) -> None:
        self.calc_model_matrix()
        self.calc_view_matrix()
        self.calc_projection_matrix()
