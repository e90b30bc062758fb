# kestrel/graphics/shaders.py
"""
Stock pipeline stages.

    transform_vertex        model/view/projection + normal matrix
    phong_fragment          diffuse + specular, inverse-square falloff
    alpha_over_depth_blend  depth test, then alpha-over compositing

Any of them can be swapped for a caller-supplied callable with the same
signature when building a Program.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from kestrel.graphics.attributes import (
    FragmentAttributes,
    FrameBufferAttributes,
    UniformAttributes,
    VertexAttributes,
)
from kestrel.graphics.program import DegeneratePolicy, Program
from kestrel.graphics.raster import FragmentShader
from kestrel.math import (
    length_squared,
    normalize,
    transform_direction,
    transform_point,
    vec3,
)


def transform_vertex(
    va: VertexAttributes, uniform: UniformAttributes
) -> VertexAttributes:
    mvp = (
        uniform.projection_matrix @ uniform.view_matrix @ uniform.model_matrix
    )
    world = transform_point(uniform.model_matrix, va.position)
    return VertexAttributes(
        position=transform_point(mvp, va.position),
        normal=transform_direction(uniform.normal_matrix, va.normal),
        frag_pos=world[:3],
    )


def identity_vertex(
    va: VertexAttributes, uniform: UniformAttributes
) -> VertexAttributes:
    return va


def phong_fragment(
    va: VertexAttributes, uniform: UniformAttributes
) -> FragmentAttributes:
    n = va.normal
    if uniform.camera.is_perspective:
        v = normalize(uniform.camera.position - va.frag_pos)
    else:
        v = vec3(0.0, 0.0, -1.0)

    to_light = uniform.light.position - va.frag_pos
    li = normalize(to_light)

    material = uniform.material
    diffuse = material.diffuse_color * max(float(np.dot(li, n)), 0.0)
    specular = material.specular_color * (
        max(float(np.dot(n, normalize(li + v))), 0.0) ** material.shininess
    )

    dist_sq = length_squared(to_light)
    if dist_sq == 0.0:
        # Light sits on the surface; there is no falloff to apply.
        color = diffuse + specular
    else:
        color = (diffuse + specular) * uniform.light.intensity / dist_sq

    return FragmentAttributes(
        color=np.append(color, 1.0),
        position=va.position[:3].copy(),
        normal=n,
    )


def constant_color_fragment(rgba: Sequence[float]) -> FragmentShader:
    """Fragment stage that ignores lighting and emits `rgba`."""
    color = np.asarray(rgba, dtype=np.float64)
    if color.shape != (4,):
        raise ValueError(f"Expected an RGBA color, got {rgba!r}")

    def fragment(
        va: VertexAttributes, uniform: UniformAttributes
    ) -> FragmentAttributes:
        return FragmentAttributes(
            color=color.copy(),
            position=va.position[:3].copy(),
            normal=va.normal,
        )

    return fragment


def alpha_over_depth_blend(
    fa: FragmentAttributes, previous: FrameBufferAttributes
) -> FrameBufferAttributes:
    """Keep the nearer of fragment and stored cell; composite alpha-over."""
    depth = float(fa.position[2])
    if not depth < previous.depth:
        return previous

    alpha = float(fa.color[3])
    out = fa.color * alpha + previous.get_color() * (1.0 - alpha)
    return FrameBufferAttributes.from_color(out, depth)


def phong_program(
    degenerate: DegeneratePolicy = DegeneratePolicy.SKIP,
) -> Program:
    return Program(
        vertex_shader=transform_vertex,
        fragment_shader=phong_fragment,
        blending_shader=alpha_over_depth_blend,
        degenerate=degenerate,
    )
