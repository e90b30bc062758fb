# kestrel/graphics/raster.py
"""
Triangle and line scan conversion.

Both rasterizers project their vertices (perspective divide, then NDC to
pixels), scan the clamped bounding box, and for every covered pixel call
the fragment stage and then the blending stage against the cell currently
stored in the frame buffer. Coverage for the whole box is evaluated with
numpy; the stage callbacks then run pixel by pixel, columns outer and rows
inner, so later pixels see the result of earlier ones.
"""

from __future__ import annotations

import math
from typing import Callable, Tuple

import numpy as np

from kestrel.errors import GeometryDegenerate, ShaderStageFailure
from kestrel.graphics.attributes import (
    FragmentAttributes,
    FrameBufferAttributes,
    UniformAttributes,
    VertexAttributes,
)
from kestrel.graphics.framebuffer import FrameBuffer
from kestrel.math import is_finite, length_squared

VertexShader = Callable[[VertexAttributes, UniformAttributes], VertexAttributes]
FragmentShader = Callable[
    [VertexAttributes, UniformAttributes], FragmentAttributes
]
BlendingShader = Callable[
    [FragmentAttributes, FrameBufferAttributes], FrameBufferAttributes
]

# A triangle is degenerate when |det| of its barycentric matrix (twice the
# projected area) is at most this fraction of its longest edge squared,
# i.e. its height is below 1e-6 of its length.
DEGENERATE_EPSILON = 1e-6

# Inclusive pixel range along one axis
Span = Tuple[int, int]


def project(v: VertexAttributes, frame_buffer: FrameBuffer) -> np.ndarray:
    """
    Clip space -> (x_px, y_px, z_ndc).

    Raises:
        GeometryDegenerate: if w is zero or the divide is not finite.
    """
    w = float(v.position[3])
    if w == 0.0 or not math.isfinite(w):
        raise GeometryDegenerate(f"Cannot divide by w={w}")

    ndc = v.position[:3] / w
    if not is_finite(ndc):
        raise GeometryDegenerate(f"Non-finite NDC position {ndc}")

    return np.array(
        [
            ((ndc[0] + 1.0) / 2.0) * frame_buffer.width,
            ((ndc[1] + 1.0) / 2.0) * frame_buffer.height,
            ndc[2],
        ],
        dtype=np.float64,
    )


def _span(lo: float, hi: float, size: int) -> Span | None:
    """Clamp [lo, hi] into [0, size-1], truncating like an unsigned cast."""
    start = int(max(lo, 0.0))
    stop = int(max(min(hi, size - 1.0), 0.0))
    if start > stop:
        return None
    return start, stop


def _pixel_grid(xs: Span, ys: Span) -> Tuple[np.ndarray, np.ndarray]:
    """Pixel centers of the box, flattened with columns outer."""
    ii, jj = np.meshgrid(
        np.arange(xs[0], xs[1] + 1),
        np.arange(ys[0], ys[1] + 1),
        indexing="ij",
    )
    return ii.ravel(), jj.ravel()


def shade_pixel(
    i: int,
    j: int,
    va: VertexAttributes,
    uniform: UniformAttributes,
    frame_buffer: FrameBuffer,
    fragment_shader: FragmentShader,
    blending_shader: BlendingShader,
) -> None:
    """Run fragment + blending for pixel-space (i, j) and store the result."""
    try:
        frag = fragment_shader(va, uniform)
    except ShaderStageFailure:
        raise
    except Exception as e:
        raise ShaderStageFailure("fragment", repr(e)) from e

    if not isinstance(frag, FragmentAttributes):
        raise ShaderStageFailure(
            "fragment",
            f"expected FragmentAttributes, got {type(frag).__name__}",
        )

    row = frame_buffer.height - 1 - j
    previous = frame_buffer.get(i, row)

    try:
        out = blending_shader(frag, previous)
    except ShaderStageFailure:
        raise
    except Exception as e:
        raise ShaderStageFailure("blending", repr(e)) from e

    if not isinstance(out, FrameBufferAttributes):
        raise ShaderStageFailure(
            "blending",
            f"expected FrameBufferAttributes, got {type(out).__name__}",
        )
    if not math.isfinite(out.depth):
        raise ShaderStageFailure("blending", f"non-finite depth {out.depth}")
    if len(out.color) != 4 or any(not 0 <= c <= 255 for c in out.color):
        raise ShaderStageFailure("blending", f"invalid color {out.color}")

    frame_buffer.set(i, row, out)


def rasterize_triangle(
    uniform: UniformAttributes,
    v1: VertexAttributes,
    v2: VertexAttributes,
    v3: VertexAttributes,
    frame_buffer: FrameBuffer,
    fragment_shader: FragmentShader,
    blending_shader: BlendingShader,
) -> int:
    """
    Fill one triangle. Returns the number of pixels shaded.

    Inside test is weight >= 0 on all three barycentric coordinates, with
    no fill rule: a pixel center exactly on an edge shared by two
    triangles is shaded by both.

    Raises:
        GeometryDegenerate: zero-area projection or undefined divide.
        ShaderStageFailure: a stage raised or returned an invalid value.
    """
    p = np.stack([project(v, frame_buffer) for v in (v1, v2, v3)])

    # Columns are the projected points augmented with 1; the inverse maps
    # a pixel (x, y, 1) onto barycentric weights.
    a = np.vstack([p[:, 0], p[:, 1], np.ones(3)])
    det = float(np.linalg.det(a))
    edges = p[:, :2] - np.roll(p[:, :2], 1, axis=0)
    longest_sq = float(np.max(np.sum(edges * edges, axis=1)))
    if not math.isfinite(det) or abs(det) <= DEGENERATE_EPSILON * longest_sq:
        raise GeometryDegenerate(
            f"Triangle has no projected area (det={det:.3g})"
        )
    a_inv = np.linalg.inv(a)

    xs = _span(float(p[:, 0].min()), float(p[:, 0].max()), frame_buffer.width)
    ys = _span(float(p[:, 1].min()), float(p[:, 1].max()), frame_buffer.height)
    if xs is None or ys is None:
        return 0

    ii, jj = _pixel_grid(xs, ys)
    pixels = np.vstack([ii + 0.5, jj + 0.5, np.ones(ii.shape[0])])
    weights = a_inv @ pixels  # (3, N)

    depth = p[:, 2] @ weights
    covered = (
        np.all(weights >= 0.0, axis=0) & (depth >= -1.0) & (depth <= 1.0)
    )

    count = 0
    for k in np.flatnonzero(covered):
        alpha, beta, gamma = (float(w) for w in weights[:, k])
        va = VertexAttributes.interpolate(v1, v2, v3, alpha, beta, gamma)
        shade_pixel(
            int(ii[k]),
            int(jj[k]),
            va,
            uniform,
            frame_buffer,
            fragment_shader,
            blending_shader,
        )
        count += 1
    return count


def rasterize_line(
    uniform: UniformAttributes,
    v1: VertexAttributes,
    v2: VertexAttributes,
    thickness: float,
    frame_buffer: FrameBuffer,
    fragment_shader: FragmentShader,
    blending_shader: BlendingShader,
) -> int:
    """
    Draw a segment as every pixel whose center lies closer than
    `thickness` to it. A zero-length segment becomes a disc around v1.
    Returns the number of pixels shaded.
    """
    p1 = project(v1, frame_buffer)[:2]
    p2 = project(v2, frame_buffer)[:2]

    xs = _span(
        min(p1[0], p2[0]) - thickness,
        max(p1[0], p2[0]) + thickness,
        frame_buffer.width,
    )
    ys = _span(
        min(p1[1], p2[1]) - thickness,
        max(p1[1], p2[1]) + thickness,
        frame_buffer.height,
    )
    if xs is None or ys is None:
        return 0

    ii, jj = _pixel_grid(xs, ys)
    pixels = np.stack([ii + 0.5, jj + 0.5], axis=1)  # (N, 2)

    d = p2 - p1
    ll = length_squared(d)
    if ll == 0.0:
        t = np.zeros(pixels.shape[0])
    else:
        t = np.clip(((pixels - p1) @ d) / ll, 0.0, 1.0)

    closest = p1 + t[:, None] * d
    dist_sq = np.sum((pixels - closest) ** 2, axis=1)
    covered = dist_sq < thickness * thickness

    count = 0
    for k in np.flatnonzero(covered):
        tk = float(t[k])
        va = VertexAttributes.interpolate(v1, v2, v1, 1.0 - tk, tk, 0.0)
        shade_pixel(
            int(ii[k]),
            int(jj[k]),
            va,
            uniform,
            frame_buffer,
            fragment_shader,
            blending_shader,
        )
        count += 1
    return count
