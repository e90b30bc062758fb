# kestrel/graphics/program.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Sequence

from kestrel.errors import (
    GeometryDegenerate,
    IndexOutOfRange,
    ShaderStageFailure,
)
from kestrel.graphics.attributes import UniformAttributes, VertexAttributes
from kestrel.graphics.framebuffer import FrameBuffer
from kestrel.graphics.raster import (
    BlendingShader,
    FragmentShader,
    VertexShader,
    rasterize_line,
    rasterize_triangle,
)
from kestrel.types import PrimitiveType

DEFAULT_LINE_THICKNESS = 0.5


class DegeneratePolicy(str, Enum):
    """What render_triangles does with a zero-area triangle."""

    SKIP = "skip"  # covers zero pixels, logged at debug level
    RAISE = "raise"  # GeometryDegenerate aborts the render


@dataclass
class Program:
    """
    Vertex -> fragment -> frame buffer.

    The three stages are plain callables; swap any of them to change how
    geometry is transformed, shaded or composited. The blending stage also
    owns the depth test.
    """

    vertex_shader: VertexShader
    fragment_shader: FragmentShader
    blending_shader: BlendingShader
    degenerate: DegeneratePolicy = DegeneratePolicy.SKIP
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger("kestrel.program")
    )

    def process_vertices(
        self,
        uniform: UniformAttributes,
        vertices: Sequence[VertexAttributes],
    ) -> List[VertexAttributes]:
        """Run the vertex stage over every vertex."""
        out: List[VertexAttributes] = []
        for index, va in enumerate(vertices):
            try:
                result = self.vertex_shader(va, uniform)
            except ShaderStageFailure:
                raise
            except Exception as e:
                raise ShaderStageFailure(
                    "vertex", f"vertex {index}: {e!r}"
                ) from e
            if not isinstance(result, VertexAttributes):
                raise ShaderStageFailure(
                    "vertex",
                    f"expected VertexAttributes, got {type(result).__name__}",
                )
            out.append(result)
        return out

    def render_triangle(
        self,
        uniform: UniformAttributes,
        v1: VertexAttributes,
        v2: VertexAttributes,
        v3: VertexAttributes,
        frame_buffer: FrameBuffer,
    ) -> int:
        try:
            return rasterize_triangle(
                uniform,
                v1,
                v2,
                v3,
                frame_buffer,
                self.fragment_shader,
                self.blending_shader,
            )
        except GeometryDegenerate as e:
            if self.degenerate is DegeneratePolicy.RAISE:
                raise
            self.logger.debug("skipped degenerate triangle: %s", e)
            return 0

    def render_triangles(
        self,
        uniform: UniformAttributes,
        vertices: Sequence[VertexAttributes],
        indices: Sequence[int],
        frame_buffer: FrameBuffer,
    ) -> int:
        count = 0
        for i in range(len(indices) // 3):
            count += self.render_triangle(
                uniform,
                vertices[indices[i * 3]],
                vertices[indices[i * 3 + 1]],
                vertices[indices[i * 3 + 2]],
                frame_buffer,
            )
        return count

    def render_line(
        self,
        uniform: UniformAttributes,
        v1: VertexAttributes,
        v2: VertexAttributes,
        line_thickness: float,
        frame_buffer: FrameBuffer,
    ) -> int:
        try:
            return rasterize_line(
                uniform,
                v1,
                v2,
                line_thickness,
                frame_buffer,
                self.fragment_shader,
                self.blending_shader,
            )
        except GeometryDegenerate as e:
            if self.degenerate is DegeneratePolicy.RAISE:
                raise
            self.logger.debug("skipped degenerate line: %s", e)
            return 0

    def render_lines(
        self,
        uniform: UniformAttributes,
        vertices: Sequence[VertexAttributes],
        indices: Sequence[int],
        line_thickness: float,
        frame_buffer: FrameBuffer,
    ) -> int:
        count = 0
        for i in range(len(indices) // 2):
            count += self.render_line(
                uniform,
                vertices[indices[i * 2]],
                vertices[indices[i * 2 + 1]],
                line_thickness,
                frame_buffer,
            )
        return count

    def render(
        self,
        uniform: UniformAttributes,
        vertices: Sequence[VertexAttributes],
        indices: Sequence[int],
        frame_buffer: FrameBuffer,
        primitive_type: PrimitiveType = PrimitiveType.TRIANGLE,
        *,
        line_thickness: float = DEFAULT_LINE_THICKNESS,
        transform_vertices: bool = False,
    ) -> int:
        """
        Rasterize `indices` grouped by primitive type into `frame_buffer`.

        `vertices` are expected to be vertex-stage output already unless
        `transform_vertices` is set. An incomplete trailing group is
        ignored. The first failing primitive aborts the call; pixels
        written before it stay written. Returns the number of pixels shaded.

        Raises:
            IndexOutOfRange: an index does not address `vertices`.
            GeometryDegenerate: only with DegeneratePolicy.RAISE.
            ShaderStageFailure: a stage raised or returned an invalid value.
        """
        indices = validate_indices(indices, len(vertices))

        if transform_vertices:
            vertices = self.process_vertices(uniform, vertices)

        if primitive_type is PrimitiveType.TRIANGLE:
            return self.render_triangles(
                uniform, vertices, indices, frame_buffer
            )
        if primitive_type is PrimitiveType.LINE:
            return self.render_lines(
                uniform, vertices, indices, line_thickness, frame_buffer
            )
        raise ValueError(f"Unknown primitive type {primitive_type!r}")


def validate_indices(indices: Sequence[int], vertex_count: int) -> List[int]:
    """
    Coerce indices to int and check them against the vertex count.

    Raises:
        IndexOutOfRange: negative, too large, or non-integral index.
    """
    out: List[int] = []
    for raw in indices:
        try:
            idx = int(raw)
        except (TypeError, ValueError, OverflowError) as e:
            raise IndexOutOfRange(raw, vertex_count) from e  # type: ignore[arg-type]
        if idx != raw or not 0 <= idx < vertex_count:
            raise IndexOutOfRange(raw, vertex_count)  # type: ignore[arg-type]
        out.append(idx)
    return out
