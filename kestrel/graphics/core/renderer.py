# kestrel/graphics/core/renderer.py
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from PIL import Image

from kestrel.assets.types import MeshData
from kestrel.core.context import EngineContext
from kestrel.graphics.attributes import UniformAttributes
from kestrel.graphics.core.settings import RendererSettings, TurntableSettings
from kestrel.graphics.framebuffer import FrameBuffer
from kestrel.graphics.geometry import (
    edge_indices,
    mesh_indices,
    mesh_vertex_attributes,
)
from kestrel.graphics.output import save_gif, save_png
from kestrel.graphics.program import Program
from kestrel.graphics.shaders import phong_program
from kestrel.types import PrimitiveType, RenderType


class SoftwareRenderer:
    """
    Settings, an update step and a render step that produces an image:
    the same surface a GPU-backed renderer would expose, with all the
    work done on the CPU by a Program.
    """

    def __init__(
        self,
        ctx: EngineContext,
        settings: Optional[RendererSettings] = None,
        program: Optional[Program] = None,
    ) -> None:
        self.ctx = ctx
        self._settings = settings or RendererSettings()
        self._logger = ctx.child_logger("renderer")

        if program is None:
            program = phong_program(self._settings.degenerate_policy)
            program.logger = self._logger
        self.program = program

        self.frame_buffer: Optional[FrameBuffer] = None
        self._uniform: Optional[UniformAttributes] = None
        self.frame_index = 0

    @property
    def settings(self) -> RendererSettings:
        return self._settings

    def update_settings(self, settings: RendererSettings) -> None:
        self._settings = settings
        self.program.degenerate = settings.degenerate_policy
        # Force a resize on the next update().
        self.frame_buffer = None

    def update(self, uniform: UniformAttributes) -> None:
        """
        Derive the uniform's matrices and size the frame buffer from its
        camera. Call after every change to the camera or transform.
        """
        uniform.calc_matrices()
        self._uniform = uniform

        height = self._settings.resolution.height
        width = self._settings.resolution.width_for(uniform.camera.aspect_ratio)
        fb = self.frame_buffer
        if fb is None or fb.width != width or fb.height != height:
            self.frame_buffer = FrameBuffer(width, height)
            self._logger.debug("frame buffer resized to %dx%d", width, height)

    def render(self, mesh: MeshData, clear: bool = True) -> FrameBuffer:
        if self._uniform is None or self.frame_buffer is None:
            raise RuntimeError("SoftwareRenderer.update() must run before render()")

        if clear:
            self.frame_buffer.clear()

        primitive_type = self._settings.primitive_type
        indices = mesh_indices(mesh)
        if primitive_type is PrimitiveType.LINE:
            indices = [int(i) for i in edge_indices(indices)]

        covered = self.program.render(
            self._uniform,
            mesh_vertex_attributes(mesh),
            indices,
            self.frame_buffer,
            primitive_type,
            line_thickness=self._settings.line_thickness,
            transform_vertices=True,
        )

        self.frame_index += 1
        self._logger.debug(
            "frame %d: %s '%s', %d pixels shaded",
            self.frame_index,
            primitive_type.value,
            mesh.name,
            covered,
        )
        return self.frame_buffer

    def render_image(self, mesh: MeshData) -> Image.Image:
        return self.render(mesh).to_image()

    def render_turntable(
        self,
        mesh: MeshData,
        uniform: UniformAttributes,
        turntable: Optional[TurntableSettings] = None,
    ) -> List[Image.Image]:
        """
        One image per frame; each frame first advances the transform.
        `uniform` is left at the state of the last frame. The first
        failing frame aborts the whole sequence.
        """
        turntable = turntable or self._settings.turntable
        frames: List[Image.Image] = []
        for _ in range(turntable.frame_count):
            uniform.transform.angle += turntable.angle_step
            uniform.transform.distance -= turntable.distance_step
            self.update(uniform)
            frames.append(self.render_image(mesh))
        return frames

    def render_to_file(
        self,
        mesh: MeshData,
        uniform: UniformAttributes,
        path: Path,
        render_type: RenderType = RenderType.PNG,
    ) -> Path:
        self._logger.info("render mode: %s.", render_type.value)

        if render_type is RenderType.PNG:
            self.update(uniform)
            out = save_png(self.render(mesh), path)
        elif render_type is RenderType.GIF:
            turntable = self._settings.turntable
            frames = self.render_turntable(mesh, uniform, turntable)
            out = save_gif(
                frames, path, turntable.frame_delay_ms, loop=turntable.loop
            )
        else:
            raise ValueError(f"Unknown render type {render_type!r}")

        self._logger.info("wrote %s", out)
        return out
