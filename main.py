"""
Software renderer demo.

Run mode (positional, default "png"):
    - "png": render the bundled cube once to <out>/frame.png
    - "gif": render a 20 frame turntable to <out>/turntable.gif
    - "preview": spin the cube in a pygame window (needs the viewer extra)

Expected keys (preview):
    - ESC: quit
"""

from __future__ import annotations

import argparse
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, get_args

from kestrel.assets.defaults import DEFAULTS_ROOT, DefaultMeshes, DefaultScenes
from kestrel.core.context import EngineContext
from kestrel.core.logger import Level, LoggerSettings, SourceLocation
from kestrel.graphics.core.renderer import SoftwareRenderer
from kestrel.graphics.core.settings import RendererSettings, ResolutionSettings
from kestrel.graphics.debug.profiler import profile
from kestrel.types import PrimitiveType, RenderType

Mode = Literal["png", "gif", "preview"]

OUT_DIR = Path("out")


@dataclass(slots=True)
class AppState:
    mode: Mode
    frame_index: int = 0
    last_time: float = field(default_factory=time.perf_counter)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the bundled cube with the software rasterizer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "mode",
        nargs="?",
        default="png",
        choices=get_args(Mode),
        help="Output mode (default: png)",
    )
    parser.add_argument(
        "--height", type=int, default=300, help="Output height in pixels"
    )
    parser.add_argument(
        "--wireframe",
        action="store_true",
        help="Draw triangle edges as lines",
    )
    parser.add_argument(
        "--out", type=Path, default=OUT_DIR, help="Output directory"
    )
    return parser.parse_args(argv)


def run_preview(
    renderer: SoftwareRenderer, ctx: EngineContext, state: AppState
) -> None:
    from kestrel.graphics.core.window import Window

    mesh = ctx.loader.load_mesh(DefaultMeshes.CUBE)
    uniform = ctx.loader.load_uniforms(DefaultScenes.UNIFORM)
    turntable = renderer.settings.turntable

    renderer.update(uniform)
    fb = renderer.frame_buffer
    assert fb is not None
    window = Window(fb.width, fb.height, title="Kestrel preview")

    try:
        while window.poll():
            now = time.perf_counter()
            dt = now - state.last_time
            state.last_time = now
            state.frame_index += 1

            uniform.transform.angle += turntable.angle_step * dt * 10.0
            renderer.update(uniform)
            window.present(renderer.render(mesh), fps=30)
    finally:
        window.destroy()


@profile(out_dir=Path(".debug"), enabled=True)
def main() -> None:
    """Main entrypoint for the software renderer demo."""
    args = parse_args()
    state = AppState(mode=args.mode)

    ctx = EngineContext.create(
        DEFAULTS_ROOT,
        LoggerSettings(level=Level.INFO, source=SourceLocation.MODULE),
    )
    settings = RendererSettings(
        resolution=ResolutionSettings(height=args.height),
        primitive_type=(
            PrimitiveType.LINE if args.wireframe else PrimitiveType.TRIANGLE
        ),
    )
    renderer = SoftwareRenderer(ctx, settings)

    if state.mode == "preview":
        run_preview(renderer, ctx, state)
        return

    mesh = ctx.loader.load_mesh(DefaultMeshes.CUBE)
    uniform = ctx.loader.load_uniforms(DefaultScenes.UNIFORM)

    if state.mode == "gif":
        renderer.render_to_file(
            mesh, uniform, args.out / "turntable.gif", RenderType.GIF
        )
    else:
        renderer.render_to_file(
            mesh, uniform, args.out / "frame.png", RenderType.PNG
        )


if __name__ == "__main__":
    main()
