# kestrel/graphics/output.py
from __future__ import annotations

from pathlib import Path
from typing import Sequence

from PIL import Image

from kestrel.graphics.framebuffer import FrameBuffer


def save_png(frame_buffer: FrameBuffer, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    frame_buffer.to_image().save(path, format="PNG")
    return path


def save_gif(
    frames: Sequence[Image.Image],
    path: Path,
    delay_ms: int,
    loop: int = 0,
) -> Path:
    """
    Encode frames as an animated GIF. loop=0 repeats forever.

    GIF stores frame delays in centiseconds, so delay_ms is truncated to a
    multiple of 10 (75 ms plays as 70 ms).
    """
    if not frames:
        raise ValueError("Cannot encode a GIF without frames")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    frames[0].save(
        path,
        format="GIF",
        save_all=True,
        append_images=list(frames[1:]),
        duration=delay_ms,
        loop=loop,
        disposal=2,
    )
    return path
