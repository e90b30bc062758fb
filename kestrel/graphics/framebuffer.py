# kestrel/graphics/framebuffer.py
from __future__ import annotations

import numpy as np
from PIL import Image

from kestrel.graphics.attributes import (
    DEFAULT_COLOR,
    DEFAULT_DEPTH,
    FrameBufferAttributes,
)


class FrameBuffer:
    """
    height x width grid of cells (8-bit RGBA + float32 depth), row-major.

    Rasterization writes pixel-space row j into stored row height-1-j,
    so stored row 0 is the top row of the exported image.
    """

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(
                f"Frame buffer dimensions must be positive, got {width}x{height}"
            )
        self._color = np.empty((height, width, 4), dtype=np.uint8)
        self._depth = np.empty((height, width), dtype=np.float32)
        self.clear()

    @property
    def width(self) -> int:
        return int(self._color.shape[1])

    @property
    def height(self) -> int:
        return int(self._color.shape[0])

    @property
    def color(self) -> np.ndarray:
        """(height, width, 4) uint8 view. Do not write through it."""
        return self._color

    @property
    def depth(self) -> np.ndarray:
        """(height, width) float32 view. Do not write through it."""
        return self._depth

    def get(self, x: int, y: int) -> FrameBufferAttributes:
        r, g, b, a = (int(c) for c in self._color[y, x])
        return FrameBufferAttributes(
            color=(r, g, b, a), depth=float(self._depth[y, x])
        )

    def set(self, x: int, y: int, val: FrameBufferAttributes) -> None:
        self._color[y, x] = val.color
        self._depth[y, x] = val.depth

    def clear(self) -> None:
        """Reset every cell to opaque white at the sentinel depth."""
        self._color[...] = DEFAULT_COLOR
        self._depth[...] = DEFAULT_DEPTH

    def as_raw(self) -> bytes:
        """RGBA bytes, top row first."""
        return self._color.tobytes()

    def to_image(self) -> Image.Image:
        # (h, w, 4) uint8 is inferred as RGBA
        return Image.fromarray(self._color.copy())

    def __repr__(self) -> str:
        return f"FrameBuffer({self.width}x{self.height})"
