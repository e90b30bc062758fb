import pytest
from PIL import Image

from kestrel.graphics.attributes import FrameBufferAttributes
from kestrel.graphics.framebuffer import FrameBuffer
from kestrel.graphics.output import save_gif, save_png


def test_save_png_creates_parents(tmp_path):
    fb = FrameBuffer(3, 2)
    fb.set(2, 1, FrameBufferAttributes(color=(0, 255, 0, 255), depth=0.0))

    path = save_png(fb, tmp_path / "a" / "b" / "frame.png")

    with Image.open(path) as img:
        assert img.size == (3, 2)
        assert img.convert("RGBA").getpixel((2, 1)) == (0, 255, 0, 255)


def test_save_gif_frames_and_timing(tmp_path):
    frames = [
        Image.new("RGBA", (4, 4), (255, 0, 0, 255)),
        Image.new("RGBA", (4, 4), (0, 0, 255, 255)),
    ]
    path = save_gif(frames, tmp_path / "anim.gif", delay_ms=75)

    with Image.open(path) as img:
        assert img.n_frames == 2
        # GIF delays are whole centiseconds
        assert img.info["duration"] == 70
        assert img.info["loop"] == 0


def test_save_gif_requires_frames(tmp_path):
    with pytest.raises(ValueError, match="without frames"):
        save_gif([], tmp_path / "empty.gif", delay_ms=75)
