import numpy as np
import pytest

from kestrel.graphics.attributes import FrameBufferAttributes
from kestrel.graphics.framebuffer import FrameBuffer


def test_new_buffer_holds_defaults():
    fb = FrameBuffer(4, 3)

    assert (fb.width, fb.height) == (4, 3)
    assert fb.color.shape == (3, 4, 4)
    assert np.all(fb.color == 255)
    assert np.all(fb.depth == 100.0)


def test_set_get_and_clear():
    fb = FrameBuffer(4, 3)
    fb.set(1, 2, FrameBufferAttributes(color=(10, 20, 30, 40), depth=0.5))

    cell = fb.get(1, 2)
    assert cell.color == (10, 20, 30, 40)
    assert cell.depth == pytest.approx(0.5)

    fb.clear()
    assert fb.get(1, 2) == FrameBufferAttributes()


@pytest.mark.parametrize("width, height", [(0, 1), (1, 0), (-2, 5)])
def test_rejects_empty_dimensions(width, height):
    with pytest.raises(ValueError, match="positive"):
        FrameBuffer(width, height)


def test_raw_and_image_export():
    fb = FrameBuffer(5, 2)
    fb.set(0, 0, FrameBufferAttributes(color=(1, 2, 3, 4), depth=0.0))

    raw = fb.as_raw()
    assert len(raw) == 5 * 2 * 4
    assert raw[:4] == bytes([1, 2, 3, 4])

    img = fb.to_image()
    assert img.size == (5, 2)
    assert img.mode == "RGBA"
    assert img.getpixel((0, 0)) == (1, 2, 3, 4)
