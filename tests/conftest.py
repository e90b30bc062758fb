import numpy as np
import pytest

from kestrel.assets.defaults import DEFAULTS_ROOT
from kestrel.core.context import EngineContext
from kestrel.graphics.attributes import UniformAttributes, VertexAttributes
from kestrel.graphics.framebuffer import FrameBuffer
from kestrel.graphics.program import Program
from kestrel.graphics.shaders import (
    alpha_over_depth_blend,
    constant_color_fragment,
    identity_vertex,
)

RED = (1.0, 0.0, 0.0, 1.0)
WHITE_PX = (255, 255, 255, 255)


def clip(x, y, z=0.0, w=1.0, normal=(0.0, 0.0, 1.0)):
    """Vertex already in clip space."""
    return VertexAttributes(
        position=np.array([x, y, z, w], dtype=np.float64),
        normal=np.array(normal, dtype=np.float64),
    )


def flat_program(rgba=RED, **kwargs):
    return Program(
        vertex_shader=identity_vertex,
        fragment_shader=constant_color_fragment(rgba),
        blending_shader=alpha_over_depth_blend,
        **kwargs,
    )


@pytest.fixture
def uniform():
    """Orthographic uniform with identity matrices."""
    u = UniformAttributes()
    u.calc_matrices()
    return u


@pytest.fixture
def frame_buffer():
    return FrameBuffer(10, 10)


@pytest.fixture
def red_program():
    return flat_program(RED)


@pytest.fixture
def big_triangle():
    return [clip(-1.0, -1.0), clip(1.0, -1.0), clip(0.0, 1.0)]


@pytest.fixture
def ctx(tmp_path):
    """Context rooted at an empty temp directory."""
    return EngineContext.create(tmp_path)


@pytest.fixture
def default_ctx():
    """Context rooted at the bundled default assets."""
    return EngineContext.create(DEFAULTS_ROOT)
