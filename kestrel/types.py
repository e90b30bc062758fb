# kestrel/types.py
from __future__ import annotations

from enum import Enum
from typing import Tuple, TypeAlias

import numpy as np
from numpy.typing import NDArray

Scalar: TypeAlias = float

# float64 arrays of shape (2,), (3,), (4,) and (4, 4)
Vec2: TypeAlias = NDArray[np.float64]
Vec3: TypeAlias = NDArray[np.float64]
Vec4: TypeAlias = NDArray[np.float64]
Mat4: TypeAlias = NDArray[np.float64]

Rgba8 = Tuple[int, int, int, int]


class PrimitiveType(str, Enum):
    """How an index list is grouped into primitives."""

    TRIANGLE = "triangle"
    LINE = "line"


class RenderType(str, Enum):
    """Output encoding of a render."""

    PNG = "png"
    GIF = "gif"
