# kestrel/assets/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from kestrel.graphics.attributes import Material


@dataclass(frozen=True)
class MeshData:
    """
    Indexed triangle mesh as parsed from disk.
    Read-only from the rasterizer's point of view.
    """

    positions: NDArray[np.float64]  # (N, 3)
    normals: NDArray[np.float64]  # (N, 3)
    texcoords: NDArray[np.float64]  # (N, 2)
    indices: NDArray[np.int64]  # flattened, 3 per triangle
    face_vertex_counts: NDArray[np.int64]  # one entry per face
    material_id: Optional[int] = None
    name: str = ""

    @property
    def vertex_count(self) -> int:
        return int(self.positions.shape[0])

    @property
    def face_count(self) -> int:
        return int(self.face_vertex_counts.shape[0])

    @property
    def aabb(
        self,
    ) -> Tuple[Tuple[float, float, float], Tuple[float, float, float]]:
        if self.vertex_count == 0:
            return (0.0, 0.0, 0.0), (0.0, 0.0, 0.0)
        lo = self.positions.min(axis=0)
        hi = self.positions.max(axis=0)
        return (
            (float(lo[0]), float(lo[1]), float(lo[2])),
            (float(hi[0]), float(hi[1]), float(hi[2])),
        )


@dataclass(frozen=True)
class MaterialData:
    """Surface parameters from a Wavefront .mtl file."""

    name: str
    ambient: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    diffuse: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    specular: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    shininess: float = 0.0

    def to_material(self) -> Material:
        return Material(
            ambient_color=np.array(self.ambient, dtype=np.float64),
            diffuse_color=np.array(self.diffuse, dtype=np.float64),
            specular_color=np.array(self.specular, dtype=np.float64),
            shininess=self.shininess,
        )


@dataclass(frozen=True)
class ObjModel:
    """One named object/group of an OBJ file."""

    name: str
    mesh: MeshData


@dataclass(frozen=True)
class ObjScene:
    models: list[ObjModel] = field(default_factory=list)
    materials: list[MaterialData] = field(default_factory=list)

