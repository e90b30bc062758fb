# kestrel/graphics/geometry.py
from __future__ import annotations

from typing import List, Sequence

import numpy as np
from numpy.typing import NDArray

from kestrel.assets.types import MeshData
from kestrel.graphics.attributes import VertexAttributes


def mesh_vertex_attributes(mesh: MeshData) -> List[VertexAttributes]:
    """Raw (object space) vertex attributes, w = 1."""
    if mesh.normals.shape[0] != mesh.positions.shape[0]:
        raise ValueError(
            f"Mesh '{mesh.name}' has {mesh.positions.shape[0]} positions "
            f"but {mesh.normals.shape[0]} normals"
        )
    return [
        VertexAttributes.from_mesh(p, n)
        for p, n in zip(mesh.positions, mesh.normals)
    ]


def mesh_indices(mesh: MeshData) -> List[int]:
    return [int(i) for i in mesh.indices]


def edge_indices(indices: Sequence[int]) -> NDArray[np.int64]:
    """Triangle index list -> line index list (three edges per triangle)."""
    tris = np.asarray(indices, dtype=np.int64)
    tris = tris[: len(tris) - len(tris) % 3].reshape(-1, 3)
    edges = np.stack(
        [tris[:, [0, 1]], tris[:, [1, 2]], tris[:, [2, 0]]], axis=1
    )
    return edges.reshape(-1)
