# kestrel/assets/importers/mesh.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from kestrel.assets.importers.base import AssetImporter
from kestrel.assets.types import MaterialData, MeshData, ObjModel, ObjScene

FaceKey = Tuple[int, Optional[int], Optional[int]]


def compute_vertex_normals(
    positions: NDArray[np.float64], indices: NDArray[np.int64]
) -> NDArray[np.float64]:
    """Area-weighted vertex normals: n_v = sum over faces of (v1-v0) x (v2-v0)."""
    normals = np.zeros_like(positions, dtype=np.float64)
    if len(indices) == 0:
        return normals

    tris = indices.reshape(-1, 3)
    v0 = positions[tris[:, 0]]
    v1 = positions[tris[:, 1]]
    v2 = positions[tris[:, 2]]
    face_normals = np.cross(v1 - v0, v2 - v0)
    for corner in range(3):
        np.add.at(normals, tris[:, corner], face_normals)

    norms = np.linalg.norm(normals, axis=1, keepdims=True)
    norms[norms == 0] = 1.0  # Prevent division by zero
    return normals / norms


def _fan(polygon: List[int]) -> List[int]:
    """Triangulate a convex polygon around its first vertex."""
    out: List[int] = []
    for k in range(1, len(polygon) - 1):
        out.extend((polygon[0], polygon[k], polygon[k + 1]))
    return out


@dataclass
class _ModelBuilder:
    name: str
    material_id: Optional[int] = None
    positions: List[Tuple[float, float, float]] = field(default_factory=list)
    normals: List[Optional[Tuple[float, float, float]]] = field(
        default_factory=list
    )
    texcoords: List[Tuple[float, float]] = field(default_factory=list)
    indices: List[int] = field(default_factory=list)
    lookup: Dict[FaceKey, int] = field(default_factory=dict)

    @property
    def empty(self) -> bool:
        return not self.indices

    def build(self) -> ObjModel:
        positions = np.array(self.positions, dtype=np.float64).reshape(-1, 3)
        indices = np.array(self.indices, dtype=np.int64)

        missing = [i for i, n in enumerate(self.normals) if n is None]
        normals = np.array(
            [n if n is not None else (0.0, 0.0, 0.0) for n in self.normals],
            dtype=np.float64,
        ).reshape(-1, 3)
        if missing:
            computed = compute_vertex_normals(positions, indices)
            normals[missing] = computed[missing]

        mesh = MeshData(
            positions=positions,
            normals=normals,
            texcoords=np.array(self.texcoords, dtype=np.float64).reshape(-1, 2),
            indices=indices,
            face_vertex_counts=np.full(len(indices) // 3, 3, dtype=np.int64),
            material_id=self.material_id,
            name=self.name,
        )
        return ObjModel(name=self.name, mesh=mesh)


class ObjImporter(AssetImporter):
    """
    Wavefront OBJ into indexed meshes.

    Supported:
      - v, vn, vt
      - f with v, v/vt, v//vn, v/vt/vn tokens, negative (relative) indices
      - polygon faces, fan-triangulated
      - o / g split the file into models
      - mtllib / usemtl
    """

    def __init__(self, mtl_importer: Optional[MtlImporter] = None) -> None:
        self._mtl = mtl_importer or MtlImporter()

    def import_file(self, path: Path) -> ObjScene:
        positions: List[Tuple[float, float, float]] = []
        normals: List[Tuple[float, float, float]] = []
        uvs: List[Tuple[float, float]] = []

        materials: List[MaterialData] = []
        material_index: Dict[str, int] = {}

        models: List[ObjModel] = []
        current = _ModelBuilder(name=Path(path).stem)

        def flush(next_name: str, material_id: Optional[int]) -> None:
            nonlocal current
            if not current.empty:
                models.append(current.build())
                current = _ModelBuilder(name=next_name, material_id=material_id)
            else:
                current.name = next_name
                current.material_id = material_id

        with open(path, "r", encoding="utf-8") as f:
            for lineno, line in enumerate(f, start=1):
                line = line.strip()
                if not line or line.startswith("#"):
                    continue

                parts = line.split()
                tag = parts[0]

                try:
                    if tag == "v":
                        px, py, pz = map(float, parts[1:4])
                        positions.append((px, py, pz))

                    elif tag == "vn":
                        nx, ny, nz = map(float, parts[1:4])
                        normals.append((nx, ny, nz))

                    elif tag == "vt":
                        u, v = map(float, parts[1:3])
                        uvs.append((u, v))

                    elif tag in ("o", "g"):
                        name = " ".join(parts[1:]) or current.name
                        flush(name, current.material_id)

                    elif tag == "mtllib":
                        for lib in parts[1:]:
                            for mat in self._mtl.import_file(
                                Path(path).parent / lib
                            ):
                                material_index[mat.name] = len(materials)
                                materials.append(mat)

                    elif tag == "usemtl":
                        mat_id = material_index.get(" ".join(parts[1:]))
                        if mat_id != current.material_id:
                            flush(current.name, mat_id)

                    elif tag == "f":
                        if len(parts) < 4:
                            raise ValueError(
                                "Faces need at least 3 vertices"
                            )
                        polygon = [
                            self._resolve(
                                current,
                                self._parse_face_vertex(
                                    token, positions, uvs, normals
                                ),
                                positions,
                                uvs,
                                normals,
                            )
                            for token in parts[1:]
                        ]
                        current.indices.extend(_fan(polygon))

                except (ValueError, IndexError) as e:
                    raise ValueError(f"{path}:{lineno}: {e}") from e

        if not current.empty:
            models.append(current.build())

        if not models:
            raise ValueError(f"No geometry found in OBJ: {path}")

        return ObjScene(models=models, materials=materials)

    def _resolve(
        self,
        model: _ModelBuilder,
        key: FaceKey,
        positions: List[Tuple[float, float, float]],
        uvs: List[Tuple[float, float]],
        normals: List[Tuple[float, float, float]],
    ) -> int:
        """Map a (v, vt, vn) triple onto the model's single index space."""
        existing = model.lookup.get(key)
        if existing is not None:
            return existing

        v_idx, vt_idx, vn_idx = key
        model.positions.append(positions[v_idx])
        model.normals.append(normals[vn_idx] if vn_idx is not None else None)
        model.texcoords.append(uvs[vt_idx] if vt_idx is not None else (0.0, 0.0))

        index = len(model.positions) - 1
        model.lookup[key] = index
        return index

    def _parse_index(self, val: str, count: int) -> int | None:
        """
        OBJ indices are 1-based; negative values count back from the
        most recent element.
        """
        if not val:
            return None
        idx = int(val)
        if idx == 0:
            raise ValueError("OBJ indices start at 1")
        resolved = idx - 1 if idx > 0 else count + idx
        if not 0 <= resolved < count:
            raise IndexError(f"Index {idx} out of range ({count} elements)")
        return resolved

    def _parse_face_vertex(
        self,
        token: str,
        positions: List[Tuple[float, float, float]],
        uvs: List[Tuple[float, float]],
        normals: List[Tuple[float, float, float]],
    ) -> FaceKey:
        parts = token.split("/")
        v = self._parse_index(parts[0], len(positions))
        vt = (
            self._parse_index(parts[1], len(uvs))
            if len(parts) > 1 and parts[1]
            else None
        )
        vn = (
            self._parse_index(parts[2], len(normals))
            if len(parts) > 2 and parts[2]
            else None
        )

        if v is None:
            raise ValueError(f"Invalid vertex index in token: {token}")

        return v, vt, vn


class MtlImporter(AssetImporter):
    """Wavefront material library: newmtl, Ka, Kd, Ks, Ns."""

    def import_file(self, path: Path) -> List[MaterialData]:
        materials: List[MaterialData] = []
        fields: Dict[str, object] = {}

        def finish() -> None:
            if fields:
                materials.append(MaterialData(**fields))  # type: ignore[arg-type]

        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue

                parts = line.split()
                tag = parts[0]

                if tag == "newmtl":
                    finish()
                    fields = {"name": " ".join(parts[1:])}
                    continue

                if not fields:
                    # Properties before the first newmtl have no owner.
                    continue

                if tag in ("Ka", "Kd", "Ks"):
                    r, g, b = map(float, parts[1:4])
                    key = {"Ka": "ambient", "Kd": "diffuse", "Ks": "specular"}
                    fields[key[tag]] = (r, g, b)
                elif tag == "Ns":
                    fields["shininess"] = float(parts[1])

        finish()
        return materials


class OffImporter(AssetImporter):
    """
    Object File Format (OFF): vertex list + polygon list.
    Vertex normals are computed from the faces since OFF carries none.
    """

    def import_file(self, path: Path) -> MeshData:
        with open(path, "r", encoding="utf-8") as f:
            tokens = [
                line.split("#", 1)[0].split()
                for line in f
            ]
        lines = [t for t in tokens if t]

        if not lines or not lines[0][0].startswith("OFF"):
            raise ValueError(f"Missing OFF header in {path}")

        header = lines[0][1:]
        body = lines[1:]
        if not header:
            if not body:
                raise ValueError(f"Missing element counts in {path}")
            header, body = body[0], body[1:]

        try:
            n_vertices, n_faces = int(header[0]), int(header[1])
        except (IndexError, ValueError) as e:
            raise ValueError(f"Malformed OFF counts in {path}") from e

        if len(body) < n_vertices + n_faces:
            raise ValueError(
                f"Truncated OFF file {path}: expected "
                f"{n_vertices} vertices and {n_faces} faces"
            )

        vertex_rows = body[:n_vertices]
        for row in vertex_rows:
            if len(row) < 3:
                raise ValueError(f"Malformed OFF vertex {row} in {path}")
        positions = np.array(
            [list(map(float, row[:3])) for row in vertex_rows],
            dtype=np.float64,
        ).reshape(-1, 3)

        indices: List[int] = []
        counts: List[int] = []
        for row in body[n_vertices : n_vertices + n_faces]:
            n = int(row[0])
            polygon = [int(x) for x in row[1 : 1 + n]]
            if n < 3 or len(polygon) != n:
                raise ValueError(f"Malformed OFF face {row} in {path}")
            for idx in polygon:
                if not 0 <= idx < n_vertices:
                    raise ValueError(
                        f"Face index {idx} out of range in {path}"
                    )
            tris = _fan(polygon)
            indices.extend(tris)
            counts.extend([3] * (len(tris) // 3))

        if not indices:
            raise ValueError(f"No geometry found in OFF: {path}")

        index_array = np.array(indices, dtype=np.int64)

        return MeshData(
            positions=positions,
            normals=compute_vertex_normals(positions, index_array),
            texcoords=np.zeros((n_vertices, 2), dtype=np.float64),
            indices=index_array,
            face_vertex_counts=np.array(counts, dtype=np.int64),
            name=Path(path).stem,
        )
