# kestrel/assets/loader.py
from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

import numpy as np

from kestrel.assets.importers.base import AssetImporter
from kestrel.assets.importers.mesh import MtlImporter, ObjImporter, OffImporter
from kestrel.assets.importers.scene import UniformImporter
from kestrel.assets.registry import AssetRegistry
from kestrel.assets.types import (
    MaterialData,
    MeshData,
    ObjModel,
    ObjScene,
)
from kestrel.errors import ResourceUnavailable
from kestrel.graphics.attributes import UniformAttributes


def merge_meshes(meshes: List[MeshData], name: str = "") -> MeshData:
    """Concatenate meshes into one index space. Material ids are dropped."""
    if not meshes:
        raise ValueError("Nothing to merge")
    if len(meshes) == 1:
        return meshes[0]

    offsets = np.cumsum([0] + [m.vertex_count for m in meshes[:-1]])
    return MeshData(
        positions=np.concatenate([m.positions for m in meshes]),
        normals=np.concatenate([m.normals for m in meshes]),
        texcoords=np.concatenate([m.texcoords for m in meshes]),
        indices=np.concatenate(
            [m.indices + off for m, off in zip(meshes, offsets)]
        ),
        face_vertex_counts=np.concatenate(
            [m.face_vertex_counts for m in meshes]
        ),
        name=name or meshes[0].name,
    )


class ResourceLoader:
    """
    Loads resources by name relative to a project root.

    Loading is synchronous; the first failure surfaces immediately as
    ResourceUnavailable. Parsed results are cached per name.
    """

    def __init__(
        self, root: Path, logger: logging.Logger | None = None
    ) -> None:
        self.root = Path(root)
        self.registry = AssetRegistry()
        self._logger = logger or logging.getLogger("kestrel.assets")

        self._importers: Dict[str, AssetImporter] = {
            ".obj": ObjImporter(),
            ".mtl": MtlImporter(),
            ".off": OffImporter(),
            ".json": UniformImporter(),
        }

    def path(self, name: str) -> Path:
        return self.root / name

    def load_text(self, name: str) -> str:
        file_path = self.path(name)
        try:
            return file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ResourceUnavailable(name, f"failed to read {file_path}: {e}") from e

    def load_bytes(self, name: str) -> bytes:
        file_path = self.path(name)
        try:
            return file_path.read_bytes()
        except OSError as e:
            raise ResourceUnavailable(name, f"failed to read {file_path}: {e}") from e

    def load(self, name: str) -> Any:
        """Import `name` with the importer registered for its extension."""
        cached = self.registry.get(name)
        if cached is not None:
            self._logger.debug("cache hit: %s", name)
            return cached

        full_path = self.path(name)
        ext = full_path.suffix.lower()
        importer = self._importers.get(ext)
        if importer is None:
            raise ResourceUnavailable(name, f"no importer for '{ext}'")

        try:
            data = importer.import_file(full_path)
        except (OSError, ValueError, IndexError) as e:
            raise ResourceUnavailable(name, str(e)) from e

        self.registry.store(name, data)
        self._logger.info("loaded %s", full_path)
        return data

    def load_obj(self, name: str) -> Tuple[List[ObjModel], List[MaterialData]]:
        scene = self._expect(name, ObjScene)
        return list(scene.models), list(scene.materials)

    def load_off(self, name: str) -> MeshData:
        return self._expect(name, MeshData)

    def load_mesh(self, name: str) -> MeshData:
        """Any supported mesh format as a single indexed mesh."""
        data = self.load(name)
        if isinstance(data, ObjScene):
            return merge_meshes([m.mesh for m in data.models], Path(name).stem)
        if isinstance(data, MeshData):
            return data
        raise ResourceUnavailable(
            name, f"expected a mesh, got {type(data).__name__}"
        )

    def load_uniforms(self, name: str) -> UniformAttributes:
        # Callers mutate uniforms between frames; never hand out the cache.
        return copy.deepcopy(self._expect(name, UniformAttributes))

    def clear_cache(self) -> None:
        self.registry.clear()

    def _expect(self, name: str, kind: type) -> Any:
        data = self.load(name)
        if not isinstance(data, kind):
            raise ResourceUnavailable(
                name,
                f"expected {kind.__name__}, got {type(data).__name__}",
            )
        return data
