# kestrel/assets/defaults/__init__.py
from enum import StrEnum
from pathlib import Path

DEFAULTS_ROOT = Path(__file__).resolve().parent


class DefaultMeshes(StrEnum):
    CUBE = "meshes/cube.obj"
    TETRAHEDRON = "meshes/tetrahedron.off"


class DefaultScenes(StrEnum):
    UNIFORM = "uniform.json"


__all__ = [
    "DEFAULTS_ROOT",
    "DefaultMeshes",
    "DefaultScenes",
]
