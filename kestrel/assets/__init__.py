# kestrel/assets/__init__.py
from kestrel.assets.defaults import DefaultMeshes, DefaultScenes
from kestrel.assets.loader import ResourceLoader, merge_meshes
from kestrel.assets.registry import AssetRegistry
from kestrel.assets.types import (
    MaterialData,
    MeshData,
    ObjModel,
    ObjScene,
)

__all__ = [
    "ResourceLoader",
    "AssetRegistry",
    "MeshData",
    "MaterialData",
    "ObjModel",
    "ObjScene",
    "DefaultMeshes",
    "DefaultScenes",
    "merge_meshes",
]
