# kestrel/assets/importers/scene.py
import json
from pathlib import Path

from kestrel.assets.importers.base import AssetImporter
from kestrel.graphics.attributes import UniformAttributes


class UniformImporter(AssetImporter):
    """JSON scene description (light, material, camera, transform)."""

    def import_file(self, path: Path) -> UniformAttributes:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(
                f"Scene config must be a JSON object, not {type(data).__name__}"
            )

        return UniformAttributes.from_dict(data)
