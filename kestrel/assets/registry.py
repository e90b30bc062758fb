# kestrel/assets/registry.py
from typing import Any, Dict, Optional


class AssetRegistry:
    """
    Stores loaded asset data (CPU side) keyed by resource name.
    """

    def __init__(self) -> None:
        self._storage: Dict[str, Any] = {}

    def store(self, name: str, data: Any) -> None:
        """Register a loaded asset."""
        self._storage[name] = data

    def get(self, name: str) -> Optional[Any]:
        """Retrieve asset data if available."""
        return self._storage.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._storage

    def __len__(self) -> int:
        return len(self._storage)

    def clear(self) -> None:
        """Clear all loaded assets."""
        self._storage.clear()
