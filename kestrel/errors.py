# kestrel/errors.py
class KestrelError(Exception):
    """Base class for every failure raised by the pipeline."""


class ResourceUnavailable(KestrelError):
    """A mesh, material or scene file is missing, unreadable or malformed."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Resource '{name}' unavailable: {reason}")
        self.name = name
        self.reason = reason


class GeometryDegenerate(KestrelError):
    """
    A primitive cannot be rasterized: its projected area is (near) zero,
    or its perspective divide is undefined.
    """


class IndexOutOfRange(KestrelError):
    """An index list references a vertex that does not exist."""

    def __init__(self, index: int, vertex_count: int) -> None:
        super().__init__(
            f"Index {index} out of range for {vertex_count} vertices"
        )
        self.index = index
        self.vertex_count = vertex_count


class ShaderStageFailure(KestrelError):
    """A vertex, fragment or blending stage raised or returned garbage."""

    def __init__(self, stage: str, reason: str) -> None:
        super().__init__(f"{stage} stage failed: {reason}")
        self.stage = stage
        self.reason = reason
