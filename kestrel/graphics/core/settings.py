# kestrel/graphics/core/settings.py
from dataclasses import dataclass, field

from kestrel.graphics.program import DEFAULT_LINE_THICKNESS, DegeneratePolicy
from kestrel.types import PrimitiveType


@dataclass(frozen=True, slots=True)
class ResolutionSettings:
    """
    Output size. Width follows the camera: int(height * aspect_ratio).
    """

    height: int = 500

    def width_for(self, aspect_ratio: float) -> int:
        if aspect_ratio <= 0:
            raise ValueError(
                f"Camera aspect ratio must be positive, got {aspect_ratio}"
            )
        return max(int(self.height * aspect_ratio), 1)


@dataclass(frozen=True, slots=True)
class TurntableSettings:
    """Per-frame deltas of an orbiting animation."""

    frame_count: int = 20
    angle_step: float = 0.1
    distance_step: float = 0.02
    frame_delay_ms: int = 75
    loop: int = 0  # 0 = forever


@dataclass(frozen=True, slots=True)
class RendererSettings:
    """
    The master configuration object of the software renderer.
    """

    resolution: ResolutionSettings = field(default_factory=ResolutionSettings)
    turntable: TurntableSettings = field(default_factory=TurntableSettings)

    primitive_type: PrimitiveType = PrimitiveType.TRIANGLE
    line_thickness: float = DEFAULT_LINE_THICKNESS
    degenerate_policy: DegeneratePolicy = DegeneratePolicy.SKIP
