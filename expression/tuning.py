"""
Typed view of the expression tuning constants in config.py.

The frame pipeline takes an ExpressionTuning instead of reading config directly,
so tests and callers can run it with any thresholds.
"""

from dataclasses import dataclass, field
from typing import Tuple

import config


@dataclass(frozen=True)
class CosmeticOffsets:
    """Fixed render-space (dx, dy) nudges added to computed centers."""
    left_eye: Tuple[float, float] = (0.0, 0.0)
    right_eye: Tuple[float, float] = (0.0, 0.0)
    mouth: Tuple[float, float] = (0.0, 0.0)

    def is_zero(self) -> bool:
        return all(dx == 0 and dy == 0 for dx, dy in (self.left_eye, self.right_eye, self.mouth))


@dataclass(frozen=True)
class ExpressionTuning:
    """
    Policy knobs for the per-frame pipeline.

    Attributes:
        blink_threshold: Eye aspect ratio below which the eye counts as closed
        mouth_open_baseline: Lip aspect ratio treated as "closed"
        mouth_open_multiplier: Scale from (aspect - baseline) to openness
        smile_divisor: Pixels of corner-line deviation for a full smile/frown
        offsets: Optional cosmetic offsets for eye/mouth centers
    """
    blink_threshold: float = 0.2
    mouth_open_baseline: float = 0.15
    mouth_open_multiplier: float = 5.0
    smile_divisor: float = 20.0
    offsets: CosmeticOffsets = field(default_factory=CosmeticOffsets)

    def __post_init__(self):
        if self.mouth_open_multiplier <= 0:
            raise ValueError("mouth_open_multiplier must be > 0")
        if self.smile_divisor == 0:
            raise ValueError("smile_divisor must be non-zero")
        if self.blink_threshold < 0:
            raise ValueError("blink_threshold must be >= 0")

    @classmethod
    def from_config(cls) -> 'ExpressionTuning':
        """Build tuning from the environment-driven values in config.py."""
        return cls(
            blink_threshold=config.BLINK_THRESHOLD,
            mouth_open_baseline=config.MOUTH_OPEN_BASELINE,
            mouth_open_multiplier=config.MOUTH_OPEN_MULTIPLIER,
            smile_divisor=config.SMILE_DIVISOR,
            offsets=CosmeticOffsets(
                left_eye=(config.LEFT_EYE_OFFSET_X, config.LEFT_EYE_OFFSET_Y),
                right_eye=(config.RIGHT_EYE_OFFSET_X, config.RIGHT_EYE_OFFSET_Y),
                mouth=(config.MOUTH_OFFSET_X, config.MOUTH_OFFSET_Y),
            ),
        )
