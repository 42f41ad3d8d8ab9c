from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .palette import BandColor

# Degradation codes recorded on AnalysisResult.warnings
SAMPLING_DEFAULT = "sampling_default"
DETECTION_FALLBACK = "detection_fallback"
UNKNOWN_REPAIRED = "unknown_repaired"
DECODE_FAILED = "decode_failed"


@dataclass(frozen=True)
class BandRegion:
    start: int
    end: int  # inclusive
    avg_value: float

    @property
    def center(self) -> int:
        return (self.start + self.end) // 2


@dataclass(frozen=True)
class BandDetection:
    positions: List[int]
    threshold: float
    retried_lower_threshold: bool
    used_fallback: bool


@dataclass(frozen=True)
class BandRect:
    x: float
    y: float
    w: float
    h: float


@dataclass(frozen=True)
class DecodedValue:
    resistance_ohms: Optional[float]
    tolerance_fraction: Optional[float]


@dataclass(frozen=True)
class AnalysisResult:
    color_sequence: List[BandColor]
    band_rects: List[BandRect]
    resistance_ohms: Optional[float]
    tolerance_fraction: Optional[float]
    band_positions: List[int] = field(default_factory=list)
    raw_colors: List[BandColor] = field(default_factory=list)
    sampled_rgb: List[Tuple[int, int, int]] = field(default_factory=list)
    body_rgb: Optional[Tuple[int, int, int]] = None
    used_fallback_positions: bool = False
    warnings: List[str] = field(default_factory=list)
    processing_time_ms: float = 0.0

    @property
    def color_names(self) -> List[str]:
        return [str(c) for c in self.color_sequence]

    def to_dict(self) -> dict:
        return {
            "color_sequence": self.color_names,
            "band_rects": [
                {"x": r.x, "y": r.y, "w": r.w, "h": r.h}
                for r in self.band_rects
            ],
            "resistance_ohms": self.resistance_ohms,
            "tolerance_fraction": self.tolerance_fraction,
            "band_positions": list(self.band_positions),
            "raw_colors": [str(c) for c in self.raw_colors],
            "sampled_rgb": [list(rgb) for rgb in self.sampled_rgb],
            "body_rgb": list(self.body_rgb) if self.body_rgb else None,
            "used_fallback_positions": self.used_fallback_positions,
            "warnings": list(self.warnings),
            "processing_time_ms": self.processing_time_ms,
        }
