"""
Resistor band palette: color names, positional roles and the lookup tables
used to turn a band sequence into ohms and a tolerance.
"""

from enum import Enum
from typing import Dict, FrozenSet


class BandColor(str, Enum):
    BLACK = "Black"
    BROWN = "Brown"
    RED = "Red"
    ORANGE = "Orange"
    YELLOW = "Yellow"
    GREEN = "Green"
    BLUE = "Blue"
    VIOLET = "Violet"
    GRAY = "Gray"
    WHITE = "White"
    GOLD = "Gold"
    SILVER = "Silver"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, name) -> "BandColor":
        """Map a color name (or BandColor) to a BandColor; anything unrecognized is UNKNOWN."""
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().capitalize())
        except ValueError:
            return cls.UNKNOWN


class BandRole(Enum):
    DIGIT = "digit"
    MULTIPLIER = "multiplier"
    TOLERANCE = "tolerance"


MULTIPLIER_BAND_INDEX = 2


def band_role(band_index: int, total_bands: int) -> BandRole:
    """The last band is always tolerance, the third is the multiplier, the rest are digits."""
    if band_index == total_bands - 1:
        return BandRole.TOLERANCE
    if band_index == MULTIPLIER_BAND_INDEX:
        return BandRole.MULTIPLIER
    return BandRole.DIGIT


DIGIT_VALUES: Dict[BandColor, int] = {
    BandColor.BLACK: 0,
    BandColor.BROWN: 1,
    BandColor.RED: 2,
    BandColor.ORANGE: 3,
    BandColor.YELLOW: 4,
    BandColor.GREEN: 5,
    BandColor.BLUE: 6,
    BandColor.VIOLET: 7,
    BandColor.GRAY: 8,
    BandColor.WHITE: 9,
}

MULTIPLIER_VALUES: Dict[BandColor, float] = {
    BandColor.BLACK: 1.0,
    BandColor.BROWN: 10.0,
    BandColor.RED: 100.0,
    BandColor.ORANGE: 1000.0,
    BandColor.YELLOW: 10000.0,
    BandColor.GREEN: 100000.0,
    BandColor.BLUE: 1000000.0,
    BandColor.VIOLET: 10000000.0,
    BandColor.GRAY: 100000000.0,
    BandColor.WHITE: 1000000000.0,
    BandColor.GOLD: 0.1,
    BandColor.SILVER: 0.01,
}

# Fractions, e.g. 0.05 == ±5%
TOLERANCE_VALUES: Dict[BandColor, float] = {
    BandColor.BROWN: 0.01,
    BandColor.RED: 0.02,
    BandColor.ORANGE: 0.03,
    BandColor.YELLOW: 0.04,
    BandColor.GREEN: 0.005,
    BandColor.BLUE: 0.0025,
    BandColor.VIOLET: 0.001,
    BandColor.GRAY: 0.0005,
    BandColor.GOLD: 0.05,
    BandColor.SILVER: 0.10,
}

TOLERANCE_LABELS: Dict[BandColor, str] = {
    BandColor.BROWN: "±1%",
    BandColor.RED: "±2%",
    BandColor.ORANGE: "±3%",
    BandColor.YELLOW: "±4%",
    BandColor.GREEN: "±0.5%",
    BandColor.BLUE: "±0.25%",
    BandColor.VIOLET: "±0.1%",
    BandColor.GRAY: "±0.05%",
    BandColor.GOLD: "±5%",
    BandColor.SILVER: "±10%",
}

# Colors a classifier may report for the tolerance band
TOLERANCE_COLORS: FrozenSet[BandColor] = frozenset({
    BandColor.GOLD,
    BandColor.SILVER,
    BandColor.BROWN,
    BandColor.RED,
    BandColor.GREEN,
    BandColor.BLUE,
    BandColor.VIOLET,
    BandColor.GRAY,
})

MULTIPLIER_COLORS: FrozenSet[BandColor] = frozenset(MULTIPLIER_VALUES)

DIGIT_COLORS: FrozenSet[BandColor] = frozenset(DIGIT_VALUES)

# Display swatches (RGB) for overlays
SWATCHES: Dict[BandColor, tuple] = {
    BandColor.BLACK: (0, 0, 0),
    BandColor.BROWN: (102, 66, 33),
    BandColor.RED: (255, 0, 0),
    BandColor.ORANGE: (255, 165, 0),
    BandColor.YELLOW: (255, 255, 0),
    BandColor.GREEN: (0, 255, 0),
    BandColor.BLUE: (0, 0, 255),
    BandColor.VIOLET: (128, 0, 128),
    BandColor.GRAY: (128, 128, 128),
    BandColor.WHITE: (255, 255, 255),
    BandColor.GOLD: (217, 166, 33),
    BandColor.SILVER: (192, 192, 192),
}
