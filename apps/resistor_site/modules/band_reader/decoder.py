import logging
from typing import Iterable, List, Optional, Tuple

from .palette import (
    BandColor,
    DIGIT_VALUES,
    MULTIPLIER_COLORS,
    MULTIPLIER_VALUES,
    TOLERANCE_COLORS,
    TOLERANCE_LABELS,
    TOLERANCE_VALUES,
)
from .schemas import DecodedValue

logger = logging.getLogger(__name__)

BAND_COUNT = 4
TOLERANCE_INDEX = 3
MULTIPLIER_INDEX = 2

# Positional replacements for Unknown bands
FOUR_BAND_DEFAULTS = (BandColor.BROWN, BandColor.BLACK, BandColor.YELLOW, BandColor.GOLD)
FIVE_BAND_DEFAULTS = (BandColor.BROWN, BandColor.BLACK, BandColor.BROWN, BandColor.GOLD, BandColor.GOLD)
# Five-band readings are reduced to these indices (the second digit is dropped)
FIVE_BAND_KEEP = (0, 2, 3, 4)


def _fill_unknown(colors: List[BandColor], defaults) -> List[BandColor]:
    filled = list(colors)
    for i, color in enumerate(filled):
        if color == BandColor.UNKNOWN and i < len(defaults):
            filled[i] = defaults[i]
            logger.debug("Replacing Unknown at position %d with %s", i, defaults[i])
    return filled


def repair_sequence(colors: Iterable) -> List[BandColor]:
    """
    Turn a raw classifier reading into exactly four usable bands.

    Unknown bands get positional defaults, an invalid tolerance becomes Gold,
    an invalid multiplier becomes Yellow, extra bands are dropped and
    missing ones padded with FOUR_BAND_DEFAULTS.
    """
    original = [BandColor.parse(c) for c in colors]

    if len(original) == 5:
        corrected = _fill_unknown(original, FIVE_BAND_DEFAULTS)
        corrected = [corrected[i] for i in FIVE_BAND_KEEP]
        logger.debug("Collapsed 5-band reading to %s", corrected)
    else:
        corrected = _fill_unknown(original, FOUR_BAND_DEFAULTS)

    if len(corrected) >= BAND_COUNT:
        if corrected[TOLERANCE_INDEX] not in TOLERANCE_COLORS:
            logger.debug("Invalid tolerance band %s, defaulting to Gold", corrected[TOLERANCE_INDEX])
            corrected[TOLERANCE_INDEX] = BandColor.GOLD
        if corrected[MULTIPLIER_INDEX] not in MULTIPLIER_COLORS:
            logger.debug("Invalid multiplier band %s, defaulting to Yellow", corrected[MULTIPLIER_INDEX])
            corrected[MULTIPLIER_INDEX] = BandColor.YELLOW

    if len(corrected) > BAND_COUNT:
        corrected = corrected[:BAND_COUNT]
    while len(corrected) < BAND_COUNT:
        corrected.append(FOUR_BAND_DEFAULTS[len(corrected)])

    if corrected != original:
        logger.info("Corrected band sequence %s -> %s", [str(c) for c in original], [str(c) for c in corrected])
    return corrected


def calculate_resistance(colors: Iterable) -> Optional[float]:
    """(digit1 * 10 + digit2) * multiplier, or None when a band has no value."""
    bands = [BandColor.parse(c) for c in colors]
    if len(bands) < 3:
        logger.warning("Not enough bands to calculate resistance: %s", bands)
        return None

    digit1 = DIGIT_VALUES.get(bands[0])
    digit2 = DIGIT_VALUES.get(bands[1])
    multiplier = MULTIPLIER_VALUES.get(bands[MULTIPLIER_INDEX])
    if digit1 is None or digit2 is None or multiplier is None:
        logger.warning(
            "Invalid digit or multiplier band: %s %s %s",
            bands[0], bands[1], bands[MULTIPLIER_INDEX],
        )
        return None

    return (digit1 * 10 + digit2) * multiplier


def tolerance_fraction(color) -> Optional[float]:
    return TOLERANCE_VALUES.get(BandColor.parse(color))


def tolerance_label(color) -> str:
    return TOLERANCE_LABELS.get(BandColor.parse(color), "Unknown")


def decode(colors: Iterable) -> DecodedValue:
    """Resistance and tolerance of a four-band sequence. Never raises."""
    bands = [BandColor.parse(c) for c in colors]
    resistance = calculate_resistance(bands)
    tolerance = tolerance_fraction(bands[TOLERANCE_INDEX]) if len(bands) > TOLERANCE_INDEX else None
    return DecodedValue(resistance_ohms=resistance, tolerance_fraction=tolerance)


def format_resistance(value: float) -> str:
    if value >= 1_000_000:
        return f"{value / 1_000_000:.2f} MΩ"
    if value >= 1_000:
        return f"{value / 1_000:.2f} KΩ"
    return f"{value:.2f} Ω"


def resistance_range(value: float, tolerance: float) -> Tuple[float, float]:
    return value * (1.0 - tolerance), value * (1.0 + tolerance)
