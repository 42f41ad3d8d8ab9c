"""
Rule-based band color classification.

A sample is first offered to the rules of its positional role (digit,
multiplier or tolerance, see ROLE_RULES); if none matches it goes through
the general rule chain (GENERAL_RULES) and the role's post-filter.
All thresholds come from thresholds.COLOR_THRESHOLDS.
"""

import logging
from typing import Callable, List, Sequence, Tuple

from .color import RGB
from .palette import BandColor, BandRole, TOLERANCE_COLORS, band_role
from .thresholds import COLOR_THRESHOLDS

logger = logging.getLogger(__name__)

Rule = Tuple[Callable[[RGB], bool], BandColor]


def _t(name: str) -> dict:
    return COLOR_THRESHOLDS[name]


def _ratio(numerator: int, denominator: int) -> float:
    if denominator == 0:
        return float('inf') if numerator > 0 else 0.0
    return numerator / denominator


def _brightness(rgb: RGB) -> int:
    return sum(rgb) // 3


def _balanced(rgb: RGB, max_diff: int) -> bool:
    r, g, b = rgb
    return abs(r - g) < max_diff and abs(g - b) < max_diff and abs(r - b) < max_diff


def _ratio_between(rgb: RGB, t: dict) -> bool:
    r, g, _ = rgb
    ratio = _ratio(g, r)
    return t["min_ratio"] < ratio < t["max_ratio"]


# ---------------------------------------------------------------------------
# General color rules
# ---------------------------------------------------------------------------

def is_black(rgb: RGB) -> bool:
    return all(c < _t("black")["max_channel"] for c in rgb)


def is_white(rgb: RGB) -> bool:
    return all(c > _t("white")["min_channel"] for c in rgb)


def is_yellow(rgb: RGB) -> bool:
    r, g, b = rgb
    t = _t("yellow")
    return (
        r > t["min_red"] and g > t["min_green"]
        and b < t["max_blue"]
        and abs(r - g) < t["max_red_green_diff"]
        and _brightness(rgb) > t["min_brightness"]
        and (r - g) < t["max_red_minus_green"]
    )


def is_gold(rgb: RGB) -> bool:
    r, g, b = rgb
    t = _t("gold")
    return (
        t["min_red"] < r < t["max_red"]
        and t["min_green"] < g < t["max_green"]
        and b < t["max_blue"]
        and r > g
        and t["min_brightness"] < _brightness(rgb) < t["max_brightness"]
        and _ratio_between(rgb, t)
    )


def is_silver(rgb: RGB) -> bool:
    t = _t("silver")
    return _balanced(rgb, t["max_pair_diff"]) and all(t["min_channel"] < c < t["max_channel"] for c in rgb)


def is_brown(rgb: RGB) -> bool:
    r, g, b = rgb

    # A strong green share means dark yellow or gold rather than brown
    reject = _t("brown_reject")
    if g > reject["min_green"] and _ratio(g, r) > reject["max_ratio"]:
        return False

    t = _t("brown_dark")
    if t["min_red"] < r < t["max_red"] and g < t["max_green"] and b < t["max_blue"]:
        return True

    t = _t("brown_medium")
    if (t["min_red"] < r < t["max_red"] and t["min_green"] < g < t["max_green"] and b < t["max_blue"]
            and r > g and (r - g) > t["min_red_minus_green"] and (g - b) > t["min_green_minus_blue"]):
        return True

    t = _t("brown_light")
    if (t["min_red"] < r < t["max_red"] and t["min_green"] < g < t["max_green"]
            and t["min_blue"] < b < t["max_blue"]
            and r > g > b and (r - g) > t["min_red_minus_green"] and (g - b) > t["min_green_minus_blue"]):
        return True

    return False


def is_orange(rgb: RGB) -> bool:
    r, g, b = rgb
    t = _t("orange")
    return r > t["min_red"] and t["min_green"] < g < t["max_green"] and b < t["max_blue"] and (r - g) > t["min_red_minus_green"]


def is_red(rgb: RGB) -> bool:
    r, g, b = rgb
    t = _t("red_strong")
    if r > t["min_red"] and g < t["max_green"] and b < t["max_blue"] and (r - g) > t["min_red_minus_green"]:
        return True
    t = _t("red_medium")
    return (r > t["min_red"] and g < t["max_green"] and b < t["max_blue"]
            and (r - g) > t["min_red_minus_green"] and (r - b) > t["min_red_minus_blue"])


def is_green(rgb: RGB) -> bool:
    r, g, b = rgb
    t = _t("green")
    return (g > t["min_green"] and r < t["max_red"] and b < t["max_blue"]
            and (g - r) > t["min_green_minus_red"] and (g - b) > t["min_green_minus_blue"])


def is_blue(rgb: RGB) -> bool:
    r, g, b = rgb
    t = _t("blue")
    return (b > t["min_blue"] and r < t["max_red"] and g < t["max_green"]
            and (b - r) > t["min_blue_minus_red"] and (b - g) > t["min_blue_minus_green"])


def is_violet(rgb: RGB) -> bool:
    r, g, b = rgb
    t = _t("violet")
    return b > t["min_blue"] and r > t["min_red"] and g < t["max_green"] and abs(r - b) < t["max_red_blue_diff"]


def is_gray(rgb: RGB) -> bool:
    t = _t("gray")
    return _balanced(rgb, t["max_pair_diff"]) and all(t["min_channel"] < c < t["max_channel"] for c in rgb)


GENERAL_RULES: List[Rule] = [
    (is_black, BandColor.BLACK),
    (is_white, BandColor.WHITE),
    (is_yellow, BandColor.YELLOW),
    (is_gold, BandColor.GOLD),
    (is_silver, BandColor.SILVER),
    (is_brown, BandColor.BROWN),
    (is_orange, BandColor.ORANGE),
    (is_red, BandColor.RED),
    (is_green, BandColor.GREEN),
    (is_blue, BandColor.BLUE),
    (is_violet, BandColor.VIOLET),
    (is_gray, BandColor.GRAY),
]


def classify_general(rgb: RGB) -> BandColor:
    """Role-independent classification; UNKNOWN when no rule matches."""
    for predicate, color in GENERAL_RULES:
        if predicate(rgb):
            return color
    return BandColor.UNKNOWN


# ---------------------------------------------------------------------------
# Role-specific rules
# ---------------------------------------------------------------------------

def is_gold_for_tolerance(rgb: RGB) -> bool:
    """Gold tolerance bands often read darker and browner than gold."""
    if is_gold(rgb):
        return True
    r, g, b = rgb
    t = _t("tolerance_gold")
    return (t["min_red"] < r < t["max_red"] and t["min_green"] < g < t["max_green"]
            and b < t["max_blue"] and r > g > b and _ratio_between(rgb, t))


def is_warm_gold(rgb: RGB) -> bool:
    r, g, b = rgb
    t = _t("tolerance_warm_gold")
    return r > t["min_red"] and g > t["min_green"] and b < t["max_blue"] and _ratio(g, r) > t["min_ratio"]


def is_yellow_for_multiplier(rgb: RGB) -> bool:
    """Yellow including the shadowed, orange-ish yellows seen on multiplier bands."""
    if is_yellow(rgb):
        return True
    r, g, b = rgb
    t = _t("multiplier_shadowed_yellow")
    return (r > t["min_red"] and g > t["min_green"] and b < t["max_blue"]
            and r > g > b and _ratio_between(rgb, t))


def is_dark_yellow(rgb: RGB) -> bool:
    r, g, b = rgb
    t = _t("multiplier_dark_yellow")
    return r > t["min_red"] and g > t["min_green"] and b < t["max_blue"] and r > g and (r - b) > t["min_red_minus_blue"]


ROLE_RULES = {
    BandRole.TOLERANCE: [
        (is_gold_for_tolerance, BandColor.GOLD),
        (is_silver, BandColor.SILVER),
        (is_warm_gold, BandColor.GOLD),
    ],
    BandRole.MULTIPLIER: [
        (is_yellow_for_multiplier, BandColor.YELLOW),
        (is_gold, BandColor.GOLD),
        (is_silver, BandColor.SILVER),
        (is_dark_yellow, BandColor.YELLOW),
    ],
    BandRole.DIGIT: [
        (is_yellow, BandColor.YELLOW),
        (is_brown, BandColor.BROWN),
    ],
}


def _restrict_tolerance(rgb: RGB, color: BandColor) -> BandColor:
    return color if color in TOLERANCE_COLORS else BandColor.GOLD


def _restrict_digit(rgb: RGB, color: BandColor) -> BandColor:
    if color not in (BandColor.GOLD, BandColor.SILVER):
        return color
    # Metallic reading on a digit band is usually a washed-out yellow
    r, g, b = rgb
    t = _t("digit_remap_yellow")
    if r > t["min_red"] and g > t["min_green"] and b < t["max_blue"]:
        return BandColor.YELLOW
    return BandColor.UNKNOWN


ROLE_FILTERS = {
    BandRole.TOLERANCE: _restrict_tolerance,
    BandRole.MULTIPLIER: lambda rgb, color: color,
    BandRole.DIGIT: _restrict_digit,
}


def classify_for_role(rgb: RGB, role: BandRole) -> BandColor:
    rgb = tuple(int(c) for c in rgb)
    for predicate, color in ROLE_RULES[role]:
        if predicate(rgb):
            return color
    return ROLE_FILTERS[role](rgb, classify_general(rgb))


def classify(rgb: RGB, band_index: int, total_bands: int) -> BandColor:
    """Classify one band sample given its position on the resistor."""
    role = band_role(band_index, total_bands)
    color = classify_for_role(rgb, role)
    logger.debug("Band %d/%d %s as %s -> %s", band_index, total_bands, tuple(rgb), role.value, color)
    return color


def classify_sequence(samples: Sequence[RGB]) -> List[BandColor]:
    total = len(samples)
    return [classify(rgb, i, total) for i, rgb in enumerate(samples)]
