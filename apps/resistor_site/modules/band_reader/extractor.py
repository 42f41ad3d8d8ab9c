import logging
from typing import List, Sequence

from .buffer import PixelBuffer, average_region
from .color import RGB, color_distance_lab

logger = logging.getLogger(__name__)

AREA_SAMPLE_SIZE = 10
DIRECT_SAMPLE_RADIUS = 2
LARGE_SAMPLE_SIZE = 15
NEAR_BLACK_LIMIT = 5

# Specular glare: bright, nearly colorless
REFLECTION_MIN_BRIGHTNESS = 180
REFLECTION_MAX_SATURATION = 0.2
REFLECTION_MAX_RANGE = 20
REFLECTION_SCAN_RADIUS = 10

BLACK: RGB = (0, 0, 0)


def is_near_black(rgb: RGB) -> bool:
    return all(channel < NEAR_BLACK_LIMIT for channel in rgb)


def is_likely_reflection(rgb: RGB) -> bool:
    r, g, b = rgb
    brightness = (r + g + b) // 3
    max_channel = max(r, g, b)
    min_channel = min(r, g, b)
    saturation = (max_channel - min_channel) / max_channel if max_channel > 0 else 0.0
    channel_range = max_channel - min_channel

    return (
        brightness > REFLECTION_MIN_BRIGHTNESS
        and saturation < REFLECTION_MAX_SATURATION
        and channel_range < REFLECTION_MAX_RANGE
    )


def _square_sample(buffer: PixelBuffer, x: int, size: int) -> RGB:
    center_y = buffer.height // 2
    half = size // 2
    avg = average_region(buffer, x - half, center_y - half, size, size)
    return avg if avg is not None else BLACK


def extract_color_area_average(buffer: PixelBuffer, x: int) -> RGB:
    return _square_sample(buffer, x, AREA_SAMPLE_SIZE)


def extract_color_larger_area(buffer: PixelBuffer, x: int) -> RGB:
    return _square_sample(buffer, x, LARGE_SAMPLE_SIZE)


def extract_color_direct(buffer: PixelBuffer, x: int) -> RGB:
    """Integer average of the in-bounds pixels of a 5x5 block at (x, middle row)."""
    center_y = buffer.height // 2
    size = 2 * DIRECT_SAMPLE_RADIUS + 1
    avg = average_region(buffer, x - DIRECT_SAMPLE_RADIUS, center_y - DIRECT_SAMPLE_RADIUS, size, size)
    return avg if avg is not None else BLACK


def extract_color_avoiding_reflection(buffer: PixelBuffer, x: int, center_color: RGB) -> RGB:
    """
    Average the non-glare pixels of a vertical strip through (x, middle row).
    Returns center_color when every pixel in the strip looks like glare.
    """
    if not 0 <= x < buffer.width:
        return center_color

    center_y = buffer.height // 2
    valid = []
    for dy in range(-REFLECTION_SCAN_RADIUS, REFLECTION_SCAN_RADIUS + 1):
        y = center_y + dy
        if not 0 <= y < buffer.height:
            continue
        rgb = buffer.pixel(x, y)
        if not is_likely_reflection(rgb):
            valid.append(rgb)

    if not valid:
        return center_color

    count = len(valid)
    return (
        sum(c[0] for c in valid) // count,
        sum(c[1] for c in valid) // count,
        sum(c[2] for c in valid) // count,
    )


def extract_color_at(buffer: PixelBuffer, x: int, body_color: RGB) -> RGB:
    area_color = extract_color_area_average(buffer, x)
    direct_color = extract_color_direct(buffer, x)
    area_distance = color_distance_lab(area_color, body_color)
    direct_distance = color_distance_lab(direct_color, body_color)

    if is_near_black(area_color) and not is_near_black(direct_color):
        chosen = direct_color
        logger.debug("Area sample at x=%d is black, using direct sample", x)
    elif is_near_black(direct_color) and not is_near_black(area_color):
        chosen = area_color
        logger.debug("Direct sample at x=%d is black, using area sample", x)
    elif is_near_black(area_color) and is_near_black(direct_color):
        chosen = extract_color_larger_area(buffer, x)
        logger.debug("Both samples at x=%d are black, using larger area", x)
    else:
        # More contrast against the body means less blending with it
        chosen = area_color if area_distance > direct_distance else direct_color

    if is_likely_reflection(chosen):
        alternative = extract_color_avoiding_reflection(buffer, x, chosen)
        if not is_likely_reflection(alternative):
            logger.debug("Replaced glare %s at x=%d with %s", chosen, x, alternative)
            chosen = alternative

    logger.debug(
        "x=%d area=%s (dE %.1f) direct=%s (dE %.1f) chosen=%s",
        x, area_color, area_distance, direct_color, direct_distance, chosen,
    )
    return chosen


def extract_colors(buffer: PixelBuffer, positions: Sequence[int], body_color: RGB) -> List[RGB]:
    """One representative RGB sample per band position."""
    return [extract_color_at(buffer, x, body_color) for x in positions]
