import logging
from typing import List, Optional, Tuple

from .buffer import PixelBuffer, average_region
from .color import RGB

logger = logging.getLogger(__name__)

# Typical beige/brown carbon-film body
DEFAULT_BODY_COLOR: RGB = (120, 70, 40)

# Point samples darker than this on every channel are treated as noise
MIN_POINT_CHANNEL = 20
# Area averages at or below this (normalized) on every channel are rejected
MIN_AREA_CHANNEL = 0.05

# Margin strips (fractions of width/height) that stay clear of the bands:
# left, right, top, bottom
BODY_SAMPLE_REGIONS = (
    (0.02, 0.40, 0.05, 0.20),
    (0.93, 0.40, 0.05, 0.20),
    (0.40, 0.05, 0.20, 0.05),
    (0.40, 0.90, 0.20, 0.05),
)


def _average(samples: List[RGB]) -> RGB:
    count = len(samples)
    return (
        sum(s[0] for s in samples) // count,
        sum(s[1] for s in samples) // count,
        sum(s[2] for s in samples) // count,
    )


def sample_body_color_direct(buffer: PixelBuffer) -> Optional[RGB]:
    """
    Point estimate from four pixels near the left and right ends of the
    middle row. Returns None when every sample is near-black.
    """
    width, height = buffer.width, buffer.height
    middle_y = height // 2

    sample_points = [
        (width // 10, middle_y),
        ((width * 9) // 10, middle_y),
        (width // 10, middle_y - 5),
        ((width * 9) // 10, middle_y + 5),
    ]

    samples = []
    for x, y in sample_points:
        if not buffer.contains(x, y):
            continue
        rgb = buffer.pixel(x, y)
        if max(rgb) > MIN_POINT_CHANNEL:
            samples.append(rgb)

    if not samples:
        return None
    return _average(samples)


def sample_body_color_area(buffer: PixelBuffer) -> Optional[RGB]:
    """
    Area estimate from the margin strips in BODY_SAMPLE_REGIONS.
    Returns None when no strip yields a usable average.
    """
    width, height = buffer.width, buffer.height

    samples = []
    for fx, fy, fw, fh in BODY_SAMPLE_REGIONS:
        avg = average_region(buffer, width * fx, height * fy, width * fw, height * fh)
        if avg is None:
            continue
        if all(channel / 255.0 <= MIN_AREA_CHANNEL for channel in avg):
            continue
        samples.append(avg)

    if not samples:
        return None
    return _average(samples)


def sample_body_color_with_status(buffer: PixelBuffer) -> Tuple[RGB, bool]:
    """
    Combined body color plus a flag telling whether either estimate had to
    fall back to DEFAULT_BODY_COLOR.
    """
    direct = sample_body_color_direct(buffer)
    area = sample_body_color_area(buffer)
    used_default = direct is None or area is None

    if direct is None:
        logger.warning("Direct body sampling found no usable pixels, using default %s", DEFAULT_BODY_COLOR)
        direct = DEFAULT_BODY_COLOR
    if area is None:
        logger.warning("Area body sampling found no usable regions, using default %s", DEFAULT_BODY_COLOR)
        area = DEFAULT_BODY_COLOR

    combined = (
        (direct[0] + area[0]) // 2,
        (direct[1] + area[1]) // 2,
        (direct[2] + area[2]) // 2,
    )
    logger.debug("Body color: direct=%s area=%s combined=%s", direct, area, combined)
    return combined, used_default


def sample_body_color(buffer: PixelBuffer) -> RGB:
    """Estimate the resistor's base color. Always returns a value."""
    color, _ = sample_body_color_with_status(buffer)
    return color
