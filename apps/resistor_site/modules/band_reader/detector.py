import logging
from typing import List, Sequence

import numpy as np

from .buffer import PixelBuffer
from .color import RGB, batch_delta_e_cie76, rgb_to_lab
from .schemas import BandDetection, BandRegion

logger = logging.getLogger(__name__)

# Profile construction
AREA_PROFILE_STRIDE = 2
AREA_WINDOW_WIDTH = 2
AREA_WINDOW_HEIGHT = 4
STRONG_WEIGHT = 0.6
WEAK_WEIGHT = 0.4

# Adaptive smoothing
VARIANCE_RADIUS = 5
VARIANCE_LIMIT = 100.0
NARROW_RADIUS = 3
WIDE_RADIUS = 5

# Thresholding and segmentation
IQR_FACTOR = 0.3
MAX_FRACTION = 0.20
RETRY_MAX_FRACTION = 0.15
MIN_REGION_LENGTH = 4
MIN_EXPECTED_BANDS = 4
MAX_BANDS = 5

# Validation / fallback
MIN_VALID_BANDS = 3
MIN_SPACING_DIVISOR = 20
FALLBACK_BAND_COUNT = 4


def create_direct_profile(buffer: PixelBuffer, body_color: RGB) -> np.ndarray:
    """Delta E from the body color for every pixel of the middle row."""
    middle_row = buffer.rgb[buffer.height // 2]
    return batch_delta_e_cie76(rgb_to_lab(middle_row), rgb_to_lab(body_color))


def create_area_profile(buffer: PixelBuffer, body_color: RGB) -> np.ndarray:
    """
    Delta E of small averaged windows around the vertical centre, sampled
    every AREA_PROFILE_STRIDE columns and expanded back to full width.
    """
    width, height = buffer.width, buffer.height
    center_y = height // 2

    y1 = max(0, center_y - AREA_WINDOW_HEIGHT // 2)
    y2 = min(height, center_y - AREA_WINDOW_HEIGHT // 2 + AREA_WINDOW_HEIGHT)
    if y1 >= y2:
        return np.zeros(width)

    # Every window spans the same rows, so averaging column means is exact
    column_means = buffer.rgb[y1:y2].astype(np.float64).mean(axis=0)

    sampled = []
    body_lab = rgb_to_lab(body_color)
    for x in range(0, width, AREA_PROFILE_STRIDE):
        x1 = max(0, x - AREA_WINDOW_WIDTH // 2)
        x2 = min(width, x - AREA_WINDOW_WIDTH // 2 + AREA_WINDOW_WIDTH)
        if x1 >= x2:
            sampled.append(0.0)
            continue
        avg = np.trunc(column_means[x1:x2].mean(axis=0))
        sampled.append(float(batch_delta_e_cie76(rgb_to_lab(avg), body_lab)))

    sampled = np.asarray(sampled)
    return sampled[np.arange(width) // AREA_PROFILE_STRIDE]


def combine_profiles(direct: np.ndarray, area: np.ndarray) -> np.ndarray:
    """
    Weighted blend of the two profiles. Columns where the direct profile
    is zero lean on the area profile instead.
    """
    direct = np.asarray(direct, dtype=np.float64)
    area = np.asarray(area, dtype=np.float64)
    if direct.size == 0 or area.size == 0:
        return area if direct.size == 0 else direct

    n = min(direct.size, area.size)
    direct, area = direct[:n], area[:n]

    weight = np.where(direct > 0, STRONG_WEIGHT, WEAK_WEIGHT)
    return direct * weight + area * (1.0 - weight)


def _window_sums(values: np.ndarray, radius: int):
    """Sum and count of values over [i - radius, i + radius], clamped to the array."""
    n = values.size
    padded = np.concatenate([[0.0], np.cumsum(values)])
    idx = np.arange(n)
    lo = np.maximum(0, idx - radius)
    hi = np.minimum(n, idx + radius + 1)
    return padded[hi] - padded[lo], hi - lo


def adaptive_smooth(profile: Sequence[float]) -> np.ndarray:
    """
    Moving average whose window shrinks where the signal is busy: a local
    variance above VARIANCE_LIMIT selects NARROW_RADIUS, otherwise WIDE_RADIUS.
    """
    values = np.asarray(profile, dtype=np.float64)
    if values.size == 0:
        return values

    sums, counts = _window_sums(values, VARIANCE_RADIUS)
    sq_sums, _ = _window_sums(values ** 2, VARIANCE_RADIUS)
    mean = sums / counts
    variance = np.maximum(sq_sums / counts - mean ** 2, 0.0)

    narrow_sums, narrow_counts = _window_sums(values, NARROW_RADIUS)
    wide_sums, wide_counts = _window_sums(values, WIDE_RADIUS)

    return np.where(
        variance > VARIANCE_LIMIT,
        narrow_sums / narrow_counts,
        wide_sums / wide_counts,
    )


def dynamic_threshold(profile: Sequence[float]) -> float:
    """max(median + IQR_FACTOR * IQR, MAX_FRACTION * max) over the profile."""
    sorted_profile = np.sort(np.asarray(profile, dtype=np.float64))
    n = sorted_profile.size
    if n == 0:
        return 0.0

    q1 = sorted_profile[n // 4]
    q3 = sorted_profile[(n * 3) // 4]
    median = sorted_profile[n // 2]
    max_value = sorted_profile[-1]

    threshold = max(median + IQR_FACTOR * (q3 - q1), max_value * MAX_FRACTION)
    logger.debug(
        "Dynamic threshold %.2f (median %.2f, IQR %.2f, max %.2f)",
        threshold, median, q3 - q1, max_value,
    )
    return float(threshold)


def find_band_regions(profile: Sequence[float], threshold: float) -> List[BandRegion]:
    """Runs of at least MIN_REGION_LENGTH columns strictly above threshold."""
    values = np.asarray(profile, dtype=np.float64)
    regions = []
    current_start = None

    for i, value in enumerate(values):
        if value > threshold:
            if current_start is None:
                current_start = i
        elif current_start is not None:
            end = i - 1
            if end - current_start + 1 >= MIN_REGION_LENGTH:
                regions.append(BandRegion(current_start, end, float(values[current_start:end + 1].mean())))
            current_start = None

    if current_start is not None and values.size - current_start >= MIN_REGION_LENGTH:
        regions.append(BandRegion(current_start, values.size - 1, float(values[current_start:].mean())))

    return regions


def find_bands_dynamic_threshold(profile: Sequence[float]):
    """
    Segment a smoothed profile into band centres.
    Returns (positions, threshold_used, retried).
    """
    values = np.asarray(profile, dtype=np.float64)
    if values.size == 0:
        return [], 0.0, False

    threshold = dynamic_threshold(values)
    regions = find_band_regions(values, threshold)
    logger.debug("Found %d regions above %.2f", len(regions), threshold)

    retried = False
    max_value = float(values.max())
    if len(regions) < MIN_EXPECTED_BANDS and max_value > 0:
        threshold = max_value * RETRY_MAX_FRACTION
        regions = find_band_regions(values, threshold)
        retried = True
        logger.debug("Too few bands, lower threshold %.2f found %d regions", threshold, len(regions))

    regions = sorted(regions, key=lambda r: r.start)[:MAX_BANDS]
    return [r.center for r in regions], threshold, retried


def fallback_positions(image_width: int) -> List[int]:
    # Strictly increasing for any width >= FALLBACK_BAND_COUNT
    return [i * image_width // (FALLBACK_BAND_COUNT + 1) for i in range(1, FALLBACK_BAND_COUNT + 1)]


def validate_band_positions(positions: Sequence[int], image_width: int):
    """
    Enforce minimum spacing between bands. Returns (positions, used_fallback);
    falls back to evenly spaced synthetic positions when fewer than
    MIN_VALID_BANDS survive.
    """
    if MIN_VALID_BANDS <= len(positions) <= MAX_BANDS:
        min_spacing = image_width // MIN_SPACING_DIVISOR
        valid = []
        for pos in positions:
            if not valid or pos - valid[-1] >= min_spacing:
                valid.append(pos)

        if len(valid) >= MIN_VALID_BANDS:
            return valid, False

    logger.warning("Using fallback band positions for width %d (detected %s)", image_width, list(positions))
    return fallback_positions(image_width), True


def detect_bands_with_details(buffer: PixelBuffer, body_color: RGB) -> BandDetection:
    direct = create_direct_profile(buffer, body_color)
    area = create_area_profile(buffer, body_color)
    combined = combine_profiles(direct, area)
    smoothed = adaptive_smooth(combined)

    positions, threshold, retried = find_bands_dynamic_threshold(smoothed)
    positions, used_fallback = validate_band_positions(positions, buffer.width)

    logger.debug("Band positions: %s", positions)
    return BandDetection(
        positions=positions,
        threshold=threshold,
        retried_lower_threshold=retried,
        used_fallback=used_fallback,
    )


def detect_bands(buffer: PixelBuffer, body_color: RGB) -> List[int]:
    """Band centre columns, left to right. Never fails: see validate_band_positions."""
    return detect_bands_with_details(buffer, body_color).positions
