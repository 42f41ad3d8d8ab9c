import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence

from .buffer import PixelBuffer
from .classifier import classify_sequence
from .decoder import decode, repair_sequence
from .detector import detect_bands_with_details
from .extractor import extract_colors
from .palette import BandColor
from .sampler import sample_body_color_with_status
from .schemas import (
    DECODE_FAILED,
    DETECTION_FALLBACK,
    SAMPLING_DEFAULT,
    UNKNOWN_REPAIRED,
    AnalysisResult,
    BandRect,
)

logger = logging.getLogger(__name__)

Completion = Callable[[List[str], Optional[float]], None]

BAND_RECT_WIDTH = 12.0
BAND_RECT_HEIGHT_FRACTION = 0.7
BAND_RECT_TOP_FRACTION = 0.15


def create_band_rectangles(positions: Sequence[int], buffer: PixelBuffer) -> List[BandRect]:
    """Overlay rectangles for each band, in the buffer's extent coordinates."""
    extent = buffer.extent
    scale_x = extent.width / buffer.width
    scale_y = extent.height / buffer.height
    band_height = buffer.height * BAND_RECT_HEIGHT_FRACTION
    band_y = buffer.height * BAND_RECT_TOP_FRACTION

    return [
        BandRect(
            x=extent.x + x * scale_x - BAND_RECT_WIDTH / 2,
            y=extent.y + band_y * scale_y,
            w=BAND_RECT_WIDTH,
            h=band_height * scale_y,
        )
        for x in positions
    ]


def run_pipeline(buffer: PixelBuffer) -> AnalysisResult:
    """Full analysis of one buffer. Every stage degrades instead of raising."""
    start_time = time.time()
    warnings = []

    body_color, used_default = sample_body_color_with_status(buffer)
    if used_default:
        warnings.append(SAMPLING_DEFAULT)

    detection = detect_bands_with_details(buffer, body_color)
    if detection.used_fallback:
        warnings.append(DETECTION_FALLBACK)

    samples = extract_colors(buffer, detection.positions, body_color)
    raw_colors = classify_sequence(samples)
    if BandColor.UNKNOWN in raw_colors:
        warnings.append(UNKNOWN_REPAIRED)

    corrected = repair_sequence(raw_colors)
    decoded = decode(corrected)
    if decoded.resistance_ohms is None:
        warnings.append(DECODE_FAILED)

    processing_time = (time.time() - start_time) * 1000

    return AnalysisResult(
        color_sequence=corrected,
        band_rects=create_band_rectangles(detection.positions, buffer),
        resistance_ohms=decoded.resistance_ohms,
        tolerance_fraction=decoded.tolerance_fraction,
        band_positions=list(detection.positions),
        raw_colors=raw_colors,
        sampled_rgb=samples,
        body_rgb=body_color,
        used_fallback_positions=detection.used_fallback,
        warnings=warnings,
        processing_time_ms=processing_time,
    )


class AnalysisCoordinator:
    """
    Runs the band-reading pipeline and keeps the most recent result.

    The last-result slot has a single writer: analyses are serialized by
    an in-flight lock, so a second request waits for the first to finish.
    Each new result replaces the previous one; reset_results() empties it.
    """

    def __init__(self) -> None:
        self._in_flight = threading.Lock()
        self._slot_lock = threading.Lock()
        self._last_result: Optional[AnalysisResult] = None
        self._executor: Optional[ThreadPoolExecutor] = None

    def analyze(self, buffer: PixelBuffer, completion: Optional[Completion] = None) -> AnalysisResult:
        with self._in_flight:
            logger.info("Starting analysis on %dx%d buffer, extent %s", buffer.width, buffer.height, buffer.extent)
            result = run_pipeline(buffer)
            with self._slot_lock:
                self._last_result = result

        logger.info(
            "Analysis finished: %s -> %s ohms (%.1f ms)",
            result.color_names, result.resistance_ohms, result.processing_time_ms,
        )
        if completion is not None:
            completion(result.color_names, result.resistance_ohms)
        return result

    def submit(self, buffer: PixelBuffer, completion: Optional[Completion] = None) -> Future:
        """Queue an analysis on the coordinator's worker thread."""
        with self._slot_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="band-reader")
            executor = self._executor
        return executor.submit(self.analyze, buffer, completion)

    def shutdown(self) -> None:
        with self._slot_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)

    @property
    def last_result(self) -> Optional[AnalysisResult]:
        with self._slot_lock:
            return self._last_result

    @property
    def detected_band_rects(self) -> List[BandRect]:
        result = self.last_result
        return list(result.band_rects) if result else []

    @property
    def detected_colors(self) -> List[str]:
        result = self.last_result
        return result.color_names if result else []

    @property
    def resistance_value(self) -> Optional[float]:
        result = self.last_result
        return result.resistance_ohms if result else None

    def reset_results(self) -> None:
        with self._slot_lock:
            self._last_result = None
        logger.info("Results reset")
