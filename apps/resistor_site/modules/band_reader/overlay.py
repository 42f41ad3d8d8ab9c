import cv2
import numpy as np
from typing import List, Sequence

from .palette import SWATCHES, BandColor
from .schemas import AnalysisResult, BandRect


def create_overlay_image(original_image: np.ndarray, rects: List[BandRect], colors: Sequence = ()) -> np.ndarray:
    """
    Draws the band rectangles on a copy of a BGR image, filled with a
    translucent swatch of each band's color and outlined in green.
    Rectangles are expected in the image's own pixel coordinates.
    """
    overlay = original_image.copy()
    fill = original_image.copy()

    for i, rect in enumerate(rects):
        x1, y1 = int(round(rect.x)), int(round(rect.y))
        x2, y2 = int(round(rect.x + rect.w)), int(round(rect.y + rect.h))

        color = BandColor.parse(colors[i]) if i < len(colors) else BandColor.UNKNOWN
        swatch = SWATCHES.get(color)
        if swatch is not None:
            r, g, b = swatch
            cv2.rectangle(fill, (x1, y1), (x2, y2), (b, g, r), -1)

    cv2.addWeighted(fill, 0.4, overlay, 0.6, 0, overlay)

    for i, rect in enumerate(rects):
        x1, y1 = int(round(rect.x)), int(round(rect.y))
        x2, y2 = int(round(rect.x + rect.w)), int(round(rect.y + rect.h))
        cv2.rectangle(overlay, (x1, y1), (x2, y2), (0, 255, 0), 2)
        if i < len(colors):
            cv2.putText(overlay, str(colors[i])[:3], (x1, max(10, y1 - 6)), cv2.FONT_HERSHEY_SIMPLEX, 0.4, (0, 255, 0), 1)

    return overlay


def create_result_overlay(original_image: np.ndarray, result: AnalysisResult) -> np.ndarray:
    """
    Overlay for one analysis. Each detected rectangle is labelled with the
    color read at that position, before the sequence was repaired to four bands.
    """
    return create_overlay_image(original_image, result.band_rects, result.raw_colors)
