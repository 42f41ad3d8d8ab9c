import logging
from dataclasses import dataclass, field
from typing import Optional, Tuple

import cv2
import numpy as np

from .color import RGB

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Extent:
    """Origin and size of a buffer in the caller's coordinate system."""
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """
    Immutable snapshot of one frame.

    pixels is an (height, width, 3|4) uint8 array in RGB(A) order with row 0
    at the top. The array is copied and marked read-only on construction.
    """
    pixels: np.ndarray
    extent: Optional[Extent] = field(default=None)

    def __post_init__(self):
        pixels = np.asarray(self.pixels)
        if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
            raise ValueError(f"Expected an (H, W, 3|4) array, got shape {pixels.shape}")
        if pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise ValueError("Pixel buffer is empty")

        pixels = np.array(pixels, dtype=np.uint8, copy=True)
        pixels.setflags(write=False)
        object.__setattr__(self, 'pixels', pixels)

        if self.extent is None:
            object.__setattr__(self, 'extent', Extent(0.0, 0.0, float(pixels.shape[1]), float(pixels.shape[0])))

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def rgb(self) -> np.ndarray:
        """RGB channels only (alpha dropped), as a read-only view."""
        return self.pixels[:, :, :3]

    def pixel(self, x: int, y: int) -> RGB:
        r, g, b = self.rgb[y, x]
        return (int(r), int(g), int(b))

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height


def clamp_region(buffer: PixelBuffer, x: float, y: float, w: float, h: float) -> Optional[Tuple[int, int, int, int]]:
    """
    Intersect a rectangle (pixel units, top-left origin) with the buffer.
    Returns (x1, y1, x2, y2) with exclusive ends, or None when nothing is left.
    """
    x1 = max(0, int(x))
    y1 = max(0, int(y))
    x2 = min(buffer.width, int(x + w))
    y2 = min(buffer.height, int(y + h))

    if x1 >= x2 or y1 >= y2:
        return None
    return x1, y1, x2, y2


def average_region(buffer: PixelBuffer, x: float, y: float, w: float, h: float) -> Optional[RGB]:
    """
    Average color of a rectangle, truncated to integers.
    Returns None when the rectangle lies outside the buffer.
    """
    bounds = clamp_region(buffer, x, y, w, h)
    if bounds is None:
        return None

    x1, y1, x2, y2 = bounds
    mean = buffer.rgb[y1:y2, x1:x2].reshape(-1, 3).mean(axis=0)
    r, g, b = mean.astype(int)
    return (int(r), int(g), int(b))


def center_crop(image: np.ndarray, width_fraction: float = 0.5, aspect: float = 2.0) -> np.ndarray:
    """
    Crop the centre strip the capture screen frames the resistor in:
    width_fraction of the image width, with a width:height ratio of aspect.
    """
    img_h, img_w = image.shape[:2]
    crop_w = int(img_w * width_fraction)
    crop_h = int(crop_w / aspect)

    if crop_w <= 0 or crop_h <= 0 or crop_h > img_h:
        raise ValueError(f"Crop {crop_w}x{crop_h} does not fit a {img_w}x{img_h} image")

    x = (img_w - crop_w) // 2
    y = (img_h - crop_h) // 2
    return image[y:y + crop_h, x:x + crop_w]


def buffer_from_bgr(bgr_image: np.ndarray, max_width: Optional[int] = None, extent: Optional[Extent] = None) -> PixelBuffer:
    """
    Build a PixelBuffer from an OpenCV BGR image.

    When max_width is set and the image is wider, the pixels are downscaled
    but the extent keeps the original size, so band rectangles map back to
    the full-resolution image.
    """
    if bgr_image is None or bgr_image.size == 0:
        raise ValueError("Could not load image")

    img_h, img_w = bgr_image.shape[:2]
    if extent is None:
        extent = Extent(0.0, 0.0, float(img_w), float(img_h))

    if max_width and img_w > max_width:
        scale = max_width / img_w
        new_size = (max_width, max(1, int(round(img_h * scale))))
        bgr_image = cv2.resize(bgr_image, new_size, interpolation=cv2.INTER_AREA)
        logger.debug("Resized %dx%d input to %dx%d for analysis", img_w, img_h, new_size[0], new_size[1])

    if bgr_image.ndim == 2:
        rgb_image = cv2.cvtColor(bgr_image, cv2.COLOR_GRAY2RGB)
    elif bgr_image.shape[2] == 4:
        rgb_image = cv2.cvtColor(bgr_image, cv2.COLOR_BGRA2RGBA)
    else:
        rgb_image = cv2.cvtColor(bgr_image, cv2.COLOR_BGR2RGB)

    return PixelBuffer(rgb_image, extent)


def load_pixel_buffer(image_path: str, max_width: Optional[int] = None, crop: bool = False,
                      crop_width_fraction: float = 0.5) -> PixelBuffer:
    bgr_image = cv2.imread(image_path)
    if bgr_image is None:
        raise ValueError("Could not load image")

    if crop:
        bgr_image = center_crop(bgr_image, width_fraction=crop_width_fraction)

    return buffer_from_bgr(bgr_image, max_width=max_width)
