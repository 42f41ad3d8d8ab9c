import os
import cv2
import numpy as np
import requests

# Configuration
BASE_URL = os.environ.get("TEST_BASE_URL", "http://127.0.0.1:8000/resistor_site")

# Tan carbon-film body
BODY_RGB = (210, 180, 140)

# Classifier-friendly band colors
BROWN_RGB = (100, 10, 10)
BLACK_RGB = (10, 10, 10)
RED_RGB = (200, 20, 20)
GOLD_RGB = (200, 120, 40)
YELLOW_RGB = (230, 210, 40)
VIOLET_RGB = (130, 30, 150)
ORANGE_RGB = (230, 110, 20)


def create_resistor_image(band_colors, width=400, height=100, body_rgb=BODY_RGB,
                          band_centers=None, band_width=24, band_top=0.2, band_bottom=0.8):
    """
    Returns an RGB uint8 array of a resistor body with vertical color bands.
    Bands cover rows band_top..band_bottom (fractions of height) so the
    margin strips used for body sampling stay clean.
    """
    img = np.zeros((height, width, 3), dtype=np.uint8)
    img[:, :] = body_rgb

    if band_centers is None:
        band_centers = [80, 150, 220, 320][:len(band_colors)]

    y1 = int(height * band_top)
    y2 = int(height * band_bottom)
    for center, rgb in zip(band_centers, band_colors):
        x1 = center - band_width // 2
        img[y1:y2, x1:x1 + band_width] = rgb
    return img


def create_test_image(filename, band_colors=(BROWN_RGB, BLACK_RGB, RED_RGB, GOLD_RGB), **kwargs):
    """Writes a synthetic resistor image to disk (OpenCV stores BGR)."""
    rgb = create_resistor_image(list(band_colors), **kwargs)
    cv2.imwrite(filename, cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR))
    return filename


def remove_test_image(filename):
    """Removes the test image if it exists."""
    if os.path.exists(filename):
        os.remove(filename)


def create_dummy_text_file(filename, content="dummy content"):
    """Creates a dummy text file."""
    with open(filename, 'w') as f:
        f.write(content)
    return filename


def server_available():
    """True when a resistor_site instance answers at BASE_URL."""
    try:
        requests.get(f"{BASE_URL}/index", timeout=1)
        return True
    except requests.RequestException:
        return False
