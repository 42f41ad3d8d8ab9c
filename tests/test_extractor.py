import unittest
import numpy as np
import sys
import os

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from apps.resistor_site.modules.band_reader.buffer import PixelBuffer
from apps.resistor_site.modules.band_reader.extractor import (
    extract_color_at,
    extract_color_avoiding_reflection,
    extract_colors,
    is_likely_reflection,
    is_near_black,
)
from tests.utils import BODY_RGB, BROWN_RGB, BLACK_RGB, RED_RGB, GOLD_RGB, create_resistor_image

GLARE_RGB = (250, 250, 250)


class TestSampleChecks(unittest.TestCase):

    def test_reflection_detection(self):
        self.assertTrue(is_likely_reflection(GLARE_RGB))
        self.assertTrue(is_likely_reflection((185, 185, 185)))
        self.assertFalse(is_likely_reflection(GOLD_RGB))
        # Bright but the channel spread is too wide
        self.assertFalse(is_likely_reflection((190, 175, 170)))
        self.assertFalse(is_likely_reflection((0, 0, 0)))

    def test_near_black(self):
        self.assertTrue(is_near_black((4, 4, 4)))
        self.assertFalse(is_near_black((5, 0, 0)))


class TestExtractColor(unittest.TestCase):

    def test_uniform_band(self):
        buffer = PixelBuffer(create_resistor_image([RED_RGB], band_centers=[80]))
        self.assertEqual(extract_color_at(buffer, 80, BODY_RGB), RED_RGB)

    def test_prefers_higher_contrast_sample(self):
        # Band spans columns 68..91; the 10x10 area at x=70 overlaps the body
        buffer = PixelBuffer(create_resistor_image([RED_RGB], band_centers=[80]))
        self.assertEqual(extract_color_at(buffer, 70, BODY_RGB), RED_RGB)

    def test_black_area_uses_direct_sample(self):
        pixels = np.zeros((100, 200, 3), dtype=np.uint8)
        pixels[48:53, 98:103] = (16, 16, 16)
        buffer = PixelBuffer(pixels)
        self.assertEqual(extract_color_at(buffer, 100, BODY_RGB), (16, 16, 16))

    def test_black_direct_uses_area_sample(self):
        pixels = np.zeros((100, 200, 3), dtype=np.uint8)
        pixels[45:48, :] = (200, 200, 200)
        buffer = PixelBuffer(pixels)
        self.assertEqual(extract_color_at(buffer, 100, BODY_RGB), (60, 60, 60))

    def test_both_black_uses_larger_area(self):
        pixels = np.zeros((100, 200, 3), dtype=np.uint8)
        pixels[43:45, :] = (100, 100, 100)
        buffer = PixelBuffer(pixels)
        # Two lit rows out of fifteen: 2 * 100 / 15
        self.assertEqual(extract_color_at(buffer, 100, BODY_RGB), (13, 13, 13))

    def test_glare_is_replaced(self):
        pixels = create_resistor_image([GOLD_RGB], band_centers=[80])
        pixels[45:55, 68:92] = GLARE_RGB
        buffer = PixelBuffer(pixels)
        self.assertEqual(extract_color_at(buffer, 80, BODY_RGB), GOLD_RGB)

    def test_glare_everywhere_is_kept(self):
        pixels = np.full((100, 200, 3), 250, dtype=np.uint8)
        buffer = PixelBuffer(pixels)
        self.assertEqual(extract_color_at(buffer, 100, BODY_RGB), GLARE_RGB)

    def test_reflection_strip_outside_buffer(self):
        buffer = PixelBuffer(np.zeros((10, 10, 3), dtype=np.uint8))
        self.assertEqual(extract_color_avoiding_reflection(buffer, 50, GLARE_RGB), GLARE_RGB)

    def test_sample_outside_buffer_is_black(self):
        buffer = PixelBuffer(create_resistor_image([]))
        color = extract_color_at(buffer, 10_000, BODY_RGB)
        self.assertEqual(color, (0, 0, 0))

    def test_one_sample_per_position(self):
        colors = [BROWN_RGB, BLACK_RGB, RED_RGB, GOLD_RGB]
        buffer = PixelBuffer(create_resistor_image(colors))
        samples = extract_colors(buffer, [80, 150, 220, 320], BODY_RGB)
        self.assertEqual(samples, colors)
        self.assertEqual(extract_colors(buffer, [], BODY_RGB), [])


if __name__ == '__main__':
    unittest.main()
