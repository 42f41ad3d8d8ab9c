import unittest
import numpy as np
import sys
import os

# Add apps to path
sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from apps.resistor_site.modules.band_reader.color import (
    batch_delta_e_cie76,
    calculate_delta_e_cie76,
    color_distance_lab,
    lab_to_rgb,
    rgb_to_lab,
)
from apps.resistor_site.modules.band_reader.buffer import (
    Extent,
    PixelBuffer,
    average_region,
    center_crop,
)
from apps.resistor_site.modules.band_reader.sampler import (
    DEFAULT_BODY_COLOR,
    sample_body_color,
    sample_body_color_with_status,
)
from tests.utils import BODY_RGB, BROWN_RGB, BLACK_RGB, RED_RGB, GOLD_RGB, create_resistor_image


class TestColorSpace(unittest.TestCase):

    def test_delta_e(self):
        # Test exact match
        c1 = np.array([50.0, 0.0, 0.0])
        c2 = np.array([50.0, 0.0, 0.0])
        self.assertAlmostEqual(calculate_delta_e_cie76(c1, c2), 0.0)

        # dist((50,0,0), (60,0,0)) = 10
        c3 = np.array([60.0, 0.0, 0.0])
        self.assertAlmostEqual(calculate_delta_e_cie76(c1, c3), 10.0)

    def test_known_lab_values(self):
        white = rgb_to_lab((255, 255, 255))
        self.assertAlmostEqual(white[0], 100.0, places=2)
        self.assertAlmostEqual(white[1], 0.0, places=1)
        self.assertAlmostEqual(white[2], 0.0, places=1)

        black = rgb_to_lab((0, 0, 0))
        np.testing.assert_allclose(black, [0.0, 0.0, 0.0], atol=1e-6)

        # Pure red is roughly (53.2, 80.1, 67.2)
        red = rgb_to_lab((255, 0, 0))
        np.testing.assert_allclose(red, [53.24, 80.09, 67.20], atol=0.1)

    def test_distance_identity_and_symmetry(self):
        colors = [(0, 0, 0), (255, 255, 255), (120, 70, 40), (12, 200, 99), (250, 3, 180)]
        for a in colors:
            self.assertEqual(color_distance_lab(a, a), 0.0)
            for b in colors:
                self.assertAlmostEqual(color_distance_lab(a, b), color_distance_lab(b, a))

    def test_batch_matches_single(self):
        colors = np.array([(10, 20, 30), (200, 100, 50), (0, 255, 0)])
        target = (120, 70, 40)
        batch = batch_delta_e_cie76(rgb_to_lab(colors), rgb_to_lab(target))
        for rgb, value in zip(colors, batch):
            self.assertAlmostEqual(value, color_distance_lab(rgb, target))

    def test_round_trip(self):
        rng = np.random.default_rng(7)
        samples = [tuple(int(c) for c in rgb) for rgb in rng.integers(0, 256, size=(200, 3))]
        samples += [(0, 0, 0), (255, 255, 255), (1, 2, 3), (255, 0, 0), (0, 0, 255)]
        for rgb in samples:
            back = lab_to_rgb(rgb_to_lab(rgb))
            for original, restored in zip(rgb, back):
                self.assertLessEqual(abs(original - restored), 2, f"{rgb} -> {back}")


class TestPixelBuffer(unittest.TestCase):

    def test_defaults_and_immutability(self):
        pixels = np.zeros((10, 20, 3), dtype=np.uint8)
        buffer = PixelBuffer(pixels)
        self.assertEqual(buffer.width, 20)
        self.assertEqual(buffer.height, 10)
        self.assertEqual(buffer.extent, Extent(0.0, 0.0, 20.0, 10.0))

        # Source array changes do not leak into the buffer
        pixels[0, 0] = (255, 255, 255)
        self.assertEqual(buffer.pixel(0, 0), (0, 0, 0))

        with self.assertRaises(ValueError):
            buffer.pixels[0, 0] = (1, 1, 1)

    def test_rgba_drops_alpha(self):
        pixels = np.zeros((4, 4, 4), dtype=np.uint8)
        pixels[:, :] = (10, 20, 30, 255)
        buffer = PixelBuffer(pixels)
        self.assertEqual(buffer.rgb.shape, (4, 4, 3))
        self.assertEqual(buffer.pixel(2, 2), (10, 20, 30))

    def test_rejects_malformed(self):
        with self.assertRaises(ValueError):
            PixelBuffer(np.zeros((10, 10), dtype=np.uint8))
        with self.assertRaises(ValueError):
            PixelBuffer(np.zeros((10, 10, 2), dtype=np.uint8))
        with self.assertRaises(ValueError):
            PixelBuffer(np.zeros((0, 10, 3), dtype=np.uint8))

    def test_average_region_clamps(self):
        pixels = np.zeros((10, 10, 3), dtype=np.uint8)
        pixels[:, :5] = (100, 0, 0)
        pixels[:, 5:] = (0, 0, 201)
        buffer = PixelBuffer(pixels)

        self.assertEqual(average_region(buffer, 0, 0, 5, 10), (100, 0, 0))
        # Half of this rectangle hangs off the left edge
        self.assertEqual(average_region(buffer, -5, 0, 10, 10), (100, 0, 0))
        # Truncated, not rounded: 201 / 2 = 100.5
        self.assertEqual(average_region(buffer, 0, 0, 10, 10), (50, 0, 100))
        self.assertIsNone(average_region(buffer, 20, 20, 5, 5))

    def test_center_crop(self):
        image = np.zeros((400, 800, 3), dtype=np.uint8)
        cropped = center_crop(image)
        self.assertEqual(cropped.shape[:2], (200, 400))

        with self.assertRaises(ValueError):
            center_crop(np.zeros((10, 800, 3), dtype=np.uint8))


class TestBodyColorSampler(unittest.TestCase):

    def test_uniform_body(self):
        pixels = create_resistor_image([BROWN_RGB, BLACK_RGB, RED_RGB, GOLD_RGB])
        self.assertEqual(sample_body_color(PixelBuffer(pixels)), BODY_RGB)

    def test_black_image_uses_default(self):
        buffer = PixelBuffer(np.zeros((50, 100, 3), dtype=np.uint8))
        color, used_default = sample_body_color_with_status(buffer)
        self.assertEqual(color, DEFAULT_BODY_COLOR)
        self.assertTrue(used_default)

    def test_one_estimate_failing_is_averaged_with_default(self):
        # Bright patches only under the point samples: every margin strip is black
        pixels = np.zeros((100, 200, 3), dtype=np.uint8)
        pixels[45:56, 18:23] = (200, 200, 200)
        pixels[45:56, 178:183] = (200, 200, 200)
        color, used_default = sample_body_color_with_status(PixelBuffer(pixels))
        self.assertTrue(used_default)
        self.assertEqual(color, ((200 + 120) // 2, (200 + 70) // 2, (200 + 40) // 2))

    def test_tiny_buffer(self):
        buffer = PixelBuffer(np.full((1, 1, 3), 90, dtype=np.uint8))
        self.assertEqual(len(sample_body_color(buffer)), 3)


if __name__ == '__main__':
    unittest.main()
