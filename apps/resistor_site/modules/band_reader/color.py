import numpy as np
from typing import Sequence, Tuple, Union

RGB = Tuple[int, int, int]
ColorLike = Union[Sequence[float], np.ndarray]

# sRGB (D65) primaries
SRGB_TO_XYZ = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
])
XYZ_TO_SRGB = np.array([
    [3.2404542, -1.5371385, -0.4985314],
    [-0.9692660, 1.8760108, 0.0415560],
    [0.0556434, -0.2040259, 1.0572252],
])
D65_WHITE = np.array([0.95047, 1.00000, 1.08883])

LAB_EPSILON = 0.008856
LAB_KAPPA = 7.787
LAB_OFFSET = 16.0 / 116.0
# f(LAB_EPSILON), used on the way back
LAB_F_EPSILON = 0.206897


def rgb_to_lab(rgb: ColorLike) -> np.ndarray:
    """
    Convert 8-bit RGB to standard CIE Lab (D65).

    Accepts a single (r, g, b) triple or any array whose last axis holds
    the three channels; returns float64 (L, a, b) with the same leading shape.
    L is in 0..100, a and b roughly in -128..127.
    """
    c = np.asarray(rgb, dtype=np.float64) / 255.0

    linear = np.where(c > 0.04045, ((c + 0.055) / 1.055) ** 2.4, c / 12.92)
    xyz = linear @ SRGB_TO_XYZ.T
    xyz_n = xyz / D65_WHITE

    f = np.where(xyz_n > LAB_EPSILON, np.cbrt(xyz_n), LAB_KAPPA * xyz_n + LAB_OFFSET)
    fx, fy, fz = f[..., 0], f[..., 1], f[..., 2]

    l_std = 116.0 * fy - 16.0
    a_std = 500.0 * (fx - fy)
    b_std = 200.0 * (fy - fz)

    return np.stack([l_std, a_std, b_std], axis=-1)


def lab_to_rgb(lab: ColorLike) -> RGB:
    """
    Inverse of rgb_to_lab for a single color.
    Out-of-gamut results are clamped before rounding to 0..255.
    """
    l_std, a_std, b_std = (float(v) for v in np.asarray(lab, dtype=np.float64))

    fy = (l_std + 16.0) / 116.0
    fx = a_std / 500.0 + fy
    fz = fy - b_std / 200.0
    f = np.array([fx, fy, fz])

    xyz_n = np.where(f > LAB_F_EPSILON, f ** 3, (f - LAB_OFFSET) / LAB_KAPPA)
    linear = (xyz_n * D65_WHITE) @ XYZ_TO_SRGB.T

    # np.where evaluates both branches; keep the power defined for negatives
    positive = np.maximum(linear, 0.0)
    gamma = np.where(linear > 0.0031308, 1.055 * positive ** (1.0 / 2.4) - 0.055, 12.92 * linear)
    channels = np.clip(gamma, 0.0, 1.0) * 255.0

    r, g, b = (int(round(v)) for v in channels)
    return (r, g, b)


def calculate_delta_e_cie76(color1: np.ndarray, color2: np.ndarray) -> float:
    """
    Calculate CIE76 Delta E between two Lab colors.
    Input colors should be arrays/tuples of (L, a, b).
    Returns Euclidean distance.
    """
    return float(np.linalg.norm(np.asarray(color1, dtype=np.float64) - np.asarray(color2, dtype=np.float64)))


def batch_delta_e_cie76(color_array: np.ndarray, target_color: np.ndarray) -> np.ndarray:
    """
    Calculate CIE76 Delta E between an array of colors and a target color.
    """
    diff = color_array - target_color
    return np.linalg.norm(diff, axis=-1)


def color_distance_lab(rgb1: ColorLike, rgb2: ColorLike) -> float:
    """Delta E between two 8-bit RGB colors."""
    return calculate_delta_e_cie76(rgb_to_lab(rgb1), rgb_to_lab(rgb2))
