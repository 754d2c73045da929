"""
Color Space Conversion Utilities

RGB → HSV / CIE L*a*b* conversion functions (scalar and whole-image).

HSV convention used throughout the engine:
    H: integer degrees 0~359 (rounded half-up, negative results wrapped by +360)
    S: 0~1
    V: 0~1
"""

import math
from typing import NamedTuple, Tuple

import numpy as np

# ITU-R BT.601 luma weights
LUMA_WEIGHTS: Tuple[float, float, float] = (0.299, 0.587, 0.114)

# D65-normalized reference white
XN, YN, ZN = 0.9505, 1.0, 1.089

_LAB_EPSILON = 0.008856


class HSVColor(NamedTuple):
    h: float
    s: float
    v: float


class LabColor(NamedTuple):
    L: float
    a: float
    b: float


def round_half_up(x: float) -> float:
    return math.floor(x + 0.5)


def rgb_to_hsv(r: float, g: float, b: float) -> HSVColor:
    """
    Convert one RGB triple (0~255) to HSV.

    Achromatic input (r == g == b) yields hue 0 and saturation 0.

    Example:
        >>> rgb_to_hsv(255, 0, 0)
        HSVColor(h=0, s=1.0, v=1.0)
    """
    r, g, b = r / 255.0, g / 255.0, b / 255.0
    mx = max(r, g, b)
    mn = min(r, g, b)
    delta = mx - mn

    h = 0
    s = 0.0
    v = mx
    if delta > 0:
        s = delta / mx
        if mx == r:
            h = math.fmod((g - b) / delta, 6)
        elif mx == g:
            h = (b - r) / delta + 2
        else:
            h = (r - g) / delta + 4
        h = int(round_half_up(h * 60))
        if h < 0:
            h += 360
    return HSVColor(h, s, v)


def rgb_to_hsv_image(image_rgba: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Whole-image version of rgb_to_hsv.

    Args:
        image_rgba: RGBA (or RGB) uint8 array (H × W × C)

    Returns:
        (H, S, V) float64 planes with the same semantics as rgb_to_hsv
    """
    rgb = image_rgba[..., :3].astype(np.float64) / 255.0
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    mx = rgb.max(axis=-1)
    mn = rgb.min(axis=-1)
    delta = mx - mn
    chromatic = delta > 0

    safe_delta = np.where(chromatic, delta, 1.0)
    safe_max = np.where(mx > 0, mx, 1.0)

    h_r = np.fmod((g - b) / safe_delta, 6)
    h_g = (b - r) / safe_delta + 2
    h_b = (r - g) / safe_delta + 4
    hue = np.where(mx == r, h_r, np.where(mx == g, h_g, h_b))
    hue = np.floor(hue * 60 + 0.5)
    hue = np.where(hue < 0, hue + 360, hue)
    hue = np.where(chromatic, hue, 0.0)

    sat = np.where(chromatic, delta / safe_max, 0.0)

    return hue, sat, mx


def _lab_f(t: float) -> float:
    return float(np.cbrt(t)) if t > _LAB_EPSILON else 7.787 * t + 16.0 / 116.0


def _srgb_to_linear(c: float) -> float:
    return ((c + 0.055) / 1.055) ** 2.4 if c > 0.04045 else c / 12.92


def rgb_to_lab(r: float, g: float, b: float) -> LabColor:
    """
    sRGB (0~255) → CIE L*a*b*.

    sRGB companding → linear RGB → XYZ (sRGB matrix) → Lab using the
    D65-normalized white point (Xn=0.9505, Yn=1.0, Zn=1.089).

    Example:
        >>> lab = rgb_to_lab(255, 255, 255)
        >>> round(lab.L)
        100
    """
    rr = _srgb_to_linear(r / 255.0)
    gg = _srgb_to_linear(g / 255.0)
    bb = _srgb_to_linear(b / 255.0)

    X = rr * 0.4124 + gg * 0.3576 + bb * 0.1805
    Y = rr * 0.2126 + gg * 0.7152 + bb * 0.0722
    Z = rr * 0.0193 + gg * 0.1192 + bb * 0.9505

    fy = _lab_f(Y / YN)
    return LabColor(
        L=116.0 * fy - 16.0,
        a=500.0 * (_lab_f(X / XN) - fy),
        b=200.0 * (fy - _lab_f(Z / ZN)),
    )


def luminance(r: float, g: float, b: float) -> float:
    """BT.601 luma (0~255) of one RGB triple."""
    return LUMA_WEIGHTS[0] * r + LUMA_WEIGHTS[1] * g + LUMA_WEIGHTS[2] * b


def luminance_image(image_rgba: np.ndarray) -> np.ndarray:
    """BT.601 luma plane (float64) of an RGB(A) image."""
    rgb = image_rgba[..., :3].astype(np.float64)
    return LUMA_WEIGHTS[0] * rgb[..., 0] + LUMA_WEIGHTS[1] * rgb[..., 1] + LUMA_WEIGHTS[2] * rgb[..., 2]
