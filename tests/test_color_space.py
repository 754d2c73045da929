"""
Color Space Conversion Tests

RGB → HSV / Lab conversions (scalar and whole-image).
"""

import numpy as np
import pytest

from fry_meter.utils.color_space import (
    LabColor,
    luminance,
    luminance_image,
    rgb_to_hsv,
    rgb_to_hsv_image,
    rgb_to_lab,
)
from fry_meter.utils.image_utils import solid_rgba


class TestRgbToHsv:
    """Scalar HSV conversion"""

    def test_primary_colors(self):
        assert rgb_to_hsv(255, 0, 0) == (0, 1.0, 1.0)
        assert rgb_to_hsv(0, 255, 0).h == 120
        assert rgb_to_hsv(0, 0, 255).h == 240

    def test_achromatic_has_zero_saturation(self):
        for level in (0, 1, 128, 255):
            hsv = rgb_to_hsv(level, level, level)
            assert hsv.h == 0
            assert hsv.s == 0.0
            assert hsv.v == pytest.approx(level / 255.0)

    def test_negative_hue_wraps(self):
        """r 최대 + b > g → 음수 hue는 +360"""
        hsv = rgb_to_hsv(255, 0, 128)
        assert 300 < hsv.h < 360

    def test_golden_reference(self):
        hsv = rgb_to_hsv(161, 131, 88)
        assert hsv.h == 35
        assert hsv.s == pytest.approx(0.453, abs=1e-3)
        assert hsv.v == pytest.approx(0.631, abs=1e-3)

    def test_hue_is_integer_rounded(self):
        # 60 * (43/73) = 35.34 → 35
        assert isinstance(rgb_to_hsv(161, 131, 88).h, int)

    def test_ranges(self):
        rng = np.random.default_rng(0)
        for r, g, b in rng.integers(0, 256, size=(500, 3)):
            hsv = rgb_to_hsv(int(r), int(g), int(b))
            assert 0 <= hsv.h < 360
            assert 0.0 <= hsv.s <= 1.0
            assert 0.0 <= hsv.v <= 1.0


class TestRgbToHsvImage:
    """Whole-image conversion matches the scalar version"""

    def test_matches_scalar(self):
        rng = np.random.default_rng(42)
        image = rng.integers(0, 256, size=(16, 16, 4), dtype=np.uint8)
        hue, sat, val = rgb_to_hsv_image(image)

        for y in range(16):
            for x in range(16):
                r, g, b = (int(c) for c in image[y, x, :3])
                expected = rgb_to_hsv(r, g, b)
                assert hue[y, x] == expected.h
                assert sat[y, x] == pytest.approx(expected.s)
                assert val[y, x] == pytest.approx(expected.v)

    def test_empty_image(self):
        hue, sat, val = rgb_to_hsv_image(np.zeros((0, 0, 4), dtype=np.uint8))
        assert hue.shape == (0, 0)
        assert sat.size == 0 and val.size == 0


class TestRgbToLab:
    def test_white(self):
        lab = rgb_to_lab(255, 255, 255)
        assert isinstance(lab, LabColor)
        assert lab.L == pytest.approx(100.0, abs=0.1)
        assert abs(lab.a) < 1.0
        assert abs(lab.b) < 1.0

    def test_black(self):
        lab = rgb_to_lab(0, 0, 0)
        assert lab.L == pytest.approx(0.0, abs=1e-6)

    def test_golden_is_yellowish(self):
        lab = rgb_to_lab(161, 131, 88)
        assert 50 < lab.L < 60
        assert lab.b > 20
        assert lab.a > 0


def test_luminance_bt601():
    assert luminance(255, 255, 255) == pytest.approx(255.0)
    assert luminance(161, 131, 88) == pytest.approx(135.068, abs=1e-3)


def test_luminance_image_matches_scalar():
    image = solid_rgba(4, 5, (161, 131, 88))
    lum = luminance_image(image)
    assert lum.shape == (4, 5)
    np.testing.assert_allclose(lum, luminance(161, 131, 88))
