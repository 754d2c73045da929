"""
Tests for spatial calibration (px/mm)
"""

import pytest

from fry_meter.calibration import (
    DEFAULT_CALIBRATION,
    CalibrationError,
    CalibrationLine,
    calculate_ppm,
    pixels_to_mm,
    pixels_to_mm2,
)


class TestCalibrationLine:
    def test_pixel_length(self):
        assert CalibrationLine(0, 0, 3, 4).pixel_length == 5.0

    def test_parse(self):
        line, mm = CalibrationLine.parse("10,20,106,20:25.4")
        assert line == CalibrationLine(10.0, 20.0, 106.0, 20.0)
        assert line.pixel_length == 96.0
        assert mm == 25.4

    @pytest.mark.parametrize("text", ["", "1,2,3:4", "1,2,3,4", "a,b,c,d:1", "1,2,3,4:5:6"])
    def test_parse_invalid(self, text):
        with pytest.raises(CalibrationError):
            CalibrationLine.parse(text)


class TestCalculatePpm:
    def test_inch_reference(self):
        """96px = 25.4mm → 약 3.78 px/mm"""
        data = calculate_ppm(CalibrationLine(0, 0, 96, 0), 25.4)
        assert data.ppm == pytest.approx(3.7795, abs=1e-4)
        assert data.pixel_length == 96.0
        assert data.reference_length == 25.4
        assert data.is_calibrated

    def test_diagonal_line(self):
        data = calculate_ppm(CalibrationLine(0, 0, 30, 40), 10.0)
        assert data.ppm == pytest.approx(5.0)

    def test_non_positive_length(self):
        with pytest.raises(CalibrationError):
            calculate_ppm(CalibrationLine(0, 0, 10, 0), 0)
        with pytest.raises(CalibrationError):
            calculate_ppm(CalibrationLine(0, 0, 10, 0), -5)

    def test_zero_length_line(self):
        with pytest.raises(CalibrationError):
            calculate_ppm(CalibrationLine(5, 5, 5, 5), 10.0)

    def test_calibration_error_is_value_error(self):
        assert issubclass(CalibrationError, ValueError)


def test_default_calibration_uncalibrated():
    assert DEFAULT_CALIBRATION.ppm == 3.78
    assert not DEFAULT_CALIBRATION.is_calibrated


def test_conversions():
    assert pixels_to_mm(40, 4.0) == pytest.approx(10.0)
    assert pixels_to_mm2(400, 4.0) == pytest.approx(25.0)


def test_conversions_without_ppm():
    """ppm <= 0 → 픽셀 값 그대로"""
    assert pixels_to_mm(40, 0) == 40
    assert pixels_to_mm2(400, -1.0) == 400
