"""
Spatial Calibration (pixels per millimeter)

분석 엔진 외부의 캘리브레이션 협력 모듈.
엔진은 px/mm 스칼라만 받으며 직접 계산하지 않는다.
"""

import math
from dataclasses import dataclass
from typing import Tuple


class CalibrationError(ValueError):
    """캘리브레이션 입력 오류"""


@dataclass(frozen=True)
class CalibrationLine:
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def pixel_length(self) -> float:
        return math.hypot(self.x2 - self.x1, self.y2 - self.y1)

    @classmethod
    def parse(cls, text: str) -> Tuple["CalibrationLine", float]:
        """
        'X1,Y1,X2,Y2:MM' 형식 파싱.

        Example:
            >>> line, mm = CalibrationLine.parse("0,0,96,0:25.4")
            >>> line.pixel_length, mm
            (96.0, 25.4)
        """
        try:
            coords, length = text.split(":")
            x1, y1, x2, y2 = (float(v) for v in coords.split(","))
            return cls(x1, y1, x2, y2), float(length)
        except ValueError as e:
            raise CalibrationError(f"Invalid calibration line '{text}', expected X1,Y1,X2,Y2:MM") from e


@dataclass(frozen=True)
class CalibrationData:
    ppm: float  # pixels per millimeter
    reference_length: float  # mm
    pixel_length: float
    is_calibrated: bool


# 96 DPI 기준 (~3.78 px/mm), 미보정 상태
DEFAULT_CALIBRATION = CalibrationData(ppm=3.78, reference_length=25.4, pixel_length=96.0, is_calibrated=False)


def calculate_ppm(line: CalibrationLine, real_length_mm: float) -> CalibrationData:
    """기준선(픽셀)과 실제 길이(mm)로 px/mm 계산."""
    if real_length_mm <= 0:
        raise CalibrationError(f"Reference length must be positive, got {real_length_mm}")
    pixel_length = line.pixel_length
    if pixel_length <= 0:
        raise CalibrationError("Calibration line has zero length")
    return CalibrationData(
        ppm=pixel_length / real_length_mm,
        reference_length=real_length_mm,
        pixel_length=pixel_length,
        is_calibrated=True,
    )


def pixels_to_mm(pixels: float, ppm: float) -> float:
    return pixels / ppm if ppm > 0 else pixels


def pixels_to_mm2(pixel_area: float, ppm: float) -> float:
    return pixel_area / (ppm * ppm) if ppm > 0 else pixel_area
