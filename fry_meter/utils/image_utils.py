"""
유틸: RGBA 이미지 버퍼 검증 및 변환 보조 함수 모음.
"""

from __future__ import annotations

from typing import Union

import cv2
import numpy as np


class ImageValidationError(ValueError):
    """이미지 유효성 오류"""


def validate_rgba(image: np.ndarray, name: str = "image") -> None:
    """
    파이프라인 입력 계약 검증: H × W × 4 uint8 (R, G, B, alpha).

    크기 0 이미지는 유효한 입력으로 취급한다.
    """
    if not isinstance(image, np.ndarray):
        raise ImageValidationError(f"{name} must be numpy.ndarray")
    if image.dtype != np.uint8:
        raise ImageValidationError(f"{name} must have dtype uint8")
    if image.ndim != 3 or image.shape[2] != 4:
        raise ImageValidationError(f"{name} must have shape (H, W, 4), got {image.shape}")


def from_buffer(buffer: Union[bytes, bytearray, memoryview, np.ndarray], width: int, height: int) -> np.ndarray:
    """
    평탄한 RGBA 바이트 버퍼(행 우선, 픽셀당 4바이트)를 H × W × 4 배열로 변환.

    Raises:
        ImageValidationError: 크기가 맞지 않을 때
    """
    if width < 0 or height < 0:
        raise ImageValidationError(f"Invalid image size: {width}x{height}")
    data = np.frombuffer(buffer, dtype=np.uint8) if not isinstance(buffer, np.ndarray) else buffer.astype(np.uint8)
    expected = width * height * 4
    if data.size != expected:
        raise ImageValidationError(f"Buffer has {data.size} bytes, expected {expected} for {width}x{height} RGBA")
    return data.reshape(height, width, 4).copy()


def bgr_to_rgba(image: np.ndarray) -> np.ndarray:
    """
    OpenCV 디코딩 결과(Gray / BGR / BGRA)를 RGBA로 변환.

    alpha 채널이 없으면 불투명(255)으로 채운다.
    """
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    if image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    raise ImageValidationError(f"Unsupported channel count: {image.shape[2]}")


def solid_rgba(height: int, width: int, rgb, alpha: int = 255) -> np.ndarray:
    """단색 RGBA 이미지 생성 (테스트/캘리브레이션용)."""
    image = np.empty((height, width, 4), dtype=np.uint8)
    image[..., 0] = rgb[0]
    image[..., 1] = rgb[1]
    image[..., 2] = rgb[2]
    image[..., 3] = alpha
    return image
