"""
Image Planes

RGBA 이미지에서 한 번 계산해 이후 단계로 넘기는 불변 스냅샷 (RGB/HSV 평면 + 불투명 마스크).
"""

from dataclasses import dataclass

import numpy as np

from fry_meter.utils.color_space import rgb_to_hsv_image
from fry_meter.utils.image_utils import validate_rgba

ALPHA_THRESHOLD = 128


@dataclass(frozen=True)
class ImagePlanes:
    """
    Attributes:
        rgb: float64 RGB 평면 (H × W × 3, 0~255)
        hue: 정수값 hue (H × W, 0~359)
        sat: 채도 (0~1)
        val: 명도 (0~1)
        opaque: alpha >= 128 마스크
    """

    rgb: np.ndarray
    hue: np.ndarray
    sat: np.ndarray
    val: np.ndarray
    opaque: np.ndarray

    @classmethod
    def from_rgba(cls, image_rgba: np.ndarray, alpha_threshold: int = ALPHA_THRESHOLD) -> "ImagePlanes":
        validate_rgba(image_rgba)
        hue, sat, val = rgb_to_hsv_image(image_rgba)
        planes = cls(
            rgb=image_rgba[..., :3].astype(np.float64),
            hue=hue,
            sat=sat,
            val=val,
            opaque=image_rgba[..., 3] >= alpha_threshold,
        )
        for arr in (planes.rgb, planes.hue, planes.sat, planes.val, planes.opaque):
            arr.setflags(write=False)
        return planes

    @property
    def height(self) -> int:
        return int(self.hue.shape[0])

    @property
    def width(self) -> int:
        return int(self.hue.shape[1])
