"""
Texture Analyzer Module

화이트밸런스 적용 전 휘도 이미지의 8×8 패치 에너지 비율로 표면 바삭함(crunch)을 추정.

패치의 각 행에 대해:
- 저주파 에너지: (행 평균)²
- 고주파 에너지: 행 평균 대비 편차 제곱합

주파수 분해가 아닌 국소 대비(local contrast) 근사치이다.
"""

import logging
from dataclasses import dataclass

import numpy as np

from fry_meter.utils.color_space import luminance_image
from fry_meter.utils.image_utils import validate_rgba

logger = logging.getLogger(__name__)


@dataclass
class TextureConfig:
    """
    Attributes:
        patch_size: 패치 한 변 길이 (px, 나머지 가장자리 픽셀은 무시)
        score_gain: 고주파 비율 → 점수 배율 (0~0.5 비율 → 0~100)
        default_score: 패치가 하나도 없을 때 점수
    """

    patch_size: int = 8
    score_gain: float = 200.0
    default_score: int = 50


class TextureAnalyzer:
    """Crust micro-topography (crunch score) estimator"""

    def __init__(self, config: TextureConfig = None):
        self.config = config or TextureConfig()
        if self.config.patch_size <= 0:
            raise ValueError(f"patch_size must be positive, got {self.config.patch_size}")

    def crunch_score(self, image_rgba: np.ndarray) -> int:
        """
        Args:
            image_rgba: 보정 전 원본 RGBA 이미지 (alpha 무시)

        Returns:
            0~100 정수 점수 (패치 없으면 50)
        """
        validate_rgba(image_rgba)
        p = self.config.patch_size
        h, w = image_rgba.shape[:2]
        rows, cols = h // p, w // p
        if rows == 0 or cols == 0:
            logger.debug(f"Image {w}x{h} smaller than one {p}x{p} patch, crunch defaults")
            return self.config.default_score

        lum = luminance_image(image_rgba)[: rows * p, : cols * p]
        # (rows, p, cols, p) → 패치 행 단위 (rows, cols, p, p)
        patches = lum.reshape(rows, p, cols, p).transpose(0, 2, 1, 3)
        row_mean = patches.mean(axis=3, keepdims=True)

        high = ((patches - row_mean) ** 2).sum(axis=(2, 3)) / (p * p)
        low = (row_mean[..., 0] ** 2).sum(axis=2) / p

        high_energy = float(high.sum())
        low_energy = float(low.sum())
        ratio = high_energy / (low_energy + high_energy + 1e-6)
        score = min(100, int(np.floor(ratio * self.config.score_gain + 0.5)))

        logger.debug(f"Crunch: {rows * cols} patches, HF ratio={ratio:.4f}, score={score}")
        return score
