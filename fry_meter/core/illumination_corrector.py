"""
Illumination Corrector Module

공간 화이트밸런스 (White Patch 변형)
이미지를 5×5 패치로 나누어 가장 밝은 근사 무채색 패치(흰 배경/18% 그레이)를
기준으로 채널별 게인을 추정하고, 보정된 복사본을 생성한다.

주의: 원본 이미지는 변경하지 않는다. 텍스처(바삭함) 추정은 고주파 성분이
화이트밸런스로 왜곡되지 않도록 원본 이미지를 사용한다.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from fry_meter.utils.color_space import LUMA_WEIGHTS
from fry_meter.utils.image_utils import validate_rgba

logger = logging.getLogger(__name__)

UNIT_GAINS: Tuple[float, float, float] = (1.0, 1.0, 1.0)


@dataclass
class CorrectorConfig:
    """
    화이트밸런스 설정

    Attributes:
        enabled: 보정 활성화 여부 (False면 게인 (1,1,1))
        grid_size: 패치 격자 크기 (grid_size × grid_size)
        neutral_max_diff: 무채색 후보 조건 - 채널 평균 간 최대 차이 (0~255)
        min_reference_luminance: 기준 패치 최소 휘도 (미만이면 보정 생략)
    """

    enabled: bool = True
    grid_size: int = 5
    neutral_max_diff: float = 40.0
    min_reference_luminance: float = 30.0


@dataclass
class CorrectionResult:
    """
    화이트밸런스 결과

    Attributes:
        corrected_image: 보정된 RGBA 이미지 (새 배열)
        original_image: 보정 전 RGBA 이미지 (텍스처 추정용)
        gains: 채널별 게인 (R, G, B)
        correction_applied: 보정 적용 여부
        reference_luminance: 선택된 기준 패치 휘도 (없으면 0)
        reference_patch: 선택된 패치 (row, col), 없으면 None
    """

    corrected_image: np.ndarray
    original_image: np.ndarray
    gains: Tuple[float, float, float]
    correction_applied: bool
    reference_luminance: float = 0.0
    reference_patch: Optional[Tuple[int, int]] = None


class IlluminationCorrector:
    """
    근사 무채색 기준 패치 기반 화이트밸런스.

    알고리즘:
    1. 이미지를 grid_size × grid_size 패치로 분할 (나머지 픽셀은 어떤 패치에도 속하지 않음)
    2. 패치별 평균 R/G/B 및 BT.601 휘도 계산
    3. 채널 평균 간 최대 차이 < neutral_max_diff 인 패치 중 휘도 최대 패치 선택
    4. 기준 휘도 < min_reference_luminance 이면 게인 (1, 1, 1)
    5. target = 기준 패치 채널 평균의 평균, gain_c = target / max(1, mean_c)
    6. 채널별 곱셈 후 반올림, 255로 클램프
    """

    def __init__(self, config: CorrectorConfig = None):
        self.config = config or CorrectorConfig()
        logger.info(
            f"IlluminationCorrector initialized: enabled={self.config.enabled}, "
            f"grid={self.config.grid_size}, neutral_max_diff={self.config.neutral_max_diff}"
        )

    def correct(self, image_rgba: np.ndarray) -> CorrectionResult:
        """
        화이트밸런스 적용

        Args:
            image_rgba: RGBA uint8 이미지 (H × W × 4), 변경되지 않음

        Returns:
            CorrectionResult: 보정 결과
        """
        validate_rgba(image_rgba)

        if not self.config.enabled:
            logger.debug("White balance disabled, using unit gains")
            return CorrectionResult(
                corrected_image=image_rgba.copy(),
                original_image=image_rgba,
                gains=UNIT_GAINS,
                correction_applied=False,
            )

        gains, ref_lum, ref_patch = self.estimate_gains(image_rgba)
        corrected = self.apply_gains(image_rgba, gains)

        applied = ref_patch is not None
        if applied:
            logger.debug(
                f"White balance reference patch={ref_patch}, luminance={ref_lum:.1f}, "
                f"gains=({gains[0]:.3f}, {gains[1]:.3f}, {gains[2]:.3f})"
            )
        else:
            logger.debug(f"No trusted neutral patch (best luminance={ref_lum:.1f}), white balance skipped")

        return CorrectionResult(
            corrected_image=corrected,
            original_image=image_rgba,
            gains=gains,
            correction_applied=applied,
            reference_luminance=ref_lum,
            reference_patch=ref_patch,
        )

    def estimate_gains(
        self, image_rgba: np.ndarray
    ) -> Tuple[Tuple[float, float, float], float, Optional[Tuple[int, int]]]:
        """
        기준 패치 탐색 및 게인 계산.

        Returns:
            (gains, 기준 휘도, 기준 패치 좌표 또는 None)
        """
        h, w = image_rgba.shape[:2]
        n = self.config.grid_size
        if h == 0 or w == 0:
            return UNIT_GAINS, 0.0, None

        patch_w = max(1, w // n)
        patch_h = max(1, h // n)
        rgb = image_rgba[..., :3].astype(np.float64)

        best_lum = 0.0
        best_patch = None
        ref = (255.0, 255.0, 255.0)

        for py in range(n):
            y0 = py * patch_h
            y1 = min(y0 + patch_h, h)
            for px in range(n):
                x0 = px * patch_w
                x1 = min(x0 + patch_w, w)
                if y1 <= y0 or x1 <= x0:
                    continue

                mr, mg, mb = (float(m) for m in rgb[y0:y1, x0:x1].reshape(-1, 3).mean(axis=0))
                lum = LUMA_WEIGHTS[0] * mr + LUMA_WEIGHTS[1] * mg + LUMA_WEIGHTS[2] * mb
                max_diff = max(abs(mr - mg), abs(mg - mb), abs(mr - mb))

                if lum > best_lum and max_diff < self.config.neutral_max_diff:
                    best_lum = lum
                    best_patch = (py, px)
                    ref = (mr, mg, mb)

        if best_lum < self.config.min_reference_luminance:
            return UNIT_GAINS, best_lum, None

        target = sum(ref) / 3.0
        gains = tuple(target / max(1.0, c) for c in ref)
        return gains, best_lum, best_patch

    @staticmethod
    def apply_gains(image_rgba: np.ndarray, gains: Tuple[float, float, float]) -> np.ndarray:
        """채널별 게인 적용 (반올림 후 255 클램프). alpha는 유지. 항상 새 배열 반환."""
        corrected = image_rgba.copy()
        if corrected.size == 0 or tuple(gains) == UNIT_GAINS:
            return corrected

        scaled = np.floor(image_rgba[..., :3].astype(np.float64) * np.asarray(gains, dtype=np.float64) + 0.5)
        corrected[..., :3] = np.clip(scaled, 0, 255).astype(np.uint8)
        return corrected
