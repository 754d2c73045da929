"""
Pixel Statistics Module

전역 통계 패스: 화이트밸런스 보정 이미지에서 평균 RGB/HSV, 중앙 hue,
탄 픽셀/어두운 픽셀/밝은 픽셀 비율을 계산한다.

제외 대상:
- alpha < 128 (투명)
- 근사 흰색 배경 (s < 0.05 AND v > 0.92)
- 그림자 픽셀 (개수만 집계)
"""

import logging
from dataclasses import dataclass, field

import numpy as np

from fry_meter.core.planes import ImagePlanes
from fry_meter.core.shadow_classifier import ShadowBaseline, ShadowConfig, compute_shadow_baseline, shadow_mask

logger = logging.getLogger(__name__)


@dataclass
class StatisticsConfig:
    """
    전역 통계 설정

    Attributes:
        background_max_saturation, background_min_value: 흰 배경 판정
        burnt_max_value, burnt_max_saturation: 탄 픽셀 판정 (v < 0.2 AND s < 0.3)
        dark_max_value: 어두운 픽셀 판정 (탄 픽셀 아님 AND v < 0.35)
        light_min_value, light_max_saturation: 밝은 픽셀 판정 (v > 0.85 AND s < 0.2)
        median_min_saturation: 중앙 hue 계산에 포함할 최소 채도
        default_median_hue: 유효 픽셀이 없을 때 중앙 hue
    """

    background_max_saturation: float = 0.05
    background_min_value: float = 0.92
    burnt_max_value: float = 0.2
    burnt_max_saturation: float = 0.3
    dark_max_value: float = 0.35
    light_min_value: float = 0.85
    light_max_saturation: float = 0.2
    median_min_saturation: float = 0.1
    default_median_hue: float = 30.0


@dataclass(frozen=True)
class GlobalStatistics:
    """
    전역 통계 결과 (이후 단계에 전달되는 불변 스냅샷)

    Attributes:
        valid_pixels: 통계 픽셀 수 (0이면 1로 보정된 값)
        shadow_pixels: 그림자로 제외된 픽셀 수
        shadow_mask: 불투명 + 비배경 + 그림자 픽셀 마스크 (H × W)
        baseline: 그림자 판정 기준
    """

    mean_r: float
    mean_g: float
    mean_b: float
    mean_h: float
    mean_s: float
    mean_v: float
    median_hue: float
    burnt_ratio: float
    dark_ratio: float
    light_ratio: float
    valid_pixels: int
    shadow_pixels: int
    baseline: ShadowBaseline
    shadow_mask: np.ndarray = field(compare=False, repr=False)

    @property
    def shadow_mask_ratio(self) -> float:
        return self.shadow_pixels / (self.valid_pixels + self.shadow_pixels + 1)


class PixelStatisticsAnalyzer:
    """전역 통계 패스 + 그림자 억제"""

    def __init__(self, config: StatisticsConfig = None, shadow_config: ShadowConfig = None):
        self.config = config or StatisticsConfig()
        self.shadow_config = shadow_config or ShadowConfig()

    def analyze(self, planes: ImagePlanes) -> GlobalStatistics:
        cfg = self.config
        baseline = compute_shadow_baseline(planes, self.shadow_config)

        background = (planes.sat < cfg.background_max_saturation) & (planes.val > cfg.background_min_value)
        candidates = planes.opaque & ~background
        shadows = candidates & shadow_mask(planes, baseline, self.shadow_config)
        valid = candidates & ~shadows

        shadow_px = int(np.count_nonzero(shadows))
        valid_px = int(np.count_nonzero(valid))
        if valid_px == 0:
            logger.debug("No valid pixels after background/shadow suppression")
            valid_px = 1

        rgb = planes.rgb[valid]
        hue = planes.hue[valid]
        sat = planes.sat[valid]
        val = planes.val[valid]

        hue_values = np.sort(hue[sat > cfg.median_min_saturation])
        median_hue = float(hue_values[len(hue_values) // 2]) if hue_values.size else cfg.default_median_hue

        burnt = (val < cfg.burnt_max_value) & (sat < cfg.burnt_max_saturation)
        dark = ~burnt & (val < cfg.dark_max_value)
        light = ~burnt & ~dark & (val > cfg.light_min_value) & (sat < cfg.light_max_saturation)

        stats = GlobalStatistics(
            mean_r=float(rgb[:, 0].sum() / valid_px),
            mean_g=float(rgb[:, 1].sum() / valid_px),
            mean_b=float(rgb[:, 2].sum() / valid_px),
            mean_h=float(hue.sum() / valid_px),
            mean_s=float(sat.sum() / valid_px),
            mean_v=float(val.sum() / valid_px),
            median_hue=median_hue,
            burnt_ratio=int(np.count_nonzero(burnt)) / valid_px,
            dark_ratio=int(np.count_nonzero(dark)) / valid_px,
            light_ratio=int(np.count_nonzero(light)) / valid_px,
            valid_pixels=valid_px,
            shadow_pixels=shadow_px,
            baseline=baseline,
            shadow_mask=shadows,
        )

        logger.debug(
            f"Global stats: meanHSV=({stats.mean_h:.1f}, {stats.mean_s:.3f}, {stats.mean_v:.3f}), "
            f"median_hue={median_hue:.0f}, burnt={stats.burnt_ratio:.3f}, shadow_px={shadow_px}"
        )
        return stats
