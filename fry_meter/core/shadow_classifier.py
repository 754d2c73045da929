"""
Shadow Classifier Module

드리운 그림자(cast shadow)와 실제 표면 갈변(탄 부분/어두운 결함)을 구분하는 픽셀 판정.

그림자 조건 (세 가지 모두 만족):
- 전역 평균 명도 대비 35% 이상 상대적으로 어두움
- 전역 평균 채도의 65% 미만 (그림자는 채도가 빠짐)
- hue가 골든 브라운 대역 [15°, 55°] 밖

그림자 픽셀은 통계, 색상 점수, 결함 검출에서 제외되고 억제 비율로만 보고된다.
"""

import logging
from dataclasses import dataclass

import numpy as np

from fry_meter.core.planes import ImagePlanes
from fry_meter.utils.color_space import HSVColor

logger = logging.getLogger(__name__)


@dataclass
class ShadowConfig:
    """
    그림자 판정 설정

    Attributes:
        relative_darkness: 평균 명도 대비 상대 어두움 임계값
        saturation_factor: 평균 채도 대비 채도 상한 비율
        golden_hue_min, golden_hue_max: 그림자가 될 수 없는 골든 브라운 hue 대역 (포함)
        baseline_min_saturation, baseline_min_value: 기준 평균 계산에 포함할 픽셀 조건
        default_mean_v, default_mean_s: 기준 픽셀이 없을 때 사용하는 평균
    """

    relative_darkness: float = 0.35
    saturation_factor: float = 0.65
    golden_hue_min: float = 15.0
    golden_hue_max: float = 55.0
    baseline_min_saturation: float = 0.08
    baseline_min_value: float = 0.1
    default_mean_v: float = 0.6
    default_mean_s: float = 0.4


@dataclass(frozen=True)
class ShadowBaseline:
    """그림자 판정 기준 (전역 평균 명도/채도)"""

    mean_v: float
    mean_s: float
    pixel_count: int = 0


def compute_shadow_baseline(planes: ImagePlanes, config: ShadowConfig = None) -> ShadowBaseline:
    """
    불투명하고 유채색(s > 0.08, v > 0.1)인 픽셀의 평균 명도/채도.

    해당 픽셀이 없으면 기본값 (0.6, 0.4).
    """
    config = config or ShadowConfig()
    mask = planes.opaque & (planes.sat > config.baseline_min_saturation) & (planes.val > config.baseline_min_value)
    count = int(np.count_nonzero(mask))
    if count == 0:
        logger.debug("No chromatic pixels for shadow baseline, using defaults")
        return ShadowBaseline(config.default_mean_v, config.default_mean_s, 0)

    return ShadowBaseline(
        mean_v=float(planes.val[mask].sum() / count),
        mean_s=float(planes.sat[mask].sum() / count),
        pixel_count=count,
    )


def is_shadow_pixel(hsv: HSVColor, baseline: ShadowBaseline, config: ShadowConfig = None) -> bool:
    """단일 픽셀 그림자 판정."""
    config = config or ShadowConfig()
    rel_darkness = (baseline.mean_v - hsv.v) / max(0.01, baseline.mean_v)
    in_golden_band = config.golden_hue_min <= hsv.h <= config.golden_hue_max
    return (
        rel_darkness > config.relative_darkness
        and hsv.s < baseline.mean_s * config.saturation_factor
        and not in_golden_band
    )


def shadow_mask(planes: ImagePlanes, baseline: ShadowBaseline, config: ShadowConfig = None) -> np.ndarray:
    """이미지 전체 그림자 마스크 (alpha와 무관, 호출 측에서 불투명 마스크와 결합)."""
    config = config or ShadowConfig()
    rel_darkness = (baseline.mean_v - planes.val) / max(0.01, baseline.mean_v)
    in_golden_band = (planes.hue >= config.golden_hue_min) & (planes.hue <= config.golden_hue_max)
    return (
        (rel_darkness > config.relative_darkness)
        & (planes.sat < baseline.mean_s * config.saturation_factor)
        & ~in_golden_band
    )
