"""
Color Evaluator Module

색상 편차 기반 속성 점수(1~9) 산출 모듈.

- Agtron 추정 → USDA 색상 점수 → 공정 색상(process color) 점수
- 평균 hue/채도 → hue 점수
- 결함 개수 → mottling 점수
- 위치 가중 결함 심각도 + 탄 픽셀 비율 → defect 점수
- 평균색 vs 목표 골드 ΔE2000 → 마이야르(아크릴아마이드) 위험도
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Tuple

from fry_meter.schemas.analysis import DefectRegion, DefectType, MaillardRisk
from fry_meter.utils.color_delta import delta_e_2000
from fry_meter.utils.color_space import LabColor, luminance, rgb_to_lab, round_half_up

logger = logging.getLogger(__name__)

# 목표 골드 색상 (L*, a*, b*)
TARGET_GOLD_LAB = LabColor(72.0, 8.5, 42.0)

USDA_TARGET = 0.5

# mottling 점수에 포함되는 결함 종류 (모든 종류를 명시, 누락 시 KeyError)
MOTTLING_KINDS: Dict[DefectType, bool] = {
    DefectType.DARK: True,
    DefectType.MOTTLED: True,
    DefectType.BURNT: False,
    DefectType.LIGHT: False,
    DefectType.SUGAR_END: False,
    DefectType.DISEASE: False,
    DefectType.SHADOW: False,
}

# (mottled + dark 개수 하한, 점수) - 큰 값부터
MOTTLING_STEPS: Tuple[Tuple[int, int], ...] = ((20, 9), (15, 8), (10, 7), (5, 6))

# (탄 픽셀 비율 초과, 가중 심각도 초과, 점수) - 큰 값부터
DEFECT_STEPS: Tuple[Tuple[float, float, int], ...] = (
    (0.3, 15.0, 9),
    (0.2, 10.0, 8),
    (0.1, 6.0, 7),
    (0.05, 3.0, 6),
)


@dataclass(frozen=True)
class ScoreWithLabel:
    score: int
    label: str


def estimate_agtron(mean_r: float, mean_g: float, mean_b: float) -> int:
    """
    평균 RGB → Agtron 추정값.

    Example:
        >>> estimate_agtron(161, 131, 88)
        62
    """
    lum = luminance(mean_r, mean_g, mean_b)
    return int(round_half_up(20 + (lum / 255.0) * 80))


def usda_score(agtron: float) -> float:
    """Agtron → USDA 색상 점수 (0.5 = 목표, Agtron 58~68)"""
    if 58 <= agtron <= 68:
        return 0.5
    if agtron < 40:
        return 0.0
    if agtron < 50:
        return 0.2
    if agtron < 58:
        return 0.4
    if agtron < 70:
        return 0.6
    if agtron < 80:
        return 0.8
    return 1.0


def usda_label(score: float) -> str:
    if score <= 0.1:
        return "Very Dark (>1.5 USDA)"
    if score <= 0.3:
        return "Dark (1.0-1.5 USDA)"
    if score <= 0.45:
        return "Slightly Dark (0.5-1.0 USDA)"
    if score <= 0.55:
        return "Target (0.5 USDA)"
    if score <= 0.7:
        return "Slightly Light (0.5-1.0 USDA)"
    if score <= 0.9:
        return "Light (1.0-1.5 USDA)"
    return "Very Light (>1.5 USDA)"


def process_color_score(usda: float) -> ScoreWithLabel:
    """
    USDA 점수의 목표(0.5) 대비 편차 → 1~9 점수.

    어두운 쪽 4/3/2/1, 밝은 쪽 6/7/8/9 (편차 임계값 0.15, 0.25, 0.35).
    """
    deviation = abs(usda - USDA_TARGET)
    if deviation < 0.05:
        return ScoreWithLabel(5, "Equal to Target")
    if usda < USDA_TARGET:
        if deviation < 0.15:
            return ScoreWithLabel(4, "Slightly Dark")
        if deviation < 0.25:
            return ScoreWithLabel(3, "Moderately Dark")
        if deviation < 0.35:
            return ScoreWithLabel(2, "Very Dark - Quality Failure")
        return ScoreWithLabel(1, "Extremely Dark - Rejected")
    if deviation < 0.15:
        return ScoreWithLabel(6, "Slightly Light")
    if deviation < 0.25:
        return ScoreWithLabel(7, "Moderately Light")
    if deviation < 0.35:
        return ScoreWithLabel(8, "Very Light - Quality Failure")
    return ScoreWithLabel(9, "Extremely Light - Rejected")


def hue_score(mean_h: float, mean_s: float) -> ScoreWithLabel:
    """
    평균 hue/채도 → 1~9 점수.

    [25°, 40°] + 채도 (0.3, 0.6) → 5, 40° 초과 구간 6/7/8/9 (55°, 70°, 80° 경계),
    채도 0.7 초과 → 8, [20°, 25°) → 4, 20° 미만 → 9 (off-color).
    """
    if 25 <= mean_h <= 40 and 0.3 < mean_s < 0.6:
        return ScoreWithLabel(5, "Bright Light Golden (Target)")
    if 40 < mean_h <= 55:
        return ScoreWithLabel(6, "Creamy Yellow")
    if 55 < mean_h <= 70:
        return ScoreWithLabel(7, "Yellow Flesh")
    if mean_h > 80:
        return ScoreWithLabel(9, "Bright Yellow / Off-Color")
    if mean_h > 70 or mean_s > 0.7:
        return ScoreWithLabel(8, "Strong Yellow - Large Difference")
    if mean_h < 20:
        return ScoreWithLabel(9, "Bright Yellow / Off-Color")
    if mean_h < 25:
        return ScoreWithLabel(4, "Slightly Under-colored")
    return ScoreWithLabel(5, "Bright Light Golden (Target)")


def mottling_score(defects: Iterable[DefectRegion]) -> int:
    count = sum(1 for d in defects if MOTTLING_KINDS[d.defect_type] and not d.is_artifact)
    for min_count, score in MOTTLING_STEPS:
        if count >= min_count:
            return score
    return 5


def weighted_severity(defects: Iterable[DefectRegion]) -> float:
    """아티팩트 제외 결함의 severity × position_weight 합"""
    return sum(d.severity * d.position_weight for d in defects if not d.is_artifact)


def defect_score(defects: Iterable[DefectRegion], burnt_ratio: float) -> int:
    weighted = weighted_severity(defects)
    for max_burnt, max_weighted, score in DEFECT_STEPS:
        if burnt_ratio > max_burnt or weighted > max_weighted:
            return score
    return 5


def maillard_risk(delta_e: float) -> Tuple[MaillardRisk, int]:
    """
    목표 골드 대비 ΔE2000 → (위험 등급, 아크릴아마이드 지수 0~100).

    ΔE 0~5 Low, 5~15 Moderate, 15~25 High, 25 이상 Critical.
    """
    index = min(100, int(round_half_up(delta_e / 30.0 * 100)))
    if delta_e < 5:
        risk = MaillardRisk.LOW
    elif delta_e < 15:
        risk = MaillardRisk.MODERATE
    elif delta_e < 25:
        risk = MaillardRisk.HIGH
    else:
        risk = MaillardRisk.CRITICAL
    return risk, index


def delta_e_to_target(mean_r: float, mean_g: float, mean_b: float, target: LabColor = TARGET_GOLD_LAB) -> float:
    delta_e = delta_e_2000(rgb_to_lab(mean_r, mean_g, mean_b), target)
    logger.debug(f"Mean color ΔE2000 to target: {delta_e:.2f}")
    return delta_e

