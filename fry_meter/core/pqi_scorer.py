"""
PQI Scorer Module

네 개의 속성 점수(1~9, 5=목표)를 퍼지 논리로 결합해 0~100 제품 품질 지수(PQI)를 산출한다.

1. Hard override: 1 또는 9 → 0, 2 또는 8 → 25
2. 속성별 퍼지 소속도 (ideal / acceptable / warning / failure) → 가중 defuzzify
3. 속성 가중치 color 0.30, hue 0.25, mottling 0.25, defect 0.20
4. 상호작용 패널티 (hue×mottling, color×defect) 차감
5. 5점 개수 보너스 가산
"""

import logging
from dataclasses import dataclass
from typing import Sequence, Tuple

from fry_meter.schemas.analysis import AttributeScores, PQIStatus
from fry_meter.utils.color_space import round_half_up

logger = logging.getLogger(__name__)

TARGET_SCORE = 5

# color, hue, mottling, defect
ATTRIBUTE_WEIGHTS: Tuple[float, float, float, float] = (0.30, 0.25, 0.25, 0.20)

# ideal, acceptable, warning, failure 대표값
MEMBERSHIP_VALUES: Tuple[float, float, float, float] = (100.0, 85.0, 60.0, 25.0)

REJECT_SCORES = (1, 9)
FAILURE_SCORES = (2, 8)
FAILURE_PQI = 25


@dataclass(frozen=True)
class FuzzyMembership:
    ideal: float
    acceptable: float
    warning: float
    failure: float

    def defuzzify(self) -> float:
        ideal, acceptable, warning, failure = MEMBERSHIP_VALUES
        return self.ideal * ideal + self.acceptable * acceptable + self.warning * warning + self.failure * failure


def fuzzy_membership(score: float) -> FuzzyMembership:
    """
    목표(5) 거리 기반 piecewise-linear 소속도.

    ideal은 거리 0에서 최대 (1.5에 걸쳐 감소), acceptable은 거리 1, warning은 거리 2 중심,
    failure는 거리 2부터 선형 증가.
    """
    dist = abs(score - TARGET_SCORE)
    return FuzzyMembership(
        ideal=max(0.0, 1 - dist / 1.5),
        acceptable=max(0.0, 1 - abs(dist - 1) / 1.5),
        warning=max(0.0, 1 - abs(dist - 2) / 1.5),
        failure=max(0.0, (dist - 2) / 2),
    )


def fuzzy_pqi(scores: Sequence[int]) -> int:
    """
    Args:
        scores: [process_color, hue, mottling, defect]

    Returns:
        0~100 정수 PQI
    """
    if len(scores) != len(ATTRIBUTE_WEIGHTS):
        raise ValueError(f"Expected {len(ATTRIBUTE_WEIGHTS)} attribute scores, got {len(scores)}")

    if any(s in REJECT_SCORES for s in scores):
        return 0
    if any(s in FAILURE_SCORES for s in scores):
        return FAILURE_PQI

    color_s, hue_s, mottle_s, defect_s = scores
    total = sum(fuzzy_membership(s).defuzzify() * w for s, w in zip(scores, ATTRIBUTE_WEIGHTS))

    hue_dev = abs(hue_s - TARGET_SCORE)
    mot_dev = abs(mottle_s - TARGET_SCORE)
    interaction_penalty = (hue_dev * mot_dev) ** 0.7 * 3 if hue_dev > 1 and mot_dev > 1 else 0.0

    color_dev = abs(color_s - TARGET_SCORE)
    defect_dev = abs(defect_s - TARGET_SCORE)
    color_defect_penalty = (color_dev * defect_dev) ** 0.5 * 2 if color_dev > 1 and defect_dev > 1 else 0.0

    num_fives = sum(1 for s in scores if s == TARGET_SCORE)
    bonus = num_fives / (len(scores) - 1) * 10 if num_fives > 0 else 0.0

    raw = total - interaction_penalty - color_defect_penalty + bonus
    pqi = int(max(0, min(100, round_half_up(raw))))
    logger.debug(
        f"Fuzzy PQI: scores={list(scores)}, base={total:.2f}, "
        f"penalties=({interaction_penalty:.2f}, {color_defect_penalty:.2f}), bonus={bonus:.2f} → {pqi}"
    )
    return pqi


def score_pqi(scores: AttributeScores) -> int:
    return fuzzy_pqi(scores.as_list())


def pqi_status(pqi: float) -> PQIStatus:
    if pqi >= 90:
        return PQIStatus.PASS
    if pqi >= 75:
        return PQIStatus.MARGINAL
    if pqi >= 60:
        return PQIStatus.REVIEW
    if pqi > FAILURE_PQI:
        return PQIStatus.FAIL
    return PQIStatus.REJECT


def fuzzy_confidence(scores: AttributeScores) -> float:
    """5점(목표) 속성 비율 (0~1)"""
    values = scores.as_list()
    return sum(1 for s in values if s == TARGET_SCORE) / len(values)
