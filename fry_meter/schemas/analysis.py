"""
Shared Analysis Data Schemas

Core data structures for defect regions, attribute scores and analysis results.
All records are frozen: a result is built once per analysis call and never mutated.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Tuple

Grid = Tuple[Tuple[float, ...], ...]


class DefectType(str, Enum):
    """결함 종류 (닫힌 집합)"""

    DARK = "dark"
    BURNT = "burnt"
    LIGHT = "light"
    MOTTLED = "mottled"
    SUGAR_END = "sugar_end"
    DISEASE = "disease"
    SHADOW = "shadow"


class MaillardRisk(str, Enum):
    """ΔE2000 기반 아크릴아마이드(마이야르 반응) 위험 등급"""

    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    CRITICAL = "Critical"


class PQIStatus(str, Enum):
    """PQI 판정 상태"""

    PASS = "PASS"
    MARGINAL = "MARGINAL"
    REVIEW = "REVIEW"
    FAIL = "FAIL"
    REJECT = "REJECT"


@dataclass(frozen=True)
class DefectRegion:
    """
    결함 영역.

    Attributes:
        x, y: 좌상단 픽셀 좌표
        width, height: 픽셀 크기 (이미지 경계 내로 클리핑됨)
        defect_type: 결함 종류
        severity: 심각도 (0~1, 저장 전 클램프)
        area: 픽셀 면적 (px²)
        area_mm2: 물리 면적 (mm², px/mm 미설정 시 px²과 동일)
        strip_coverage: 같은 행 밴드 내 결함 폭 합 / 이미지 폭
        position_weight: 위치 가중치 (1.0=몸통, 1.5=끝단)
    """

    x: int
    y: int
    width: int
    height: int
    defect_type: DefectType
    severity: float
    area: int
    area_mm2: float
    strip_coverage: float = 0.0
    position_weight: float = 1.0

    def __post_init__(self):
        object.__setattr__(self, "severity", float(min(1.0, max(0.0, self.severity))))

    @property
    def is_artifact(self) -> bool:
        """그림자 영역만 아티팩트 (모든 점수 계산에서 제외, 표시용으로만 유지)"""
        return self.defect_type is DefectType.SHADOW

    def with_coverage(self, coverage: float) -> "DefectRegion":
        return replace(self, strip_coverage=float(coverage))


@dataclass(frozen=True)
class AttributeScores:
    """
    1~9 속성 점수 (5 = 목표와 일치).

    1 쪽은 목표 미달(어두움/과소), 9 쪽은 목표 초과(밝음/과다).
    """

    process_color: int
    hue: int
    mottling: int
    defect: int

    def as_list(self) -> List[int]:
        return [self.process_color, self.hue, self.mottling, self.defect]


@dataclass(frozen=True)
class PixelStats:
    """
    전역 픽셀 통계 및 보조 지표.

    Attributes:
        mean_r, mean_g, mean_b: 유효 픽셀 평균 RGB (0~255)
        mean_h, mean_s, mean_v: 유효 픽셀 평균 HSV
        median_hue: 중앙 hue (유효 픽셀 없으면 30)
        dark_pixel_ratio, burnt_pixel_ratio, light_pixel_ratio: 픽셀 비율
        total_pixels: 통계에 사용된 유효 픽셀 수 (0이면 1로 보정)
        shadow_pixels: 그림자로 제외된 픽셀 수
        agtron_score: Agtron 추정값
        white_balance_gain: 채널별 화이트밸런스 게인 (R, G, B)
        shadow_mask_ratio: 그림자 억제 비율
        crunch_score: 표면 바삭함 점수 (0~100)
        maillard_risk: 마이야르 위험 등급
        delta_e_2000: 평균색 vs 목표 골드 ΔE2000
        fuzzy_confidence: 5점 속성 비율 (0~1)
    """

    mean_r: float
    mean_g: float
    mean_b: float
    mean_h: float
    mean_s: float
    mean_v: float
    median_hue: float
    dark_pixel_ratio: float
    burnt_pixel_ratio: float
    light_pixel_ratio: float
    total_pixels: int
    shadow_pixels: int
    agtron_score: int
    white_balance_gain: Tuple[float, float, float]
    shadow_mask_ratio: float
    crunch_score: int
    maillard_risk: MaillardRisk
    delta_e_2000: float
    fuzzy_confidence: float


@dataclass(frozen=True)
class AnalysisResult:
    """
    분석 결과 (호출당 1회 생성, 이후 불변).

    scores와 pqi만 외부 소비자(배치 로그, 리포트)에 대해 안정적인 필드이며,
    나머지 그리드/히스토그램은 진단 표시용이다.
    """

    pixel_stats: PixelStats
    usda_color_score: float
    usda_label: str
    scores: AttributeScores
    process_color_label: str
    hue_label: str
    overall_appearance_score: int
    pqi: int
    pqi_status: PQIStatus
    defects: Tuple[DefectRegion, ...]
    defect_count: int
    acrylamide_index: int
    image_width: int
    image_height: int
    cell_size: int
    hue_histogram: Tuple[float, ...] = field(default_factory=tuple)
    heatmap: Grid = field(default_factory=tuple)
    explainability_map: Grid = field(default_factory=tuple)

    @property
    def process_color_score(self) -> int:
        return self.scores.process_color

    @property
    def hue_score(self) -> int:
        return self.scores.hue

    @property
    def mottling_score(self) -> int:
        return self.scores.mottling

    @property
    def defect_score(self) -> int:
        return self.scores.defect

    @property
    def real_defects(self) -> Tuple[DefectRegion, ...]:
        return tuple(d for d in self.defects if not d.is_artifact)

    def defects_of(self, defect_type: DefectType) -> Tuple[DefectRegion, ...]:
        return tuple(d for d in self.defects if d.defect_type is defect_type)
