"""
Defect Detector Module

그림자 인식 격자 분할 및 결함 분류.

1. 이미지를 cell_size × cell_size 셀로 분할 (기본 20px, 가장자리 셀은 잘림)
2. 셀별 유효 픽셀(불투명, s > 0.08, v > 0.08) 평균 HSV 및 그림자 비율 계산
3. 그림자 비율 > 0.5 셀 → shadow 영역 (아티팩트, 점수 제외)
4. 나머지 셀을 격자 평균 대비 규칙(우선순위 순)으로 분류:
   burnt → dark → light/sugar_end → mottled
5. 1/3 규칙: 행 밴드(30px)별 결함 폭 커버리지 < 1/3 인 mottled 결함 제거
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from fry_meter.calibration import pixels_to_mm2
from fry_meter.core.pixel_statistics import GlobalStatistics
from fry_meter.core.planes import ImagePlanes
from fry_meter.schemas.analysis import DefectRegion, DefectType

logger = logging.getLogger(__name__)


@dataclass
class DetectorConfig:
    """
    결함 검출 설정

    Attributes:
        cell_size: 셀 한 변 길이 (px)
        fry_min_saturation, fry_min_value: 셀 평균에 포함할 픽셀 조건
        shadow_cell_ratio: 셀 전체를 그림자로 볼 그림자 픽셀 비율 (초과)
        default_grid_hue, default_grid_value: 유효 셀이 없을 때 격자 평균
        burnt_max_value, burnt_max_saturation: burnt 규칙
        dark_value_drop, dark_min_saturation: dark 규칙
        light_min_value, light_max_saturation, light_severity_gain: light/sugar_end 규칙
        mottled_hue_diff, mottled_value_drop, mottled_severity_scale: mottled 규칙
        min_severity: 가중치 적용 전 최소 심각도 (이하 무시)
        edge_margin: 끝단(tip) 판정 격자 외곽 비율
        edge_weight: 끝단 위치 가중치
        sugar_end_weight: 이 가중치 초과 시 light → sugar_end
        band_height: 1/3 규칙 행 밴드 높이 (px)
        mottling_min_coverage: mottled 결함 유지 최소 커버리지
    """

    cell_size: int = 20
    fry_min_saturation: float = 0.08
    fry_min_value: float = 0.08
    shadow_cell_ratio: float = 0.5
    default_grid_hue: float = 30.0
    default_grid_value: float = 0.7
    burnt_max_value: float = 0.22
    burnt_max_saturation: float = 0.35
    dark_value_drop: float = 0.28
    dark_min_saturation: float = 0.18
    light_min_value: float = 0.87
    light_max_saturation: float = 0.22
    light_severity_gain: float = 5.0
    mottled_hue_diff: float = 28.0
    mottled_value_drop: float = 0.08
    mottled_severity_scale: float = 60.0
    min_severity: float = 0.15
    edge_margin: float = 0.1
    edge_weight: float = 1.5
    sugar_end_weight: float = 1.2
    band_height: int = 30
    mottling_min_coverage: float = 0.333


@dataclass(frozen=True)
class GridCell:
    """격자 셀 (분석 호출마다 새로 계산)"""

    row: int
    col: int
    x: int
    y: int
    width: int
    height: int
    hue: float
    sat: float
    val: float
    pixel_count: int
    shadow_ratio: float
    is_fry: bool
    is_shadow: bool


@dataclass(frozen=True)
class DetectionResult:
    """
    결함 검출 결과

    Attributes:
        defects: 1/3 규칙 적용 후 결함 목록 (shadow 아티팩트 포함)
        cells: 셀 격자 (rows × cols)
        grid_mean_hue, grid_mean_value: 그림자 아닌 유효 셀 평균
        dropped_mottled: 1/3 규칙으로 제거된 mottled 결함 수
    """

    defects: Tuple[DefectRegion, ...]
    cells: Tuple[Tuple[GridCell, ...], ...]
    grid_mean_hue: float
    grid_mean_value: float
    dropped_mottled: int = 0

    @property
    def grid_shape(self) -> Tuple[int, int]:
        return (len(self.cells), len(self.cells[0]) if self.cells else 0)


def _cell_sums(values: np.ndarray, rows: int, cols: int, cell: int) -> np.ndarray:
    h, w = values.shape
    padded = np.zeros((rows * cell, cols * cell), dtype=np.float64)
    padded[:h, :w] = values
    return padded.reshape(rows, cell, cols, cell).sum(axis=(1, 3))


def position_weight(col: int, row: int, cols: int, rows: int, config: DetectorConfig) -> float:
    """
    위치 가중치: 격자 외곽 edge_margin 이내 셀(스트립 끝단으로 간주)은 edge_weight, 그 외 1.0.
    """
    edge_ratio = min(col / cols, (cols - col) / cols, row / rows, (rows - row) / rows)
    return config.edge_weight if edge_ratio < config.edge_margin else 1.0


def apply_strip_coverage_rule(
    defects: List[DefectRegion],
    image_width: int,
    band_height: int = 30,
    min_coverage: float = 0.333,
) -> Tuple[List[DefectRegion], int]:
    """
    1/3 규칙.

    그림자 아닌 결함을 행 밴드(floor(y / band_height))로 묶어 밴드별 결함 폭 합 / 이미지 폭을
    커버리지로 기록한다. 커버리지 < min_coverage 밴드의 mottled 결함은 제거되고
    나머지 종류는 커버리지와 무관하게 유지된다. shadow 결함은 그대로 통과한다.

    Returns:
        (필터링된 결함 목록 - 입력 순서 유지, 제거된 mottled 개수)
    """
    width = max(1, image_width)
    band_widths = {}
    for d in defects:
        if d.is_artifact:
            continue
        band = d.y // band_height
        band_widths[band] = band_widths.get(band, 0) + d.width

    kept = []
    dropped = 0
    for d in defects:
        if d.is_artifact:
            kept.append(d)
            continue
        coverage = band_widths[d.y // band_height] / width
        if d.defect_type is DefectType.MOTTLED and coverage < min_coverage:
            dropped += 1
            continue
        kept.append(d.with_coverage(coverage))
    return kept, dropped


class DefectDetector:
    """그림자 인식 격자 결함 검출기"""

    def __init__(self, config: DetectorConfig = None):
        self.config = config or DetectorConfig()
        if self.config.cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {self.config.cell_size}")
        logger.info(f"DefectDetector initialized: cell_size={self.config.cell_size}px")

    def build_grid(self, planes: ImagePlanes, stats: GlobalStatistics) -> Tuple[Tuple[GridCell, ...], ...]:
        """셀별 평균 HSV, 유효 픽셀 수, 그림자 비율 계산."""
        cfg = self.config
        c = cfg.cell_size
        h, w = planes.height, planes.width
        rows, cols = math.ceil(h / c), math.ceil(w / c)
        if rows == 0 or cols == 0:
            return tuple()

        fry = planes.opaque & (planes.sat > cfg.fry_min_saturation) & (planes.val > cfg.fry_min_value)
        fry_f = fry.astype(np.float64)

        counts = _cell_sums(fry_f, rows, cols, c)
        sum_h = _cell_sums(np.where(fry, planes.hue, 0.0), rows, cols, c)
        sum_s = _cell_sums(np.where(fry, planes.sat, 0.0), rows, cols, c)
        sum_v = _cell_sums(np.where(fry, planes.val, 0.0), rows, cols, c)
        shadow_counts = _cell_sums((fry & stats.shadow_mask).astype(np.float64), rows, cols, c)

        grid = []
        for gy in range(rows):
            row_cells = []
            for gx in range(cols):
                cnt = int(counts[gy, gx])
                x, y = gx * c, gy * c
                shadow_ratio = float(shadow_counts[gy, gx] / cnt) if cnt > 0 else 0.0
                row_cells.append(
                    GridCell(
                        row=gy,
                        col=gx,
                        x=x,
                        y=y,
                        width=min(c, w - x),
                        height=min(c, h - y),
                        hue=float(sum_h[gy, gx] / cnt) if cnt > 0 else 0.0,
                        sat=float(sum_s[gy, gx] / cnt) if cnt > 0 else 0.0,
                        val=float(sum_v[gy, gx] / cnt) if cnt > 0 else 0.0,
                        pixel_count=cnt,
                        shadow_ratio=shadow_ratio,
                        is_fry=cnt > 0,
                        is_shadow=shadow_ratio > cfg.shadow_cell_ratio,
                    )
                )
            grid.append(tuple(row_cells))
        return tuple(grid)

    def detect(self, planes: ImagePlanes, stats: GlobalStatistics, ppm: float = 1.0) -> DetectionResult:
        """
        결함 검출.

        Args:
            planes: 화이트밸런스 보정 이미지 평면
            stats: 전역 통계 (그림자 마스크 포함)
            ppm: pixels per millimeter (면적 mm² 환산용, 0 이하면 px² 유지)

        Returns:
            DetectionResult
        """
        cfg = self.config
        grid = self.build_grid(planes, stats)

        body_cells = [cell for row in grid for cell in row if cell.is_fry and not cell.is_shadow]
        if body_cells:
            mean_h = sum(cell.hue for cell in body_cells) / len(body_cells)
            mean_v = sum(cell.val for cell in body_cells) / len(body_cells)
        else:
            mean_h, mean_v = cfg.default_grid_hue, cfg.default_grid_value

        rows = len(grid)
        cols = len(grid[0]) if grid else 0

        defects: List[DefectRegion] = []
        for row in grid:
            for cell in row:
                if not cell.is_fry:
                    continue
                if cell.is_shadow:
                    defects.append(self._region(cell, DefectType.SHADOW, cell.shadow_ratio, 1.0, ppm))
                    continue

                weight = position_weight(cell.col, cell.row, cols, rows, cfg)
                classified = self.classify_cell(cell, mean_h, mean_v, weight)
                if classified is None:
                    continue
                defect_type, severity = classified
                defects.append(self._region(cell, defect_type, severity * weight, weight, ppm))

        kept, dropped = apply_strip_coverage_rule(
            defects, planes.width, cfg.band_height, cfg.mottling_min_coverage
        )
        if dropped:
            logger.debug(f"One-third rule dropped {dropped} mottled defect(s)")

        return DetectionResult(
            defects=tuple(kept),
            cells=grid,
            grid_mean_hue=float(mean_h),
            grid_mean_value=float(mean_v),
            dropped_mottled=dropped,
        )

    def classify_cell(
        self, cell: GridCell, grid_mean_hue: float, grid_mean_value: float, weight: float
    ) -> Optional[Tuple[DefectType, float]]:
        """
        규칙 우선순위 분류 (첫 매칭).

        Returns:
            (결함 종류, 가중치 적용 전 심각도) 또는 None (정상 / 심각도 <= min_severity)
        """
        cfg = self.config
        v_diff = grid_mean_value - cell.val
        h_diff = abs(grid_mean_hue - cell.hue)

        if cell.val < cfg.burnt_max_value and cell.sat < cfg.burnt_max_saturation:
            result = (DefectType.BURNT, 1 - cell.val)
        elif v_diff > cfg.dark_value_drop and cell.sat > cfg.dark_min_saturation:
            result = (DefectType.DARK, v_diff)
        elif cell.val > cfg.light_min_value and cell.sat < cfg.light_max_saturation:
            kind = DefectType.SUGAR_END if weight > cfg.sugar_end_weight else DefectType.LIGHT
            result = (kind, (cell.val - cfg.light_min_value) * cfg.light_severity_gain)
        elif h_diff > cfg.mottled_hue_diff and v_diff > cfg.mottled_value_drop:
            result = (DefectType.MOTTLED, h_diff / cfg.mottled_severity_scale)
        else:
            return None

        if result[1] <= cfg.min_severity:
            return None
        return result

    @staticmethod
    def _region(cell: GridCell, defect_type: DefectType, severity: float, weight: float, ppm: float) -> DefectRegion:
        area = cell.width * cell.height
        return DefectRegion(
            x=cell.x,
            y=cell.y,
            width=cell.width,
            height=cell.height,
            defect_type=defect_type,
            severity=severity,
            area=area,
            area_mm2=float(pixels_to_mm2(area, ppm)),
            position_weight=weight,
        )
