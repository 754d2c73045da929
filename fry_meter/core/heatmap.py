"""
Heatmap Module

진단 표시용 보조 출력:
- hue 히스토그램 (36 bins × 10°, 백분율)
- 그림자 억제 탄 정도(burn) 히트맵 (셀별 평균 1 - v)
- 결함 설명 맵 (결함 셀 주변 반경 2 셀로 심각도 확산, 셀당 최대 1)

세 출력 모두 점수 계산에는 사용되지 않는다.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Tuple

import numpy as np

from fry_meter.core.planes import ImagePlanes
from fry_meter.core.shadow_classifier import ShadowBaseline, ShadowConfig, shadow_mask
from fry_meter.schemas.analysis import DefectRegion, Grid

logger = logging.getLogger(__name__)


@dataclass
class HeatmapConfig:
    """
    Attributes:
        cell_size: 히트맵/설명 맵 셀 크기 (결함 격자와 동일하게 유지)
        hue_bins: 히스토그램 bin 수 (각 360 / hue_bins 도)
        hue_min_saturation, hue_min_value: 히스토그램 포함 조건
        burn_min_saturation, burn_max_value: 히트맵 포함 조건 (s > min OR v < max)
        spread_radius: 설명 맵 확산 반경 (셀)
    """

    cell_size: int = 20
    hue_bins: int = 36
    hue_min_saturation: float = 0.1
    hue_min_value: float = 0.15
    burn_min_saturation: float = 0.05
    burn_max_value: float = 0.5
    spread_radius: int = 2


def _to_grid(values: np.ndarray) -> Grid:
    return tuple(tuple(float(v) for v in row) for row in values)


class HeatmapGenerator:
    """Hue 히스토그램 / burn 히트맵 / 설명 맵 생성기"""

    def __init__(self, config: HeatmapConfig = None, shadow_config: ShadowConfig = None):
        self.config = config or HeatmapConfig()
        self.shadow_config = shadow_config or ShadowConfig()

    def hue_histogram(self, planes: ImagePlanes) -> Tuple[float, ...]:
        """
        불투명, s > 0.1, v > 0.15 픽셀의 hue 분포 (%).

        해당 픽셀이 없으면 모두 0.
        """
        cfg = self.config
        bins = cfg.hue_bins
        mask = planes.opaque & (planes.sat > cfg.hue_min_saturation) & (planes.val > cfg.hue_min_value)
        hues = planes.hue[mask]
        if hues.size == 0:
            logger.debug("No chromatic pixels for hue histogram")
            return tuple(0.0 for _ in range(bins))

        width = 360.0 / bins
        idx = np.minimum(bins - 1, np.floor(hues / width)).astype(np.int64)
        counts = np.bincount(idx, minlength=bins)
        return tuple(float(c) for c in counts / hues.size * 100.0)

    def burn_heatmap(self, planes: ImagePlanes, baseline: ShadowBaseline) -> Grid:
        """셀별 평균 (1 - v), 그림자 픽셀 제외. 포함 픽셀이 없는 셀은 0."""
        cfg = self.config
        c = cfg.cell_size
        h, w = planes.height, planes.width
        rows, cols = math.ceil(h / c), math.ceil(w / c)
        if rows == 0 or cols == 0:
            return tuple()

        shadows = shadow_mask(planes, baseline, self.shadow_config)
        mask = (
            planes.opaque
            & ~shadows
            & ((planes.sat > cfg.burn_min_saturation) | (planes.val < cfg.burn_max_value))
        )

        padded_burn = np.zeros((rows * c, cols * c), dtype=np.float64)
        padded_mask = np.zeros((rows * c, cols * c), dtype=np.float64)
        padded_burn[:h, :w] = np.where(mask, 1.0 - planes.val, 0.0)
        padded_mask[:h, :w] = mask

        burn_sum = padded_burn.reshape(rows, c, cols, c).sum(axis=(1, 3))
        counts = padded_mask.reshape(rows, c, cols, c).sum(axis=(1, 3))
        heatmap = np.divide(burn_sum, counts, out=np.zeros_like(burn_sum), where=counts > 0)
        return _to_grid(heatmap)

    def explainability_map(self, defects: Iterable[DefectRegion], width: int, height: int) -> Grid:
        """
        결함 위치 기반 설명 맵.

        각 결함(아티팩트 제외)의 셀에서 반경 내 셀로 severity × 거리 가중치 × position_weight를
        누적한다 (거리 가중치 = max(0, 1 - dist / (radius + 1)), 셀당 최대 1).
        """
        c = self.config.cell_size
        rows, cols = math.ceil(height / c), math.ceil(width / c)
        if rows == 0 or cols == 0:
            return tuple()

        radius = self.config.spread_radius
        cam = np.zeros((rows, cols), dtype=np.float64)
        for d in defects:
            if d.is_artifact:
                continue
            gx, gy = d.x // c, d.y // c
            for dy in range(-radius, radius + 1):
                for dx in range(-radius, radius + 1):
                    nx, ny = gx + dx, gy + dy
                    if nx < 0 or ny < 0 or nx >= cols or ny >= rows:
                        continue
                    weight = max(0.0, 1 - math.sqrt(dx * dx + dy * dy) / (radius + 1))
                    cam[ny, nx] = min(1.0, cam[ny, nx] + d.severity * weight * d.position_weight)
        return _to_grid(cam)
