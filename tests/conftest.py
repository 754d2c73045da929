import json
from pathlib import Path

import numpy as np
import pytest

from fry_meter.utils.image_utils import solid_rgba

# h=35°, s≈0.45, v≈0.63 골든 색상
GOLDEN_RGB = (161, 131, 88)
# h=80°, s≈0.45, v≈0.48 (격자 평균 대비 hue 차이 큼, 명도 소폭 낮음)
MOTTLED_RGB = (104, 122, 67)
# h=228°, s≈0.14, v≈0.27 (어둡고 채도 낮은 청회색 그림자)
SHADOW_RGB = (60, 62, 70)
# h=30°, s=0.2, v≈0.12
BURNT_RGB = (30, 27, 24)


def paint_cells(image: np.ndarray, cells, rgb, cell_size: int = 20) -> np.ndarray:
    """(row, col) 셀 목록을 단색으로 칠한 복사본 반환"""
    out = image.copy()
    for row, col in cells:
        out[row * cell_size : (row + 1) * cell_size, col * cell_size : (col + 1) * cell_size, :3] = rgb
    return out


@pytest.fixture
def tmp_json(tmp_path: Path):
    def _make(data, name="sample.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        return path

    return _make


@pytest.fixture
def golden_image():
    # 100x100 균일 골든 (5x5 셀)
    return solid_rgba(100, 100, GOLDEN_RGB)


@pytest.fixture
def black_image():
    return solid_rgba(100, 100, (0, 0, 0))


@pytest.fixture
def empty_image():
    return np.zeros((0, 0, 4), dtype=np.uint8)


@pytest.fixture
def transparent_image():
    return solid_rgba(60, 80, GOLDEN_RGB, alpha=0)
