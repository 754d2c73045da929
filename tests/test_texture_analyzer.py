"""
Tests for TextureAnalyzer (crunch score)
"""

import numpy as np
import pytest

from fry_meter.core.texture_analyzer import TextureAnalyzer, TextureConfig
from fry_meter.utils.image_utils import ImageValidationError, solid_rgba


@pytest.fixture
def analyzer():
    return TextureAnalyzer()


def test_flat_image_scores_zero(analyzer, golden_image):
    assert analyzer.crunch_score(golden_image) == 0


def test_column_checkerboard_scores_max(analyzer):
    """행 내부 교대 패턴: 고주파 = 저주파 → 비율 0.5 → 100"""
    image = solid_rgba(16, 16, (0, 0, 0))
    image[:, 1::2, :3] = 255
    assert analyzer.crunch_score(image) == 100


def test_row_stripes_are_low_frequency(analyzer):
    """행 평균 기반 추정이므로 가로 줄무늬는 고주파로 잡히지 않는다"""
    image = solid_rgba(16, 16, (0, 0, 0))
    image[1::2, :, :3] = 255
    assert analyzer.crunch_score(image) == 0


def test_noise_scores_between(analyzer):
    rng = np.random.default_rng(3)
    image = solid_rgba(64, 64, (161, 131, 88))
    noise = rng.integers(-40, 41, size=(64, 64, 1))
    image[..., :3] = np.clip(image[..., :3].astype(int) + noise, 0, 255).astype(np.uint8)

    score = analyzer.crunch_score(image)
    assert 0 < score < 100


def test_smaller_than_patch_defaults(analyzer):
    assert analyzer.crunch_score(solid_rgba(7, 100, (10, 20, 30))) == 50
    assert analyzer.crunch_score(np.zeros((0, 0, 4), dtype=np.uint8)) == 50


def test_partial_patches_ignored(analyzer):
    """8의 배수가 아닌 가장자리 픽셀은 무시"""
    image = solid_rgba(12, 12, (100, 100, 100))
    image[8:, :, :3] = 0
    image[:, 9::2, :3] = 255
    assert analyzer.crunch_score(image) == 0


def test_alpha_ignored(analyzer):
    image = solid_rgba(16, 16, (0, 0, 0), alpha=0)
    image[:, 1::2, :3] = 255
    assert analyzer.crunch_score(image) == 100


def test_invalid_patch_size():
    with pytest.raises(ValueError):
        TextureAnalyzer(TextureConfig(patch_size=0))


def test_invalid_input(analyzer):
    with pytest.raises(ImageValidationError):
        analyzer.crunch_score(np.zeros((16, 16), dtype=np.uint8))
