"""
Unit tests for IlluminationCorrector module
"""

import numpy as np
import pytest

from fry_meter.core.illumination_corrector import (
    UNIT_GAINS,
    CorrectionResult,
    CorrectorConfig,
    IlluminationCorrector,
)
from fry_meter.utils.image_utils import ImageValidationError, solid_rgba

# ================================================================
# Fixtures
# ================================================================


@pytest.fixture
def tinted_background_image():
    """
    푸른 조명 아래 흰 배경 (좌상단 패치) + 골든 나머지
    """
    image = solid_rgba(100, 100, (161, 131, 88))
    image[:20, :20, :3] = (200, 210, 230)
    return image


# ================================================================
# Test Cases
# ================================================================


def test_corrector_config_defaults():
    """CorrectorConfig 기본값 확인"""
    config = CorrectorConfig()
    assert config.enabled is True
    assert config.grid_size == 5
    assert config.neutral_max_diff == 40.0
    assert config.min_reference_luminance == 30.0


def test_all_black_image_unit_gains(black_image):
    """기준 휘도 30 미만 → 게인 (1,1,1)"""
    result = IlluminationCorrector().correct(black_image)

    assert isinstance(result, CorrectionResult)
    assert result.gains == UNIT_GAINS
    assert result.correction_applied is False
    np.testing.assert_array_equal(result.corrected_image, black_image)


def test_no_neutral_patch_unit_gains(golden_image):
    """채널 차이 40 이상 (유채색)만 있으면 보정 생략"""
    result = IlluminationCorrector().correct(golden_image)
    assert result.gains == UNIT_GAINS
    assert result.reference_patch is None


def test_neutral_patch_gains(tinted_background_image):
    """가장 밝은 무채색 패치 기준으로 채널 평균을 맞춘다"""
    corrector = IlluminationCorrector()
    gains, ref_lum, patch = corrector.estimate_gains(tinted_background_image)

    assert patch == (0, 0)
    assert ref_lum == pytest.approx(0.299 * 200 + 0.587 * 210 + 0.114 * 230)
    target = (200 + 210 + 230) / 3
    assert gains == pytest.approx((target / 200, target / 210, target / 230))


def test_correction_neutralizes_reference(tinted_background_image):
    result = IlluminationCorrector().correct(tinted_background_image)

    assert result.correction_applied is True
    r, g, b = (int(c) for c in result.corrected_image[5, 5, :3])
    assert max(r, g, b) - min(r, g, b) <= 1


def test_original_not_mutated(tinted_background_image):
    before = tinted_background_image.copy()
    result = IlluminationCorrector().correct(tinted_background_image)

    np.testing.assert_array_equal(tinted_background_image, before)
    assert result.original_image is tinted_background_image
    assert result.corrected_image is not tinted_background_image


def test_alpha_preserved(tinted_background_image):
    tinted_background_image[50:, :, 3] = 0
    result = IlluminationCorrector().correct(tinted_background_image)
    np.testing.assert_array_equal(result.corrected_image[..., 3], tinted_background_image[..., 3])


def test_apply_gains_clamps():
    image = solid_rgba(2, 2, (250, 100, 10))
    corrected = IlluminationCorrector.apply_gains(image, (2.0, 1.0, 0.5))
    assert tuple(corrected[0, 0, :3]) == (255, 100, 5)


def test_correction_disabled():
    corrector = IlluminationCorrector(CorrectorConfig(enabled=False))
    image = solid_rgba(50, 50, (200, 210, 230))
    result = corrector.correct(image)
    assert result.correction_applied is False
    assert result.gains == UNIT_GAINS


def test_empty_image(empty_image):
    result = IlluminationCorrector().correct(empty_image)
    assert result.gains == UNIT_GAINS
    assert result.corrected_image.shape == (0, 0, 4)


def test_invalid_input_raises():
    with pytest.raises(ImageValidationError):
        IlluminationCorrector().correct(np.zeros((10, 10, 3), dtype=np.uint8))
    with pytest.raises(ImageValidationError):
        IlluminationCorrector().correct(np.zeros((10, 10, 4), dtype=np.float32))
