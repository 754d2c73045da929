"""
Tests for color-deviation attribute scorers
"""

import pytest

from fry_meter.core.color_evaluator import (
    MOTTLING_KINDS,
    TARGET_GOLD_LAB,
    defect_score,
    delta_e_to_target,
    estimate_agtron,
    hue_score,
    maillard_risk,
    mottling_score,
    process_color_score,
    usda_label,
    usda_score,
    weighted_severity,
)
from fry_meter.schemas.analysis import DefectRegion, DefectType, MaillardRisk


def make_defect(kind=DefectType.MOTTLED, severity=0.5, weight=1.0):
    return DefectRegion(
        x=0, y=0, width=20, height=20, defect_type=kind, severity=severity, area=400, area_mm2=400.0,
        position_weight=weight,
    )


class TestAgtronUsda:
    def test_agtron_golden(self):
        assert estimate_agtron(161, 131, 88) == 62

    def test_agtron_extremes(self):
        assert estimate_agtron(0, 0, 0) == 20
        assert estimate_agtron(255, 255, 255) == 100

    @pytest.mark.parametrize(
        "agtron,expected",
        [(39, 0.0), (40, 0.2), (49, 0.2), (50, 0.4), (57, 0.4), (58, 0.5), (68, 0.5), (69, 0.6), (70, 0.8), (79, 0.8), (80, 1.0)],
    )
    def test_usda_steps(self, agtron, expected):
        assert usda_score(agtron) == expected

    def test_usda_labels(self):
        assert usda_label(0.5).startswith("Target")
        assert usda_label(0.0).startswith("Very Dark")
        assert usda_label(1.0).startswith("Very Light")


class TestProcessColor:
    @pytest.mark.parametrize(
        "usda,expected", [(0.5, 5), (0.4, 4), (0.2, 2), (0.0, 1), (0.6, 6), (0.8, 8), (1.0, 9)]
    )
    def test_scores(self, usda, expected):
        assert process_color_score(usda).score == expected

    def test_target_label(self):
        assert process_color_score(0.5).label == "Equal to Target"


class TestHueScore:
    @pytest.mark.parametrize(
        "h,s,expected",
        [
            (35, 0.45, 5),
            (25, 0.31, 5),
            (40, 0.59, 5),
            (45, 0.45, 6),
            (60, 0.45, 7),
            (75, 0.45, 8),
            (80, 0.45, 8),
            (81, 0.45, 9),
            (200, 0.45, 9),
            (22, 0.45, 4),
            (10, 0.45, 9),
            (30, 0.75, 8),
            (30, 0.2, 5),
        ],
    )
    def test_bands(self, h, s, expected):
        assert hue_score(h, s).score == expected

    def test_off_color_boundary(self):
        """80° 경계: 8 → 9, 20° 미만도 off-color"""
        assert hue_score(80, 0.45).score == 8
        assert hue_score(80.5, 0.45) == hue_score(10, 0.45)
        assert hue_score(85, 0.45).label == "Bright Yellow / Off-Color"
        # 채도 과다는 80° 이하에서만 8
        assert hue_score(30, 0.75).score == 8
        assert hue_score(90, 0.75).score == 9


class TestMottling:
    def test_counts_mottled_and_dark(self):
        defects = [make_defect(DefectType.MOTTLED)] * 3 + [make_defect(DefectType.DARK)] * 2
        assert mottling_score(defects) == 6

    @pytest.mark.parametrize("count,expected", [(0, 5), (4, 5), (5, 6), (10, 7), (15, 8), (20, 9), (40, 9)])
    def test_thresholds(self, count, expected):
        assert mottling_score([make_defect()] * count) == expected

    def test_other_kinds_ignored(self):
        defects = [make_defect(k) for k in (DefectType.BURNT, DefectType.LIGHT, DefectType.SHADOW)] * 5
        assert mottling_score(defects) == 5

    def test_every_defect_kind_mapped(self):
        assert set(MOTTLING_KINDS) == set(DefectType)


class TestDefectScore:
    def test_clean(self):
        assert defect_score([], 0.0) == 5

    def test_weighted_severity_excludes_artifacts(self):
        defects = [make_defect(DefectType.BURNT, 0.8, 1.5), make_defect(DefectType.SHADOW, 1.0)]
        assert weighted_severity(defects) == pytest.approx(1.2)

    @pytest.mark.parametrize("burnt,expected", [(0.05, 5), (0.06, 6), (0.11, 7), (0.21, 8), (0.31, 9)])
    def test_burnt_ratio_gates(self, burnt, expected):
        assert defect_score([], burnt) == expected

    def test_weighted_gates(self):
        # 7 × 0.5 = 3.5 > 3
        assert defect_score([make_defect(DefectType.BURNT, 0.5)] * 7, 0.0) == 6
        # 8 × 1.0 × 1.5 = 12 > 10
        assert defect_score([make_defect(DefectType.BURNT, 1.0, 1.5)] * 8, 0.0) == 8

    def test_shadow_never_scores(self):
        assert defect_score([make_defect(DefectType.SHADOW, 1.0)] * 50, 0.0) == 5


class TestMaillard:
    @pytest.mark.parametrize(
        "de,risk,index",
        [
            (0.0, MaillardRisk.LOW, 0),
            (4.9, MaillardRisk.LOW, 16),
            (5.0, MaillardRisk.MODERATE, 17),
            (15.0, MaillardRisk.HIGH, 50),
            (25.0, MaillardRisk.CRITICAL, 83),
            (45.0, MaillardRisk.CRITICAL, 100),
        ],
    )
    def test_levels(self, de, risk, index):
        assert maillard_risk(de) == (risk, index)

    def test_delta_e_to_target(self):
        assert delta_e_to_target(161, 131, 88) > 0
        assert TARGET_GOLD_LAB == (72.0, 8.5, 42.0)
