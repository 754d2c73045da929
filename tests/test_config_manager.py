"""
Tests for ConfigManager and PipelineConfig
"""

import json

import pytest

from fry_meter.config import PipelineConfig
from fry_meter.data.config_manager import ConfigError, ConfigManager

# ================================================================
# ConfigManager
# ================================================================


class TestConfigManager:
    def test_get_dotted(self):
        cm = ConfigManager(data={"detector": {"cell_size": 20}})
        assert cm.get("detector.cell_size") == 20
        assert cm.get("detector.missing", 7) == 7
        assert cm.get("detector.cell_size.deeper") is None

    def test_set_creates_sections(self):
        cm = ConfigManager(data={})
        cm.set("texture.patch_size", 16)
        assert cm.as_dict() == {"texture": {"patch_size": 16}}

    def test_set_through_value_raises(self):
        cm = ConfigManager(data={"detector": 20})
        with pytest.raises(ConfigError):
            cm.set("detector.cell_size", 10)

    def test_load_and_save(self, tmp_json, tmp_path):
        path = tmp_json({"heatmap": {"spread_radius": 3}}, "config.json")
        cm = ConfigManager(path)
        assert cm.get("heatmap.spread_radius") == 3

        cm.set("heatmap.spread_radius", 1)
        out = tmp_path / "out" / "saved.json"
        cm.save(out)
        assert json.loads(out.read_text(encoding="utf-8")) == {"heatmap": {"spread_radius": 1}}

    def test_missing_file_is_empty(self, tmp_path):
        assert ConfigManager(tmp_path / "none.json").as_dict() == {}

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError):
            ConfigManager(path)

    def test_non_object_root(self, tmp_json):
        with pytest.raises(ConfigError):
            ConfigManager(tmp_json([1, 2, 3]))


# ================================================================
# PipelineConfig
# ================================================================


class TestPipelineConfig:
    def test_defaults(self):
        config = PipelineConfig()
        assert config.cell_size == 20
        assert config.heatmap.cell_size == 20
        assert config.corrector.enabled
        assert config.texture.patch_size == 8

    def test_from_dict(self):
        config = PipelineConfig.from_dict(
            {"detector": {"cell_size": 10, "band_height": 40}, "corrector": {"enabled": False}}
        )
        assert config.cell_size == 10
        assert config.detector.band_height == 40
        assert config.heatmap.cell_size == 10
        assert not config.corrector.enabled

    @pytest.mark.parametrize(
        "data",
        [
            {"unknown": {}},
            {"detector": {"cell_sz": 10}},
            {"detector": 10},
        ],
    )
    def test_from_dict_rejects_bad_input(self, data):
        with pytest.raises(ConfigError):
            PipelineConfig.from_dict(data)

    @pytest.mark.parametrize(
        "data",
        [
            {"detector": {"cell_size": 0}},
            {"detector": {"cell_size": -20}},
            {"texture": {"patch_size": 0}},
            {"corrector": {"grid_size": 0}},
        ],
    )
    def test_from_dict_rejects_non_positive_sizes(self, data):
        with pytest.raises(ConfigError):
            PipelineConfig.from_dict(data)

    def test_with_cell_size(self):
        base = PipelineConfig()
        config = base.with_cell_size(16)
        assert config.cell_size == 16
        assert config.heatmap.cell_size == 16
        # 원본 불변
        assert base.cell_size == 20

    @pytest.mark.parametrize("cell_size", [0, -4])
    def test_with_cell_size_invalid(self, cell_size):
        with pytest.raises(ConfigError):
            PipelineConfig().with_cell_size(cell_size)

    def test_load(self, tmp_json):
        path = tmp_json({"texture": {"patch_size": 4}}, "pipeline.json")
        config = PipelineConfig.load(path)
        assert config.texture.patch_size == 4
        assert config.cell_size == 20

    def test_load_none_is_default(self):
        assert PipelineConfig.load(None) == PipelineConfig()

    def test_load_missing(self, tmp_path):
        with pytest.raises(ConfigError):
            PipelineConfig.load(tmp_path / "missing.json")
