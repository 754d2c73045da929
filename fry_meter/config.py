"""
Pipeline Configuration

단계별 설정 dataclass를 하나로 묶는 PipelineConfig.
JSON 설정 파일 형식 (모든 섹션/키 선택):

    {
        "corrector": {"enabled": true, "grid_size": 5},
        "shadow": {"relative_darkness": 0.35},
        "statistics": {"background_min_value": 0.92},
        "detector": {"cell_size": 20, "band_height": 30},
        "texture": {"patch_size": 8},
        "heatmap": {"spread_radius": 2}
    }

heatmap.cell_size는 항상 detector.cell_size를 따른다.
"""

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from fry_meter.core.defect_detector import DetectorConfig
from fry_meter.core.heatmap import HeatmapConfig
from fry_meter.core.illumination_corrector import CorrectorConfig
from fry_meter.core.pixel_statistics import StatisticsConfig
from fry_meter.core.shadow_classifier import ShadowConfig
from fry_meter.core.texture_analyzer import TextureConfig
from fry_meter.data.config_manager import ConfigError, ConfigManager

# 양수여야 하는 크기 설정
POSITIVE_SIZES = (("detector", "cell_size"), ("texture", "patch_size"), ("corrector", "grid_size"))


@dataclass
class PipelineConfig:
    corrector: CorrectorConfig = field(default_factory=CorrectorConfig)
    shadow: ShadowConfig = field(default_factory=ShadowConfig)
    statistics: StatisticsConfig = field(default_factory=StatisticsConfig)
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    texture: TextureConfig = field(default_factory=TextureConfig)
    heatmap: HeatmapConfig = field(default_factory=HeatmapConfig)

    def __post_init__(self):
        self.heatmap.cell_size = self.detector.cell_size

    @property
    def cell_size(self) -> int:
        return self.detector.cell_size

    def with_cell_size(self, cell_size: int) -> "PipelineConfig":
        if cell_size <= 0:
            raise ConfigError(f"cell_size must be positive, got {cell_size}")
        return replace(
            self,
            detector=replace(self.detector, cell_size=cell_size),
            heatmap=replace(self.heatmap, cell_size=cell_size),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineConfig":
        """
        섹션별 dict → PipelineConfig.

        Raises:
            ConfigError: 알 수 없는 섹션/키, 0 이하의 크기 값
        """
        sections = {f.name: f for f in fields(cls)}
        unknown = set(data) - set(sections)
        if unknown:
            raise ConfigError(f"Unknown config section(s): {', '.join(sorted(unknown))}")

        kwargs = {}
        for name, values in data.items():
            section_cls = sections[name].default_factory
            if not isinstance(values, dict):
                raise ConfigError(f"Config section '{name}' must be an object")
            allowed = {f.name for f in fields(section_cls)}
            bad_keys = set(values) - allowed
            if bad_keys:
                raise ConfigError(f"Unknown key(s) in '{name}': {', '.join(sorted(bad_keys))}")
            kwargs[name] = section_cls(**values)

        config = cls(**kwargs)
        for section, key in POSITIVE_SIZES:
            value = getattr(getattr(config, section), key)
            if value <= 0:
                raise ConfigError(f"{section}.{key} must be positive, got {value}")
        return config

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "PipelineConfig":
        """JSON 설정 파일 로드 (없으면 기본값)"""
        if path is None:
            return cls()
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        return cls.from_dict(ConfigManager(path).as_dict())
