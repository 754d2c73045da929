from pathlib import Path
from typing import Any, Dict, Optional

from fry_meter.utils.file_io import read_json, write_json


class ConfigError(ValueError):
    """설정 파일/키 오류"""


class ConfigManager:
    """
    JSON 설정 문서에 대한 점(.) 구분 키 접근.

    Example:
        >>> cm = ConfigManager(data={"detector": {"cell_size": 20}})
        >>> cm.get("detector.cell_size")
        20
    """

    def __init__(self, path: Optional[Path] = None, data: Optional[Dict] = None):
        self.config_path = Path(path) if path else None
        self._config: Dict[str, Any] = {}
        if data:
            self._config = data
        elif self.config_path and self.config_path.exists():
            try:
                loaded = read_json(self.config_path)
            except ValueError as e:
                raise ConfigError(f"Invalid JSON in {self.config_path}: {e}") from e
            if not isinstance(loaded, dict):
                raise ConfigError(f"Config root must be an object: {self.config_path}")
            self._config = loaded

    def get(self, key: str, default: Any = None) -> Any:
        val = self._config
        for k in key.split("."):
            if not isinstance(val, dict) or k not in val:
                return default
            val = val[k]
        return val

    def set(self, key: str, value: Any):
        keys = key.split(".")
        val = self._config
        for k in keys[:-1]:
            val = val.setdefault(k, {})
            if not isinstance(val, dict):
                raise ConfigError(f"Cannot set '{key}': '{k}' is not a section")
        val[keys[-1]] = value

    def as_dict(self) -> Dict[str, Any]:
        return self._config

    def save(self, path: Optional[Path] = None):
        target = path or self.config_path
        if target:
            write_json(self._config, target)
