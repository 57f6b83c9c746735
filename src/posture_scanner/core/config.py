from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from enum import Enum
import json
import logging
import os

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)


class SeverityLevel(Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


@dataclass
class ScannerConfig:
    govcloud: bool = False
    enabled_plugins: List[str] = field(default_factory=list)
    exclude_plugins: List[str] = field(default_factory=list)
    plugin_settings: Dict[str, str] = field(default_factory=dict)
    parallel_scans: int = 10
    timeout_seconds: int = 300
    verbose: bool = False

    def scan_settings(self) -> Dict[str, Any]:
        settings: Dict[str, Any] = dict(self.plugin_settings)
        settings["govcloud"] = self.govcloud
        return settings


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


class ConfigManager:
    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or os.environ.get(
            "POSTURE_SCANNER_CONFIG", "config/scanner_config.json"
        )
        self.config: Optional[ScannerConfig] = None

    def load_config(self) -> ScannerConfig:
        if os.path.exists(self.config_path):
            config_data = self._read_file(self.config_path)
            self.config = self._parse_config(config_data)
        else:
            logger.debug(f"No config file at {self.config_path}, using defaults")
            self.config = ScannerConfig()
        self._apply_environment_overrides()
        self.validate(self.config)
        return self.config

    def _read_file(self, path: str) -> Dict[str, Any]:
        try:
            with open(path, "r") as f:
                if path.endswith((".yaml", ".yml")):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigError(f"Unable to read config file {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return data

    def _parse_config(self, data: Dict[str, Any]) -> ScannerConfig:
        try:
            return ScannerConfig(
                govcloud=_parse_bool(data.get("govcloud", False)),
                enabled_plugins=list(data.get("enabled_plugins", [])),
                exclude_plugins=list(data.get("exclude_plugins", [])),
                plugin_settings={
                    str(k): str(v)
                    for k, v in (data.get("plugin_settings") or {}).items()
                },
                parallel_scans=int(data.get("parallel_scans", 10)),
                timeout_seconds=int(data.get("timeout_seconds", 300)),
                verbose=_parse_bool(data.get("verbose", False)),
            )
        except (TypeError, ValueError, AttributeError) as e:
            raise ConfigError(f"Invalid scanner configuration: {e}") from e

    def _apply_environment_overrides(self):
        if not self.config:
            return

        env_overrides = {
            "GOVCLOUD": ("govcloud", _parse_bool),
            "PARALLEL_SCANS": ("parallel_scans", int),
            "TIMEOUT_SECONDS": ("timeout_seconds", int),
            "VERBOSE": ("verbose", _parse_bool),
        }

        for env_var, (attr, parser) in env_overrides.items():
            value = os.environ.get(f"POSTURE_{env_var}")
            if value:
                try:
                    setattr(self.config, attr, parser(value))
                except ValueError as e:
                    raise ConfigError(f"Invalid POSTURE_{env_var}: {value}") from e

    def validate(self, config: ScannerConfig):
        from ..plugins import PLUGINS
        from .settings import validate

        if config.parallel_scans < 1:
            raise ConfigError("parallel_scans must be at least 1")
        if config.timeout_seconds < 1:
            raise ConfigError("timeout_seconds must be at least 1")

        for plugin_id in config.enabled_plugins + config.exclude_plugins:
            if plugin_id not in PLUGINS:
                raise ConfigError(f"Unknown plugin in configuration: {plugin_id}")

        declared_keys = set()
        for plugin in PLUGINS.values():
            validate(config.plugin_settings, plugin.descriptor.settings)
            declared_keys.update(plugin.descriptor.settings)

        for key in config.plugin_settings:
            if key not in declared_keys:
                logger.warning(f"Setting {key} is not used by any plugin")

    def save_config(self, config: ScannerConfig, path: Optional[str] = None):
        path = path or self.config_path
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        config_data = {
            "govcloud": config.govcloud,
            "enabled_plugins": config.enabled_plugins,
            "exclude_plugins": config.exclude_plugins,
            "plugin_settings": config.plugin_settings,
            "parallel_scans": config.parallel_scans,
            "timeout_seconds": config.timeout_seconds,
            "verbose": config.verbose,
        }

        with open(path, "w") as f:
            json.dump(config_data, f, indent=2)
