from typing import Any


class PostureScannerError(Exception):
    pass


class ConfigError(PostureScannerError):
    pass


class InvalidSettingError(ConfigError):
    def __init__(self, key: str, value: Any, pattern: str):
        self.key = key
        self.value = value
        self.pattern = pattern
        super().__init__(
            f"Invalid value {value!r} for setting {key}: must match {pattern}"
        )


class UnknownPluginError(PostureScannerError):
    def __init__(self, plugin_id: str):
        self.plugin_id = plugin_id
        super().__init__(f"Unknown plugin: {plugin_id}")
