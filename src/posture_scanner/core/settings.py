import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from .errors import InvalidSettingError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettingDefinition:
    name: str
    description: str
    regex: str
    default: str
    parser: Callable[[str], Any] = str

    def matches(self, value: Any) -> bool:
        return re.fullmatch(self.regex, str(value)) is not None

    def parse(self, value: Any) -> Any:
        return self.parser(str(value))

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "description": self.description,
            "regex": self.regex,
            "default": self.default,
        }


def _supplied(settings: Optional[Mapping[str, Any]], key: str) -> Optional[Any]:
    if not settings:
        return None
    value = settings.get(key)
    if value is None or value == "":
        return None
    return value


def validate(
    settings: Optional[Mapping[str, Any]],
    declared: Mapping[str, SettingDefinition],
) -> None:
    for key, definition in declared.items():
        value = _supplied(settings, key)
        if value is not None and not definition.matches(value):
            raise InvalidSettingError(key, value, definition.regex)


def effective(
    settings: Optional[Mapping[str, Any]],
    declared: Mapping[str, SettingDefinition],
) -> Dict[str, Any]:
    resolved: Dict[str, Any] = {}

    for key, definition in declared.items():
        value = _supplied(settings, key)
        if value is None:
            value = definition.default
        elif not definition.matches(value):
            logger.warning(
                f"Ignoring setting {key}={value!r} (expected {definition.regex}), "
                f"using default {definition.default}"
            )
            value = definition.default

        resolved[key] = definition.parse(value)

    return resolved
