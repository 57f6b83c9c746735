"""
Read access to the collector cache.

The cache is a nested mapping ``service -> api -> location -> entry`` built
once per assessment by an external collector. Plugins never modify it; every
lookup is mirrored into a per-run source trace for later diagnostics.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

DEFAULT_ERROR_MESSAGE = "Unable to obtain data"


@dataclass(frozen=True)
class CachePath:
    service: str
    api: str
    location: str

    @classmethod
    def from_api(cls, api_call: str, location: str) -> "CachePath":
        service, api = api_call.split(":", 1)
        return cls(service, api, location)


def _lookup(cache: Dict[str, Any], path: CachePath) -> Optional[Dict[str, Any]]:
    node: Any = cache
    for key in (path.service, path.api, path.location):
        if not isinstance(node, dict) or key not in node:
            return None
        node = node[key]

    return node


def add_source(
    cache: Dict[str, Any], source: Dict[str, Any], path: CachePath
) -> Optional[Dict[str, Any]]:
    entry = _lookup(cache, path)
    source.setdefault(path.service, {}).setdefault(path.api, {})[path.location] = entry
    return entry


def merge_source(target: Dict[str, Any], part: Dict[str, Any]) -> Dict[str, Any]:
    """Fold a worker's private source trace into the run's trace."""
    for service, apis in part.items():
        for api, entries in apis.items():
            target.setdefault(service, {}).setdefault(api, {}).update(entries)
    return target


def add_error(entry: Optional[Dict[str, Any]]) -> str:
    if not entry or not entry.get("err"):
        return DEFAULT_ERROR_MESSAGE

    err = entry["err"]
    if isinstance(err, str):
        return err
    if isinstance(err, dict):
        return str(err.get("message") or err.get("code") or DEFAULT_ERROR_MESSAGE)
    if isinstance(err, BaseException):
        return str(err) or type(err).__name__

    return getattr(err, "message", None) or getattr(err, "code", None) or DEFAULT_ERROR_MESSAGE
