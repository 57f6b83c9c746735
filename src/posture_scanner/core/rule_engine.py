import re
import logging
import queue
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .cache import CachePath, add_error, add_source, merge_source
from .config import SeverityLevel, _parse_bool
from .locations import locations
from .results import PluginOutput, ResultRecord, ResultStatus, add_result
from .settings import SettingDefinition, effective

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 10

Callback = Callable[[None, List[ResultRecord], Dict[str, Any]], Any]


class RuleValidator:
    @staticmethod
    def is_valid_plugin_id(plugin_id: str) -> bool:
        pattern = re.compile(r"^[a-z][A-Za-z0-9]+$")
        return bool(pattern.match(plugin_id))

    @staticmethod
    def is_valid_api(api_call: str) -> bool:
        pattern = re.compile(r"^[a-zA-Z]+:[a-zA-Z]+$")
        return bool(pattern.match(api_call))

    @staticmethod
    def is_valid_trigger(event_name: str) -> bool:
        pattern = re.compile(r"^[a-z0-9]+(:[a-z0-9]+)+$")
        return bool(pattern.match(event_name))


def parse_tls_version(value: Any) -> Optional[float]:
    """Turn "1.2", "TLS1_2" or "TLS 1.2" into 1.2; None if unparseable."""
    if value is None:
        return None
    text = str(value).strip().upper()
    if text.startswith("TLS"):
        text = text[3:].strip().replace("_", ".")
    try:
        return float(text)
    except ValueError:
        return None


@dataclass(frozen=True)
class PluginDescriptor:
    title: str
    category: str
    domain: str
    severity: SeverityLevel
    description: str
    more_info: str
    recommended_action: str
    link: str
    apis: Tuple[str, ...]
    settings: Dict[str, SettingDefinition] = field(default_factory=dict, hash=False)
    realtime_triggers: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "category": self.category,
            "domain": self.domain,
            "severity": self.severity.value,
            "description": self.description,
            "more_info": self.more_info,
            "recommended_action": self.recommended_action,
            "link": self.link,
            "apis": list(self.apis),
            "settings": {k: s.to_dict() for k, s in self.settings.items()},
            "realtime_triggers": list(self.realtime_triggers),
        }


class RulePlugin(ABC):
    """
    One compliance rule evaluated against a collector cache.

    Subclasses declare a descriptor, the cached API they read and the nouns
    used in the standard messages, and implement ``check`` for a single
    resource. ``run`` takes care of settings, the per-location fan-out and the
    unknown / empty / missing-id handling shared by every rule.
    """

    plugin_id: str = ""
    descriptor: PluginDescriptor
    # noun used in "Unable to query for ...", e.g. "Event Grid domains"
    query_noun: str = ""
    none_found: str = ""

    @property
    def service(self) -> str:
        return self.descriptor.apis[0].split(":", 1)[0]

    @abstractmethod
    def check(
        self, resource: Dict[str, Any], config: Dict[str, Any]
    ) -> Tuple[ResultStatus, str]:
        pass

    def run(
        self,
        cache: Dict[str, Any],
        settings: Optional[Dict[str, Any]] = None,
        callback: Optional[Callback] = None,
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
        timeout: Optional[float] = None,
    ) -> PluginOutput:
        settings = settings or {}
        output = PluginOutput()
        config = effective(settings, self.descriptor.settings)
        govcloud = _parse_bool(settings.get("govcloud", False))
        plugin_locations = locations(govcloud).get(self.service, [])

        todo = queue.Queue()
        for location in plugin_locations:
            todo.put(location)
        finished = queue.Queue()
        stop = threading.Event()

        def worker():
            while not stop.is_set():
                try:
                    location = todo.get_nowait()
                except queue.Empty:
                    return
                source: Dict[str, Any] = {}
                try:
                    results = self._evaluate_location(cache, source, location, config)
                    finished.put((location, results, source, None))
                except Exception as e:
                    finished.put((location, [], source, e))

        # daemon threads: a location stalled past the deadline must not block exit
        for n in range(min(max(1, max_workers), len(plugin_locations))):
            threading.Thread(
                target=worker, name=f"{self.plugin_id}-{n}", daemon=True
            ).start()

        deadline = None if timeout is None else time.monotonic() + timeout
        outstanding = list(plugin_locations)
        try:
            while outstanding:
                remaining = None
                if deadline is not None:
                    remaining = max(0.0, deadline - time.monotonic())
                self._collect(finished.get(timeout=remaining), outstanding, output)
        except queue.Empty:
            stop.set()
            while True:
                try:
                    self._collect(finished.get_nowait(), outstanding, output)
                except queue.Empty:
                    break
            for location in outstanding:
                logger.warning(f"{self.plugin_id}: timed out evaluating {location}")
                add_result(
                    output.results,
                    ResultStatus.UNKNOWN,
                    f"Timed out evaluating {self.query_noun}",
                    location,
                )

        if callback is not None:
            callback(None, output.results, output.source)
        return output

    def _collect(self, item: Tuple, outstanding: List[str], output: PluginOutput):
        location, results, source, error = item
        outstanding.remove(location)
        merge_source(output.source, source)

        if error is None:
            output.results.extend(results)
            return

        logger.error(f"Error evaluating {self.plugin_id} in {location}: {error}")
        add_result(
            output.results,
            ResultStatus.UNKNOWN,
            f"Unable to evaluate {self.query_noun}: {error}",
            location,
        )

    def _evaluate_location(
        self,
        cache: Dict[str, Any],
        source: Dict[str, Any],
        location: str,
        config: Dict[str, Any],
    ) -> List[ResultRecord]:
        results: List[ResultRecord] = []
        entry = add_source(
            cache, source, CachePath.from_api(self.descriptor.apis[0], location)
        )

        if entry is None:
            return results

        if not isinstance(entry, dict):
            entry = {}

        if entry.get("err") or entry.get("data") is None:
            add_result(
                results,
                ResultStatus.UNKNOWN,
                f"Unable to query for {self.query_noun}: {add_error(entry)}",
                location,
            )
            return results

        if not entry["data"]:
            add_result(results, ResultStatus.OK, self.none_found, location)
            return results

        for resource in entry["data"]:
            if not isinstance(resource, dict) or not resource.get("id"):
                continue

            status, message = self.check(resource, config)
            add_result(results, status, message, location, resource["id"])

        return results

    def to_dict(self) -> Dict[str, Any]:
        data = {"plugin_id": self.plugin_id}
        data.update(self.descriptor.to_dict())
        return data
