import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from ..core.config import ScannerConfig
from ..core.results import PluginOutput, ResultStatus
from ..core.rule_engine import RulePlugin
from ..plugins import PLUGINS, get_plugin, plugins_for_trigger

logger = logging.getLogger(__name__)


@dataclass
class ScanReport:
    scan_id: str
    timestamp: datetime
    outputs: Dict[str, PluginOutput]
    summary: Dict[str, int]
    duration_seconds: float
    plugins_applied: List[str]
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scan_id": self.scan_id,
            "timestamp": self.timestamp.isoformat(),
            "summary": self.summary,
            "duration_seconds": self.duration_seconds,
            "plugins_applied": self.plugins_applied,
            "errors": self.errors,
            "results": {
                plugin_id: [r.to_dict(encode_json=True) for r in output.results]
                for plugin_id, output in self.outputs.items()
            },
        }


class PostureScanner:
    def __init__(self, config: Optional[ScannerConfig] = None):
        self.config = config or ScannerConfig()

    def run_scan(
        self,
        cache: Dict[str, Any],
        plugin_ids: Optional[List[str]] = None,
    ) -> ScanReport:
        return self._run_plugins(cache, self._select_plugins(plugin_ids))

    def run_realtime_scan(
        self,
        cache: Dict[str, Any],
        change_events: Iterable[Union[str, Dict[str, Any]]],
    ) -> ScanReport:
        event_names = self._parse_change_events(change_events)

        selected: Dict[str, RulePlugin] = {}
        for event_name in sorted(event_names):
            for plugin in plugins_for_trigger(event_name):
                if self._is_enabled(plugin.plugin_id):
                    selected[plugin.plugin_id] = plugin

        if not selected:
            logger.info(f"No plugins triggered by events: {sorted(event_names)}")

        return self._run_plugins(cache, list(selected.values()))

    def _parse_change_events(
        self, change_events: Iterable[Union[str, Dict[str, Any]]]
    ) -> Set[str]:
        event_names = set()

        for event in change_events:
            if isinstance(event, dict):
                name = event.get("operationName") or event.get("event_name") or ""
            else:
                name = event
            # activity log operation names look like Microsoft.Storage/storageAccounts/write
            name = str(name).strip().lower().replace(".", "").replace("/", ":")
            if name:
                event_names.add(name)

        return event_names

    def _is_enabled(self, plugin_id: str) -> bool:
        if plugin_id in self.config.exclude_plugins:
            return False
        if self.config.enabled_plugins:
            return plugin_id in self.config.enabled_plugins
        return True

    def _select_plugins(self, plugin_ids: Optional[List[str]]) -> List[RulePlugin]:
        if plugin_ids:
            return [get_plugin(plugin_id) for plugin_id in plugin_ids]
        return [p for pid, p in PLUGINS.items() if self._is_enabled(pid)]

    def _run_plugins(
        self, cache: Dict[str, Any], plugins: List[RulePlugin]
    ) -> ScanReport:
        started = datetime.now(timezone.utc)
        start_time = time.perf_counter()
        settings = self.config.scan_settings()
        outputs: Dict[str, PluginOutput] = {}
        errors: List[str] = []

        logger.info(f"Starting posture scan with {len(plugins)} plugins")

        for plugin in plugins:
            try:
                outputs[plugin.plugin_id] = plugin.run(
                    cache,
                    settings,
                    max_workers=self.config.parallel_scans,
                    timeout=self.config.timeout_seconds,
                )
            except Exception as e:
                logger.error(f"Error running plugin {plugin.plugin_id}: {e}")
                errors.append(f"{plugin.plugin_id}: {e}")

            if self.config.verbose and plugin.plugin_id in outputs:
                logger.info(
                    f"{plugin.plugin_id}: "
                    f"{len(outputs[plugin.plugin_id].results)} results"
                )

        summary = self._summarize(outputs.values())
        report = ScanReport(
            scan_id=self._generate_scan_id(started),
            timestamp=started,
            outputs=outputs,
            summary=summary,
            duration_seconds=round(time.perf_counter() - start_time, 3),
            plugins_applied=list(outputs),
            errors=errors,
        )

        logger.info(
            f"Scan completed: {summary['total_results']} results, "
            f"{summary['fail']} failing, {summary['unknown']} unknown"
        )
        return report

    def _summarize(self, outputs: Iterable[PluginOutput]) -> Dict[str, int]:
        summary = {"total_results": 0, "ok": 0, "warn": 0, "fail": 0, "unknown": 0}

        for output in outputs:
            for status in ResultStatus:
                count = output.count(status)
                summary[status.name.lower()] += count
                summary["total_results"] += count

        return summary

    def get_compliance_summary(self, report: ScanReport) -> Dict[str, Any]:
        summary: Dict[str, Any] = {
            "scan_id": report.scan_id,
            "overall_score": 100.0,
            "by_plugin": {},
            "failing_resources": [],
        }

        evaluated = report.summary["ok"] + report.summary["warn"] + report.summary["fail"]
        if evaluated > 0:
            summary["overall_score"] = round(report.summary["ok"] / evaluated * 100, 2)

        for plugin_id, output in report.outputs.items():
            summary["by_plugin"][plugin_id] = {
                status.name.lower(): output.count(status) for status in ResultStatus
            }
            summary["failing_resources"].extend(
                [
                    {"plugin_id": plugin_id, "resource": r.resource, "region": r.region}
                    for r in output.results
                    if r.status == ResultStatus.FAIL
                ]
            )

        return summary

    def _generate_scan_id(self, started: datetime) -> str:
        return f"scan-{started.strftime('%Y%m%d%H%M%S')}-{uuid.uuid4().hex[:8]}"
