from typing import Any, Dict, Tuple

from ...core.config import SeverityLevel
from ...core.results import ResultStatus
from ...core.rule_engine import PluginDescriptor, RulePlugin, parse_tls_version
from ...core.settings import SettingDefinition


class DomainMinimumTlsVersion(RulePlugin):
    plugin_id = "domainMinimumTlsVersion"
    query_noun = "Event Grid domains"
    none_found = "No Event Grid domains found"

    descriptor = PluginDescriptor(
        title="Event Grid Domain Minimum TLS Version",
        category="Event Grid",
        domain="Management and Governance",
        severity=SeverityLevel.MEDIUM,
        description="Ensures that Azure Event Grid domain is using the latest TLS version.",
        more_info=(
            "Using latest TLS version for Event Grid domains enforces strict security "
            "measures, which requires that clients send and receive data with a newer "
            "version of TLS."
        ),
        recommended_action="Modify Event Grid domain to set the desired minimum TLS version.",
        link="https://learn.microsoft.com/en-us/azure/event-grid/transport-layer-security-configure-minimum-version",
        apis=("eventGrid:listDomains",),
        settings={
            "event_grid_domain_min_tls_version": SettingDefinition(
                name="Event Grid Domain Minimum TLS Version",
                description="Minimum desired TLS version for Event Grid domain",
                regex=r"^(1.0|1.1|1.2)$",
                default="1.2",
                parser=float,
            ),
        },
        realtime_triggers=(
            "microsofteventgrid:domains:write",
            "microsofteventgrid:domains:delete",
        ),
    )

    def check(
        self, resource: Dict[str, Any], config: Dict[str, Any]
    ) -> Tuple[ResultStatus, str]:
        desired = config["event_grid_domain_min_tls_version"]
        configured = resource.get("minimumTlsVersionAllowed")
        # also accepts the storage-style "TLS1_2" spelling; Event Grid reports "1.2"
        version = parse_tls_version(configured)

        if version is not None and version >= desired:
            return (
                ResultStatus.OK,
                f"Event Grid domain is using TLS version {configured} which is equal "
                f"to or higher than desired TLS version {desired}",
            )
        return (
            ResultStatus.FAIL,
            f"Event Grid domain is using TLS version {configured} which is less "
            f"than desired TLS version {desired}",
        )
