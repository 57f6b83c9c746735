from typing import Any, Dict, Tuple

from ...core.config import SeverityLevel
from ...core.results import ResultStatus
from ...core.rule_engine import PluginDescriptor, RulePlugin


class AppServiceHttpsOnly(RulePlugin):
    plugin_id = "appServiceHttpsOnly"
    query_noun = "App Services"
    none_found = "No existing App Services found"

    descriptor = PluginDescriptor(
        title="App Service HTTPS Only",
        category="App Service",
        domain="Application Integration",
        severity=SeverityLevel.MEDIUM,
        description="Ensures HTTPS-only is enabled for App Services, redirecting all HTTP traffic to HTTPS.",
        more_info=(
            "Enabling HTTPS-only traffic redirects all non-secure HTTP requests to "
            "HTTPS, so traffic to the app is always encrypted in transit."
        ),
        recommended_action="Enable HTTPS-only in the TLS/SSL settings of the App Service.",
        link="https://learn.microsoft.com/en-us/azure/app-service/configure-ssl-bindings#enforce-https",
        apis=("webApps:list",),
        realtime_triggers=(
            "microsoftweb:sites:write",
            "microsoftweb:sites:delete",
        ),
    )

    def check(
        self, resource: Dict[str, Any], config: Dict[str, Any]
    ) -> Tuple[ResultStatus, str]:
        if resource.get("httpsOnly"):
            return ResultStatus.OK, "HTTPS-only is enabled for App Service"
        return ResultStatus.FAIL, "HTTPS-only is not enabled for App Service"
