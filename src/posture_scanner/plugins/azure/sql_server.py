from typing import Any, Dict, Tuple

from ...core.config import SeverityLevel
from ...core.results import ResultStatus
from ...core.rule_engine import PluginDescriptor, RulePlugin


class SqlServerPublicAccessDisabled(RulePlugin):
    plugin_id = "sqlServerPublicAccessDisabled"
    query_noun = "SQL servers"
    none_found = "No SQL servers found"

    descriptor = PluginDescriptor(
        title="SQL Server Public Network Access Disabled",
        category="SQL Server",
        domain="Databases",
        severity=SeverityLevel.HIGH,
        description="Ensures that public network access is disabled for SQL servers.",
        more_info=(
            "Disabling public network access restricts connections to private "
            "endpoints, so the server is not reachable from the internet even if "
            "firewall rules are misconfigured."
        ),
        recommended_action="Set public network access to Disabled on the SQL server and use private endpoints.",
        link="https://learn.microsoft.com/en-us/azure/azure-sql/database/connectivity-settings",
        apis=("servers:listSql",),
        realtime_triggers=(
            "microsoftsql:servers:write",
            "microsoftsql:servers:delete",
        ),
    )

    def check(
        self, resource: Dict[str, Any], config: Dict[str, Any]
    ) -> Tuple[ResultStatus, str]:
        access = resource.get("publicNetworkAccess")
        if str(access).lower() == "disabled":
            return ResultStatus.OK, "SQL server has public network access disabled"
        return (
            ResultStatus.FAIL,
            f"SQL server has public network access set to {access or 'Enabled'}",
        )
