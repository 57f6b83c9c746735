from typing import Any, Dict, Tuple

from ...core.config import SeverityLevel
from ...core.results import ResultStatus
from ...core.rule_engine import PluginDescriptor, RulePlugin


class AksManagedIdentity(RulePlugin):
    plugin_id = "aksManagedIdentity"
    query_noun = "Kubernetes clusters"
    none_found = "No existing Kubernetes clusters found"

    descriptor = PluginDescriptor(
        title="AKS Cluster Managed Identity Enabled",
        category="Kubernetes Service",
        domain="Containers",
        severity=SeverityLevel.MEDIUM,
        description="Ensures that Azure Kubernetes clusters have managed identity enabled.",
        more_info=(
            "Managed identities let the cluster authenticate to other Azure services "
            "without storing service principal credentials, which removes the need to "
            "rotate secrets manually."
        ),
        recommended_action="Enable a system-assigned or user-assigned managed identity on the AKS cluster.",
        link="https://learn.microsoft.com/en-us/azure/aks/use-managed-identity",
        apis=("managedClusters:list",),
        realtime_triggers=(
            "microsoftcontainerservice:managedclusters:write",
            "microsoftcontainerservice:managedclusters:delete",
        ),
    )

    def check(
        self, resource: Dict[str, Any], config: Dict[str, Any]
    ) -> Tuple[ResultStatus, str]:
        if resource.get("identity"):
            return ResultStatus.OK, "The managed cluster has identities assigned"
        return ResultStatus.FAIL, "The managed cluster does not have an identity assigned"
