from typing import Any, Dict, Tuple

from ...core.config import SeverityLevel
from ...core.results import ResultStatus
from ...core.rule_engine import PluginDescriptor, RulePlugin


class KeyVaultPurgeProtection(RulePlugin):
    plugin_id = "keyVaultPurgeProtection"
    query_noun = "Key Vaults"
    none_found = "No Key Vaults found"

    descriptor = PluginDescriptor(
        title="Key Vault Purge Protection",
        category="Key Vaults",
        domain="Application Integration",
        severity=SeverityLevel.HIGH,
        description="Ensures that purge protection is enabled for all Key Vaults.",
        more_info=(
            "Purge protection enforces a mandatory retention period for deleted "
            "vaults and vault objects, so they cannot be permanently removed before "
            "the retention period ends."
        ),
        recommended_action="Enable purge protection for all Key Vaults.",
        link="https://learn.microsoft.com/en-us/azure/key-vault/general/soft-delete-overview",
        apis=("vaults:list",),
        realtime_triggers=(
            "microsoftkeyvault:vaults:write",
            "microsoftkeyvault:vaults:delete",
        ),
    )

    def check(
        self, resource: Dict[str, Any], config: Dict[str, Any]
    ) -> Tuple[ResultStatus, str]:
        if resource.get("enablePurgeProtection"):
            return ResultStatus.OK, "Purge protection is enabled for Key Vault"
        return ResultStatus.FAIL, "Purge protection is not enabled for Key Vault"
