from typing import Any, Dict, Tuple

from ...core.config import SeverityLevel
from ...core.results import ResultStatus
from ...core.rule_engine import PluginDescriptor, RulePlugin, parse_tls_version
from ...core.settings import SettingDefinition

STORAGE_TRIGGERS = (
    "microsoftstorage:storageaccounts:write",
    "microsoftstorage:storageaccounts:delete",
)


class StorageAccountsHttps(RulePlugin):
    plugin_id = "storageAccountsHttps"
    query_noun = "Storage Accounts"
    none_found = "No storage accounts found"

    descriptor = PluginDescriptor(
        title="Storage Accounts HTTPS",
        category="Storage Accounts",
        domain="Storage",
        severity=SeverityLevel.HIGH,
        description="Ensures HTTPS-only traffic is allowed to storage account endpoints.",
        more_info=(
            "Storage Accounts can contain sensitive information and should only be "
            "accessed over HTTPS. Enabling the HTTPS-only flag ensures that Azure "
            "does not allow HTTP traffic to Storage Accounts."
        ),
        recommended_action="Enable the HTTPS-only option for all Storage Accounts.",
        link="https://learn.microsoft.com/en-us/azure/storage/common/storage-require-secure-transfer",
        apis=("storageAccounts:list",),
        realtime_triggers=STORAGE_TRIGGERS,
    )

    def check(
        self, resource: Dict[str, Any], config: Dict[str, Any]
    ) -> Tuple[ResultStatus, str]:
        if resource.get("enableHttpsTrafficOnly") or resource.get(
            "supportsHttpsTrafficOnly"
        ):
            return ResultStatus.OK, "Storage Account is configured with HTTPS-only traffic"
        return ResultStatus.FAIL, "Storage Account is not configured with HTTPS-only traffic"


class StorageAccountPublicAccess(RulePlugin):
    plugin_id = "storageAccountPublicAccess"
    query_noun = "Storage Accounts"
    none_found = "No storage accounts found"

    descriptor = PluginDescriptor(
        title="Storage Account Blob Public Access Disabled",
        category="Storage Accounts",
        domain="Storage",
        severity=SeverityLevel.CRITICAL,
        description="Ensures that anonymous public read access to blobs is disallowed on storage accounts.",
        more_info=(
            "Allowing blob public access lets any container in the account be made "
            "anonymously readable. Disallowing it at the account level overrides "
            "container-level settings."
        ),
        recommended_action="Set allowBlobPublicAccess to false on the storage account.",
        link="https://learn.microsoft.com/en-us/azure/storage/blobs/anonymous-read-access-prevent",
        apis=("storageAccounts:list",),
        realtime_triggers=STORAGE_TRIGGERS,
    )

    def check(
        self, resource: Dict[str, Any], config: Dict[str, Any]
    ) -> Tuple[ResultStatus, str]:
        if resource.get("allowBlobPublicAccess") is True:
            return ResultStatus.FAIL, "Storage Account allows blob public access"
        return ResultStatus.OK, "Storage Account does not allow blob public access"


class StorageAccountMinimumTlsVersion(RulePlugin):
    plugin_id = "storageAccountMinimumTlsVersion"
    query_noun = "Storage Accounts"
    none_found = "No storage accounts found"

    descriptor = PluginDescriptor(
        title="Storage Account Minimum TLS Version",
        category="Storage Accounts",
        domain="Storage",
        severity=SeverityLevel.MEDIUM,
        description="Ensures that storage accounts are using the latest TLS version.",
        more_info=(
            "Requiring a recent minimum TLS version for storage accounts rejects "
            "clients that negotiate older, weaker protocol versions."
        ),
        recommended_action="Modify the storage account to set the desired minimum TLS version.",
        link="https://learn.microsoft.com/en-us/azure/storage/common/transport-layer-security-configure-minimum-version",
        apis=("storageAccounts:list",),
        settings={
            "storage_account_min_tls_version": SettingDefinition(
                name="Storage Account Minimum TLS Version",
                description="Minimum desired TLS version for storage accounts",
                regex=r"^(1.0|1.1|1.2)$",
                default="1.2",
                parser=float,
            ),
        },
        realtime_triggers=STORAGE_TRIGGERS,
    )

    def check(
        self, resource: Dict[str, Any], config: Dict[str, Any]
    ) -> Tuple[ResultStatus, str]:
        desired = config["storage_account_min_tls_version"]
        # accounts created before the property existed default to TLS 1.0
        configured = resource.get("minimumTlsVersion") or "TLS1_0"
        version = parse_tls_version(configured)

        if version is not None and version >= desired:
            return (
                ResultStatus.OK,
                f"Storage Account is using TLS version {configured} which is equal "
                f"to or higher than desired TLS version {desired}",
            )
        return (
            ResultStatus.FAIL,
            f"Storage Account is using TLS version {configured} which is less "
            f"than desired TLS version {desired}",
        )
