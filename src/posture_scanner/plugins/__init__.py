"""
Plugin registry.

Every rule is registered here explicitly at import time; there is no
filesystem discovery. Lookups by id and by realtime trigger event name are
served from the mapping built below.
"""

from typing import Dict, List, Optional

from ..core.config import SeverityLevel
from ..core.errors import UnknownPluginError
from ..core.rule_engine import RulePlugin, RuleValidator
from .azure.app_service import AppServiceHttpsOnly
from .azure.event_grid import DomainMinimumTlsVersion
from .azure.key_vaults import KeyVaultPurgeProtection
from .azure.kubernetes_service import AksManagedIdentity
from .azure.sql_server import SqlServerPublicAccessDisabled
from .azure.storage_accounts import (
    StorageAccountMinimumTlsVersion,
    StorageAccountPublicAccess,
    StorageAccountsHttps,
)

PLUGINS: Dict[str, RulePlugin] = {}


def register_plugin(plugin: RulePlugin) -> RulePlugin:
    if not RuleValidator.is_valid_plugin_id(plugin.plugin_id):
        raise ValueError(f"Invalid plugin ID: {plugin.plugin_id!r}")
    if plugin.plugin_id in PLUGINS:
        raise ValueError(f"Plugin already registered: {plugin.plugin_id}")
    for api_call in plugin.descriptor.apis:
        if not RuleValidator.is_valid_api(api_call):
            raise ValueError(f"Invalid API call {api_call!r} in {plugin.plugin_id}")
    for trigger in plugin.descriptor.realtime_triggers:
        if not RuleValidator.is_valid_trigger(trigger):
            raise ValueError(f"Invalid trigger {trigger!r} in {plugin.plugin_id}")

    PLUGINS[plugin.plugin_id] = plugin
    return plugin


def get_plugin(plugin_id: str) -> RulePlugin:
    try:
        return PLUGINS[plugin_id]
    except KeyError:
        raise UnknownPluginError(plugin_id) from None


def get_plugins(
    category: Optional[str] = None,
    severity: Optional[SeverityLevel] = None,
) -> List[RulePlugin]:
    plugins = list(PLUGINS.values())

    if category:
        plugins = [p for p in plugins if p.descriptor.category == category]
    if severity:
        plugins = [p for p in plugins if p.descriptor.severity == severity]

    return plugins


def plugins_for_trigger(event_name: str) -> List[RulePlugin]:
    event_name = event_name.strip().lower()
    return [p for p in PLUGINS.values() if event_name in p.descriptor.realtime_triggers]


for _plugin in (
    DomainMinimumTlsVersion(),
    AksManagedIdentity(),
    StorageAccountsHttps(),
    StorageAccountPublicAccess(),
    StorageAccountMinimumTlsVersion(),
    KeyVaultPurgeProtection(),
    AppServiceHttpsOnly(),
    SqlServerPublicAccessDisabled(),
):
    register_plugin(_plugin)
