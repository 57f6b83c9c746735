import pytest

from posture_scanner.core.config import ScannerConfig

AKS_CLUSTER_ID = (
    "/subscriptions/123/resourceGroups/aqua-resource-group/providers/"
    "Microsoft.ContainerService/managedClusters/tes-cluster"
)
EVENT_GRID_DOMAIN_ID = (
    "/subscriptions/123/resourceGroups/test-rg/providers/"
    "Microsoft.EventGrid/domains/test-domain"
)


def build_cache(service, api, entries):
    """entries: location -> cache entry"""
    return {service: {api: dict(entries)}}


@pytest.fixture
def managed_clusters():
    return [
        {
            "id": AKS_CLUSTER_ID,
            "location": "eastus",
            "name": "tes-cluster",
            "type": "Microsoft.ContainerService/ManagedClusters",
            "provisioningState": "Succeeded",
            "kubernetesVersion": "1.18.14",
            "dnsPrefix": "tes-cluster-dns",
            "fqdn": "tes-cluster-dns-f7b98b1e.hcp.eastus.azmk8s.io",
            "enableRBAC": True,
            "maxAgentPools": 10,
            "identity": {"type": "SystemAssigned"},
        },
        {
            "id": AKS_CLUSTER_ID,
            "location": "eastus",
            "name": "tes-cluster",
            "type": "Microsoft.ContainerService/ManagedClusters",
            "provisioningState": "Succeeded",
            "kubernetesVersion": "1.18.14",
            "dnsPrefix": "tes-cluster-dns",
            "fqdn": "tes-cluster-dns-f7b98b1e.hcp.eastus.azmk8s.io",
            "enableRBAC": False,
            "maxAgentPools": 10,
        },
    ]


@pytest.fixture
def event_grid_domains():
    return [
        {
            "id": EVENT_GRID_DOMAIN_ID,
            "name": "test-domain",
            "location": "eastus",
            "type": "Microsoft.EventGrid/domains",
            "minimumTlsVersionAllowed": "1.2",
            "publicNetworkAccess": "Enabled",
        },
        {
            "id": EVENT_GRID_DOMAIN_ID,
            "name": "test-domain",
            "location": "eastus",
            "type": "Microsoft.EventGrid/domains",
            "minimumTlsVersionAllowed": "1.1",
            "publicNetworkAccess": "Enabled",
        },
    ]


@pytest.fixture
def storage_accounts():
    return [
        {
            "id": "/subscriptions/123/resourceGroups/test-rg/providers/Microsoft.Storage/storageAccounts/secure",
            "name": "secure",
            "location": "eastus",
            "enableHttpsTrafficOnly": True,
            "allowBlobPublicAccess": False,
            "minimumTlsVersion": "TLS1_2",
        },
        {
            "id": "/subscriptions/123/resourceGroups/test-rg/providers/Microsoft.Storage/storageAccounts/legacy",
            "name": "legacy",
            "location": "eastus",
            "enableHttpsTrafficOnly": False,
            "allowBlobPublicAccess": True,
            "minimumTlsVersion": "TLS1_0",
        },
    ]


@pytest.fixture
def multi_service_cache(managed_clusters, event_grid_domains, storage_accounts):
    return {
        "managedClusters": {
            "list": {
                "eastus": {"data": managed_clusters},
                "westus": {"data": []},
            }
        },
        "eventGrid": {
            "listDomains": {
                "eastus": {"data": event_grid_domains},
                "westeurope": {"err": "AuthorizationFailed"},
            }
        },
        "storageAccounts": {"list": {"eastus": {"data": storage_accounts}}},
    }


@pytest.fixture
def scanner_config():
    return ScannerConfig(
        parallel_scans=4,
        timeout_seconds=30,
        verbose=True,
    )
