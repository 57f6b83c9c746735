from typing import Dict, List

AZURE_LOCATIONS = [
    "eastus",
    "eastus2",
    "westus",
    "westus2",
    "westus3",
    "centralus",
    "northcentralus",
    "southcentralus",
    "westcentralus",
    "canadacentral",
    "canadaeast",
    "brazilsouth",
    "northeurope",
    "westeurope",
    "uksouth",
    "ukwest",
    "francecentral",
    "germanywestcentral",
    "norwayeast",
    "swedencentral",
    "switzerlandnorth",
    "eastasia",
    "southeastasia",
    "japaneast",
    "japanwest",
    "koreacentral",
    "koreasouth",
    "australiaeast",
    "australiasoutheast",
    "australiacentral",
    "centralindia",
    "southindia",
    "westindia",
    "uaenorth",
    "southafricanorth",
    "qatarcentral",
]

AZURE_GOV_LOCATIONS = [
    "usgovvirginia",
    "usgovtexas",
    "usgovarizona",
    "usgoviowa",
    "usdodeast",
    "usdodcentral",
]

# Services whose cache entries are keyed per location.
REGIONAL_SERVICES = (
    "eventGrid",
    "managedClusters",
    "storageAccounts",
    "vaults",
    "webApps",
    "servers",
)


def locations(govcloud: bool = False) -> Dict[str, List[str]]:
    regions = AZURE_GOV_LOCATIONS if govcloud else AZURE_LOCATIONS

    return {service: list(regions) for service in REGIONAL_SERVICES}
