"""
Package Store Client Library

Chain-aware contract binding and package catalog search for the
decentralized package store.
"""

from .types import (
    ChainId,
    ContractRole,
    AccessMode,
    PackageCategory,
    BindStatus,
    RefreshStatus,
    ContractBinding,
    BindResult,
    RefreshResult,
    StoreClientError,
    ConfigurationError,
    FetchError,
    UnsupportedNetworkWarning
)

from .models import (
    PackageId,
    PackageMetadata,
    PackageRecord,
    PackageCollection
)

from .interfaces import (
    IWalletCapability,
    IRegistryCapability,
    IContractConnector
)

from .addresses import (
    AddressTable,
    DEFAULT_ADDRESS_TABLES,
    KNS_REGISTRY_ADDRESSES,
    DOT_OS_ADDRESSES,
    NAMEWRAPPER_ADDRESSES,
    ENS_REGISTRY_ADDRESSES,
    KNS_ENS_ENTRY_ADDRESSES,
    KNS_ENS_EXIT_ADDRESSES,
    PACKAGE_STORE_ADDRESSES
)

from .utils import (
    validate_address,
    normalize_address,
    app_id,
    matches_query
)

from .sequencing import SequenceCounter, SequenceGuard
from .chain_binder import ChainBinder
from .catalog import AppCatalogIndex, partition_packages, filter_collection
from .contracts import Web3ContractConnector
from .wallet import Web3Wallet
from .registry import RegistryClient
from .network import NetworkObserver
from .config import StoreClientSettings, get_settings, configure_logging
from .client import StoreClient

__all__ = [
    # Types
    "ChainId",
    "ContractRole",
    "AccessMode",
    "PackageCategory",
    "BindStatus",
    "RefreshStatus",
    "ContractBinding",
    "BindResult",
    "RefreshResult",
    "StoreClientError",
    "ConfigurationError",
    "FetchError",
    "UnsupportedNetworkWarning",

    # Models
    "PackageId",
    "PackageMetadata",
    "PackageRecord",
    "PackageCollection",

    # Interfaces
    "IWalletCapability",
    "IRegistryCapability",
    "IContractConnector",

    # Addresses
    "AddressTable",
    "DEFAULT_ADDRESS_TABLES",
    "KNS_REGISTRY_ADDRESSES",
    "DOT_OS_ADDRESSES",
    "NAMEWRAPPER_ADDRESSES",
    "ENS_REGISTRY_ADDRESSES",
    "KNS_ENS_ENTRY_ADDRESSES",
    "KNS_ENS_EXIT_ADDRESSES",
    "PACKAGE_STORE_ADDRESSES",

    # Utils
    "validate_address",
    "normalize_address",
    "app_id",
    "matches_query",

    # Core
    "SequenceCounter",
    "SequenceGuard",
    "ChainBinder",
    "AppCatalogIndex",
    "partition_packages",
    "filter_collection",

    # Collaborators
    "Web3ContractConnector",
    "Web3Wallet",
    "RegistryClient",
    "NetworkObserver",

    # Config & facade
    "StoreClientSettings",
    "get_settings",
    "configure_logging",
    "StoreClient"
]

__version__ = "1.0.0"
