"""
Core types, enums and errors for the package store client.
"""

from enum import Enum, IntEnum
from typing import Optional, Any
from dataclasses import dataclass


class ChainId(IntEnum):
    """Well-known chain identifiers"""
    MAINNET = 1
    GOERLI = 5
    OPTIMISM = 10
    SEPOLIA = 11155111


class ContractRole(Enum):
    """Logical contracts the store talks to"""
    KNS_REGISTRY = "kns_registry"
    DOT_OS = "dot_os"
    NAMEWRAPPER = "namewrapper"
    ENS_REGISTRY = "ens_registry"
    KNS_ENS_ENTRY = "kns_ens_entry"
    KNS_ENS_EXIT = "kns_ens_exit"
    PACKAGE_STORE = "package_store"


class AccessMode(Enum):
    """How calls on a contract handle are authorized"""
    READ_ONLY = "read_only"
    SIGNER_BOUND = "signer_bound"


class PackageCategory(Enum):
    """Lifecycle categories, in precedence order"""
    DOWNLOADED = "downloaded"
    INSTALLED = "installed"
    LOCAL = "local"
    SYSTEM = "system"


class BindStatus(Enum):
    """Outcome of a network observation"""
    BOUND = "bound"
    UNSUPPORTED_NETWORK = "unsupported_network"
    DISCONNECTED = "disconnected"
    SIGNER_UNAVAILABLE = "signer_unavailable"
    STALE_UPDATE_DISCARDED = "stale_update_discarded"


class RefreshStatus(Enum):
    """Outcome of a catalog refresh"""
    OK = "ok"
    FAILED = "failed"


@dataclass(frozen=True)
class ContractBinding:
    """The active (chain, address, access mode) triple for one contract role"""
    chain_id: int
    address: str
    access_mode: AccessMode
    contract: Any = None

    @property
    def is_signer_bound(self) -> bool:
        return self.access_mode is AccessMode.SIGNER_BOUND


class StoreClientError(Exception):
    """Base exception for package store client operations"""
    def __init__(self, message: str, chain_id: Optional[int] = None,
                 error_code: Optional[str] = None):
        self.chain_id = chain_id
        self.error_code = error_code
        super().__init__(message)


class ConfigurationError(StoreClientError):
    """Required configuration is missing or invalid"""
    pass


class FetchError(StoreClientError):
    """Package registry call failed"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message, error_code="FETCH_FAILED")


class UnsupportedNetworkWarning(UserWarning):
    """Wallet is on a chain the contract is not deployed on"""
    def __init__(self, role: ContractRole, chain_id: int):
        self.role = role
        self.chain_id = chain_id
        super().__init__(f"{role.value} is not deployed on chain {chain_id}")


@dataclass(frozen=True)
class BindResult:
    """Result of ChainBinder.on_network_observed"""
    status: BindStatus
    binding: ContractBinding
    sequence: int
    warning: Optional[UnsupportedNetworkWarning] = None
    error: Optional[Exception] = None

    @property
    def can_write(self) -> bool:
        return self.binding.is_signer_bound


@dataclass(frozen=True)
class RefreshResult:
    """Result of AppCatalogIndex.refresh"""
    status: RefreshStatus
    version: int
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.status is RefreshStatus.OK
