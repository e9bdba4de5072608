"""
Interfaces (protocols) for the collaborators the store client depends on.
Using Python's Protocol for structural subtyping.
"""

from typing import Protocol, Any, Callable, List, Optional, Tuple
from abc import abstractmethod

from .types import PackageCategory
from .models import PackageRecord

ChainChangedCallback = Callable[[Optional[int]], None]


class IWalletCapability(Protocol):
    """Interface for a connected wallet"""

    @abstractmethod
    async def current_chain_id(self) -> Optional[int]:
        """Get the chain the wallet is on, None when disconnected"""
        ...

    @abstractmethod
    async def signer(self) -> Any:
        """Get an opaque signing handle for contract writes"""
        ...

    @abstractmethod
    def on_chain_changed(self, callback: ChainChangedCallback) -> Callable[[], None]:
        """Subscribe to network switches; returns an unsubscribe callable"""
        ...


class IRegistryCapability(Protocol):
    """Interface for the backend package registry"""

    @abstractmethod
    async def fetch_packages(self) -> List[Tuple[PackageCategory, PackageRecord]]:
        """Fetch every known package tagged with its lifecycle category"""
        ...


class IContractConnector(Protocol):
    """Interface for building contract handles"""

    @abstractmethod
    def provider(self, rpc_url: str) -> Any:
        """Get a read-only provider for a public RPC endpoint"""
        ...

    @abstractmethod
    def connect(self, address: str, runner: Any) -> Any:
        """Attach the contract at address to a provider or signer"""
        ...
