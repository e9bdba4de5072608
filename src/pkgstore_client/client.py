"""
Store client facade.

Wires the wallet, the contract binders and the catalog index together and
exposes what the UI layer consumes.
"""

import logging
from typing import Dict, Iterable, Mapping, Optional

from eth_account.signers.local import LocalAccount
from web3 import Web3

from .addresses import AddressTable, get_address_table
from .catalog import AppCatalogIndex
from .chain_binder import ChainBinder
from .config import StoreClientSettings, get_settings
from .contracts import Web3ContractConnector
from .interfaces import IContractConnector, IRegistryCapability, IWalletCapability
from .models import PackageCollection
from .network import NetworkObserver, NetworkStatusListener
from .registry import RegistryClient
from .sequencing import SequenceCounter
from .types import BindResult, ConfigurationError, ContractBinding, ContractRole, RefreshResult
from .wallet import Web3Wallet

logger = logging.getLogger(__name__)


class StoreClient:
    """
    Entry point for the package store UI.

    Usage:
        client = StoreClient(wallet, RegistryClient(settings.registry_url))
        await client.start()
        store = client.get_contract_binding(ContractRole.PACKAGE_STORE)
        await client.refresh()
        client.set_query("chess")
        view = client.get_filtered_view()
    """

    def __init__(self,
                 wallet: IWalletCapability,
                 registry: IRegistryCapability,
                 settings: Optional[StoreClientSettings] = None,
                 roles: Iterable[ContractRole] = (ContractRole.PACKAGE_STORE,),
                 connectors: Optional[Mapping[ContractRole, IContractConnector]] = None,
                 address_tables: Optional[Mapping[ContractRole, AddressTable]] = None):
        self.wallet = wallet
        self.settings = settings or get_settings()
        self.catalog = AppCatalogIndex(registry)

        tables = address_tables if address_tables is not None else self.settings.address_tables()
        connectors = connectors or {}
        self._counter = SequenceCounter()
        self._binders: Dict[ContractRole, ChainBinder] = {}

        for role in roles:
            connector = connectors.get(role) or Web3ContractConnector(
                request_timeout=self.settings.request_timeout
            )
            self._binders[role] = ChainBinder(
                role=role,
                table=get_address_table(role, tables),
                connector=connector,
                wallet=wallet,
                rpc_url=self.settings.rpc_url,
                counter=self._counter
            )

        self.network = NetworkObserver(wallet, self._binders.values(), self._counter)
        self._started = False
        self._owned_wallet: Optional[Web3Wallet] = None
        self._owned_registry: Optional[RegistryClient] = None

    @classmethod
    def from_web3(cls,
                  w3: Web3,
                  account: Optional[LocalAccount] = None,
                  settings: Optional[StoreClientSettings] = None,
                  roles: Iterable[ContractRole] = (ContractRole.PACKAGE_STORE,)) -> "StoreClient":
        """Build a client whose wallet polls w3 and whose registry is reached over HTTP"""
        settings = settings or get_settings()
        wallet = Web3Wallet(w3, account=account, poll_interval=settings.wallet_poll_interval)
        registry = RegistryClient(
            settings.registry_url,
            apps_path=settings.apps_path,
            timeout=settings.request_timeout
        )
        client = cls(wallet, registry, settings=settings, roles=roles)
        client._owned_wallet = wallet
        client._owned_registry = registry
        return client

    @property
    def started(self) -> bool:
        return self._started

    async def start(self) -> None:
        """
        Bind every role read-only, apply the wallet's current network and
        subscribe to network changes. Safe to call more than once.

        Raises:
            ConfigurationError: If a role has no address on the default chain
        """
        if self._started:
            return

        for binder in self._binders.values():
            binder.initialize(self.settings.default_chain_id)

        self.network.subscribe()
        if self._owned_wallet is not None:
            await self._owned_wallet.start()
        self._started = True

        chain_id = await self.wallet.current_chain_id()
        if chain_id is not None:
            await self.network.observe(chain_id)
        logger.info(f"Store client started with wallet on chain {chain_id}")

    async def close(self) -> None:
        self.network.cancel()
        if self._owned_wallet is not None:
            await self._owned_wallet.stop()
        if self._owned_registry is not None:
            await self._owned_registry.close()
        self._started = False
        logger.info("Store client closed")

    def on_network_status(self, listener: NetworkStatusListener) -> None:
        """Get notified of every binding outcome, e.g. to disable write actions"""
        self.network.add_listener(listener)

    async def observe_network(self, chain_id: Optional[int]) -> Dict[ContractRole, BindResult]:
        """Apply a network observation to every role right away"""
        return await self.network.observe(chain_id)

    def get_contract_binding(self, role: ContractRole) -> ContractBinding:
        binder = self._binders.get(role)
        if binder is None:
            raise ConfigurationError(f"No binder configured for {role.value}")
        return binder.binding

    def can_write(self, role: ContractRole) -> bool:
        binder = self._binders.get(role)
        return binder is not None and binder.can_write

    async def refresh(self) -> RefreshResult:
        return await self.catalog.refresh()

    def set_query(self, query: Optional[str]) -> PackageCollection:
        return self.catalog.set_query(query)

    def get_filtered_view(self) -> PackageCollection:
        return self.catalog.get_filtered_view()
