"""
Chain-aware contract binding.

A ChainBinder owns the single active ContractBinding for one contract role.
It starts read-only against a public RPC endpoint and moves to a signer-bound
handle when the wallet reports a chain the contract is deployed on.
"""

import logging
from typing import Optional

from .addresses import AddressTable
from .interfaces import IContractConnector, IWalletCapability
from .sequencing import SequenceCounter, SequenceGuard
from .types import (
    AccessMode, BindResult, BindStatus, ConfigurationError, ContractBinding,
    ContractRole, UnsupportedNetworkWarning
)
from .utils import validate_address, normalize_address

logger = logging.getLogger(__name__)


class ChainBinder:
    """
    Keeps exactly one ContractBinding for a role, scoped to the wallet's network.

    Every network observation takes a ticket when it starts. A rebind only
    lands if its ticket is newer than the last applied one, so a slow rebind
    for an old network never overwrites a fresher binding.
    """

    def __init__(self,
                 role: ContractRole,
                 table: AddressTable,
                 connector: IContractConnector,
                 wallet: IWalletCapability,
                 rpc_url: str,
                 counter: Optional[SequenceCounter] = None):
        self.role = role
        self.table = table
        self.connector = connector
        self.wallet = wallet
        self.rpc_url = rpc_url

        self._guard = SequenceGuard(counter)
        self._read_only: Optional[ContractBinding] = None
        self._binding: Optional[ContractBinding] = None

    def initialize(self, default_chain_id: int,
                   default_address: Optional[str] = None) -> ContractBinding:
        """
        Create the read-only binding used until a supported network is observed.

        Args:
            default_chain_id: Chain served by the public RPC endpoint
            default_address: Contract address; looked up in the table when omitted

        Raises:
            ConfigurationError: If no address is known for the default chain
        """
        if default_address is None:
            default_address = self.table.require(default_chain_id)
        elif validate_address(default_address):
            default_address = normalize_address(default_address)
        else:
            raise ConfigurationError(
                f"Invalid default {self.role.value} address {default_address!r}",
                chain_id=default_chain_id,
                error_code="INVALID_ADDRESS"
            )

        contract = self.connector.connect(default_address, self.connector.provider(self.rpc_url))
        self._read_only = ContractBinding(
            chain_id=default_chain_id,
            address=default_address,
            access_mode=AccessMode.READ_ONLY,
            contract=contract
        )
        self._binding = self._read_only
        logger.info(
            f"Bound {self.role.value} read-only to {default_address} "
            f"on chain {default_chain_id}"
        )
        return self._binding

    @property
    def binding(self) -> ContractBinding:
        if self._binding is None:
            raise ConfigurationError(f"{self.role.value} binder is not initialized")
        return self._binding

    @property
    def initialized(self) -> bool:
        return self._binding is not None

    @property
    def can_write(self) -> bool:
        return self._binding is not None and self._binding.is_signer_bound

    def issue_ticket(self) -> int:
        return self._guard.issue()

    async def on_network_observed(self, chain_id: Optional[int],
                                  sequence: Optional[int] = None) -> BindResult:
        """
        React to the wallet reporting a network.

        A signer-bound binding only ever exists for the wallet's current chain.
        Any observation that cannot produce one reverts to the default
        read-only binding, so the address and chain id become the default
        chain's rather than staying on the chain the wallet just left. A
        read-only binding that is already active is left as it is.

        Args:
            chain_id: Chain reported by the wallet, None if it disconnected
            sequence: Ticket assigned when the event was observed; a fresh one
                is issued when omitted

        Returns:
            BindResult describing the binding in force afterwards
        """
        current = self.binding
        ticket = sequence if sequence is not None else self.issue_ticket()

        if chain_id is None:
            return self._settle_read_only(ticket, BindStatus.DISCONNECTED)

        if chain_id not in self.table:
            warning = UnsupportedNetworkWarning(self.role, chain_id)
            return self._settle_read_only(ticket, BindStatus.UNSUPPORTED_NETWORK, warning)

        if current.is_signer_bound and current.chain_id == chain_id:
            if not self._guard.accept(ticket):
                return self._discard(ticket, chain_id)
            return BindResult(status=BindStatus.BOUND, binding=current, sequence=ticket)

        address = self.table[chain_id]
        try:
            signer = await self.wallet.signer()
        except Exception as e:
            return self._signer_failed(ticket, chain_id, e)
        if ticket <= self._guard.applied:
            return self._discard(ticket, chain_id)

        try:
            contract = self.connector.connect(address, signer)
        except Exception as e:
            return self._signer_failed(ticket, chain_id, e)
        if not self._guard.accept(ticket):
            return self._discard(ticket, chain_id)

        self._binding = ContractBinding(
            chain_id=chain_id,
            address=address,
            access_mode=AccessMode.SIGNER_BOUND,
            contract=contract
        )
        logger.info(f"Bound {self.role.value} with signer to {address} on chain {chain_id}")
        return BindResult(status=BindStatus.BOUND, binding=self._binding, sequence=ticket)

    def _settle_read_only(self, ticket: int, status: BindStatus,
                          warning: Optional[UnsupportedNetworkWarning] = None) -> BindResult:
        if not self._guard.accept(ticket):
            return self._discard(ticket, None)

        if self._binding is not self._read_only:
            logger.info(
                f"Reverting {self.role.value} to read-only binding on chain "
                f"{self._read_only.chain_id}"
            )
            self._binding = self._read_only
        if warning is not None:
            logger.warning(f"{warning}; write actions disabled for {self.role.value}")
        return BindResult(status=status, binding=self._binding, sequence=ticket, warning=warning)

    def _signer_failed(self, ticket: int, chain_id: int, error: Exception) -> BindResult:
        if not self._guard.accept(ticket):
            return self._discard(ticket, chain_id)

        self._binding = self._read_only
        logger.error(
            f"Could not bind {self.role.value} with signer on chain {chain_id}, "
            f"reverted to read-only: {error}"
        )
        return BindResult(
            status=BindStatus.SIGNER_UNAVAILABLE,
            binding=self._binding,
            sequence=ticket,
            error=error
        )

    def _discard(self, ticket: int, chain_id: Optional[int]) -> BindResult:
        logger.debug(
            f"Discarded stale {self.role.value} rebind for chain {chain_id} "
            f"(ticket {ticket}, applied {self._guard.applied})"
        )
        return BindResult(
            status=BindStatus.STALE_UPDATE_DISCARDED,
            binding=self.binding,
            sequence=ticket
        )
