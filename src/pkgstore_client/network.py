"""
Wallet network event stream.

Turns the wallet's chain-changed callbacks into sequenced rebind requests for
every registered ChainBinder.
"""

import asyncio
import logging
from typing import Callable, Dict, Iterable, List, Optional, Set

from .chain_binder import ChainBinder
from .interfaces import IWalletCapability
from .sequencing import SequenceCounter
from .types import BindResult, ContractRole

logger = logging.getLogger(__name__)

NetworkStatusListener = Callable[[BindResult], None]


class NetworkObserver:
    """
    Cancellable subscription to wallet network changes.

    Each event is tagged with a ticket from the shared counter the moment it
    arrives, so binders can tell a late result from a fresh one.
    """

    def __init__(self,
                 wallet: IWalletCapability,
                 binders: Iterable[ChainBinder],
                 counter: SequenceCounter):
        self.wallet = wallet
        self.binders = list(binders)
        self.counter = counter

        self._listeners: List[NetworkStatusListener] = []
        self._pending: Set[asyncio.Task] = set()
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def subscribed(self) -> bool:
        return self._unsubscribe is not None

    def add_listener(self, listener: NetworkStatusListener) -> None:
        self._listeners.append(listener)

    def subscribe(self) -> None:
        """Subscribe to the wallet; repeated calls keep the single subscription"""
        if self._unsubscribe is None:
            self._unsubscribe = self.wallet.on_chain_changed(self._on_chain_changed)
            logger.info(f"Observing wallet network for {len(self.binders)} contract(s)")

    async def observe(self, chain_id: Optional[int]) -> Dict[ContractRole, BindResult]:
        """Tag one observation and apply it to every binder"""
        return await self._dispatch(chain_id, self.counter.issue())

    def cancel(self) -> None:
        """Unsubscribe and abandon rebinds still in flight"""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for task in list(self._pending):
            task.cancel()
        self._pending.clear()

    async def drain(self) -> None:
        """Wait for every dispatched rebind to finish"""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _on_chain_changed(self, chain_id: Optional[int]) -> None:
        ticket = self.counter.issue()
        task = asyncio.ensure_future(self._dispatch(chain_id, ticket))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _dispatch(self, chain_id: Optional[int], ticket: int) -> Dict[ContractRole, BindResult]:
        results: Dict[ContractRole, BindResult] = {}
        for binder in self.binders:
            try:
                result = await binder.on_network_observed(chain_id, sequence=ticket)
            except Exception as e:
                logger.error(f"Rebinding {binder.role.value} to chain {chain_id} failed: {e}")
                continue
            results[binder.role] = result
            self._notify(result)
        return results

    def _notify(self, result: BindResult) -> None:
        for listener in self._listeners:
            try:
                listener(result)
            except Exception as e:
                logger.error(f"Error in network status listener: {e}")
