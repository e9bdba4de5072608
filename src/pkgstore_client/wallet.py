"""
Wallet capability backed by a web3.py provider.

Chain switches are not pushed by HTTP providers, so the wallet polls the
provider's chain id and notifies subscribers when it changes.
"""

import asyncio
import logging
from typing import Callable, List, Optional

from eth_account.signers.local import LocalAccount
from web3 import Web3
from web3.middleware import SignAndSendRawMiddlewareBuilder

from .interfaces import ChainChangedCallback
from .types import StoreClientError

logger = logging.getLogger(__name__)


class Web3Wallet:
    """Wallet over a Web3 instance, optionally signing with a local account"""

    def __init__(self,
                 w3: Web3,
                 account: Optional[LocalAccount] = None,
                 poll_interval: float = 2.0):
        self.w3 = w3
        self.account = account
        self.poll_interval = poll_interval

        self._callbacks: List[ChainChangedCallback] = []
        self._last_chain_id: Optional[int] = None
        self._poll_task: Optional[asyncio.Task] = None
        self._signer_ready = False

    async def current_chain_id(self) -> Optional[int]:
        """Get the provider's chain id, None if it cannot be reached"""
        try:
            if not self.w3.is_connected():
                return None
            return self.w3.eth.chain_id
        except Exception as e:
            logger.warning(f"Could not read chain id from wallet provider: {e}")
            return None

    async def signer(self) -> Web3:
        """Get the Web3 instance set up to sign with the wallet's account"""
        if self._signer_ready:
            return self.w3

        if self.account is not None:
            self.w3.middleware_onion.inject(
                SignAndSendRawMiddlewareBuilder.build(self.account),
                layer=0
            )
            self.w3.eth.default_account = self.account.address
        else:
            accounts = self.w3.eth.accounts
            if not accounts:
                raise StoreClientError("Wallet has no account to sign with")
            self.w3.eth.default_account = accounts[0]

        self._signer_ready = True
        logger.info(f"Wallet signer ready for {self.w3.eth.default_account}")
        return self.w3

    def on_chain_changed(self, callback: ChainChangedCallback) -> Callable[[], None]:
        """Register a chain change callback; returns the matching unsubscribe"""
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    async def start(self) -> None:
        """Start polling the provider for chain switches"""
        if self._poll_task is None:
            self._last_chain_id = await self.current_chain_id()
            self._poll_task = asyncio.create_task(self._poll_loop())
            logger.info(f"Wallet polling started on chain {self._last_chain_id}")

    async def stop(self) -> None:
        if self._poll_task:
            self._poll_task.cancel()
            try:
                await self._poll_task
            except asyncio.CancelledError:
                pass
            self._poll_task = None
            logger.info("Wallet polling stopped")

    async def poll_once(self) -> Optional[int]:
        """Read the chain id and notify subscribers if it changed"""
        chain_id = await self.current_chain_id()
        if chain_id != self._last_chain_id:
            logger.info(f"Wallet network changed from {self._last_chain_id} to {chain_id}")
            self._last_chain_id = chain_id
            for callback in list(self._callbacks):
                try:
                    callback(chain_id)
                except Exception as e:
                    logger.error(f"Error in chain change callback: {e}")
        return chain_id

    async def _poll_loop(self) -> None:
        while True:
            try:
                await asyncio.sleep(self.poll_interval)
                await self.poll_once()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in wallet poll loop: {e}")
