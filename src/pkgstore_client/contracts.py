"""
web3 contract connector.

Builds contract handles either against a public RPC endpoint (read-only) or
against a wallet-backed Web3 instance (signer-bound).
"""

import logging
from typing import Any, Dict, List, Optional
from web3 import Web3

from .utils import normalize_address

logger = logging.getLogger(__name__)


class Web3ContractConnector:
    """Connector for EVM contracts using web3.py"""

    def __init__(self, abi: Optional[List[Dict[str, Any]]] = None,
                 request_timeout: float = 30.0):
        self.abi = abi or []
        self.request_timeout = request_timeout
        self._providers: Dict[str, Web3] = {}

    def provider(self, rpc_url: str) -> Web3:
        """Get a read-only Web3 instance, one per RPC URL"""
        w3 = self._providers.get(rpc_url)
        if w3 is None:
            w3 = Web3(Web3.HTTPProvider(
                rpc_url,
                request_kwargs={"timeout": self.request_timeout}
            ))
            self._providers[rpc_url] = w3
            logger.info(f"Created read-only provider for {rpc_url}")
        return w3

    def connect(self, address: str, runner: Web3) -> Any:
        """Attach the contract at address to a provider or a wallet-backed Web3"""
        return runner.eth.contract(address=normalize_address(address), abi=self.abi)
