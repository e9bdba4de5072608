"""
Pytest configuration and fakes for the store client tests
"""

import asyncio
from typing import Any, List, Optional

import pytest

from pkgstore_client import (
    AddressTable,
    ContractRole,
    ChainId,
    PackageCategory,
    PackageId,
    PackageMetadata,
    PackageRecord,
    StoreClientSettings,
)

RPC_URL = "https://rpc.example.org"
SIGNER = "wallet-signer"

STORE_SEPOLIA = "0x1111111111111111111111111111111111111111"
STORE_OPTIMISM = "0x2222222222222222222222222222222222222222"


class FakeWallet:
    """In-memory wallet whose signer can be held back per call"""

    def __init__(self, chain_id: Optional[int] = None):
        self.chain_id = chain_id
        self.signer_calls = 0
        self.signer_error: Optional[Exception] = None
        self.callbacks: List[Any] = []
        self._gates: List[asyncio.Event] = []

    def hold_next_signer(self) -> asyncio.Event:
        gate = asyncio.Event()
        self._gates.append(gate)
        return gate

    async def current_chain_id(self) -> Optional[int]:
        return self.chain_id

    async def signer(self) -> Any:
        self.signer_calls += 1
        gate = self._gates.pop(0) if self._gates else None
        if gate is not None:
            await gate.wait()
        if self.signer_error is not None:
            raise self.signer_error
        return SIGNER

    def on_chain_changed(self, callback):
        self.callbacks.append(callback)
        return lambda: self.callbacks.remove(callback)

    def switch_to(self, chain_id: Optional[int]) -> None:
        self.chain_id = chain_id
        for callback in list(self.callbacks):
            callback(chain_id)


class FakeConnector:
    """Records every provider and contract handle it hands out"""

    def __init__(self):
        self.providers: List[str] = []
        self.connections: List[tuple] = []
        self.connect_error: Optional[Exception] = None

    def provider(self, rpc_url: str) -> Any:
        self.providers.append(rpc_url)
        return ("provider", rpc_url)

    def connect(self, address: str, runner: Any) -> Any:
        if self.connect_error is not None:
            raise self.connect_error
        handle = ("contract", address, runner)
        self.connections.append(handle)
        return handle


class FakeRegistry:
    """Registry returning queued responses; an exception in the queue is raised"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = 0

    async def fetch_packages(self):
        self.calls += 1
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class GatedRegistry:
    """Registry where each fetch waits until the test releases it"""

    def __init__(self):
        self.pending: List[list] = []

    async def fetch_packages(self):
        gate = asyncio.Event()
        slot = [gate, None]
        self.pending.append(slot)
        await gate.wait()
        return slot[1]

    def release(self, index: int, packages) -> None:
        gate, _ = self.pending[index]
        self.pending[index][1] = packages
        gate.set()


def make_record(name: str, publisher: str = "sys",
                description: Optional[str] = None, with_metadata: bool = True) -> PackageRecord:
    metadata = PackageMetadata(name=name, description=description) if with_metadata else None
    return PackageRecord(id=PackageId(publisher=publisher, package_name=name), metadata=metadata)


@pytest.fixture
def wallet():
    return FakeWallet()


@pytest.fixture
def connector():
    return FakeConnector()


@pytest.fixture
def store_table():
    return AddressTable(ContractRole.PACKAGE_STORE, {
        ChainId.SEPOLIA: STORE_SEPOLIA,
        ChainId.OPTIMISM: STORE_OPTIMISM,
    })


@pytest.fixture
def settings():
    return StoreClientSettings(
        _env_file=None,
        rpc_url=RPC_URL,
        default_chain_id=ChainId.SEPOLIA,
        package_store_addresses={ChainId.SEPOLIA: STORE_SEPOLIA, ChainId.OPTIMISM: STORE_OPTIMISM},
    )


@pytest.fixture
def tagged_packages():
    return [
        (PackageCategory.DOWNLOADED, make_record("chess", "template.os", "a game")),
        (PackageCategory.INSTALLED, make_record("terminal", "sys", "command line shell")),
        (PackageCategory.INSTALLED, make_record("echo", "sys", "echoes messages")),
        (PackageCategory.INSTALLED, make_record("kino_files", "gloria.os", None)),
        (PackageCategory.LOCAL, make_record("my_app", "me.os", with_metadata=False)),
        (PackageCategory.SYSTEM, make_record("app_store", "sys", "Install and publish packages")),
    ]
