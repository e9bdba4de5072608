"""
Tests for the chain-aware contract binder
"""

import asyncio

import pytest

from pkgstore_client import (
    AccessMode,
    AddressTable,
    BindStatus,
    ChainBinder,
    ChainId,
    ConfigurationError,
    ContractRole,
    SequenceCounter,
    UnsupportedNetworkWarning,
)
from conftest import RPC_URL, SIGNER, STORE_OPTIMISM, STORE_SEPOLIA

UNSUPPORTED_CHAIN = 31337


@pytest.fixture
def binder(store_table, connector, wallet):
    binder = ChainBinder(
        role=ContractRole.PACKAGE_STORE,
        table=store_table,
        connector=connector,
        wallet=wallet,
        rpc_url=RPC_URL
    )
    binder.initialize(ChainId.SEPOLIA)
    return binder


class TestInitialize:
    """Test the read-only startup binding"""

    def test_initialize_binds_read_only_default(self, store_table, connector, wallet):
        """Test initialize uses the table address and the public endpoint"""
        binder = ChainBinder(ContractRole.PACKAGE_STORE, store_table, connector, wallet, RPC_URL)

        binding = binder.initialize(ChainId.SEPOLIA)

        assert binding.chain_id == ChainId.SEPOLIA
        assert binding.address == STORE_SEPOLIA
        assert binding.access_mode == AccessMode.READ_ONLY
        assert binding.contract == ("contract", STORE_SEPOLIA, ("provider", RPC_URL))
        assert binder.binding is binding
        assert not binder.can_write

    def test_initialize_with_explicit_address(self, store_table, connector, wallet):
        """Test an explicit default address overrides the table"""
        binder = ChainBinder(ContractRole.PACKAGE_STORE, store_table, connector, wallet, RPC_URL)

        binding = binder.initialize(ChainId.MAINNET, "3333333333333333333333333333333333333333")

        assert binding.chain_id == ChainId.MAINNET
        assert binding.address == "0x3333333333333333333333333333333333333333"

    def test_initialize_missing_address_is_configuration_error(self, connector, wallet):
        """Test a role without a default-chain address fails at startup"""
        empty = AddressTable(ContractRole.PACKAGE_STORE)
        binder = ChainBinder(ContractRole.PACKAGE_STORE, empty, connector, wallet, RPC_URL)

        with pytest.raises(ConfigurationError):
            binder.initialize(ChainId.SEPOLIA)

    def test_initialize_invalid_address_is_configuration_error(self, store_table, connector, wallet):
        """Test a malformed default address is rejected"""
        binder = ChainBinder(ContractRole.PACKAGE_STORE, store_table, connector, wallet, RPC_URL)

        with pytest.raises(ConfigurationError):
            binder.initialize(ChainId.SEPOLIA, "0x1234")

    def test_binding_before_initialize(self, store_table, connector, wallet):
        """Test reading the binding before initialize is a configuration error"""
        binder = ChainBinder(ContractRole.PACKAGE_STORE, store_table, connector, wallet, RPC_URL)

        assert not binder.initialized
        with pytest.raises(ConfigurationError):
            binder.binding


class TestNetworkObserved:
    """Test rebinding on wallet network reports"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("chain_id,address", [
        (ChainId.SEPOLIA, STORE_SEPOLIA),
        (ChainId.OPTIMISM, STORE_OPTIMISM),
    ])
    async def test_supported_chain_binds_signer(self, binder, chain_id, address):
        """Test every supported chain yields a signer-bound binding at its address"""
        result = await binder.on_network_observed(chain_id)

        assert result.status == BindStatus.BOUND
        assert result.binding.chain_id == chain_id
        assert result.binding.address == address
        assert result.binding.access_mode == AccessMode.SIGNER_BOUND
        assert result.binding.contract == ("contract", address, SIGNER)
        assert binder.binding == result.binding
        assert binder.can_write

    @pytest.mark.asyncio
    async def test_unsupported_chain_keeps_read_only(self, binder):
        """Test an unsupported chain leaves the read-only binding and warns"""
        before = binder.binding

        result = await binder.on_network_observed(UNSUPPORTED_CHAIN)

        assert result.status == BindStatus.UNSUPPORTED_NETWORK
        assert isinstance(result.warning, UnsupportedNetworkWarning)
        assert result.warning.chain_id == UNSUPPORTED_CHAIN
        assert binder.binding is before
        assert binder.binding.address == STORE_SEPOLIA
        assert binder.binding.chain_id == ChainId.SEPOLIA
        assert not result.can_write

    @pytest.mark.asyncio
    async def test_unsupported_chain_after_signer_reverts_to_read_only(self, binder):
        """Test leaving a supported chain drops write access"""
        await binder.on_network_observed(ChainId.OPTIMISM)

        result = await binder.on_network_observed(UNSUPPORTED_CHAIN)

        assert result.status == BindStatus.UNSUPPORTED_NETWORK
        assert binder.binding.access_mode == AccessMode.READ_ONLY
        assert binder.binding.chain_id == ChainId.SEPOLIA

    @pytest.mark.asyncio
    async def test_disconnect_reverts_to_read_only(self, binder):
        """Test a disconnected wallet drops the signer-bound binding"""
        await binder.on_network_observed(ChainId.SEPOLIA)
        assert binder.can_write

        result = await binder.on_network_observed(None)

        assert result.status == BindStatus.DISCONNECTED
        assert binder.binding.access_mode == AccessMode.READ_ONLY
        assert result.warning is None

    @pytest.mark.asyncio
    async def test_same_chain_twice_is_idempotent(self, binder, wallet, connector):
        """Test a repeated observation reuses the binding without reconnecting"""
        first = await binder.on_network_observed(ChainId.OPTIMISM)
        connections = len(connector.connections)

        second = await binder.on_network_observed(ChainId.OPTIMISM)

        assert second.status == BindStatus.BOUND
        assert second.binding is first.binding
        assert wallet.signer_calls == 1
        assert len(connector.connections) == connections

    @pytest.mark.asyncio
    async def test_switching_chains_rebinds(self, binder):
        """Test moving between supported chains rebinds each time"""
        await binder.on_network_observed(ChainId.SEPOLIA)
        result = await binder.on_network_observed(ChainId.OPTIMISM)

        assert result.binding.address == STORE_OPTIMISM
        assert binder.binding.chain_id == ChainId.OPTIMISM


class TestLastWriterWins:
    """Test stale rebinds never overwrite fresher bindings"""

    @pytest.mark.asyncio
    async def test_late_completion_is_discarded(self, binder, wallet):
        """Test a slow rebind started first loses to a newer one that finished"""
        gate = wallet.hold_next_signer()
        slow = asyncio.create_task(binder.on_network_observed(ChainId.OPTIMISM))
        await asyncio.sleep(0)

        fast = await binder.on_network_observed(ChainId.SEPOLIA)
        assert fast.status == BindStatus.BOUND

        gate.set()
        late = await slow

        assert late.status == BindStatus.STALE_UPDATE_DISCARDED
        assert late.binding is fast.binding
        assert binder.binding.chain_id == ChainId.SEPOLIA
        assert binder.binding.address == STORE_SEPOLIA

    @pytest.mark.asyncio
    async def test_in_order_completion_applies_newest(self, binder, wallet):
        """Test the newer observation wins when both complete in order"""
        first_gate = wallet.hold_next_signer()
        second_gate = wallet.hold_next_signer()
        first = asyncio.create_task(binder.on_network_observed(ChainId.OPTIMISM))
        await asyncio.sleep(0)
        second = asyncio.create_task(binder.on_network_observed(ChainId.SEPOLIA))
        await asyncio.sleep(0)

        first_gate.set()
        first_result = await first
        assert binder.binding.chain_id == ChainId.OPTIMISM

        second_gate.set()
        second_result = await second

        assert first_result.status == BindStatus.BOUND
        assert second_result.status == BindStatus.BOUND
        assert binder.binding.chain_id == ChainId.SEPOLIA

    @pytest.mark.asyncio
    async def test_unsupported_observation_supersedes_pending_rebind(self, binder, wallet):
        """Test switching to an unsupported chain cancels the effect of a pending rebind"""
        gate = wallet.hold_next_signer()
        pending = asyncio.create_task(binder.on_network_observed(ChainId.OPTIMISM))
        await asyncio.sleep(0)

        result = await binder.on_network_observed(UNSUPPORTED_CHAIN)
        gate.set()
        late = await pending

        assert result.status == BindStatus.UNSUPPORTED_NETWORK
        assert late.status == BindStatus.STALE_UPDATE_DISCARDED
        assert binder.binding.access_mode == AccessMode.READ_ONLY

    @pytest.mark.asyncio
    async def test_explicit_old_sequence_is_discarded(self, store_table, connector, wallet):
        """Test a ticket issued before the applied one is dropped"""
        counter = SequenceCounter()
        binder = ChainBinder(
            ContractRole.PACKAGE_STORE, store_table, connector, wallet, RPC_URL, counter=counter
        )
        binder.initialize(ChainId.SEPOLIA)
        old_ticket = counter.issue()
        new_ticket = counter.issue()

        await binder.on_network_observed(ChainId.SEPOLIA, sequence=new_ticket)
        result = await binder.on_network_observed(ChainId.OPTIMISM, sequence=old_ticket)

        assert result.status == BindStatus.STALE_UPDATE_DISCARDED
        assert binder.binding.chain_id == ChainId.SEPOLIA


class TestSignerFailure:
    """Test rebinds whose signer or contract attachment fails"""

    @pytest.mark.asyncio
    async def test_signer_error_drops_previous_signer_binding(self, binder, wallet):
        """Test a signer failure on the new chain reverts to read-only"""
        await binder.on_network_observed(ChainId.SEPOLIA)
        assert binder.can_write
        wallet.signer_error = RuntimeError("wallet locked")

        result = await binder.on_network_observed(ChainId.OPTIMISM)

        assert result.status == BindStatus.SIGNER_UNAVAILABLE
        assert isinstance(result.error, RuntimeError)
        assert not result.can_write
        assert binder.binding.access_mode == AccessMode.READ_ONLY
        assert binder.binding.chain_id == ChainId.SEPOLIA
        assert not binder.can_write

    @pytest.mark.asyncio
    async def test_connect_error_reverts_to_read_only(self, binder, connector):
        """Test a failing contract attachment also reverts to read-only"""
        await binder.on_network_observed(ChainId.OPTIMISM)
        connector.connect_error = ValueError("bad abi")

        result = await binder.on_network_observed(ChainId.SEPOLIA)

        assert result.status == BindStatus.SIGNER_UNAVAILABLE
        assert str(result.error) == "bad abi"
        assert binder.binding.access_mode == AccessMode.READ_ONLY

    @pytest.mark.asyncio
    async def test_stale_signer_error_is_discarded(self, binder, wallet):
        """Test a late signer failure does not undo a newer binding"""
        gate = wallet.hold_next_signer()
        slow = asyncio.create_task(binder.on_network_observed(ChainId.OPTIMISM))
        await asyncio.sleep(0)

        await binder.on_network_observed(ChainId.SEPOLIA)
        wallet.signer_error = RuntimeError("wallet locked")
        gate.set()
        late = await slow

        assert late.status == BindStatus.STALE_UPDATE_DISCARDED
        assert binder.binding.access_mode == AccessMode.SIGNER_BOUND
        assert binder.binding.chain_id == ChainId.SEPOLIA
