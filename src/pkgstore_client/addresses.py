"""
Deployed contract addresses per chain, one table per contract role.
"""

from typing import Dict, Iterator, Mapping, Optional, Union

from .types import ChainId, ContractRole, ConfigurationError
from .utils import validate_address, normalize_address


class AddressTable(Mapping[int, str]):
    """
    Immutable chain id -> checksummed address mapping for one contract role.

    A chain missing from the table means the contract is not deployed there.
    """

    def __init__(self, role: ContractRole, addresses: Optional[Mapping[Union[int, str], str]] = None):
        self.role = role
        self._addresses: Dict[int, str] = {}

        for chain_id, address in (addresses or {}).items():
            chain_id = _chain_key(role, chain_id)
            if not validate_address(address):
                raise ConfigurationError(
                    f"Invalid {role.value} address {address!r} for chain {chain_id}",
                    chain_id=chain_id,
                    error_code="INVALID_ADDRESS"
                )
            self._addresses[chain_id] = normalize_address(address)

    def __getitem__(self, chain_id: int) -> str:
        return self._addresses[chain_id]

    def __iter__(self) -> Iterator[int]:
        return iter(self._addresses)

    def __len__(self) -> int:
        return len(self._addresses)

    def __repr__(self) -> str:
        return f"AddressTable({self.role.value}, {self._addresses!r})"

    def require(self, chain_id: int) -> str:
        """Get the address for a chain, failing when the contract is not deployed there"""
        try:
            return self._addresses[chain_id]
        except KeyError:
            raise ConfigurationError(
                f"No {self.role.value} address configured for chain {chain_id}",
                chain_id=chain_id,
                error_code="MISSING_ADDRESS"
            )

    def merged(self, addresses: Mapping[Union[int, str], str]) -> "AddressTable":
        """Return a new table with the given entries added or overridden"""
        combined: Dict[int, str] = dict(self._addresses)
        for chain_id, address in addresses.items():
            combined[_chain_key(self.role, chain_id)] = address
        return AddressTable(self.role, combined)


def _chain_key(role: ContractRole, chain_id: Union[int, str]) -> int:
    try:
        return int(chain_id)
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"Invalid chain id {chain_id!r} in {role.value} address table",
            error_code="INVALID_CHAIN_ID"
        )


KNS_REGISTRY_ADDRESSES = AddressTable(ContractRole.KNS_REGISTRY, {
    ChainId.SEPOLIA: "0x3807fBD692Aa5c96F1D8D7c59a1346a885F40B1C",
    ChainId.OPTIMISM: "0xca5b5811c0C40aAB3295f932b1B5112Eb7bb4bD6",
})

DOT_OS_ADDRESSES = AddressTable(ContractRole.DOT_OS, {
    ChainId.SEPOLIA: "0xC5a939923E0B336642024b479502E039338bEd00",
    ChainId.OPTIMISM: "0x66929F55Ea1E38591f9430E5013C92cdC01F6cAd",
})

NAMEWRAPPER_ADDRESSES = AddressTable(ContractRole.NAMEWRAPPER, {
    ChainId.SEPOLIA: "0x0635513f179D50A207757E05759CbD106d7dFcE8",
    ChainId.MAINNET: "0xD4416b13d2b3a9aBae7AcD5D6C2BbDBE25686401",
})

ENS_REGISTRY_ADDRESSES = AddressTable(ContractRole.ENS_REGISTRY, {
    ChainId.SEPOLIA: "0x00000000000C2E074eC69A0dFb2997BA6C7d2e1e",
    ChainId.MAINNET: "0x00000000000C2E074eC69A0dFb2997BA6C7d2e1e",
})

KNS_ENS_ENTRY_ADDRESSES = AddressTable(ContractRole.KNS_ENS_ENTRY, {
    ChainId.SEPOLIA: "0xD4583DFd73B382B7e3230aa29Be774C1843FB7d2",
    ChainId.GOERLI: "0xD4583DFd73B382B7e3230aa29Be774C1843FB7d2",
    ChainId.MAINNET: "0xa1F47fBBa93574DB4a049C1c5bA03471A21EE01D",
})

KNS_ENS_EXIT_ADDRESSES = AddressTable(ContractRole.KNS_ENS_EXIT, {
    ChainId.SEPOLIA: "0x528bA1BA3186d8CABD2c4E8758a98fAf64eD8Af0",
    ChainId.OPTIMISM: "0x0b35664aB5950cE92bce7222be165BB575D9b7c5",
})

# Filled in from configuration, see StoreClientSettings.address_tables()
PACKAGE_STORE_ADDRESSES = AddressTable(ContractRole.PACKAGE_STORE)

DEFAULT_ADDRESS_TABLES: Dict[ContractRole, AddressTable] = {
    ContractRole.KNS_REGISTRY: KNS_REGISTRY_ADDRESSES,
    ContractRole.DOT_OS: DOT_OS_ADDRESSES,
    ContractRole.NAMEWRAPPER: NAMEWRAPPER_ADDRESSES,
    ContractRole.ENS_REGISTRY: ENS_REGISTRY_ADDRESSES,
    ContractRole.KNS_ENS_ENTRY: KNS_ENS_ENTRY_ADDRESSES,
    ContractRole.KNS_ENS_EXIT: KNS_ENS_EXIT_ADDRESSES,
    ContractRole.PACKAGE_STORE: PACKAGE_STORE_ADDRESSES,
}


def get_address_table(role: ContractRole,
                      tables: Optional[Mapping[ContractRole, AddressTable]] = None) -> AddressTable:
    """Look up the table for a role, failing at startup if none is configured"""
    tables = DEFAULT_ADDRESS_TABLES if tables is None else tables
    if role not in tables:
        raise ConfigurationError(f"No address table configured for {role.value}")
    return tables[role]
