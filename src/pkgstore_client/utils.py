"""
Utility functions for addresses and package matching.
"""

from typing import Optional
from eth_utils import to_checksum_address, is_hex_address

from .models import PackageRecord


def with_hex_prefix(address: str) -> str:
    """Add the 0x prefix when it is missing"""
    address = address.strip()
    if address[:2].lower() == "0x":
        return address
    return "0x" + address


def validate_address(address: str) -> bool:
    """Validate a 20-byte hex address, 0x prefix optional"""
    if not isinstance(address, str):
        return False
    return is_hex_address(with_hex_prefix(address))


def normalize_address(address: str) -> str:
    """Normalize address to EIP-55 checksum format"""
    return to_checksum_address(with_hex_prefix(address))


def app_id(record: PackageRecord) -> str:
    """Stable display key for a package"""
    return str(record.id)


def normalize_query(query: Optional[str]) -> str:
    """Case-fold a search query; None behaves like an empty query"""
    return (query or "").casefold()


def matches_query(record: PackageRecord, folded_query: str) -> bool:
    """
    Check a record against an already case-folded query.

    The package name and the description are each checked once. A record
    without a description only matches on its name.
    """
    if not folded_query:
        return True
    if folded_query in record.id.package_name.casefold():
        return True
    description = record.description
    return description is not None and folded_query in description.casefold()
