"""
Package store client configuration
"""

import logging
from typing import Dict, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .addresses import AddressTable, DEFAULT_ADDRESS_TABLES
from .types import ChainId, ContractRole


class StoreClientSettings(BaseSettings):
    """Client settings, read from PKGSTORE_* environment variables or .env"""

    model_config = SettingsConfigDict(
        env_prefix="PKGSTORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Public endpoint for read-only contract access
    rpc_url: str = "https://rpc.sepolia.org"
    default_chain_id: int = ChainId.SEPOLIA

    # Backend registry
    registry_url: str = "http://localhost:8080/main:app_store:sys"
    apps_path: str = "/apps"
    request_timeout: float = 30.0

    # Wallet
    wallet_poll_interval: float = 2.0

    # chain id -> address, e.g. PKGSTORE_PACKAGE_STORE_ADDRESSES='{"11155111": "0x..."}'
    package_store_addresses: Dict[int, str] = {}

    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("request_timeout", "wallet_poll_interval")
    @classmethod
    def check_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    def address_tables(self) -> Dict[ContractRole, AddressTable]:
        """Built-in address tables with the configured package store deployments merged in"""
        tables = dict(DEFAULT_ADDRESS_TABLES)
        if self.package_store_addresses:
            tables[ContractRole.PACKAGE_STORE] = tables[ContractRole.PACKAGE_STORE].merged(
                self.package_store_addresses
            )
        return tables


_settings: Optional[StoreClientSettings] = None


def get_settings() -> StoreClientSettings:
    """Get cached settings instance"""
    global _settings
    if _settings is None:
        _settings = StoreClientSettings()
    return _settings


def configure_logging(settings: Optional[StoreClientSettings] = None) -> None:
    """Set up root logging at the configured level"""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
