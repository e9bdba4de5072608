"""
HTTP client for the backend package registry.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .models import PackageId, PackageMetadata, PackageRecord
from .types import FetchError, PackageCategory

logger = logging.getLogger(__name__)


class RegistryAppMetadata(BaseModel):
    """Metadata block of a registry app entry"""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    external_url: Optional[str] = None
    current_version: Optional[str] = None


class RegistryApp(BaseModel):
    """One app as listed by the registry"""
    model_config = ConfigDict(extra="ignore")

    package: str
    publisher: str
    metadata: Optional[RegistryAppMetadata] = None

    def to_record(self) -> PackageRecord:
        metadata = None
        if self.metadata is not None:
            metadata = PackageMetadata(**self.metadata.model_dump())
        return PackageRecord(
            id=PackageId(publisher=self.publisher, package_name=self.package),
            metadata=metadata
        )


class RegistryAppsResponse(BaseModel):
    """The registry's per-category app listing"""
    model_config = ConfigDict(extra="ignore")

    downloaded: List[RegistryApp] = Field(default_factory=list)
    installed: List[RegistryApp] = Field(default_factory=list)
    local: List[RegistryApp] = Field(default_factory=list)
    system: List[RegistryApp] = Field(default_factory=list)

    def tagged_records(self) -> List[Tuple[PackageCategory, PackageRecord]]:
        return [
            (category, app.to_record())
            for category in PackageCategory
            for app in getattr(self, category.value)
        ]


class RegistryClient:
    """
    Async client for the registry's app listing endpoint.

    Usage:
        async with RegistryClient("http://localhost:8080/main:app_store:sys") as registry:
            packages = await registry.fetch_packages()
    """

    def __init__(self,
                 base_url: str,
                 apps_path: str = "/apps",
                 timeout: float = 30.0,
                 client: Optional[httpx.AsyncClient] = None):
        self.base_url = base_url.rstrip("/")
        self.apps_path = apps_path
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "RegistryClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    @property
    def apps_url(self) -> str:
        return f"{self.base_url}{self.apps_path}"

    async def fetch_packages(self) -> List[Tuple[PackageCategory, PackageRecord]]:
        """
        Fetch every package the node knows about, tagged with its category.

        Raises:
            FetchError: On transport errors, non-2xx responses or a malformed payload
        """
        payload = await self._get_json(self.apps_url)
        try:
            listing = RegistryAppsResponse.model_validate(payload)
        except ValidationError as e:
            raise FetchError(f"Malformed registry response from {self.apps_url}: {e}")

        records = listing.tagged_records()
        logger.debug(f"Fetched {len(records)} packages from {self.apps_url}")
        return records

    async def _get_json(self, url: str) -> Dict[str, Any]:
        try:
            response = await self._client.get(url, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"Registry returned {e.response.status_code} for {url}",
                status_code=e.response.status_code
            )
        except httpx.HTTPError as e:
            raise FetchError(f"Registry request to {url} failed: {e}")

        try:
            return response.json()
        except ValueError as e:
            raise FetchError(f"Registry response from {url} is not JSON: {e}")
