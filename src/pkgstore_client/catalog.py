"""
Package catalog index.

Holds the user's packages in four lifecycle categories and a filtered view
derived from a search query.
"""

import itertools
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .interfaces import IRegistryCapability
from .models import PackageCollection, PackageId, PackageRecord
from .types import FetchError, PackageCategory, RefreshResult, RefreshStatus
from .utils import matches_query, normalize_query

logger = logging.getLogger(__name__)


def partition_packages(tagged: Iterable[Tuple[PackageCategory, PackageRecord]]) -> PackageCollection:
    """
    Build a PackageCollection from category-tagged records.

    A package id may only live in one category. When the registry reports it
    in several, the highest-precedence category (downloaded, installed, local,
    system) keeps it and the duplicate is logged and dropped.
    """
    buckets: Dict[PackageCategory, List[PackageRecord]] = {c: [] for c in PackageCategory}
    owners: Dict[PackageId, PackageCategory] = {}

    for category, record in tagged:
        buckets[category].append(record)

    for category in PackageCategory:
        kept: List[PackageRecord] = []
        for record in buckets[category]:
            owner = owners.get(record.id)
            if owner is None:
                owners[record.id] = category
                kept.append(record)
            elif owner is category:
                logger.warning(f"Package {record.id} listed twice in {category.value}; keeping first")
            else:
                logger.warning(
                    f"Package {record.id} reported as both {owner.value} and "
                    f"{category.value}; keeping {owner.value}"
                )
        buckets[category] = kept

    return PackageCollection(**{c.value: tuple(buckets[c]) for c in PackageCategory})


def filter_collection(collection: PackageCollection, query: Optional[str]) -> PackageCollection:
    """
    Derive the filtered view of a collection.

    A record matches when the case-folded query is a substring of its package
    name or of its description. An empty query returns the collection itself.
    """
    folded = normalize_query(query)
    if not folded:
        return collection
    return PackageCollection(**{
        category.value: tuple(r for r in records if matches_query(r, folded))
        for category, records in collection.groups()
    })


class AppCatalogIndex:
    """
    Four-category package collection with a memoized filtered view.

    The collection is replaced wholesale on every successful refresh. When
    refreshes overlap, the one that completes last is the one kept. A failed
    refresh leaves the previous collection and view untouched.
    """

    def __init__(self, registry: IRegistryCapability):
        self.registry = registry

        self._versions = itertools.count(1)
        self._version = 0
        self._collection = PackageCollection.empty()
        self._query = ""
        self._view = self._collection
        self._view_key: Tuple[int, str] = (0, "")
        self._last_error: Optional[FetchError] = None

    @property
    def collection(self) -> PackageCollection:
        return self._collection

    @property
    def query(self) -> str:
        return self._query

    @property
    def version(self) -> int:
        return self._version

    @property
    def last_error(self) -> Optional[FetchError]:
        return self._last_error

    async def refresh(self) -> RefreshResult:
        """Fetch all packages from the registry and replace the collection"""
        try:
            tagged = await self.registry.fetch_packages()
            collection = partition_packages(tagged)
        except FetchError as e:
            return self._fail(e)
        except Exception as e:
            logger.exception("Unexpected registry failure")
            return self._fail(FetchError(f"Registry fetch failed: {e}"))

        self._collection = collection
        self._version = next(self._versions)
        self._last_error = None
        self._recompute()
        logger.info(
            f"Catalog refreshed to version {self._version} "
            f"with {collection.total} packages"
        )
        return RefreshResult(status=RefreshStatus.OK, version=self._version)

    def set_query(self, query: Optional[str]) -> PackageCollection:
        """Store the search query and recompute the filtered view"""
        self._query = query or ""
        self._recompute()
        return self._view

    def get_filtered_view(self) -> PackageCollection:
        return self._view

    def _recompute(self) -> None:
        key = (self._version, normalize_query(self._query))
        if key == self._view_key:
            return
        self._view = filter_collection(self._collection, self._query)
        self._view_key = key

    def _fail(self, error: FetchError) -> RefreshResult:
        self._last_error = error
        logger.error(f"Catalog refresh failed, keeping version {self._version}: {error}")
        return RefreshResult(status=RefreshStatus.FAILED, version=self._version, error=error)
