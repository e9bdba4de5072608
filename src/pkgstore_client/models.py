"""
Package data models.
"""

from typing import Optional, Tuple, Iterator
from dataclasses import dataclass, field

from .types import PackageCategory


@dataclass(frozen=True)
class PackageId:
    """Package identity: who published it and under which name"""
    publisher: str
    package_name: str

    def __str__(self) -> str:
        return f"{self.package_name}:{self.publisher}"


@dataclass(frozen=True)
class PackageMetadata:
    """Descriptive package fields as reported by the registry"""
    name: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    external_url: Optional[str] = None
    current_version: Optional[str] = None


@dataclass(frozen=True)
class PackageRecord:
    """Read-only copy of one registry package"""
    id: PackageId
    metadata: Optional[PackageMetadata] = None

    @property
    def description(self) -> Optional[str]:
        return self.metadata.description if self.metadata else None


@dataclass(frozen=True)
class PackageCollection:
    """
    Packages partitioned into the four lifecycle categories.

    Also the shape of a filtered view. Instances are never mutated; a refresh
    or a new query produces a new collection.
    """
    downloaded: Tuple[PackageRecord, ...] = field(default_factory=tuple)
    installed: Tuple[PackageRecord, ...] = field(default_factory=tuple)
    local: Tuple[PackageRecord, ...] = field(default_factory=tuple)
    system: Tuple[PackageRecord, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> "PackageCollection":
        return cls()

    def get(self, category: PackageCategory) -> Tuple[PackageRecord, ...]:
        return getattr(self, category.value)

    def groups(self) -> Iterator[Tuple[PackageCategory, Tuple[PackageRecord, ...]]]:
        for category in PackageCategory:
            yield category, self.get(category)

    @property
    def total(self) -> int:
        return sum(len(records) for _, records in self.groups())

    def ids(self) -> Tuple[PackageId, ...]:
        return tuple(record.id for _, records in self.groups() for record in records)
