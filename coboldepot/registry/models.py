"""Registry data models — validated package records and install snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class PackageRecord:
    """A validated, normalized registry entry."""

    # Identity
    name: str
    version: str
    description: str
    author: str

    # Source
    repository: str
    repo_key: str

    # Classification
    keywords: tuple[str, ...]
    license: str  # Always lowercase, member of License
    updated_at: str

    # Only some consumers require this
    popularity: float | None = None

    # Unknown manifest keys, carried through untouched
    extras: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def qualified_id(self) -> str:
        return f"{self.name}@{self.version}"

    def to_dict(self) -> dict[str, Any]:
        """Return the record in manifest shape (camelCase keys)."""
        data = dict(self.extras)
        data.update(
            {
                "name": self.name,
                "version": self.version,
                "description": self.description,
                "author": self.author,
                "repository": self.repository,
                "keywords": list(self.keywords),
                "license": self.license,
                "updatedAt": self.updated_at,
                "repoKey": self.repo_key,
            }
        )
        if self.popularity is not None:
            data["popularity"] = self.popularity
        return data


@dataclass
class InstallationRecord:
    """Snapshot written into a package directory after a successful clone."""

    name: str
    version: str
    repository: str
    repo_key: str
    license: str
    installed_at: str  # ISO 8601, UTC

    @classmethod
    def for_package(cls, record: PackageRecord, installed_at: str) -> "InstallationRecord":
        return cls(
            name=record.name,
            version=record.version,
            repository=record.repository,
            repo_key=record.repo_key,
            license=record.license,
            installed_at=installed_at,
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "version": self.version,
            "repository": self.repository,
            "repoKey": self.repo_key,
            "license": self.license,
            "installedAt": self.installed_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "InstallationRecord":
        return cls(
            name=data["name"],
            version=data["version"],
            repository=data["repository"],
            repo_key=data["repoKey"],
            license=data["license"],
            installed_at=data["installedAt"],
        )
