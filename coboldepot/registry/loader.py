"""Registry loader — reads a directory of YAML manifests into a catalog.

The registry directory is always passed in by the caller; nothing here
resolves it from module state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from coboldepot.errors import DuplicateNameError, PackageNotFoundError, RegistryError
from coboldepot.registry.models import PackageRecord
from coboldepot.registry.schema import MANIFEST_SUFFIX, SchemaVariant
from coboldepot.registry.validator import (
    ROOT_FIELD,
    ValidationIssue,
    ValidationMode,
    validate_manifest,
)

logger = logging.getLogger(__name__)

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class ManifestLoader(yaml.SafeLoader):
    """SafeLoader that leaves timestamps as plain strings.

    ``updatedAt: 2024-03-01`` must stay the string ``"2024-03-01"``.
    """


ManifestLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


@dataclass
class AuditReport:
    """Every defect found across a registry directory."""

    registry_dir: Path
    manifest_count: int = 0
    issues: list[ValidationIssue] = field(default_factory=list)
    records: list[PackageRecord] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.issues

    @property
    def is_empty(self) -> bool:
        return self.manifest_count == 0


def discover_manifests(registry_dir: str | Path) -> list[Path]:
    """Return the manifest files in ``registry_dir``, sorted by file name."""
    directory = Path(registry_dir)
    try:
        entries = list(directory.iterdir())
    except OSError as e:
        raise RegistryError(f"Unable to read registry directory {directory}: {e}") from e
    return sorted(
        (p for p in entries if p.is_file() and p.name.endswith(MANIFEST_SUFFIX)),
        key=lambda p: p.name,
    )


def read_manifest(path: Path) -> Any:
    """Parse one manifest file, without validating it."""
    try:
        with open(path, encoding="utf-8") as f:
            return yaml.load(f, Loader=ManifestLoader)
    except yaml.YAMLError as e:
        raise RegistryError(f"Unable to parse YAML in {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise RegistryError(f"Failed to read {path}: {e}") from e


def load_catalog(
    registry_dir: str | Path,
    variant: SchemaVariant = SchemaVariant.CATALOG,
    allow_empty: bool = False,
    allow_duplicates: bool = False,
) -> list[PackageRecord]:
    """Load and validate every manifest, aborting on the first defect.

    Args:
        registry_dir: Directory holding ``*.yaml`` manifests.
        variant: Required-field set to validate against.
        allow_empty: Return ``[]`` with a warning instead of raising when
            the directory holds no manifests.
        allow_duplicates: Keep the last manifest for a name that appears
            twice (case-insensitive) instead of raising. Only the sync job
            should turn this on.

    Returns:
        Records sorted by name (ordinal, case-sensitive).
    """
    paths = discover_manifests(registry_dir)
    if not paths:
        if allow_empty:
            logger.warning("No registry manifests found in %s", registry_dir)
            return []
        raise RegistryError(f"No registry manifests found in {registry_dir}")

    by_name: dict[str, tuple[PackageRecord, Path]] = {}
    for path in paths:
        record = validate_manifest(read_manifest(path), str(path), variant, ValidationMode.FAIL_FAST)
        key = record.name.lower()
        if key in by_name:
            previous = by_name[key][1]
            if not allow_duplicates:
                raise DuplicateNameError(record.name, [str(previous), str(path)])
            logger.warning(
                'Duplicate package name "%s": %s replaces %s', record.name, path, previous
            )
        by_name[key] = (record, path)

    return sorted((record for record, _ in by_name.values()), key=lambda r: r.name)


def audit_registry(
    registry_dir: str | Path, variant: SchemaVariant = SchemaVariant.AUDIT
) -> AuditReport:
    """Validate every manifest and collect all defects instead of stopping."""
    report = AuditReport(registry_dir=Path(registry_dir))
    paths = discover_manifests(registry_dir)
    report.manifest_count = len(paths)

    seen: dict[str, str] = {}
    for path in paths:
        source = str(path)
        try:
            document = read_manifest(path)
        except RegistryError as e:
            report.issues.append(ValidationIssue(ROOT_FIELD, source, str(e)))
            continue

        result = validate_manifest(document, source, variant, ValidationMode.COLLECT_ALL)
        report.issues.extend(result.issues)
        if result.record is None:
            continue

        key = result.record.name.lower()
        if key in seen:
            report.issues.append(
                ValidationIssue(
                    "name",
                    source,
                    str(DuplicateNameError(result.record.name, [seen[key], source])),
                )
            )
            continue
        seen[key] = source
        report.records.append(result.record)

    report.records.sort(key=lambda r: r.name)
    return report


def find_by_name(catalog: list[PackageRecord], name: str) -> PackageRecord | None:
    """Case-insensitive exact lookup."""
    wanted = name.lower()
    for record in catalog:
        if record.name.lower() == wanted:
            return record
    return None


def get_package(catalog: list[PackageRecord], name: str) -> PackageRecord:
    record = find_by_name(catalog, name)
    if record is None:
        raise PackageNotFoundError(name)
    return record
