"""Registry — manifest schema, validation, and the package catalog.

The registry provides:
- Schema: required fields, license and host allow-lists
- Validation: fail-fast for loading, collect-all for auditing
- Identity: a stable repoKey per upstream repository
- Catalog: the sorted, duplicate-free list of package records
"""

from coboldepot.registry.identity import REPO_KEY_LENGTH, derive_repo_key
from coboldepot.registry.loader import (
    AuditReport,
    audit_registry,
    find_by_name,
    get_package,
    load_catalog,
)
from coboldepot.registry.models import InstallationRecord, PackageRecord
from coboldepot.registry.schema import License, SchemaVariant
from coboldepot.registry.validator import ValidationMode, validate_manifest

__all__ = [
    "AuditReport",
    "InstallationRecord",
    "License",
    "PackageRecord",
    "REPO_KEY_LENGTH",
    "SchemaVariant",
    "ValidationMode",
    "audit_registry",
    "derive_repo_key",
    "find_by_name",
    "get_package",
    "load_catalog",
    "validate_manifest",
]
