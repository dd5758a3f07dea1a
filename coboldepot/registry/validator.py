"""Manifest validator — turns one parsed YAML document into a PackageRecord.

The per-field rules are written once, as an ordered stream of issues.
Callers pick how to aggregate that stream:

- ``ValidationMode.FAIL_FAST`` raises ``SchemaError`` on the first issue.
  The CLI and the sync job use this; they need one usable record or nothing.
- ``ValidationMode.COLLECT_ALL`` gathers every issue so an audit can report
  all defects of all manifests at once.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator
from urllib.parse import urlsplit

from coboldepot.errors import SchemaError
from coboldepot.registry.identity import derive_repo_key
from coboldepot.registry.models import PackageRecord
from coboldepot.registry.schema import (
    SEMVER_PATTERN,
    STRING_FIELDS,
    License,
    SchemaVariant,
)

ROOT_FIELD = "<root>"


class ValidationMode(Enum):
    FAIL_FAST = "fail-fast"
    COLLECT_ALL = "collect-all"


@dataclass
class ValidationIssue:
    """A single defect found in a manifest."""

    field: str
    source: str
    message: str

    def to_error(self) -> SchemaError:
        return SchemaError(self.message, field=self.field, source=self.source)


@dataclass
class ManifestValidation:
    """Outcome of validating one manifest in collect-all mode."""

    source: str
    issues: list[ValidationIssue] = field(default_factory=list)
    record: PackageRecord | None = None

    @property
    def passed(self) -> bool:
        return not self.issues


def validate_manifest(
    document: Any,
    source: str,
    variant: SchemaVariant = SchemaVariant.CATALOG,
    mode: ValidationMode = ValidationMode.FAIL_FAST,
) -> PackageRecord | ManifestValidation:
    """Validate a parsed manifest document.

    Args:
        document: Whatever the YAML parser produced for the file.
        source: Label used in every message (usually the file path).
        variant: Which consumer's required-field set applies.
        mode: Aggregation strategy, see module docstring.

    Returns:
        A ``PackageRecord`` in fail-fast mode, a ``ManifestValidation`` in
        collect-all mode.

    Raises:
        SchemaError: In fail-fast mode, for the first defect found.
    """
    issues = iter_issues(document, source, variant)

    if mode is ValidationMode.FAIL_FAST:
        first = next(issues, None)
        if first is not None:
            raise first.to_error()
        return build_record(document)

    result = ManifestValidation(source=source, issues=list(issues))
    if result.passed:
        result.record = build_record(document)
    return result


def iter_issues(
    document: Any, source: str, variant: SchemaVariant
) -> Iterator[ValidationIssue]:
    """Yield every defect in ``document``, required fields first."""
    if not isinstance(document, dict):
        yield ValidationIssue(
            ROOT_FIELD, source, f"Manifest in {source} must be a mapping at the document root"
        )
        return

    missing = set()
    for name in variant.required_fields:
        if document.get(name) is None:
            missing.add(name)
            yield ValidationIssue(name, source, f'Missing required field "{name}" in {source}')

    for name in STRING_FIELDS:
        if name in missing or document.get(name) is None:
            continue
        value = document[name]
        if not isinstance(value, str) or not value.strip():
            yield ValidationIssue(
                name, source, f'Field "{name}" must be a non-empty string in {source}'
            )

    if "keywords" not in missing and document.get("keywords") is not None:
        yield from _check_keywords(document["keywords"], source)

    version = document.get("version")
    if isinstance(version, str) and not SEMVER_PATTERN.fullmatch(version):
        yield ValidationIssue(
            "version", source, f'Field "version" must be a valid semver string in {source}'
        )

    repository = document.get("repository")
    if isinstance(repository, str) and repository.strip() and not _is_absolute_url(repository):
        yield ValidationIssue(
            "repository", source, f'Field "repository" must be a valid URL in {source}'
        )

    license_id = document.get("license")
    if isinstance(license_id, str) and license_id.strip() and License.normalize(license_id) is None:
        allowed = ", ".join(License.identifiers())
        yield ValidationIssue(
            "license",
            source,
            f'Field "license" must be an approved open-source license in {source} '
            f"(allowed: {allowed})",
        )

    if "popularity" in variant.required_fields and "popularity" not in missing:
        if not _is_finite_number(document["popularity"]):
            yield ValidationIssue(
                "popularity", source, f'Field "popularity" must be a finite number in {source}'
            )


def build_record(document: dict) -> PackageRecord:
    """Build the normalized record from an already-validated document."""
    known = set(STRING_FIELDS) | {"keywords", "repoKey"}
    popularity = document.get("popularity")
    if _is_finite_number(popularity):
        known.add("popularity")
    else:
        # Non-numeric values stay in extras
        popularity = None
    return PackageRecord(
        name=document["name"],
        version=document["version"],
        description=document["description"],
        author=document["author"],
        repository=document["repository"],
        repo_key=derive_repo_key(document["repository"]),
        keywords=tuple(document["keywords"]),
        license=License.normalize(document["license"]).value,
        updated_at=document["updatedAt"],
        popularity=popularity,
        extras={k: v for k, v in document.items() if k not in known},
    )


def _check_keywords(keywords: Any, source: str) -> Iterator[ValidationIssue]:
    if not isinstance(keywords, list) or not keywords:
        yield ValidationIssue(
            "keywords",
            source,
            f'Field "keywords" must be a non-empty array of strings in {source}',
        )
    elif not all(isinstance(k, str) and k.strip() for k in keywords):
        yield ValidationIssue(
            "keywords",
            source,
            f'Field "keywords" must only contain non-empty strings in {source}',
        )


def _is_absolute_url(value: str) -> bool:
    try:
        parts = urlsplit(value.strip())
    except ValueError:
        return False
    return bool(parts.scheme and parts.netloc)


def _is_finite_number(value: Any) -> bool:
    # YAML booleans are ints in Python
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
