"""Manifest schema — the normative definition of a registry manifest.

Required fields, type groups, the license and host allow-lists, and the
per-consumer schema variants all live here. The validator and the install
guard read from this module; nothing else re-declares these sets.
"""

from __future__ import annotations

import re
from enum import Enum

MANIFEST_SUFFIX = ".yaml"


class License(Enum):
    """Open-source licenses accepted in the registry (SPDX ids, lowercase)."""

    MIT = "mit"
    APACHE_2_0 = "apache-2.0"
    BSD_2_CLAUSE = "bsd-2-clause"
    BSD_3_CLAUSE = "bsd-3-clause"
    GPL_2_0 = "gpl-2.0"
    GPL_3_0 = "gpl-3.0"
    LGPL_2_1 = "lgpl-2.1"
    LGPL_3_0 = "lgpl-3.0"
    MPL_2_0 = "mpl-2.0"
    EPL_2_0 = "epl-2.0"
    CC0_1_0 = "cc0-1.0"

    @classmethod
    def normalize(cls, value: str) -> "License | None":
        """Return the matching license for ``value`` (case-insensitive), or None."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    @classmethod
    def identifiers(cls) -> list[str]:
        return [member.value for member in cls]


# Repositories must start with one of these to be installable.
ALLOWED_SOURCE_PREFIXES: tuple[str, ...] = ("https://github.com/",)

SEMVER_PATTERN = re.compile(
    r"(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)\.(0|[1-9][0-9]*)"
    r"(?:-[0-9A-Za-z.-]+)?"
    r"(?:\+[0-9A-Za-z.-]+)?"
)

REQUIRED_FIELDS: tuple[str, ...] = (
    "name",
    "version",
    "description",
    "author",
    "repository",
    "keywords",
    "license",
    "updatedAt",
)

STRING_FIELDS: tuple[str, ...] = (
    "name",
    "version",
    "description",
    "author",
    "repository",
    "license",
    "updatedAt",
)


class SchemaVariant(Enum):
    """Which consumer a manifest is validated for.

    The consumers disagree on ``popularity``: the web catalog and the
    standalone auditor require it, the CLI and the search sync do not.
    """

    CATALOG = "catalog"  # CLI list/info/install
    SYNC = "sync"  # Search index sync job
    AUDIT = "audit"  # Standalone registry auditor

    @property
    def required_fields(self) -> tuple[str, ...]:
        if self is SchemaVariant.AUDIT:
            return REQUIRED_FIELDS + ("popularity",)
        return REQUIRED_FIELDS


def is_allowed_source(repository: str) -> bool:
    return repository.startswith(ALLOWED_SOURCE_PREFIXES)
