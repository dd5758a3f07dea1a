"""Repository identity — a stable content address for an upstream URL.

Two manifests pointing at the same repository (modulo surrounding
whitespace and letter case) always share a ``repoKey``, whatever their
name or version.

Known limitation: the whole URL is lowercased, path included. Hosts with
case-sensitive repository paths can therefore alias two distinct
repositories to one key. Existing keys depend on this, so it stays.
"""

from __future__ import annotations

import hashlib

# Changing this invalidates every key already recorded on disk.
REPO_KEY_LENGTH = 32


def normalize_repository(repository: str) -> str:
    return repository.strip().lower()


def derive_repo_key(repository: str) -> str:
    """Return the fixed-length lowercase hex key for ``repository``."""
    digest = hashlib.sha256(normalize_repository(repository).encode("utf-8"))
    return digest.hexdigest()[:REPO_KEY_LENGTH]
