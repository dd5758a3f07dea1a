"""Installer — shallow-clone a package into a deterministic local directory.

Each install runs five steps in order and stops at the first failure:

1. Preflight: ``git version`` must succeed.
2. Guard: the repository must live on an allowed host.
3. Clean slate: any previous ``<name>@<version>`` directory is removed.
4. Acquire: ``git clone --depth=1`` into that directory.
5. Record: ``coboldepot.json`` is written inside it.

A directory without ``coboldepot.json`` is an interrupted install and is
wiped by the next attempt. Concurrent installs of the same target are not
guarded against.
"""

from __future__ import annotations

import json
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path

from coboldepot import PRODUCT_NAME
from coboldepot.errors import FilesystemError, UnsupportedSourceError
from coboldepot.registry.models import InstallationRecord, PackageRecord
from coboldepot.registry.schema import ALLOWED_SOURCE_PREFIXES, is_allowed_source
from coboldepot.utils.git_ops import GitClient

logger = logging.getLogger(__name__)

METADATA_FILE = f"{PRODUCT_NAME}.json"


def utc_timestamp() -> str:
    """Current time as ISO 8601 with milliseconds and a ``Z`` suffix."""
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def read_installation(target_dir: str | Path) -> InstallationRecord | None:
    """Return the recorded install in ``target_dir``, or None if it never completed."""
    path = Path(target_dir) / METADATA_FILE
    if not path.is_file():
        return None
    with open(path, encoding="utf-8") as f:
        return InstallationRecord.from_dict(json.load(f))


class Installer:
    """Installs packages under ``<work_dir>/.coboldepot/packages``."""

    def __init__(self, work_dir: str | Path, git: GitClient | None = None):
        self.work_dir = Path(work_dir)
        self.packages_dir = self.work_dir / f".{PRODUCT_NAME}" / "packages"
        self.git = git or GitClient()

    def target_dir(self, record: PackageRecord) -> Path:
        """Return ``packages/<name>@<version>``; it must be a direct child of ``packages/``."""
        target = self.packages_dir / record.qualified_id
        if target.resolve().parent != self.packages_dir.resolve():
            raise FilesystemError(
                f"Refusing to install {record.qualified_id} outside {self.packages_dir}"
            )
        return target

    def install(self, record: PackageRecord) -> InstallationRecord:
        """Install ``record``, replacing any earlier install of the same version."""
        self.git.probe()

        if not is_allowed_source(record.repository):
            allowed = ", ".join(ALLOWED_SOURCE_PREFIXES)
            raise UnsupportedSourceError(
                f"Only repositories under {allowed} are supported for installation "
                f"(got {record.repository})."
            )

        target = self.target_dir(record)
        self._clean(target)

        logger.info("Cloning %s into %s", record.repository, target)
        self.git.shallow_clone(record.repository, target)

        installation = InstallationRecord.for_package(record, installed_at=utc_timestamp())
        self._write_metadata(target, installation)
        logger.info(
            "Installed %s. Repo key %s recorded in %s.",
            record.qualified_id,
            record.repo_key,
            METADATA_FILE,
        )
        return installation

    def _clean(self, target: Path) -> None:
        try:
            self.packages_dir.mkdir(parents=True, exist_ok=True)
            if target.exists():
                logger.info("Removing existing installation at %s", target)
                shutil.rmtree(target)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise FilesystemError(f"Unable to prepare {target}: {e}") from e

    def _write_metadata(self, target: Path, installation: InstallationRecord) -> None:
        path = target / METADATA_FILE
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(installation.to_dict(), f, indent=2)
        except OSError as e:
            raise FilesystemError(f"Unable to write {path}: {e}") from e
