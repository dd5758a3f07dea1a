"""Runtime settings resolved from the environment at call time."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

REGISTRY_DIR_ENV = "COBOLDEPOT_REGISTRY_DIR"
WORK_DIR_ENV = "COBOLDEPOT_WORK_DIR"


@dataclass(frozen=True)
class Settings:
    """Where manifests are read from and where packages are installed."""

    registry_dir: Path
    work_dir: Path

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        cwd = Path.cwd()
        return cls(
            registry_dir=Path(env.get(REGISTRY_DIR_ENV) or cwd / "registry"),
            work_dir=Path(env.get(WORK_DIR_ENV) or cwd),
        )
