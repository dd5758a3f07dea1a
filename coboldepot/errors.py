"""Error taxonomy shared by the registry, installer, and sync job.

Every message is meant to be shown to a user as-is; the CLI prints
``str(exc)`` without decoration.
"""

from __future__ import annotations


class CobolDepotError(Exception):
    """Base class for every failure raised by coboldepot."""


class RegistryError(CobolDepotError):
    """The registry directory or one of its files could not be read."""


class SchemaError(CobolDepotError):
    """A manifest field is missing or malformed."""

    def __init__(self, message: str, field: str, source: str):
        super().__init__(message)
        self.field = field
        self.source = source


class DuplicateNameError(CobolDepotError):
    """Two manifests declare the same package name (case-insensitive)."""

    def __init__(self, name: str, sources: list[str]):
        super().__init__(
            f'Duplicate package name "{name}" declared in {", ".join(sources)}'
        )
        self.name = name
        self.sources = sources


class PackageNotFoundError(CobolDepotError, LookupError):
    """The requested package is not in the catalog."""

    def __init__(self, name: str):
        super().__init__(f'Package "{name}" not found in registry.')
        self.name = name


class ToolUnavailableError(CobolDepotError):
    """The external git executable is missing or misbehaving."""


class UnsupportedSourceError(CobolDepotError):
    """The package repository is not hosted on an allowed host."""


class FilesystemError(CobolDepotError):
    """Unexpected I/O failure while preparing or recording an install."""


class ProcessError(CobolDepotError):
    """The git clone process failed to spawn or exited non-zero."""

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        self.exit_code = exit_code


class ConfigError(CobolDepotError):
    """Required configuration is missing."""


class RemoteError(CobolDepotError):
    """The search index answered with a non-success status."""

    def __init__(self, message: str, status_code: int, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
