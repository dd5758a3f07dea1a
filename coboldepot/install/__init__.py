"""Package installation into ``.coboldepot/packages``."""

from coboldepot.install.installer import METADATA_FILE, Installer, read_installation

__all__ = ["METADATA_FILE", "Installer", "read_installation"]
