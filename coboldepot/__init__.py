"""CobolDepot — package directory and installer for the COBOL ecosystem."""

__version__ = "0.1.0"

PRODUCT_NAME = "coboldepot"
