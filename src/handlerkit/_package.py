"""Package metadata and naming constants."""

PACKAGE_NAME = "handlerkit"
__version__ = "1.0.0"
