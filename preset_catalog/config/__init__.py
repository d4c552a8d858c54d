"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository, ManifestError, parse_manifest
from .models import CatalogConfig, ManifestEntry

__all__ = [
    "CatalogConfig",
    "ConfigLocator",
    "ConfigRepository",
    "ManifestEntry",
    "ManifestError",
    "parse_manifest",
]
