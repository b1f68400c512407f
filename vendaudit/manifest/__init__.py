"""Manifest loading and data model."""

from vendaudit.manifest.loader import load_manifest, normalize_path
from vendaudit.manifest.models import GitSource, Manifest, ManifestItem, Source

__all__ = [
    "GitSource",
    "Manifest",
    "ManifestItem",
    "Source",
    "load_manifest",
    "normalize_path",
]
