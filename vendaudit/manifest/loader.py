"""Load a manifest document (YAML or JSON) into the typed model."""

from __future__ import annotations

import json
import logging
import os
import posixpath
from pathlib import Path

import yaml

from vendaudit.errors import ManifestParseError, UnsupportedSourceError
from vendaudit.manifest.models import GitSource, Manifest, ManifestItem, SourceKind
from vendaudit.patch.hunk import Hunk

logger = logging.getLogger(__name__)


def normalize_path(path: str) -> str:
    """Normalize a relative path to posix form with ``.``/``..`` collapsed."""
    normalized = posixpath.normpath(path.replace("\\", "/"))
    if normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


def _read_document(manifest_path: Path) -> dict:
    try:
        text = manifest_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ManifestParseError(f"Cannot read manifest {manifest_path}: {e}") from e

    try:
        if manifest_path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ManifestParseError(f"Invalid manifest {manifest_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ManifestParseError(f"Manifest {manifest_path} must be a mapping at the top level")
    return data


def _parse_git_source(file_name: str, data: object) -> GitSource:
    if not isinstance(data, dict):
        raise ManifestParseError(f"{file_name}: 'source.git' must be a mapping")
    repo = data.get("repo")
    commit = data.get("commit")
    if not isinstance(repo, str) or not repo:
        raise ManifestParseError(f"{file_name}: 'source.git.repo' is required")
    if not isinstance(commit, str) or not commit:
        raise ManifestParseError(f"{file_name}: 'source.git.commit' is required")

    path = data.get("path") or ()
    if isinstance(path, str):
        path = (path,)
    elif isinstance(path, list) and all(isinstance(p, str) for p in path):
        path = tuple(path)
    else:
        raise ManifestParseError(f"{file_name}: 'source.git.path' must be a string or list of strings")

    return GitSource(repo=repo, commit=commit, path=path)


def _parse_item(file_name: str, data: object) -> ManifestItem:
    if not isinstance(data, dict):
        raise ManifestParseError(f"{file_name}: manifest entry must be a mapping")

    source = data.get("source")
    if not isinstance(source, dict) or len(source) != 1:
        raise ManifestParseError(f"{file_name}: 'source' must have exactly one source kind")
    kind, source_data = next(iter(source.items()))
    try:
        SourceKind(kind)
    except ValueError:
        raise UnsupportedSourceError(
            f"Unknown manifest source {json.dumps(source, default=str)} for {file_name}"
        ) from None

    raw_patches = data.get("patches") or []
    if not isinstance(raw_patches, list):
        raise ManifestParseError(f"{file_name}: 'patches' must be a list of hunks")
    patches = []
    for i, raw in enumerate(raw_patches):
        if not isinstance(raw, dict):
            raise ManifestParseError(f"{file_name}: patch {i + 1} must be a mapping")
        try:
            patches.append(Hunk.from_dict(raw))
        except (KeyError, TypeError, ValueError) as e:
            raise ManifestParseError(f"{file_name}: patch {i + 1} is malformed: {e}") from e

    return ManifestItem(source=_parse_git_source(file_name, source_data), patches=tuple(patches))


def load_manifest(manifest_file: str | Path, manifest_dir: str | Path | None = None) -> Manifest:
    """Parse and normalize the manifest at *manifest_file*.

    Args:
        manifest_file: Path to a ``.json`` or YAML manifest.
        manifest_dir: Overrides the directory file paths are relative to.
            Defaults to the document's ``manifestDir`` (relative to the
            manifest's own directory), else the manifest's own directory.
    """
    manifest_path = Path(manifest_file)
    data = _read_document(manifest_path)

    if manifest_dir is None:
        declared_dir = data.get("manifestDir")
        if declared_dir is not None and not isinstance(declared_dir, str):
            raise ManifestParseError("'manifestDir' must be a string")
        manifest_dir = manifest_path.parent / declared_dir if declared_dir else manifest_path.parent
    root = Path(manifest_dir)

    strict = data.get("strict", False)
    if not isinstance(strict, bool):
        raise ManifestParseError("'strict' must be true or false")

    raw_files = data.get("files") or {}
    if not isinstance(raw_files, dict):
        raise ManifestParseError("'files' must be a mapping of path to entry")
    files: dict[str, ManifestItem] = {}
    for raw_name, entry in raw_files.items():
        name = normalize_path(str(raw_name))
        if name in files:
            raise ManifestParseError(f"Duplicate manifest entry after normalization: {name}")
        if posixpath.isabs(name) or name == ".." or name.startswith("../"):
            raise ManifestParseError(f"Manifest path must stay inside the manifest directory: {raw_name}")
        files[name] = _parse_item(name, entry)

    allowed = data.get("allowedExtra") or []
    if not isinstance(allowed, list) or not all(isinstance(a, str) for a in allowed):
        raise ManifestParseError("'allowedExtra' must be a list of paths")
    own_path = os.path.relpath(manifest_path.resolve(), root.resolve())
    allowed_extra = tuple(normalize_path(a) for a in [*allowed, own_path])

    logger.debug("Loaded manifest %s: %d files, strict=%s, dir=%s", manifest_path, len(files), strict, root)
    return Manifest(files=files, strict=strict, manifest_dir=root, allowed_extra=allowed_extra)
