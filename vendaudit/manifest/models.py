"""Manifest data model.

A manifest maps each vendored file, by path relative to ``manifest_dir``, to
the upstream source it came from and the patches that are allowed between
the local copy and that source.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union

from vendaudit.patch.hunk import Hunk

FILE_TOKEN = "{file}"


class SourceKind(str, Enum):
    """Source kinds a manifest entry may name under `source`."""

    GIT = "git"


@dataclass(frozen=True)
class GitSource:
    """A file at a fixed commit of a git-hosted repository."""

    repo: str  # e.g. "git@github.com:owner/name.git"
    commit: str
    path: tuple[str, ...] = ()

    kind = SourceKind.GIT

    def remote_path(self, file_name: str) -> str:
        """Resolve the path of *file_name* inside the repository.

        Path segments containing ``{file}`` have it replaced with the file
        name; without the token the file name is appended as a last segment.
        """
        segments = [s.strip("/") for s in self.path if s.strip("/")]
        if any(FILE_TOKEN in s for s in segments):
            segments = [s.replace(FILE_TOKEN, file_name) for s in segments]
        else:
            segments.append(file_name)
        return "/".join(segments)


# Add new source kinds here and in ``vendaudit.sources``.
Source = Union[GitSource]


@dataclass(frozen=True)
class ManifestItem:
    """One declared file: where it comes from and its accepted local delta."""

    source: Source
    patches: tuple[Hunk, ...] = ()


@dataclass(frozen=True)
class Manifest:
    """The parsed manifest for one invocation."""

    files: dict[str, ManifestItem] = field(default_factory=dict)
    strict: bool = False
    manifest_dir: Path = Path(".")
    allowed_extra: tuple[str, ...] = ()

    @property
    def declared(self) -> list[str]:
        return list(self.files)
