"""File scanner — enumerate the regular files under a manifest directory."""

from __future__ import annotations

import os
import stat
from pathlib import Path


def scan_files(root: str | Path) -> list[str]:
    """List every regular file under *root* as a posix path relative to it.

    Directories are walked depth-first from an explicit stack, entries sorted
    by name, so the result order is stable. Symlinks are neither followed nor
    reported.
    """
    root = Path(root)
    files: list[str] = []
    pending: list[Path] = [root]

    while pending:
        directory = pending.pop()
        subdirs: list[Path] = []
        for name in sorted(os.listdir(directory)):
            path = directory / name
            mode = os.lstat(path).st_mode
            if stat.S_ISREG(mode):
                files.append(path.relative_to(root).as_posix())
            elif stat.S_ISDIR(mode):
                subdirs.append(path)
        pending.extend(reversed(subdirs))

    return files
