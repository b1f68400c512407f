"""Error taxonomy for manifest loading, fetching, auditing and syncing.

Manifest and fetch errors are fatal for a run. The classification errors
(missing, unexpected, divergence) are collected into an ``AuditReport`` and
only raised when a caller asks for it via ``AuditReport.raise_for_failures``.
"""

from __future__ import annotations


class VendauditError(Exception):
    """Base class for every error raised by vendaudit."""


class ManifestParseError(VendauditError, ValueError):
    """The manifest document is unreadable or malformed."""


class UnsupportedSourceError(ManifestParseError):
    """A manifest item declares a source kind other than ``git``."""


class FetchError(VendauditError):
    """The remote baseline for a file could not be retrieved."""

    NOT_FOUND = "not-found"
    NETWORK = "network"
    UNSUPPORTED_DOMAIN = "unsupported-domain"

    def __init__(self, message: str, kind: str = NETWORK, url: str = ""):
        super().__init__(message)
        self.kind = kind
        self.url = url


class DivergenceError(VendauditError):
    """Local content differs from upstream beyond the recorded patches."""

    def __init__(self, file_names: list[str]):
        super().__init__(f"File divergence found in: {', '.join(file_names)}")
        self.file_names = file_names


class MissingFileError(VendauditError):
    """Files declared in the manifest are absent from disk."""

    def __init__(self, file_names: list[str]):
        super().__init__(f"Missing expected files: {', '.join(file_names)}")
        self.file_names = file_names


class UnexpectedFileError(VendauditError):
    """Files on disk are not declared in a strict manifest."""

    def __init__(self, file_names: list[str]):
        super().__init__(f"Unexpected files: {', '.join(file_names)}")
        self.file_names = file_names


class PatchApplyError(VendauditError):
    """A hunk does not match the text it is being applied to."""

    def __init__(self, message: str, file_name: str = "", hunk_index: int | None = None):
        super().__init__(message)
        self.file_name = file_name
        self.hunk_index = hunk_index

    def for_file(self, file_name: str) -> PatchApplyError:
        """Return a copy of this error tagged with *file_name*."""
        return PatchApplyError(f"{file_name}: {self}", file_name, self.hunk_index)
