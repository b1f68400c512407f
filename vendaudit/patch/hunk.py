"""Hunk — one contiguous change region between two texts.

Hunks use the unified-diff conventions: positions are 1-based, body lines
start with ``+`` (added), ``-`` (removed) or a space (context), and a
``\\ No newline at end of file`` line marks the body line before it as
lacking a trailing newline.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field

ADD = "+"
REMOVE = "-"
CONTEXT = " "
NO_NEWLINE_MARKER = "\\ No newline at end of file"
MARKER_PREFIX = "\\"

_FLIPPED = {ADD: REMOVE, REMOVE: ADD}


@dataclass(frozen=True)
class Hunk:
    """A single change region, in the shape stored in manifests."""

    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept lists from callers and parsers; keep the instance hashable.
        if not isinstance(self.lines, tuple):
            object.__setattr__(self, "lines", tuple(self.lines))

    @property
    def header(self) -> str:
        return f"@@ -{self.old_start},{self.old_lines} +{self.new_start},{self.new_lines} @@"

    def inverted(self) -> Hunk:
        """Return the hunk that undoes this one."""
        return Hunk(
            old_start=self.new_start,
            old_lines=self.new_lines,
            new_start=self.old_start,
            new_lines=self.old_lines,
            lines=tuple(_FLIPPED.get(line[:1], line[:1]) + line[1:] for line in self.lines),
        )

    def to_dict(self) -> dict:
        """Manifest representation (camelCase keys)."""
        return {
            "oldStart": self.old_start,
            "oldLines": self.old_lines,
            "newStart": self.new_start,
            "newLines": self.new_lines,
            "lines": list(self.lines),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Hunk:
        """Build a hunk from its manifest representation.

        Raises ``KeyError``, ``TypeError`` or ``ValueError`` on malformed
        input; the manifest loader turns those into ``ManifestParseError``.
        """
        lines = data["lines"]
        if not isinstance(lines, list) or not all(isinstance(line, str) for line in lines):
            raise TypeError("hunk 'lines' must be a list of strings")
        for line in lines:
            if line[:1] not in (ADD, REMOVE, CONTEXT, MARKER_PREFIX):
                raise ValueError(f"hunk line has no +/-/space prefix: {line!r}")

        counts = [data[key] for key in ("oldStart", "oldLines", "newStart", "newLines")]
        if not all(isinstance(n, int) and not isinstance(n, bool) and n >= 0 for n in counts):
            raise TypeError("hunk positions and counts must be non-negative integers")

        return cls(*counts, lines=tuple(lines))

    def canonical(self) -> str:
        """Deterministic encoding of all five fields, used for set comparison."""
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))

    @classmethod
    def from_canonical(cls, encoded: str) -> Hunk:
        return cls.from_dict(json.loads(encoded))
