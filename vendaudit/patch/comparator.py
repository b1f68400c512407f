"""Compare the hunks found on disk against the hunks a manifest accepts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from vendaudit.audit.reconcile import reconcile
from vendaudit.patch.hunk import Hunk


@dataclass
class Divergence:
    """A file whose local changes do not match its recorded patches."""

    file_name: str
    unexpected: list[Hunk] = field(default_factory=list)  # found, not recorded
    missing: list[Hunk] = field(default_factory=list)  # recorded, not found
    found: list[Hunk] = field(default_factory=list)


def compare(file_name: str, found: Sequence[Hunk], expected: Sequence[Hunk]) -> Divergence | None:
    """Return a ``Divergence`` unless *found* and *expected* are the same set of hunks.

    Hunks are compared by their canonical encoding, so order does not matter
    and a hunk listed twice counts once.
    """
    result = reconcile(
        [hunk.canonical() for hunk in found],
        [hunk.canonical() for hunk in expected],
    )
    if result.identical:
        return None

    return Divergence(
        file_name=file_name,
        unexpected=[Hunk.from_canonical(h) for h in result.only_left],
        missing=[Hunk.from_canonical(h) for h in result.only_right],
        found=list(found),
    )
