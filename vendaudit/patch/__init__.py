"""Hunks, line diffing, patch application and hunk-set comparison."""

from vendaudit.patch.comparator import Divergence, compare
from vendaudit.patch.engine import apply_hunks, diff, invert, split_lines
from vendaudit.patch.hunk import Hunk

__all__ = [
    "Divergence",
    "Hunk",
    "apply_hunks",
    "compare",
    "diff",
    "invert",
    "split_lines",
]
