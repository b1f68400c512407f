"""Tests for hunk-set comparison."""

from vendaudit.patch.comparator import compare
from vendaudit.patch.engine import diff
from vendaudit.patch.hunk import Hunk

FIRST = Hunk(2, 1, 2, 1, ["-b", "+B"])
SECOND = Hunk(7, 0, 7, 1, ["+new"])


def test_compare_same_hunks_any_order():
    assert compare("f.py", [FIRST, SECOND], [FIRST, SECOND]) is None
    assert compare("f.py", [FIRST, SECOND], [SECOND, FIRST]) is None
    assert compare("f.py", [], []) is None


def test_compare_reports_unexpected_and_missing():
    divergence = compare("f.py", [FIRST], [SECOND])
    assert divergence is not None
    assert divergence.file_name == "f.py"
    assert divergence.unexpected == [FIRST]
    assert divergence.missing == [SECOND]
    assert divergence.found == [FIRST]


def test_compare_unrecorded_local_change():
    found = diff("a\nlocal\n", "a\nupstream\n")
    divergence = compare("f.py", found, [])
    assert divergence is not None
    assert divergence.unexpected == found
    assert divergence.missing == []


def test_compare_uses_structure_not_identity():
    copy = Hunk.from_dict(FIRST.to_dict())
    assert copy is not FIRST
    assert compare("f.py", [FIRST], [copy]) is None


def test_compare_collapses_duplicate_hunks():
    assert compare("f.py", [FIRST, FIRST], [FIRST]) is None
