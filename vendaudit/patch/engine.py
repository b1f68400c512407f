"""Line diffing, hunk inversion and hunk application.

``diff`` emits hunks with no context lines: every hunk covers exactly one
changed region. The output is meant for exact structural comparison against
recorded patches, so for fixed inputs it is always the same hunk list.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from vendaudit.errors import PatchApplyError
from vendaudit.patch.hunk import (
    ADD,
    CONTEXT,
    MARKER_PREFIX,
    NO_NEWLINE_MARKER,
    REMOVE,
    Hunk,
)

logger = logging.getLogger(__name__)

_EQUAL = "="


def split_lines(text: str) -> list[str]:
    """Split *text* into lines, keeping each ``\\n`` terminator.

    Only ``\\n`` separates lines; a ``\\r`` stays part of the line content so
    CRLF files round-trip byte for byte. The last line has no terminator when
    the text does not end with a newline.
    """
    if not text:
        return []
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


# ---------------------------------------------------------------------------
# Diff
# ---------------------------------------------------------------------------


def _bisect(a: list[int], b: list[int]) -> tuple[int, int]:
    """Find where the forward and reverse Myers searches meet.

    Only the current furthest-reaching x per diagonal is kept for each
    direction, so memory is linear in ``len(a) + len(b)``. Diagonals that run
    off the grid are dropped from further rounds. Returns the split point
    ``(x, y)`` of a middle snake.
    """
    n, m = len(a), len(b)
    max_d = (n + m + 1) // 2
    offset = max_d
    size = 2 * max_d + 2
    forward = [-1] * size
    forward[offset + 1] = 0
    reverse = forward[:]
    delta = n - m
    front = delta % 2 != 0
    k1_start = k1_end = k2_start = k2_end = 0

    for d in range(max_d):
        for k1 in range(-d + k1_start, d + 1 - k1_end, 2):
            i = offset + k1
            if k1 == -d or (k1 != d and forward[i - 1] < forward[i + 1]):
                x1 = forward[i + 1]
            else:
                x1 = forward[i - 1] + 1
            y1 = x1 - k1
            while x1 < n and y1 < m and a[x1] == b[y1]:
                x1 += 1
                y1 += 1
            forward[i] = x1
            if x1 > n:
                k1_end += 2
            elif y1 > m:
                k1_start += 2
            elif front:
                j = offset + delta - k1
                if 0 <= j < size and reverse[j] != -1 and x1 >= n - reverse[j]:
                    return x1, y1

        for k2 in range(-d + k2_start, d + 1 - k2_end, 2):
            j = offset + k2
            if k2 == -d or (k2 != d and reverse[j - 1] < reverse[j + 1]):
                x2 = reverse[j + 1]
            else:
                x2 = reverse[j - 1] + 1
            y2 = x2 - k2
            while x2 < n and y2 < m and a[n - x2 - 1] == b[m - y2 - 1]:
                x2 += 1
                y2 += 1
            reverse[j] = x2
            if x2 > n:
                k2_end += 2
            elif y2 > m:
                k2_start += 2
            elif not front:
                i = offset + delta - k2
                if 0 <= i < size and forward[i] != -1:
                    x1 = forward[i]
                    y1 = offset + x1 - i
                    if x1 >= n - x2:
                        return x1, y1

    # No overlap found: treat the whole range as one replacement.
    return n, 0


def _diff_range(
    a: list[int],
    b: list[int],
    a_lo: int,
    a_hi: int,
    b_lo: int,
    b_hi: int,
    script: list[tuple[str, int, int]],
) -> None:
    while a_lo < a_hi and b_lo < b_hi and a[a_lo] == b[b_lo]:
        script.append((_EQUAL, a_lo, b_lo))
        a_lo += 1
        b_lo += 1

    suffix = []
    while a_lo < a_hi and b_lo < b_hi and a[a_hi - 1] == b[b_hi - 1]:
        a_hi -= 1
        b_hi -= 1
        suffix.append((_EQUAL, a_hi, b_hi))

    split = None
    if a_lo < a_hi and b_lo < b_hi and not set(a[a_lo:a_hi]).isdisjoint(b[b_lo:b_hi]):
        x, y = _bisect(a[a_lo:a_hi], b[b_lo:b_hi])
        if (x, y) not in ((0, 0), (a_hi - a_lo, b_hi - b_lo)):
            split = (a_lo + x, b_lo + y)

    if split is None:
        script.extend((REMOVE, i, b_lo) for i in range(a_lo, a_hi))
        script.extend((ADD, a_hi, j) for j in range(b_lo, b_hi))
    else:
        _diff_range(a, b, a_lo, split[0], b_lo, split[1], script)
        _diff_range(a, b, split[0], a_hi, split[1], b_hi, script)

    script.extend(reversed(suffix))


def _edit_script(old: list[str], new: list[str]) -> list[tuple[str, int, int]]:
    """Myers shortest edit script between two line lists, in linear space.

    Returns ``(op, old_index, new_index)`` triples in forward order, where the
    indices are the 0-based position in each list at which the op happens.
    """
    codes: dict[str, int] = {}
    a = [codes.setdefault(line, len(codes)) for line in old]
    b = [codes.setdefault(line, len(codes)) for line in new]

    script: list[tuple[str, int, int]] = []
    _diff_range(a, b, 0, len(a), 0, len(b), script)
    return script


def _body_lines(prefix: str, lines: list[str]) -> Iterator[str]:
    for line in lines:
        if line.endswith("\n"):
            yield prefix + line[:-1]
        else:
            yield prefix + line
            yield NO_NEWLINE_MARKER


def _make_hunk(old_pos: int, new_pos: int, removed: list[str], added: list[str]) -> Hunk:
    return Hunk(
        old_start=old_pos + 1,
        old_lines=len(removed),
        new_start=new_pos + 1,
        new_lines=len(added),
        lines=(*_body_lines(REMOVE, removed), *_body_lines(ADD, added)),
    )


def diff(old_text: str, new_text: str) -> list[Hunk]:
    """Compute the hunks that turn *old_text* into *new_text*.

    Each hunk lists its removed lines before its added lines. A pure
    insertion has ``old_lines == 0`` and ``old_start`` pointing at the old
    line it is inserted before (one past the end when appending).
    """
    old = split_lines(old_text)
    new = split_lines(new_text)

    hunks: list[Hunk] = []
    removed: list[str] = []
    added: list[str] = []
    old_pos = new_pos = 0

    for op, i, j in _edit_script(old, new):
        if op == _EQUAL:
            if removed or added:
                hunks.append(_make_hunk(old_pos, new_pos, removed, added))
                removed, added = [], []
            continue
        if not removed and not added:
            old_pos, new_pos = i, j
        if op == REMOVE:
            removed.append(old[i])
        else:
            added.append(new[j])

    if removed or added:
        hunks.append(_make_hunk(old_pos, new_pos, removed, added))

    logger.debug("diff: %d old lines, %d new lines, %d hunks", len(old), len(new), len(hunks))
    return hunks


# ---------------------------------------------------------------------------
# Invert / apply
# ---------------------------------------------------------------------------


def invert(hunks: Iterable[Hunk]) -> list[Hunk]:
    """Return hunks that undo *hunks*: ``invert(diff(a, b))`` turns b into a."""
    return [hunk.inverted() for hunk in hunks]


def _parse_body(hunk: Hunk, index: int) -> list[tuple[str, str]]:
    """Turn hunk body lines into ``(op, line)`` pairs with terminators restored."""
    body: list[tuple[str, str]] = []
    for line in hunk.lines:
        op = line[:1]
        if op == MARKER_PREFIX:
            if not body:
                raise PatchApplyError(f"hunk {index + 1} starts with a no-newline marker", hunk_index=index)
            prev_op, prev_line = body[-1]
            body[-1] = (prev_op, prev_line[:-1])
        elif op in (ADD, REMOVE, CONTEXT):
            body.append((op, line[1:] + "\n"))
        else:
            raise PatchApplyError(f"hunk {index + 1} has a line without a prefix: {line!r}", hunk_index=index)

    old_count = sum(1 for op, _ in body if op != ADD)
    new_count = sum(1 for op, _ in body if op != REMOVE)
    if old_count != hunk.old_lines or new_count != hunk.new_lines:
        raise PatchApplyError(
            f"hunk {index + 1} header {hunk.header} does not match its body "
            f"({old_count} old, {new_count} new lines)",
            hunk_index=index,
        )
    return body


def apply_hunks(hunks: Iterable[Hunk], text: str) -> str:
    """Apply *hunks* to *text* and return the patched text.

    Hunks must be ordered and non-overlapping. Removed and context lines must
    match *text* exactly at ``old_start``; otherwise ``PatchApplyError`` is
    raised and nothing is returned.
    """
    source = split_lines(text)
    out: list[str] = []
    cursor = 0

    for index, hunk in enumerate(hunks):
        body = _parse_body(hunk, index)
        if hunk.old_start < 1 and hunk.old_lines > 0:
            raise PatchApplyError(f"hunk {index + 1} starts before line 1", hunk_index=index)
        start = max(hunk.old_start - 1, 0)
        if start < cursor:
            raise PatchApplyError(
                f"hunk {index + 1} at line {hunk.old_start} overlaps or precedes the previous hunk",
                hunk_index=index,
            )
        if start > len(source):
            raise PatchApplyError(
                f"hunk {index + 1} starts at line {hunk.old_start} but the text has {len(source)} lines",
                hunk_index=index,
            )

        out.extend(source[cursor:start])
        cursor = start

        for op, line in body:
            if op == ADD:
                out.append(line)
                continue
            if cursor >= len(source) or source[cursor] != line:
                found = source[cursor] if cursor < len(source) else "<end of text>"
                raise PatchApplyError(
                    f"hunk {index + 1} does not match at line {cursor + 1}: "
                    f"expected {line!r}, found {found!r}",
                    hunk_index=index,
                )
            if op == CONTEXT:
                out.append(line)
            cursor += 1

    out.extend(source[cursor:])
    return "".join(out)
