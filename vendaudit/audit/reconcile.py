"""Three-way set reconciliation between two collections."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Hashable, Iterable, TypeVar

T = TypeVar("T", bound=Hashable)


@dataclass
class ReconciliationResult(Generic[T]):
    """Elements in both inputs, only in the left one, and only in the right one.

    Each list keeps the order in which its elements first appear in the
    input they come from, with duplicates collapsed.
    """

    matched: list[T] = field(default_factory=list)
    only_left: list[T] = field(default_factory=list)
    only_right: list[T] = field(default_factory=list)

    @property
    def identical(self) -> bool:
        return not self.only_left and not self.only_right


def _unique(items: Iterable[T]) -> list[T]:
    return list(dict.fromkeys(items))


def reconcile(left: Iterable[T], right: Iterable[T]) -> ReconciliationResult[T]:
    """Compare *left* and *right* as sets."""
    left_items = _unique(left)
    right_items = _unique(right)
    left_set = set(left_items)
    right_set = set(right_items)

    return ReconciliationResult(
        matched=[x for x in left_items if x in right_set],
        only_left=[x for x in left_items if x not in right_set],
        only_right=[x for x in right_items if x not in left_set],
    )
