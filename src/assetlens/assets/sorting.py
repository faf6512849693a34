"""Caller-side orderings for similarity groups."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Sequence

from .model import SimilarityGroup
from .overlay import AssetStatusOverlay


class GroupSortingCriterion(Enum):
    SIZE_ASCENDING = "size-asc"
    SIZE_DESCENDING = "size-desc"
    USED_FIRST = "used-first"
    UNUSED_FIRST = "unused-first"
    COUNT_ASCENDING = "count-asc"
    COUNT_DESCENDING = "count-desc"

    @property
    def title(self) -> str:
        return _TITLES[self]


_TITLES = {
    GroupSortingCriterion.SIZE_ASCENDING: "Smallest first (KB)",
    GroupSortingCriterion.SIZE_DESCENDING: "Largest first (KB)",
    GroupSortingCriterion.USED_FIRST: "Used first",
    GroupSortingCriterion.UNUSED_FIRST: "Unused first",
    GroupSortingCriterion.COUNT_ASCENDING: "Smallest first",
    GroupSortingCriterion.COUNT_DESCENDING: "Largest first",
}


def sort_groups(
    groups: Sequence[SimilarityGroup],
    criterion: GroupSortingCriterion,
    overlay: Optional[AssetStatusOverlay] = None,
) -> List[SimilarityGroup]:
    """
    Return *groups* reordered by *criterion*.

    Sorting is stable, so groups that compare equal keep their analysis order.
    Usage-based criteria need an overlay; without one every group counts as used.
    """
    def all_unused(group: SimilarityGroup) -> bool:
        return overlay is not None and overlay.all_unused(group)

    if criterion is GroupSortingCriterion.SIZE_ASCENDING:
        return sorted(groups, key=lambda g: g.total_size)
    if criterion is GroupSortingCriterion.SIZE_DESCENDING:
        return sorted(groups, key=lambda g: g.total_size, reverse=True)
    if criterion is GroupSortingCriterion.USED_FIRST:
        return sorted(groups, key=all_unused)
    if criterion is GroupSortingCriterion.UNUSED_FIRST:
        return sorted(groups, key=lambda g: not all_unused(g))
    if criterion is GroupSortingCriterion.COUNT_ASCENDING:
        return sorted(groups, key=lambda g: len(g.similar))
    return sorted(groups, key=lambda g: len(g.similar), reverse=True)
