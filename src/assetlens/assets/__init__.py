"""Asset discovery, models and caller-owned status."""

from .model import ImageAsset, SimilarityGroup, SimilarMember
from .overlay import AssetStatusOverlay
from .scanner import ScanError, scan_directory
from .sorting import GroupSortingCriterion, sort_groups
from .usage import UsageFinder

__all__ = [
    "ImageAsset",
    "SimilarityGroup",
    "SimilarMember",
    "AssetStatusOverlay",
    "ScanError",
    "scan_directory",
    "GroupSortingCriterion",
    "sort_groups",
    "UsageFinder",
]
