"""Error taxonomy for similarity analysis."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..assets.model import ImageAsset


class AnalysisError(Exception):
    """Base class for similarity analysis failures."""


class DecodeError(AnalysisError):
    """Raised when an asset cannot be decoded into a digest. Never fatal to a pass."""

    def __init__(self, asset: "ImageAsset", reason: str) -> None:
        super().__init__(f"Cannot decode {asset.path}: {reason}")
        self.asset = asset
        self.reason = reason


class ClusteringError(AnalysisError):
    """Raised when an invariant of the clustering pass is violated."""


class AnalysisCancelled(AnalysisError):
    """Raised when the caller cancelled the analysis. No partial results exist."""
