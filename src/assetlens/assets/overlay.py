"""Caller-owned usage and deletion status for assets, keyed by asset path."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from .model import ImageAsset, SimilarityGroup


class AssetStatusOverlay:
    """
    Mutable status layered on top of immutable assets and groups.

    ``is_used`` is tri-state: ``None`` means usage was never checked for the
    asset, which is different from "checked and unused".
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._used: Dict[Path, bool] = {}
        self._deleted: Set[Path] = set()

    def mark_used(self, asset: ImageAsset) -> None:
        with self._lock:
            self._used[asset.path] = True

    def mark_unused(self, asset: ImageAsset) -> None:
        with self._lock:
            self._used[asset.path] = False

    def mark_deleted(self, asset: ImageAsset) -> None:
        with self._lock:
            self._deleted.add(asset.path)

    def is_used(self, asset: ImageAsset) -> Optional[bool]:
        with self._lock:
            return self._used.get(asset.path)

    def is_unused(self, asset: ImageAsset) -> bool:
        return self.is_used(asset) is False

    def is_deleted(self, asset: ImageAsset) -> bool:
        with self._lock:
            return asset.path in self._deleted

    @property
    def usage_checked(self) -> bool:
        with self._lock:
            return bool(self._used)

    def unused_assets(self, assets: Iterable[ImageAsset]) -> List[ImageAsset]:
        return [asset for asset in assets if self.is_unused(asset)]

    def all_unused(self, group: SimilarityGroup) -> bool:
        return all(self.is_unused(asset) for asset in group.all_assets)
