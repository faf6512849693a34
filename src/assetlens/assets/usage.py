"""Text search for asset references in project source files."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Iterable, Iterator, List, Set

from .model import ImageAsset
from .overlay import AssetStatusOverlay
from ..logging import get_logger

logger = get_logger(__name__)

SOURCE_SUFFIXES = frozenset({".swift", ".m", ".h", ".storyboard", ".xib", ".plist"})
EXCLUDED_DIRS = frozenset({".git", "Build", "Pods", "Carthage"})


class UsageFinder:
    """
    Decide which assets are referenced from source code by display name.

    A name counts as used when it appears anywhere in a searched file, so the
    result is a conservative "potentially unused" list rather than proof.
    """

    def __init__(
        self,
        source_suffixes: Iterable[str] = SOURCE_SUFFIXES,
        excluded_dirs: Iterable[str] = EXCLUDED_DIRS,
    ) -> None:
        self.source_suffixes = frozenset(source_suffixes)
        self.excluded_dirs = frozenset(excluded_dirs)

    def find_unused(self, assets: List[ImageAsset], project_root: Path | str) -> Set[ImageAsset]:
        if not assets:
            return set()

        logger.info(f"Checking usage of {len(assets)} assets...")
        used_names = self.find_referenced_names(
            {asset.display_name for asset in assets}, Path(project_root)
        )
        unused = {asset for asset in assets if asset.display_name not in used_names}
        logger.info(f"Found {len(unused)} potentially unused assets")
        return unused

    def apply(
        self,
        overlay: AssetStatusOverlay,
        assets: List[ImageAsset],
        project_root: Path | str,
    ) -> Set[ImageAsset]:
        """Record used/unused status for every asset in *overlay*."""
        unused = self.find_unused(assets, project_root)
        for asset in assets:
            if asset in unused:
                overlay.mark_unused(asset)
            else:
                overlay.mark_used(asset)
        return unused

    def find_referenced_names(self, names: Set[str], project_root: Path) -> Set[str]:
        if not names:
            return set()

        # Longest names first so a name is not shadowed by one of its prefixes.
        pattern = re.compile(
            "|".join(re.escape(name) for name in sorted(names, key=len, reverse=True))
        )

        found: Set[str] = set()
        for source in self._source_files(project_root):
            try:
                text = source.read_text(encoding="utf-8", errors="ignore")
            except OSError as exc:
                logger.warning(f"Could not read {source}: {exc}")
                continue
            if "\x00" in text:
                continue
            found.update(match.group(0) for match in pattern.finditer(text))
            if found >= names:
                break

        logger.debug(f"Found {len(found)} asset names referenced in code")
        return found

    def _source_files(self, root: Path) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in self.excluded_dirs)
            for filename in sorted(filenames):
                if Path(filename).suffix in self.source_suffixes:
                    yield Path(dirpath) / filename
