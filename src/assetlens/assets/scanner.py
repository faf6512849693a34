"""Directory scanning for image assets."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Set

from .model import ImageAsset
from ..logging import get_logger

logger = get_logger(__name__)

SUPPORTED_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "pdf", "svg"})
SKIPPED_NAME_MARKERS = ("LaunchImage", ".generated.", "~")


class ScanError(Exception):
    """Raised when the scan root cannot be read."""


def scan_directory(root: Path | str, min_size_kb: int = 1) -> List[ImageAsset]:
    """
    Collect image assets below *root* in a stable, sorted traversal order.

    Hidden files and directories are skipped, as are files smaller than
    ``min_size_kb`` kilobytes and launch/generated images. Only the first
    image of each ``.imageset`` bundle is kept.

    Raises:
        ScanError: If *root* is not a readable directory
    """
    root = Path(root).expanduser()
    if not root.is_dir():
        raise ScanError(f"Cannot read directory: {root}")

    min_bytes = min_size_kb * 1024
    assets: List[ImageAsset] = []
    seen_imagesets: Set[Path] = set()

    def on_error(exc: OSError) -> None:
        logger.warning(f"Skipping unreadable path {exc.filename}: {exc.strerror}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))

        for filename in sorted(filenames):
            if filename.startswith("."):
                continue
            if Path(filename).suffix.lower().lstrip(".") not in SUPPORTED_EXTENSIONS:
                continue
            if any(marker in filename for marker in SKIPPED_NAME_MARKERS):
                continue

            asset = ImageAsset.from_path(Path(dirpath) / filename)
            if asset.file_size < min_bytes:
                continue

            key = asset.imageset_dir
            if key is not None:
                if key in seen_imagesets:
                    continue
                seen_imagesets.add(key)

            assets.append(asset)

    logger.info(f"Found {len(assets)} image assets under {root}")
    return assets
