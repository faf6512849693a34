"""
Asset and group models shared by the scanner, the clustering engine and callers.

Assets are immutable and compare by path only. Status that changes after a scan
(used in code, deleted by the user) is kept out of these objects; see
``assetlens.assets.overlay``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import NamedTuple, Optional, Tuple

IMAGESET_SUFFIX = ".imageset"
XCASSETS_SUFFIX = ".xcassets"


@dataclass(frozen=True)
class ImageAsset:
    """A single image file discovered on disk."""
    path: Path
    file_size: int = field(default=0, compare=False)
    file_type: str = field(default="", compare=False)

    @classmethod
    def from_path(cls, path: Path | str) -> ImageAsset:
        path = Path(path)
        try:
            size = path.stat().st_size
        except OSError:
            size = 0
        return cls(path=path, file_size=size, file_type=path.suffix.lower().lstrip("."))

    @property
    def imageset_name(self) -> Optional[str]:
        """Name of the enclosing ``.imageset`` directory, without its suffix."""
        index = self._imageset_index()
        if index is None:
            return None
        return self.path.parts[index][: -len(IMAGESET_SUFFIX)]

    @property
    def imageset_dir(self) -> Optional[Path]:
        index = self._imageset_index()
        if index is None:
            return None
        return Path(*self.path.parts[: index + 1])

    @property
    def display_name(self) -> str:
        """Imageset name inside an asset catalog, otherwise the file stem."""
        return self.imageset_name or self.path.stem

    @property
    def relative_path(self) -> str:
        """Path from the ``.xcassets`` catalog down to the imageset, or the file name."""
        index = self._imageset_index()
        if index is not None:
            parts = self.path.parts[: index + 1]
            for i, part in enumerate(parts):
                if part.endswith(XCASSETS_SUFFIX):
                    return "/".join(parts[i:])
        return self.path.name

    def in_same_imageset(self, other: ImageAsset) -> bool:
        mine = self.imageset_name
        theirs = other.imageset_name
        if mine is None or theirs is None:
            return False
        return mine == theirs

    def _imageset_index(self) -> Optional[int]:
        for i, part in enumerate(self.path.parts):
            if part.endswith(IMAGESET_SUFFIX):
                return i
        return None


class SimilarMember(NamedTuple):
    asset: ImageAsset
    distance: float


@dataclass(frozen=True)
class SimilarityGroup:
    """A primary asset plus the assets found within threshold of it."""
    primary: ImageAsset
    similar: Tuple[SimilarMember, ...]

    @property
    def all_assets(self) -> Tuple[ImageAsset, ...]:
        return (self.primary,) + tuple(member.asset for member in self.similar)

    @property
    def total_size(self) -> int:
        return sum(asset.file_size for asset in self.all_assets)

    @property
    def potential_savings(self) -> int:
        """Bytes reclaimed by keeping only the smallest asset of the group."""
        sizes = [asset.file_size for asset in self.all_assets]
        return sum(sizes) - min(sizes)

    def index_of(self, asset: ImageAsset) -> int:
        """Position of *asset* in ``all_assets``; raises ValueError if absent."""
        return self.all_assets.index(asset)

    def __contains__(self, asset: object) -> bool:
        return asset in self.all_assets
