"""Perceptual fingerprints for image assets."""

from dataclasses import dataclass
from typing import Tuple

import imagehash
import numpy as np
from PIL import Image

from .errors import DecodeError
from .rendering import RenderError, render_first_page
from ..assets.model import ImageAsset
from ..logging import get_logger

logger = get_logger(__name__)

HASH_SIZE = 8
VECTOR_TYPES = frozenset({"pdf", "svg"})
BACKGROUND = (255, 255, 255)
HIGH_DEPTH_MODES = frozenset({"I", "F"})


@dataclass(frozen=True)
class Digest:
    """Perceptual and difference hash of one decoded asset."""
    phash: imagehash.ImageHash
    dhash: imagehash.ImageHash

    @property
    def shape(self) -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
        return self.phash.hash.shape, self.dhash.hash.shape


def extract(asset: ImageAsset, hash_size: int = HASH_SIZE) -> Digest:
    """
    Decode *asset* and compute its digest.

    Vector documents are rendered from their first page only; raster images
    use their first frame. Transparent pixels are flattened onto white so an
    icon and its opaque export hash alike.

    Raises:
        DecodeError: If the file is missing, empty, or cannot be decoded
    """
    if not asset.path.is_file():
        raise DecodeError(asset, "file does not exist")
    if asset.path.stat().st_size == 0:
        raise DecodeError(asset, "file is empty")

    if asset.file_type in VECTOR_TYPES:
        try:
            img = render_first_page(asset.path)
        except RenderError as exc:
            raise DecodeError(asset, str(exc)) from exc
        return _digest(img, hash_size)

    try:
        with Image.open(asset.path) as img:
            img.seek(0)
            img.load()
            rgb = _to_rgb(img)
    except Exception as exc:
        raise DecodeError(asset, f"{type(exc).__name__}: {exc}") from exc

    return _digest(rgb, hash_size)


def _to_rgb(img: Image.Image) -> Image.Image:
    if img.mode.startswith("I;16") or img.mode in HIGH_DEPTH_MODES:
        img = _to_eight_bit(img)
    if img.mode == "P":
        img = img.convert("RGBA")
    if img.mode in ("RGBA", "LA", "PA"):
        rgba = img.convert("RGBA")
        flattened = Image.new("RGB", rgba.size, BACKGROUND)
        flattened.paste(rgba, mask=rgba.getchannel("A"))
        return flattened
    if img.mode != "RGB":
        return img.convert("RGB")
    return img.copy()


def _to_eight_bit(img: Image.Image) -> Image.Image:
    """
    Reduce a 16-bit, 32-bit integer or float grayscale image to mode ``L``.

    16-bit data is scaled by its full bit depth. Wider modes carry no fixed
    range, so values outside [0, 255] are stretched from their own min/max.
    """
    data = np.asarray(img, dtype=np.float64)
    if not np.isfinite(data).all():
        raise ValueError(f"non-finite pixel values in mode {img.mode}")

    if img.mode.startswith("I;16"):
        data = data / 257.0
    else:
        low, high = data.min(), data.max()
        if low < 0 or high > 255:
            span = high - low
            data = (data - low) * (255.0 / span) if span else np.zeros_like(data)

    return Image.fromarray(np.clip(np.rint(data), 0, 255).astype(np.uint8))


def _digest(img: Image.Image, hash_size: int) -> Digest:
    digest = Digest(
        phash=imagehash.phash(img, hash_size=hash_size),
        dhash=imagehash.dhash(img, hash_size=hash_size),
    )
    logger.debug(f"Computed digest phash={digest.phash}, dhash={digest.dhash}")
    return digest
