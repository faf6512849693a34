"""Distance metrics for digest comparison."""

import imagehash

from .errors import ClusteringError
from .fingerprint import Digest

PHASH_WEIGHT = 0.7
DHASH_WEIGHT = 0.3


def hamming_distance(a: imagehash.ImageHash, b: imagehash.ImageHash) -> int:
    """
    Calculate Hamming distance between two perceptual hashes.

    Raises:
        ClusteringError: If the hashes have different bit shapes
    """
    if a.hash.shape != b.hash.shape:
        raise ClusteringError(
            f"Cannot compare hashes of shape {a.hash.shape} and {b.hash.shape}"
        )
    return int(a - b)


def normalized_hamming(a: imagehash.ImageHash, b: imagehash.ImageHash) -> float:
    """Fraction of differing bits, in [0, 1]."""
    return hamming_distance(a, b) / a.hash.size


def distance(
    a: Digest,
    b: Digest,
    phash_weight: float = PHASH_WEIGHT,
    dhash_weight: float = DHASH_WEIGHT,
) -> float:
    """
    Weighted normalized distance between two digests.

    Returns 0.0 for identical digests and at most 1.0 when the weights sum
    to one. Symmetric in its arguments.

    Raises:
        ClusteringError: If the digests were computed with different hash sizes
    """
    return float(
        phash_weight * normalized_hamming(a.phash, b.phash)
        + dhash_weight * normalized_hamming(a.dhash, b.dhash)
    )


def is_within(value: float, threshold: float) -> bool:
    """Threshold test used for grouping; inclusive at the boundary."""
    return value <= threshold
