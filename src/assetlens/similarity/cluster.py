"""Clustering logic for grouping visually similar assets."""

from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Set, Union

from .distance import distance, is_within
from .errors import ClusteringError
from .fingerprint import Digest
from .progress import CancelToken, ProgressCallback, ProgressReporter
from ..assets.model import ImageAsset, SimilarityGroup, SimilarMember
from ..config import PRIMARY_STRATEGIES
from ..logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ClusterOutcome:
    groups: List[SimilarityGroup]
    ungrouped: List[ImageAsset]


def cluster(
    assets: Sequence[ImageAsset],
    digests: Mapping[ImageAsset, Digest],
    threshold: float,
    progress: Union[ProgressReporter, ProgressCallback, None] = None,
    cancel: Optional[CancelToken] = None,
    strategy: str = "first-seen",
) -> ClusterOutcome:
    """
    Group assets around primaries using one greedy pass.

    Candidates are visited in order (input order for ``first-seen``). Each
    candidate not yet assigned becomes a primary and claims every later
    unassigned candidate whose distance to it is ``<= threshold``. Members are
    compared with the primary only, never with each other, and groups are not
    merged afterwards. B and C can therefore be within threshold of each other
    yet end up apart when A claimed B first. This keeps the pass at a single
    O(N^2) sweep.

    A primary that claims nothing is not a group. Assets without a digest are
    never compared and are returned as ungrouped, as is every asset outside
    a group, in input order.

    Args:
        assets: Assets in scan order; repeated paths after the first are ignored
        digests: Digest per asset; assets missing here failed to decode
        threshold: Maximum distance for an asset to join a primary's group
        progress: Receives the fraction of the N*(N-1)/2 pairs covered, once
            per primary-candidate position
        cancel: Checked before every primary-candidate pass
        strategy: Candidate order, one of ``PRIMARY_STRATEGIES``

    Raises:
        ClusteringError: If two digests cannot be compared or *strategy* is unknown
        AnalysisCancelled: If *cancel* was triggered during the pass
    """
    reporter = progress if isinstance(progress, ProgressReporter) else ProgressReporter(progress)

    unique = _unique(assets)
    candidates = _order([asset for asset in unique if asset in digests], strategy)

    n = len(candidates)
    total_pairs = n * (n - 1) // 2
    assigned = [False] * n
    groups: List[SimilarityGroup] = []
    covered = 0

    for i, primary in enumerate(candidates):
        if cancel is not None:
            cancel.raise_if_cancelled()

        if not assigned[i]:
            primary_digest = digests[primary]
            members: List[SimilarMember] = []

            for j in range(i + 1, n):
                if assigned[j]:
                    continue
                candidate = candidates[j]
                value = distance(primary_digest, digests[candidate])
                if is_within(value, threshold):
                    members.append(SimilarMember(candidate, value))
                    assigned[j] = True
                    logger.debug(f"Matched {candidate.path} to {primary.path} (distance: {value:.4f})")

            if members:
                assigned[i] = True
                groups.append(SimilarityGroup(primary=primary, similar=tuple(members)))
                logger.debug(f"Created similarity group #{len(groups)} with {len(members) + 1} assets, primary: {primary.path}")

        covered += n - 1 - i
        if total_pairs:
            reporter.report(covered / total_pairs)

    grouped: Set[ImageAsset] = {asset for group in groups for asset in group.all_assets}
    ungrouped = [asset for asset in unique if asset not in grouped]

    logger.info(f"Clustered {n} comparable assets into {len(groups)} groups, {len(ungrouped)} ungrouped")
    return ClusterOutcome(groups=groups, ungrouped=ungrouped)


def _unique(assets: Sequence[ImageAsset]) -> List[ImageAsset]:
    seen: Dict[ImageAsset, None] = {}
    for asset in assets:
        if asset in seen:
            logger.warning(f"Ignoring repeated asset {asset.path}")
            continue
        seen[asset] = None
    return list(seen)


def _order(assets: List[ImageAsset], strategy: str) -> List[ImageAsset]:
    if strategy == "first-seen":
        return assets
    if strategy == "smallest-file":
        return sorted(assets, key=lambda asset: asset.file_size)
    if strategy == "largest-file":
        return sorted(assets, key=lambda asset: asset.file_size, reverse=True)
    raise ClusteringError(
        f"Unknown primary strategy {strategy!r}; expected one of {', '.join(PRIMARY_STRATEGIES)}"
    )
