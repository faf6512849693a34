"""
Public entry points for similarity analysis.

``analyze`` runs a full pass on the calling thread: parallel digest
extraction followed by the single-threaded clustering pass. ``analyze_async``
and ``start_analysis`` run the same pass in the background for event-loop and
threaded callers respectively.
"""

from __future__ import annotations

import asyncio
import functools
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .cluster import cluster
from .errors import DecodeError
from .fingerprint import Digest, extract
from .progress import CancelToken, ProgressCallback, ProgressChannel, ProgressReporter
from ..assets.model import ImageAsset, SimilarityGroup
from ..logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    """Terminal output of one analysis pass."""
    groups: List[SimilarityGroup] = field(default_factory=list)
    ungrouped: List[ImageAsset] = field(default_factory=list)
    failures: Dict[Path, DecodeError] = field(default_factory=dict)

    def grouped_assets(self) -> List[ImageAsset]:
        return [asset for group in self.groups for asset in group.all_assets]


def extract_all(
    assets: Sequence[ImageAsset],
    max_workers: Optional[int] = None,
    cancel: Optional[CancelToken] = None,
) -> Tuple[Dict[ImageAsset, Digest], Dict[Path, DecodeError]]:
    """
    Compute digests for *assets* on a thread pool.

    Results are collected in input order, independent of which worker finishes
    first. Decode failures are logged and returned separately, never raised.

    Raises:
        AnalysisCancelled: If *cancel* was triggered while extracting
    """
    workers = max_workers or os.cpu_count() or 1

    def work(asset: ImageAsset) -> Tuple[Optional[Digest], Optional[DecodeError]]:
        if cancel is not None and cancel.cancelled:
            return None, None
        try:
            return extract(asset), None
        except DecodeError as exc:
            return None, exc

    digests: Dict[ImageAsset, Digest] = {}
    failures: Dict[Path, DecodeError] = {}

    unique = list(dict.fromkeys(assets))
    with ThreadPoolExecutor(max_workers=min(workers, max(1, len(unique)))) as pool:
        for asset, (digest, error) in zip(unique, pool.map(work, unique)):
            if error is not None:
                logger.warning(f"Excluding {asset.path} from comparison: {error.reason}")
                failures[asset.path] = error
            elif digest is not None:
                digests[asset] = digest

    if cancel is not None:
        cancel.raise_if_cancelled()

    logger.info(f"Extracted {len(digests)} digests, {len(failures)} assets failed to decode")
    return digests, failures


def analyze(
    assets: Sequence[ImageAsset],
    threshold: float,
    on_progress: Optional[ProgressCallback] = None,
    *,
    cancel: Optional[CancelToken] = None,
    strategy: str = "first-seen",
    max_workers: Optional[int] = None,
) -> AnalysisResult:
    """
    Find groups of visually similar assets.

    An empty input, or one where nothing decodes, is a successful pass with
    no groups.

    Args:
        assets: Assets in scan order
        threshold: Maximum normalized distance in [0, 1] for grouping
        on_progress: Receives non-decreasing completion fractions of the
            comparison phase; a final 1.0 is not guaranteed
        cancel: Cooperative cancellation token
        strategy: Primary selection order, see ``cluster``
        max_workers: Extraction threads; defaults to the CPU count

    Raises:
        ClusteringError: If digests cannot be compared
        AnalysisCancelled: If *cancel* was triggered; no partial result is returned
    """
    if cancel is not None:
        cancel.raise_if_cancelled()

    if not assets:
        logger.info("No assets to analyze")
        return AnalysisResult()

    digests, failures = extract_all(assets, max_workers=max_workers, cancel=cancel)
    outcome = cluster(
        assets,
        digests,
        threshold,
        progress=ProgressReporter(on_progress),
        cancel=cancel,
        strategy=strategy,
    )
    return AnalysisResult(groups=outcome.groups, ungrouped=outcome.ungrouped, failures=failures)


async def analyze_async(
    assets: Sequence[ImageAsset],
    threshold: float,
    on_progress: Optional[ProgressCallback] = None,
    *,
    strategy: str = "first-seen",
    max_workers: Optional[int] = None,
) -> AnalysisResult:
    """
    Run ``analyze`` off the event loop.

    Progress callbacks are delivered on the event loop thread. Cancelling the
    awaiting task signals the background pass, which stops before its next
    primary candidate; ``asyncio.CancelledError`` propagates to the caller.
    """
    loop = asyncio.get_running_loop()
    cancel = CancelToken()

    relay: Optional[ProgressCallback] = None
    if on_progress is not None:
        relay = functools.partial(loop.call_soon_threadsafe, on_progress)

    call = functools.partial(
        analyze,
        list(assets),
        threshold,
        relay,
        cancel=cancel,
        strategy=strategy,
        max_workers=max_workers,
    )
    try:
        return await loop.run_in_executor(None, call)
    except asyncio.CancelledError:
        cancel.cancel()
        raise


class AnalysisJob:
    """
    Analysis pass running on a background thread.

    Progress is published on ``progress``, which is closed when the pass ends
    for any reason.
    """

    def __init__(
        self,
        assets: Sequence[ImageAsset],
        threshold: float,
        *,
        strategy: str = "first-seen",
        max_workers: Optional[int] = None,
        channel_size: int = 64,
    ) -> None:
        self.progress = ProgressChannel(maxsize=channel_size)
        self._cancel = CancelToken()
        self._future: Future = Future()
        self._thread = threading.Thread(
            target=self._run,
            args=(list(assets), threshold, strategy, max_workers),
            name="assetlens-analysis",
            daemon=True,
        )

    def start(self) -> AnalysisJob:
        self._future.set_running_or_notify_cancel()
        self._thread.start()
        return self

    def cancel(self) -> None:
        self._cancel.cancel()

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: Optional[float] = None) -> AnalysisResult:
        """
        Block until the pass finishes.

        Raises:
            AnalysisCancelled: If the job was cancelled
            ClusteringError: If the pass failed
            concurrent.futures.TimeoutError: If *timeout* elapsed first
        """
        return self._future.result(timeout)

    def _run(
        self,
        assets: List[ImageAsset],
        threshold: float,
        strategy: str,
        max_workers: Optional[int],
    ) -> None:
        try:
            result = analyze(
                assets,
                threshold,
                self.progress.offer,
                cancel=self._cancel,
                strategy=strategy,
                max_workers=max_workers,
            )
        except Exception as exc:
            self._future.set_exception(exc)
        else:
            self._future.set_result(result)
        finally:
            self.progress.close()


def start_analysis(
    assets: Sequence[ImageAsset],
    threshold: float,
    *,
    strategy: str = "first-seen",
    max_workers: Optional[int] = None,
) -> AnalysisJob:
    """Start an analysis pass on a background thread and return its handle."""
    return AnalysisJob(assets, threshold, strategy=strategy, max_workers=max_workers).start()
