"""Perceptual similarity engine: fingerprints, distances and clustering."""

from .cluster import ClusterOutcome
from .distance import distance, hamming_distance, is_within
from .errors import AnalysisCancelled, AnalysisError, ClusteringError, DecodeError
from .fingerprint import Digest, extract
from .progress import CancelToken, ProgressChannel, ProgressEvent, ProgressReporter
from .runner import AnalysisJob, AnalysisResult, analyze, analyze_async, extract_all, start_analysis

__all__ = [
    "ClusterOutcome",
    "distance",
    "hamming_distance",
    "is_within",
    "AnalysisCancelled",
    "AnalysisError",
    "ClusteringError",
    "DecodeError",
    "Digest",
    "extract",
    "CancelToken",
    "ProgressChannel",
    "ProgressEvent",
    "ProgressReporter",
    "AnalysisJob",
    "AnalysisResult",
    "analyze",
    "analyze_async",
    "extract_all",
    "start_analysis",
]
