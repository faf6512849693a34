from dataclasses import dataclass
from typing import Optional

PRIMARY_STRATEGIES = ("first-seen", "smallest-file", "largest-file")


@dataclass
class AnalysisSettings:
    threshold: float = 0.15
    min_size_kb: int = 1
    usage_check: bool = False
    primary_strategy: str = "first-seen"
    max_workers: Optional[int] = None

    def validate(self) -> "AnalysisSettings":
        """Raise ValueError for settings the analysis cannot run with."""
        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError(f"threshold must be within [0, 1], got {self.threshold}")
        if self.min_size_kb < 0:
            raise ValueError(f"min_size_kb must be non-negative, got {self.min_size_kb}")
        if self.primary_strategy not in PRIMARY_STRATEGIES:
            raise ValueError(
                f"Unknown primary strategy {self.primary_strategy!r}; "
                f"expected one of {', '.join(PRIMARY_STRATEGIES)}"
            )
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {self.max_workers}")
        return self
