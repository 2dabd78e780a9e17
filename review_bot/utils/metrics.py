"""Metrics calculation utilities for review runs."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..models import FileAnalysis, Severity, SEVERITY_ORDER, normalize_severity


@dataclass
class ReviewMetrics:
    """Aggregate counts over the per-file analyses of one run."""

    # File counts
    files_analyzed: int = 0
    files_failed: int = 0

    # Severity breakdown
    severity_counts: Dict[str, int] = field(
        default_factory=lambda: {s.value: 0 for s in SEVERITY_ORDER}
    )

    # Per-file breakdown, in analysis order
    file_counts: Dict[str, Dict[str, int]] = field(default_factory=dict)

    # Comment delivery
    inline_comments: int = 0
    fallback_comments: int = 0

    # Timing
    review_duration_ms: Optional[int] = None

    @property
    def total_issues(self) -> int:
        return sum(self.severity_counts.values())

    @property
    def blocking_count(self) -> int:
        """CRÍTICA + ALTA issues; a positive count requests changes."""
        return (
            self.severity_counts.get(Severity.CRITICA.value, 0)
            + self.severity_counts.get(Severity.ALTA.value, 0)
        )


def calculate_metrics(
    analyses: List[FileAnalysis],
    duration_ms: Optional[int] = None
) -> ReviewMetrics:
    """
    Calculate review metrics from the ordered per-file analyses.

    Failed files are counted but contribute no issues.

    Args:
        analyses: FileAnalysis entries in the order files were processed
        duration_ms: Review duration in milliseconds

    Returns:
        ReviewMetrics object with calculated statistics
    """
    metrics = ReviewMetrics(review_duration_ms=duration_ms)

    for analysis in analyses:
        if not analysis.analyzed:
            metrics.files_failed += 1
            continue

        metrics.files_analyzed += 1
        metrics.inline_comments += analysis.inline_comments
        metrics.fallback_comments += analysis.fallback_comments

        per_file: Dict[str, int] = {}
        for issue in analysis.issues:
            severity = normalize_severity(issue.severity)
            if severity in metrics.severity_counts:
                metrics.severity_counts[severity] += 1
            per_file[severity] = per_file.get(severity, 0) + 1
        metrics.file_counts[analysis.path] = per_file

    return metrics
