"""Data models for PR review."""

from .issue import Severity, Issue, SEVERITY_ORDER, normalize_severity, severity_rank
from .change import (
    FileStatus,
    ChangedFile,
    LineKind,
    DiffLine,
    DiffHunk,
    ReviewComment,
)
from .context import ReviewContext
from .analysis import FileAnalysis

__all__ = [
    "Severity",
    "Issue",
    "SEVERITY_ORDER",
    "normalize_severity",
    "severity_rank",
    "FileStatus",
    "ChangedFile",
    "LineKind",
    "DiffLine",
    "DiffHunk",
    "ReviewComment",
    "ReviewContext",
    "FileAnalysis",
]
