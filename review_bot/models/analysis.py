"""Per-file analysis results accumulated during a review run."""

from dataclasses import dataclass, field
from typing import List, Optional

from .issue import Issue


@dataclass
class FileAnalysis:
    """Outcome of analyzing one changed file."""
    path: str
    issues: List[Issue] = field(default_factory=list)  # Issues at or above threshold
    error: Optional[str] = None
    inline_comments: int = 0
    fallback_comments: int = 0

    @property
    def analyzed(self) -> bool:
        return self.error is None
