"""Data models for issues."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class Severity(Enum):
    """Issue severity levels, ordered CRÍTICA > ALTA > MEDIA > BAJA."""
    CRITICA = "CRÍTICA"   # Security, data loss
    ALTA = "ALTA"         # Bugs, serious performance
    MEDIA = "MEDIA"       # Code quality
    BAJA = "BAJA"         # Style, suggestions

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {
    Severity.BAJA: 1,
    Severity.MEDIA: 2,
    Severity.ALTA: 3,
    Severity.CRITICA: 4,
}

_ALIASES = {
    "CRITICA": Severity.CRITICA,
    "CRITICAL": Severity.CRITICA,
    "HIGH": Severity.ALTA,
    "MEDIUM": Severity.MEDIA,
    "LOW": Severity.BAJA,
}

# Display order for summaries
SEVERITY_ORDER = [Severity.CRITICA, Severity.ALTA, Severity.MEDIA, Severity.BAJA]


def normalize_severity(value: Optional[str]) -> str:
    """
    Normalize a severity label reported by the model.

    Known labels (including the accent-less CRITICA and English aliases)
    map to the canonical Severity value. Anything else is returned
    upper-cased and stripped, so it still ranks 0.
    """
    if not value:
        return ""
    label = str(value).strip().upper()
    for severity in Severity:
        if severity.value == label:
            return severity.value
    if label in _ALIASES:
        return _ALIASES[label].value
    return label


def severity_rank(value: Optional[str]) -> int:
    """Rank a severity label: BAJA=1 ... CRÍTICA=4, unrecognized=0."""
    label = normalize_severity(value)
    for severity in Severity:
        if severity.value == label:
            return severity.rank
    return 0


@dataclass
class Issue:
    """A single finding reported by the model for one file."""
    line: int                 # 1-based line in the new version of the file
    severity: str             # Severity value (unrecognized labels kept verbatim)
    description: str
    suggestion: str
    replacement_code: str = ""
    references: List[str] = field(default_factory=list)
    can_auto_fix: bool = False

    @property
    def is_valid(self) -> bool:
        """Line, severity, description and suggestion must all be present."""
        return (
            isinstance(self.line, int)
            and self.line > 0
            and bool(self.severity)
            and bool(self.description and self.description.strip())
            and bool(self.suggestion and self.suggestion.strip())
        )

    @property
    def rank(self) -> int:
        return severity_rank(self.severity)
