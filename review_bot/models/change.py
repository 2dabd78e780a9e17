"""Data models for changed files, diff hunks and existing review comments."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class FileStatus(Enum):
    """Status of a file in the PR diff listing."""
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"
    RENAMED = "renamed"


@dataclass
class ChangedFile:
    """One entry from the platform's changed-files listing."""
    path: str
    status: str               # FileStatus value; other platform values pass through
    patch: Optional[str] = None  # Absent for binary/removed files

    @property
    def is_removed(self) -> bool:
        return self.status == FileStatus.REMOVED.value


class LineKind(Enum):
    """Kind of a line inside a hunk."""
    CONTEXT = "context"
    ADDED = "added"
    REMOVED = "removed"


@dataclass
class DiffLine:
    """A single line of a hunk body."""
    kind: LineKind
    text: str
    position: int             # 1-based index of this line within the patch text


@dataclass
class DiffHunk:
    """Represents a single hunk of a file's unified diff."""
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    header: str
    lines: List[DiffLine] = field(default_factory=list)

    @property
    def new_file_start_line(self) -> int:
        return self.new_start


@dataclass
class ReviewComment:
    """An existing review comment on the PR (read-only)."""
    id: int
    path: str
    body: str
    line: Optional[int] = None
    position: Optional[int] = None
    in_reply_to_id: Optional[int] = None
