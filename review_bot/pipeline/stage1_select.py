"""Stage 1: Change-Set Selection - Pick the changed files to analyze."""

from fnmatch import fnmatch
from typing import Callable, List

from ..models import ChangedFile


ExclusionPredicate = Callable[[str], bool]


def make_exclude_predicate(patterns: List[str]) -> ExclusionPredicate:
    """
    Build an exclusion predicate from glob patterns.

    A path is excluded when it matches any pattern.
    """
    patterns = list(patterns)

    def is_excluded(path: str) -> bool:
        return any(fnmatch(path, pattern) for pattern in patterns)

    return is_excluded


def select_files(
    files: List[ChangedFile],
    is_excluded: ExclusionPredicate,
    max_files: int
) -> List[str]:
    """
    Select the paths to analyze from the PR's changed files.

    Removed files and excluded paths are skipped. Scanning stops as soon
    as ``max_files`` paths have been accepted, and the platform's order
    is preserved.

    Args:
        files: Changed files as listed by the platform
        is_excluded: Predicate returning True for paths to skip
        max_files: Maximum number of paths to return

    Returns:
        Ordered list of at most ``max_files`` paths
    """
    selected: List[str] = []

    for changed in files:
        if len(selected) >= max_files:
            break
        if changed.is_removed:
            continue
        if is_excluded(changed.path):
            continue
        selected.append(changed.path)

    return selected
