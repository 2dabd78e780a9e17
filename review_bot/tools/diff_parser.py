"""Unified diff parsing and diff-position mapping.

GitHub's review API anchors comments by ``position``: a 1-based index
counted through the lines of a file's ``patch`` (hunk headers included),
not by absolute line number in the file.
"""

import re
from typing import List, Optional, Union

from ..models import DiffHunk, DiffLine, LineKind


HUNK_HEADER_PATTERN = re.compile(r'^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$')


def parse_patch(patch: Optional[str]) -> List[DiffHunk]:
    """
    Parse the unified diff of a single file into hunks.

    Args:
        patch: The ``patch`` text for one file (as returned by the PR files API)

    Returns:
        Ordered list of DiffHunk objects. Every hunk line records its
        position within the patch text.
    """
    if not patch or not patch.strip():
        return []

    hunks: List[DiffHunk] = []
    current: Optional[DiffHunk] = None

    for position, line in enumerate(patch.split('\n'), start=1):
        match = HUNK_HEADER_PATTERN.match(line)
        if match:
            current = DiffHunk(
                old_start=int(match.group(1)),
                old_lines=int(match.group(2) or 1),
                new_start=int(match.group(3)),
                new_lines=int(match.group(4) or 1),
                header=line,
            )
            hunks.append(current)
            continue

        if current is None:
            continue

        if line.startswith('+'):
            current.lines.append(DiffLine(LineKind.ADDED, line[1:], position))
        elif line.startswith('-'):
            current.lines.append(DiffLine(LineKind.REMOVED, line[1:], position))
        elif line.startswith(' '):
            current.lines.append(DiffLine(LineKind.CONTEXT, line[1:], position))
        # "\ No newline at end of file" and stray lines still take a position

    return hunks


def find_diff_position(
    patch_or_hunks: Union[str, List[DiffHunk], None],
    target_line: int
) -> Optional[int]:
    """
    Map a new-file line number to its position within the patch.

    Args:
        patch_or_hunks: Raw patch text or the output of parse_patch()
        target_line: 1-based line number in the new version of the file

    Returns:
        Position to anchor a review comment at, or None when the line
        is not part of any hunk (the caller should post a general comment)
    """
    if isinstance(patch_or_hunks, str) or patch_or_hunks is None:
        hunks = parse_patch(patch_or_hunks)
    else:
        hunks = patch_or_hunks

    for hunk in hunks:
        current_line = hunk.new_start - 1
        for diff_line in hunk.lines:
            if diff_line.kind == LineKind.REMOVED:
                continue
            current_line += 1
            if current_line == target_line:
                return diff_line.position

    return None


def format_hunks(hunks: List[DiffHunk]) -> str:
    """Render hunks back to a compact, readable form for logging."""
    if not hunks:
        return "No changes found."

    prefixes = {LineKind.ADDED: '+', LineKind.REMOVED: '-', LineKind.CONTEXT: ' '}
    output_parts = []
    for i, hunk in enumerate(hunks, 1):
        end = hunk.new_start + hunk.new_lines - 1
        output_parts.append(f"Hunk {i} (lines {hunk.new_start}-{end}):")
        output_parts.extend(f"{prefixes[dl.kind]}{dl.text}" for dl in hunk.lines)

    return '\n'.join(output_parts)
