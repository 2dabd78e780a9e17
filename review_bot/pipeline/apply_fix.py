"""Apply-Fix: commit a previously suggested replacement on request.

A reviewer replies ``/apply-fix`` to one of the bot's review comments;
the replacement in that comment's ``diff`` block replaces the commented
line of the file on the PR branch.
"""

import re
from typing import List, Optional

from github import GithubException

from ..models import ReviewComment
from ..tools import GitHubTool, FileContentError
from ..utils import get_logger
from .stage4_comment import APPLY_FIX_COMMAND


FIX_BLOCK_PATTERN = re.compile(r"```diff\n([\s\S]*?)\n```")
DIFF_MARKER_PATTERN = re.compile(r"^[+-]\s")
COMMIT_MESSAGE = "Apply fix suggested by review bot"


def is_apply_fix_command(body: Optional[str]) -> bool:
    """True when a comment body, trimmed, is exactly the apply-fix command."""
    return (body or "").strip() == APPLY_FIX_COMMAND


def find_parent_comment(
    in_reply_to_id: Optional[int],
    comments: List[ReviewComment]
) -> Optional[ReviewComment]:
    """Find the review comment a reply points at."""
    if in_reply_to_id is None:
        return None
    return next((c for c in comments if c.id == in_reply_to_id), None)


def extract_fix_code(body: str) -> Optional[str]:
    """
    Extract the replacement from the first ``diff`` block of a comment.

    A single leading "+"/"-" marker and the whitespace after it are
    removed.
    """
    match = FIX_BLOCK_PATTERN.search(body or "")
    if not match:
        return None
    return DIFF_MARKER_PATTERN.sub("", match.group(1), count=1)


def apply_fix_to_content(content: str, line: int, fix_code: str) -> Optional[str]:
    """
    Replace the 1-based ``line`` of ``content`` with ``fix_code``.

    Returns:
        Updated content, or None when the line is outside the file
    """
    lines = content.split("\n")
    if line < 1 or line > len(lines):
        return None
    lines[line - 1] = fix_code
    return "\n".join(lines)


def resolve_fix(
    content: str,
    parent: ReviewComment
) -> Optional[str]:
    """Compute the updated file content for a parent comment, or None."""
    if parent.line is None:
        return None
    fix_code = extract_fix_code(parent.body)
    if fix_code is None:
        return None
    return apply_fix_to_content(content, parent.line, fix_code)


async def handle_apply_fix(github: GitHubTool, in_reply_to_id: Optional[int]) -> bool:
    """
    Apply the fix suggested by the comment a reply points at.

    A missing parent comment, missing diff block or unusable line is a
    silent no-op: nothing is written.

    Returns:
        True if the file was updated
    """
    logger = get_logger()

    parent = find_parent_comment(in_reply_to_id, github.get_review_comments())
    if parent is None:
        logger.info(f"No review comment with id {in_reply_to_id}, nothing to apply")
        return False

    if extract_fix_code(parent.body) is None:
        logger.info(f"Comment {parent.id} has no diff block, nothing to apply")
        return False

    try:
        content = github.get_file_content(parent.path, ref=github.head_ref)
    except (GithubException, FileContentError) as e:
        logger.warning(f"Failed to fetch {parent.path}: {e}")
        return False

    updated = resolve_fix(content, parent)
    if updated is None:
        logger.info(f"Line {parent.line} of {parent.path} cannot be replaced, nothing to apply")
        return False

    github.update_file(parent.path, updated, COMMIT_MESSAGE)
    logger.info(f"Applied fix from comment {parent.id} to {parent.path}:{parent.line}")
    return True
