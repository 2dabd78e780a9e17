"""Stage 4: Commenting - Filter issues and publish them on the PR."""

from typing import List, Optional

from ..models import Issue, severity_rank
from ..tools import GitHubTool, find_diff_position
from ..utils import get_logger


APPLY_FIX_COMMAND = "/apply-fix"
DEFAULT_REFERENCE = "Development best practices"


def filter_by_severity(issues: List[Issue], threshold: str) -> List[Issue]:
    """
    Keep issues whose severity rank is at or above the threshold.

    Issues with an unrecognized severity rank 0 and never pass a real
    threshold.
    """
    minimum = severity_rank(threshold)
    return [issue for issue in issues if issue.rank >= max(minimum, 1)]


def format_comment(issue: Issue, offer_fix: bool = True) -> str:
    """
    Format an issue as a review comment body.

    offer_fix adds the apply-fix prompt. Replies to general PR comments
    carry no parent comment id, so fallback comments leave it out.
    """
    parts = [
        "🤖 **AI Code Review**\n",
        f"\n**Severity**: {issue.severity}",
        f"\n**Issue**: {issue.description}",
        f"\n**Suggestion**: {issue.suggestion}\n",
    ]

    if issue.replacement_code:
        parts.append(f"\n```diff\n{issue.replacement_code}\n```\n")

    if offer_fix and issue.can_auto_fix:
        parts.append(f"\nWant this change applied? Reply with `{APPLY_FIX_COMMAND}` to apply it.\n")

    parts.append("\n**References:**\n")
    references = issue.references or [DEFAULT_REFERENCE]
    parts.extend(f"- {ref}\n" for ref in references)

    return ''.join(parts)


def format_fallback_comment(path: str, issue: Issue) -> str:
    """Format an issue as a general PR comment that names its file and line."""
    return f"**`{path}`, line {issue.line}**\n\n{format_comment(issue, offer_fix=False)}"


def post_issue_comment(
    github: GitHubTool,
    path: str,
    patch: Optional[str],
    issue: Issue
) -> Optional[str]:
    """
    Publish one issue, inline when its line is part of the diff.

    Falls back to a general PR comment when the line cannot be mapped to
    a diff position or the inline comment is rejected.

    Returns:
        "inline", "fallback", or None if nothing could be posted
    """
    logger = get_logger()
    body = format_comment(issue)

    position = find_diff_position(patch, issue.line) if patch else None
    if position is not None:
        if github.post_review_comment(path, position, body):
            return "inline"
        logger.info(f"Inline comment rejected for {path}:{issue.line}, posting general comment")
    else:
        logger.debug(f"{path}:{issue.line} is not part of the diff, posting general comment")

    if github.post_general_comment(format_fallback_comment(path, issue)):
        return "fallback"

    logger.warning(f"Dropped comment for {path}:{issue.line}")
    return None
