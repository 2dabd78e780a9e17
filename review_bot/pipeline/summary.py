"""Review summary: aggregate per-file results into one PR comment."""

from typing import List

from github import GithubException

from ..models import FileAnalysis, SEVERITY_ORDER
from ..tools import GitHubTool
from ..utils import ReviewMetrics, calculate_metrics, get_logger


def format_summary(analyses: List[FileAnalysis], metrics: ReviewMetrics) -> str:
    """
    Render the markdown summary comment.

    Only successfully analyzed files are listed; failed files are
    mentioned by count.
    """
    body_parts = ["## AI Code Review Summary\n"]

    if metrics.files_analyzed == 0:
        body_parts.append("No files were analyzed.\n")
    elif metrics.total_issues == 0:
        body_parts.append(
            f"Analyzed **{metrics.files_analyzed}** files. No significant issues found.\n"
        )
    else:
        body_parts.append(
            f"Analyzed **{metrics.files_analyzed}** files and found "
            f"**{metrics.total_issues}** issues.\n"
        )
        body_parts.append("\n| Severity | Count |")
        body_parts.append("|---|---|")
        for severity in SEVERITY_ORDER:
            body_parts.append(f"| {severity.value} | {metrics.severity_counts[severity.value]} |")

        body_parts.append("\n### Issues by file\n")
        for analysis in analyses:
            counts = metrics.file_counts.get(analysis.path)
            if not counts:
                continue
            breakdown = ", ".join(
                f"{s.value}: {counts[s.value]}" for s in SEVERITY_ORDER if counts.get(s.value)
            )
            total = sum(counts.values())
            body_parts.append(f"- `{analysis.path}`: {total} ({breakdown})")

    if metrics.files_failed:
        body_parts.append(f"\n_{metrics.files_failed} file(s) could not be analyzed._")

    body_parts.append("\n\n---\n*Reviewed by AI PR Review Bot*")

    return '\n'.join(body_parts)


def format_request_changes(metrics: ReviewMetrics) -> str:
    """Body of the blocking review posted for CRÍTICA/ALTA findings."""
    return (
        f"Found **{metrics.blocking_count}** critical or high severity issues. "
        "Please address them before merging."
    )


def publish_summary(
    github: GitHubTool,
    analyses: List[FileAnalysis],
    request_changes: bool = True
) -> ReviewMetrics:
    """
    Post the summary comment and, if needed, a REQUEST_CHANGES review.

    Failures are logged; the summary is best-effort.
    """
    logger = get_logger()
    metrics = calculate_metrics(analyses)

    if not github.post_general_comment(format_summary(analyses, metrics)):
        logger.warning("Summary comment could not be posted")

    if request_changes and metrics.blocking_count > 0:
        logger.info(f"Requesting changes: {metrics.blocking_count} blocking issues")
        try:
            github.request_changes(format_request_changes(metrics))
        except GithubException as e:
            logger.warning(f"Failed to request changes: {e}")

    return metrics
