"""Request context for a single bot run."""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class ReviewContext:
    """Identity of the PR this run operates on."""
    repo: str                 # "owner/repo"
    pr_number: int
    head_sha: str = ""        # Empty means "resolve from the PR"
    head_ref: str = ""

    @classmethod
    def from_event(cls, repo: str, event: Dict[str, Any]) -> "ReviewContext":
        """
        Build a context from a GitHub Actions event payload.

        Handles pull_request, pull_request_review_comment and
        issue_comment payloads. The latter carries no head commit, so
        head_sha/head_ref are left for the platform wrapper to resolve.
        """
        pull = event.get("pull_request") or {}
        if pull:
            head = pull.get("head") or {}
            return cls(
                repo=repo,
                pr_number=int(pull.get("number") or event.get("number") or 0),
                head_sha=head.get("sha", ""),
                head_ref=head.get("ref", ""),
            )

        issue = event.get("issue") or {}
        return cls(repo=repo, pr_number=int(issue.get("number") or 0))
