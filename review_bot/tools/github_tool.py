"""GitHub API wrapper for PR operations."""

import os
from typing import List, Optional

from github import Github, GithubException
from github.PullRequest import PullRequest

from ..models import ChangedFile, ReviewComment, ReviewContext
from ..utils import get_logger


class FileContentError(ValueError):
    """Raised when a file's content cannot be read as text."""
    pass


class GitHubTool:
    """
    GitHub API wrapper for PR review operations.

    Handles:
    - Listing changed files and fetching their content
    - Posting inline review comments, general comments and reviews
    - Listing existing review comments
    - Writing file content back to the PR branch
    """

    def __init__(self, context: ReviewContext, token: Optional[str] = None):
        """
        Initialize GitHub tool.

        Args:
            context: Repository and PR this run operates on
            token: GitHub token (defaults to GITHUB_TOKEN env var)
        """
        self.token = token or os.environ.get("GITHUB_TOKEN")
        if not self.token:
            raise ValueError("GitHub token required. Set GITHUB_TOKEN env var or pass token parameter.")

        self.context = context
        self.logger = get_logger()
        self.gh = Github(self.token)
        self.repo = self.gh.get_repo(context.repo)
        self.pr_number = context.pr_number
        self._pr: Optional[PullRequest] = None

    @property
    def pr(self) -> PullRequest:
        """Get the pull request object (cached)."""
        if self._pr is None:
            self._pr = self.repo.get_pull(self.pr_number)
        return self._pr

    @property
    def head_sha(self) -> str:
        return self.context.head_sha or self.pr.head.sha

    @property
    def head_ref(self) -> str:
        return self.context.head_ref or self.pr.head.ref

    def get_changed_files(self) -> List[ChangedFile]:
        """
        List the files changed in this PR, in the platform's order.

        Raises:
            GithubException: if the listing cannot be fetched
        """
        return [
            ChangedFile(path=f.filename, status=f.status, patch=f.patch)
            for f in self.pr.get_files()
        ]

    def get_file_content(self, path: str, ref: Optional[str] = None) -> str:
        """
        Fetch the decoded content of a file at a commit (defaults to PR head).

        Raises:
            GithubException: if the file cannot be fetched
            FileContentError: if the API returns no inline content (files
                over 1 MB) or the content is not UTF-8 text
        """
        contents = self.repo.get_contents(path, ref=ref or self.head_sha)
        if contents.encoding != "base64":
            raise FileContentError(f"{path}: no inline content (encoding '{contents.encoding}')")
        try:
            return contents.decoded_content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise FileContentError(f"{path}: not UTF-8 text") from e

    def post_review_comment(self, path: str, position: int, body: str) -> bool:
        """
        Post a position-anchored inline comment.

        The comment is wrapped in a COMMENT review so it can be anchored
        by diff position.

        Returns:
            True if comment was posted successfully
        """
        try:
            self.pr.create_review(
                commit=self.repo.get_commit(self.head_sha),
                event="COMMENT",
                comments=[{"path": path, "position": position, "body": body}],
            )
            return True
        except GithubException as e:
            self.logger.warning(f"Failed to post inline comment on {path} (position {position}): {e}")
            return False

    def post_general_comment(self, body: str) -> bool:
        """Post a non-inline comment on the PR conversation."""
        try:
            self.pr.create_issue_comment(body)
            return True
        except GithubException as e:
            self.logger.warning(f"Failed to post PR comment: {e}")
            return False

    def post_review(self, body: str, event: str = "COMMENT"):
        """Create a review with an overall event and no inline comments."""
        self.pr.create_review(
            commit=self.repo.get_commit(self.head_sha),
            body=body,
            event=event,
        )

    def request_changes(self, message: str):
        """Request changes on the PR."""
        self.post_review(message, event="REQUEST_CHANGES")

    def get_review_comments(self) -> List[ReviewComment]:
        """List all existing review comments on the PR."""
        comments = []
        for c in self.pr.get_review_comments():
            comments.append(ReviewComment(
                id=c.id,
                path=c.path,
                body=c.body or "",
                line=c.line if c.line is not None else c.original_line,
                position=c.position,
                in_reply_to_id=c.in_reply_to_id,
            ))
        return comments

    def update_file(self, path: str, content: str, message: str):
        """
        Write the whole content of a file to the PR head branch.

        Uses the blob sha of the current file at the branch head.
        """
        branch = self.head_ref
        current = self.repo.get_contents(path, ref=branch)
        self.repo.update_file(
            path=path,
            message=message,
            content=content,
            sha=current.sha,
            branch=branch,
        )
