"""Configuration for PR Review Bot."""

from dataclasses import dataclass, field
from typing import List, Optional
import os

from .models import Severity, normalize_severity


DEFAULT_MODEL_ID = "anthropic.claude-3-5-sonnet-20240620-v1:0"
DEFAULT_EXCLUDE_PATTERNS = ["node_modules/**", "dist/**", "build/**"]


class ConfigurationError(ValueError):
    """Raised when configuration is invalid or missing."""
    pass


def parse_exclude_patterns(text: Optional[str]) -> List[str]:
    """Split a newline- or comma-separated list of glob patterns."""
    if not text:
        return []
    patterns = []
    for line in text.splitlines():
        patterns.extend(p.strip() for p in line.split(","))
    return [p for p in patterns if p]


def _env_flag(name: str, default: str = "true") -> bool:
    return os.environ.get(name, default).lower() == "true"


@dataclass
class ReviewConfig:
    """Configuration for the review bot."""

    # GitHub settings
    repo: str = ""
    pr_number: int = 0
    github_token: Optional[str] = None

    # File selection
    exclude_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    max_files: int = 10

    # Minimum severity to post: CRÍTICA, ALTA, MEDIA, BAJA
    comment_threshold: str = Severity.MEDIA.value

    # Inference
    model_id: str = DEFAULT_MODEL_ID
    aws_region: str = "us-east-1"
    inference_timeout: float = 120.0

    # Review behavior
    post_summary: bool = True     # Post summary comment
    request_changes: bool = True  # Request changes on CRÍTICA/ALTA findings

    @classmethod
    def from_env(cls) -> "ReviewConfig":
        """Create config from environment variables."""
        exclude = os.environ.get("EXCLUDE_PATTERNS")
        return cls(
            repo=os.environ.get("GITHUB_REPOSITORY", ""),
            pr_number=int(os.environ.get("PR_NUMBER", "0") or 0),
            github_token=os.environ.get("GITHUB_TOKEN"),
            exclude_patterns=(
                parse_exclude_patterns(exclude) if exclude is not None
                else list(DEFAULT_EXCLUDE_PATTERNS)
            ),
            max_files=int(os.environ.get("MAX_FILES", "10") or 10),
            comment_threshold=os.environ.get("COMMENT_THRESHOLD", Severity.MEDIA.value),
            model_id=os.environ.get("BEDROCK_MODEL_ID") or DEFAULT_MODEL_ID,
            aws_region=os.environ.get("AWS_REGION", "us-east-1"),
            inference_timeout=float(os.environ.get("INFERENCE_TIMEOUT", "120")),
            post_summary=_env_flag("POST_SUMMARY"),
            request_changes=_env_flag("REQUEST_CHANGES"),
        )

    def validate(self):
        """
        Check required settings and normalize the comment threshold.

        Raises:
            ConfigurationError: if a setting is missing or out of range
        """
        if not self.repo:
            raise ConfigurationError("Repository required. Use --repo or set GITHUB_REPOSITORY env var")
        if not self.pr_number:
            raise ConfigurationError("PR number required. Use --pr-number or set PR_NUMBER env var")
        if self.max_files < 1:
            raise ConfigurationError(f"max_files must be positive, got {self.max_files}")

        threshold = normalize_severity(self.comment_threshold)
        if threshold not in {s.value for s in Severity}:
            raise ConfigurationError(
                f"Invalid comment threshold '{self.comment_threshold}'. "
                f"Use one of: {', '.join(s.value for s in Severity)}"
            )
        self.comment_threshold = threshold
