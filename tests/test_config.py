"""Tests for configuration, request context and logging setup."""

import logging
import os
from unittest.mock import patch

import pytest

from review_bot.config import ReviewConfig, ConfigurationError, parse_exclude_patterns
from review_bot.models import ReviewContext
from review_bot.utils.logging import QUIET_LOGGERS, setup_logging


class TestParseExcludePatterns:
    """Tests for splitting exclude-pattern input."""

    def test_newline_separated(self):
        assert parse_exclude_patterns("node_modules/**\n  dist/**\n\n*.lock") == [
            "node_modules/**", "dist/**", "*.lock"
        ]

    def test_comma_separated(self):
        assert parse_exclude_patterns("node_modules/**,dist/**, build/**") == [
            "node_modules/**", "dist/**", "build/**"
        ]

    def test_empty(self):
        assert parse_exclude_patterns("") == []
        assert parse_exclude_patterns(None) == []


class TestReviewConfig:
    """Tests for loading and validating configuration."""

    def test_defaults(self):
        config = ReviewConfig()
        assert config.max_files == 10
        assert config.comment_threshold == "MEDIA"
        assert config.exclude_patterns == ["node_modules/**", "dist/**", "build/**"]
        assert config.model_id.startswith("anthropic.")

    def test_from_env(self):
        """Given environment variables, should read every recognized option."""
        # Given
        env = {
            "GITHUB_REPOSITORY": "owner/repo",
            "PR_NUMBER": "12",
            "GITHUB_TOKEN": "token",
            "EXCLUDE_PATTERNS": "*.md\n.github/**",
            "MAX_FILES": "15",
            "COMMENT_THRESHOLD": "BAJA",
            "BEDROCK_MODEL_ID": "amazon.nova-pro-v1:0",
            "AWS_REGION": "eu-west-1",
            "INFERENCE_TIMEOUT": "30",
            "POST_SUMMARY": "false",
        }

        # When
        with patch.dict(os.environ, env, clear=True):
            config = ReviewConfig.from_env()

        # Then
        assert config.repo == "owner/repo"
        assert config.pr_number == 12
        assert config.github_token == "token"
        assert config.exclude_patterns == ["*.md", ".github/**"]
        assert config.max_files == 15
        assert config.comment_threshold == "BAJA"
        assert config.model_id == "amazon.nova-pro-v1:0"
        assert config.aws_region == "eu-west-1"
        assert config.inference_timeout == 30.0
        assert config.post_summary is False
        assert config.request_changes is True

    def test_validate_normalizes_threshold(self):
        """Given an accent-less or English threshold, should normalize it."""
        config = ReviewConfig(repo="o/r", pr_number=1, comment_threshold="critica")
        config.validate()
        assert config.comment_threshold == "CRÍTICA"

        config = ReviewConfig(repo="o/r", pr_number=1, comment_threshold="high")
        config.validate()
        assert config.comment_threshold == "ALTA"

    def test_validate_rejects_unknown_threshold(self):
        with pytest.raises(ConfigurationError, match="Invalid comment threshold"):
            ReviewConfig(repo="o/r", pr_number=1, comment_threshold="URGENT").validate()

    def test_validate_requires_repo_and_pr(self):
        with pytest.raises(ConfigurationError, match="Repository required"):
            ReviewConfig(pr_number=1).validate()
        with pytest.raises(ConfigurationError, match="PR number required"):
            ReviewConfig(repo="o/r").validate()

    def test_validate_rejects_non_positive_cap(self):
        with pytest.raises(ConfigurationError, match="max_files"):
            ReviewConfig(repo="o/r", pr_number=1, max_files=0).validate()


class TestReviewContext:
    """Tests for building the request context from event payloads."""

    def test_from_pull_request_event(self):
        # Given
        event = {
            "number": 5,
            "pull_request": {"number": 5, "head": {"sha": "abc123", "ref": "feature"}},
        }

        # When
        context = ReviewContext.from_event("owner/repo", event)

        # Then
        assert context == ReviewContext("owner/repo", 5, "abc123", "feature")

    def test_from_issue_comment_event(self):
        """Given an issue_comment payload, should take the PR number from the issue."""
        context = ReviewContext.from_event("owner/repo", {"issue": {"number": 9}, "comment": {}})
        assert context.pr_number == 9
        assert context.head_sha == ""

    def test_context_is_immutable(self):
        context = ReviewContext("owner/repo", 1)
        with pytest.raises(AttributeError):
            context.pr_number = 2


class TestSetupLogging:
    """Tests for logger configuration."""

    def test_debug_keeps_client_libraries_at_info(self):
        """Given DEBUG logging, should not lower the HTTP client loggers below INFO."""
        # When
        logger = setup_logging(level=logging.DEBUG)

        # Then
        assert logger.name == "review_bot"
        assert logger.level == logging.DEBUG
        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.INFO

    def test_warning_level_applies_to_client_libraries(self):
        setup_logging(level=logging.WARNING)
        assert logging.getLogger("botocore").level == logging.WARNING
