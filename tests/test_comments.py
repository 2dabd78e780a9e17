"""Tests for severity filtering and comment publishing."""

from unittest.mock import Mock

import pytest

from review_bot.models import Issue, severity_rank
from review_bot.pipeline.stage4_comment import (
    filter_by_severity,
    format_comment,
    format_fallback_comment,
    post_issue_comment,
)


def make_issue(line=10, severity="CRÍTICA", **overrides):
    values = dict(
        line=line,
        severity=severity,
        description="SQL built from user input",
        suggestion="Use a parameterized query",
        replacement_code="+ cursor.execute(sql, (user_id,))",
    )
    values.update(overrides)
    return Issue(**values)


ALL_LEVELS = ["CRÍTICA", "ALTA", "MEDIA", "BAJA"]


class TestSeverityRank:
    """Tests for severity ordering."""

    def test_rank_order(self):
        assert [severity_rank(s) for s in ALL_LEVELS] == [4, 3, 2, 1]

    def test_unrecognized_ranks_zero(self):
        assert severity_rank("URGENT") == 0
        assert severity_rank("") == 0
        assert severity_rank(None) == 0


class TestFilterBySeverity:
    """Tests for threshold filtering."""

    @pytest.mark.parametrize("threshold", ALL_LEVELS)
    def test_inclusion_follows_rank(self, threshold):
        """Given any threshold, an issue is kept iff its rank is at least the threshold's."""
        # Given
        issues = [make_issue(severity=s) for s in ALL_LEVELS]

        # When
        kept = filter_by_severity(issues, threshold)

        # Then
        assert [i.severity for i in kept] == [
            s for s in ALL_LEVELS if severity_rank(s) >= severity_rank(threshold)
        ]

    def test_baja_includes_all_levels(self):
        issues = [make_issue(severity=s) for s in ALL_LEVELS]
        assert len(filter_by_severity(issues, "BAJA")) == 4

    def test_critica_includes_only_critica(self):
        issues = [make_issue(severity=s) for s in ALL_LEVELS]
        assert [i.severity for i in filter_by_severity(issues, "CRÍTICA")] == ["CRÍTICA"]

    def test_unrecognized_severity_is_always_filtered(self):
        """Given an issue with an unknown severity, no real threshold should keep it."""
        issues = [make_issue(severity="URGENT")]
        for threshold in ALL_LEVELS:
            assert filter_by_severity(issues, threshold) == []


class TestFormatComment:
    """Tests for comment bodies."""

    def test_contains_issue_fields(self):
        """Should render severity, description, suggestion and a diff block."""
        # When
        body = format_comment(make_issue())

        # Then
        assert "**Severity**: CRÍTICA" in body
        assert "**Issue**: SQL built from user input" in body
        assert "**Suggestion**: Use a parameterized query" in body
        assert "```diff\n+ cursor.execute(sql, (user_id,))\n```" in body

    def test_call_to_action_only_when_auto_fixable(self):
        """Should mention /apply-fix only for auto-fixable issues."""
        assert "/apply-fix" not in format_comment(make_issue(can_auto_fix=False))
        assert "/apply-fix" in format_comment(make_issue(can_auto_fix=True))

    def test_references_listed(self):
        """Given references, should list each as a bullet."""
        body = format_comment(make_issue(references=["https://a.example", "PEP 8"]))
        assert "- https://a.example\n- PEP 8\n" in body

    def test_references_fallback(self):
        """Given no references, should list the default best-practices bullet."""
        body = format_comment(make_issue(references=[]))
        assert "- Development best practices" in body

    def test_no_diff_block_without_replacement(self):
        """Given no replacement code, should omit the diff block."""
        assert "```diff" not in format_comment(make_issue(replacement_code=""))

    def test_fallback_comment_names_file_and_line(self):
        body = format_fallback_comment("app.py", make_issue(line=10))
        assert body.startswith("**`app.py`, line 10**")
        assert "**Severity**: CRÍTICA" in body

    def test_fallback_comment_omits_apply_fix_prompt(self):
        """Given an auto-fixable issue posted as a general comment, should not offer /apply-fix."""
        # Given
        issue = make_issue(can_auto_fix=True)

        # When
        body = format_fallback_comment("app.py", issue)

        # Then
        assert "/apply-fix" not in body
        assert "```diff" in body
        assert "/apply-fix" in format_comment(issue)


class TestPostIssueComment:
    """Tests for inline-or-fallback publishing."""

    PATCH = "@@ -8,3 +8,4 @@\n a\n b\n+c\n d"  # new lines 8..11, line 10 at position 4

    def test_mappable_line_posts_inline_only(self):
        """Given a line inside the patch, should post exactly one inline comment."""
        # Given
        github = Mock()
        github.post_review_comment.return_value = True

        # When
        outcome = post_issue_comment(github, "app.py", self.PATCH, make_issue(line=10))

        # Then
        assert outcome == "inline"
        github.post_review_comment.assert_called_once()
        path, position, _ = github.post_review_comment.call_args.args
        assert (path, position) == ("app.py", 4)
        github.post_general_comment.assert_not_called()

    def test_unmappable_line_posts_fallback_only(self):
        """Given a line outside the patch, should post exactly one general comment."""
        # Given
        github = Mock()
        github.post_general_comment.return_value = True

        # When
        outcome = post_issue_comment(github, "app.py", self.PATCH, make_issue(line=50))

        # Then
        assert outcome == "fallback"
        github.post_review_comment.assert_not_called()
        github.post_general_comment.assert_called_once()
        assert "line 50" in github.post_general_comment.call_args.args[0]

    def test_rejected_inline_falls_back(self):
        """Given the inline comment is rejected, should fall back to a general comment."""
        # Given
        github = Mock()
        github.post_review_comment.return_value = False
        github.post_general_comment.return_value = True

        # When
        outcome = post_issue_comment(github, "app.py", self.PATCH, make_issue(line=10))

        # Then
        assert outcome == "fallback"
        github.post_general_comment.assert_called_once()

    def test_both_failures_drop_comment(self):
        """Given both attempts fail, should return None without raising."""
        # Given
        github = Mock()
        github.post_review_comment.return_value = False
        github.post_general_comment.return_value = False

        # Then
        assert post_issue_comment(github, "app.py", self.PATCH, make_issue(line=10)) is None

    def test_missing_patch_uses_fallback(self):
        """Given a file without a patch, should go straight to a general comment."""
        # Given
        github = Mock()
        github.post_general_comment.return_value = True

        # When
        outcome = post_issue_comment(github, "image.png", None, make_issue(line=1))

        # Then
        assert outcome == "fallback"
        github.post_review_comment.assert_not_called()
