"""Tests for review metrics and the summary comment."""

from unittest.mock import Mock

from github import GithubException

from review_bot.models import FileAnalysis, Issue
from review_bot.pipeline.summary import format_summary, publish_summary
from review_bot.utils import calculate_metrics


def issue(severity, line=1):
    return Issue(line=line, severity=severity, description="d", suggestion="s")


ANALYSES = [
    FileAnalysis(path="app.py", issues=[issue("CRÍTICA"), issue("MEDIA", 5)], inline_comments=1, fallback_comments=1),
    FileAnalysis(path="util.py", issues=[]),
    FileAnalysis(path="broken.py", error="timed out"),
    FileAnalysis(path="db.py", issues=[issue("ALTA"), issue("ALTA", 2), issue("BAJA", 3)], inline_comments=3),
]


class TestCalculateMetrics:
    """Tests for aggregating per-file analyses."""

    def test_counts_per_severity_and_file(self):
        """Given mixed analyses, should count issues by severity and by file."""
        # When
        metrics = calculate_metrics(ANALYSES)

        # Then
        assert metrics.files_analyzed == 3
        assert metrics.files_failed == 1
        assert metrics.severity_counts == {"CRÍTICA": 1, "ALTA": 2, "MEDIA": 1, "BAJA": 1}
        assert metrics.total_issues == 5
        assert metrics.file_counts["db.py"] == {"ALTA": 2, "BAJA": 1}
        assert "broken.py" not in metrics.file_counts
        assert list(metrics.file_counts) == ["app.py", "util.py", "db.py"]

    def test_blocking_count(self):
        """Blocking count should be CRÍTICA plus ALTA."""
        assert calculate_metrics(ANALYSES).blocking_count == 3

    def test_comment_delivery_counts(self):
        metrics = calculate_metrics(ANALYSES)
        assert metrics.inline_comments == 4
        assert metrics.fallback_comments == 1

    def test_empty(self):
        metrics = calculate_metrics([])
        assert metrics.total_issues == 0
        assert metrics.blocking_count == 0


class TestFormatSummary:
    """Tests for the summary markdown."""

    def test_summary_lists_counts_and_files(self):
        """Should render a severity table and one line per file with issues."""
        # When
        body = format_summary(ANALYSES, calculate_metrics(ANALYSES))

        # Then
        assert body.startswith("## AI Code Review Summary")
        assert "Analyzed **3** files and found **5** issues." in body
        assert "| CRÍTICA | 1 |" in body
        assert "| ALTA | 2 |" in body
        assert "- `app.py`: 2 (CRÍTICA: 1, MEDIA: 1)" in body
        assert "- `db.py`: 3 (ALTA: 2, BAJA: 1)" in body
        assert "util.py" not in body
        assert "broken.py" not in body
        assert "1 file(s) could not be analyzed" in body

    def test_clean_summary(self):
        """Given no issues, should say the code looks fine."""
        analyses = [FileAnalysis(path="a.py")]
        body = format_summary(analyses, calculate_metrics(analyses))
        assert "No significant issues found" in body

    def test_nothing_analyzed(self):
        body = format_summary([], calculate_metrics([]))
        assert "No files were analyzed." in body


class TestPublishSummary:
    """Tests for posting the summary and the blocking review."""

    def test_requests_changes_on_blocking_issues(self):
        """Given CRÍTICA/ALTA issues, should post the summary and request changes."""
        # Given
        github = Mock()
        github.post_general_comment.return_value = True

        # When
        metrics = publish_summary(github, ANALYSES)

        # Then
        github.post_general_comment.assert_called_once()
        github.request_changes.assert_called_once()
        assert "**3**" in github.request_changes.call_args.args[0]
        assert metrics.blocking_count == 3

    def test_no_request_changes_without_blocking_issues(self):
        """Given only MEDIA/BAJA issues, should not request changes."""
        # Given
        github = Mock()
        analyses = [FileAnalysis(path="a.py", issues=[issue("MEDIA"), issue("BAJA")])]

        # When
        publish_summary(github, analyses)

        # Then
        github.post_general_comment.assert_called_once()
        github.request_changes.assert_not_called()

    def test_request_changes_can_be_disabled(self):
        github = Mock()
        publish_summary(github, ANALYSES, request_changes=False)
        github.request_changes.assert_not_called()

    def test_request_changes_failure_is_logged(self):
        """Given the review call fails, should not raise."""
        # Given
        github = Mock()
        github.request_changes.side_effect = GithubException(422, {"message": "Unprocessable"}, None)

        # When
        metrics = publish_summary(github, ANALYSES)

        # Then
        assert metrics.blocking_count == 3
