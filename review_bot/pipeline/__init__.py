"""Pipeline stages for PR review."""

from .stage1_select import select_files, make_exclude_predicate
from .stage2_prompt import build_prompt, build_request_payload, language_hint, model_family
from .stage3_parse import parse_response, parse_issues, extract_response_text
from .stage4_comment import (
    filter_by_severity,
    format_comment,
    format_fallback_comment,
    post_issue_comment,
)
from .summary import format_summary, publish_summary
from .apply_fix import (
    is_apply_fix_command,
    find_parent_comment,
    extract_fix_code,
    apply_fix_to_content,
    handle_apply_fix,
)

__all__ = [
    "select_files",
    "make_exclude_predicate",
    "build_prompt",
    "build_request_payload",
    "language_hint",
    "model_family",
    "parse_response",
    "parse_issues",
    "extract_response_text",
    "filter_by_severity",
    "format_comment",
    "format_fallback_comment",
    "post_issue_comment",
    "format_summary",
    "publish_summary",
    "is_apply_fix_command",
    "find_parent_comment",
    "extract_fix_code",
    "apply_fix_to_content",
    "handle_apply_fix",
]
