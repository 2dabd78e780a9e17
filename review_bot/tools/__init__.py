"""Tools for PR review bot."""

from .github_tool import GitHubTool, FileContentError
from .bedrock_tool import BedrockTool, InferenceError
from .diff_parser import parse_patch, find_diff_position, format_hunks

__all__ = [
    "GitHubTool",
    "FileContentError",
    "BedrockTool",
    "InferenceError",
    "parse_patch",
    "find_diff_position",
    "format_hunks",
]
