"""Stage 2: Prompt Building - Turn a file into a model request payload."""

import os
import re
from typing import Any, Callable, Dict


REVIEW_PROMPT = """
You are an expert code reviewer with deep knowledge of best practices, security patterns, and clean code principles.

## Your Mission
Review the file below and report every concrete problem you find:
1. **Bugs and Logic Errors** - Off-by-one errors, null handling, incorrect conditions
2. **Security Vulnerabilities** - Injection, XSS, path traversal, secrets in code
3. **Performance Issues** - Unnecessary loops, repeated work, memory leaks
4. **Style and Best Practices** - Readability, naming, anti-patterns
5. **Refactoring Suggestions** - Duplication, overly complex code

## Output Format
Respond with a bare JSON array and nothing else. Each element:
{{
  "line": 42,
  "severity": "ALTA",
  "description": "Concise issue description",
  "suggestion": "Why and how to fix it",
  "replacement_code": "Fixed code for that line",
  "references": ["https://..."],
  "can_auto_fix": true
}}

- severity: one of CRÍTICA, ALTA, MEDIA, BAJA
- line: 1-based line number in the file below
- can_auto_fix: true only if replacement_code can replace that single line as-is
If no issues are found, return an empty array: []

## File to Review
Filename: {filename}
File type: {language}

## Code Content
{fence}{language}
{content}
{fence}

Analyze the file and respond with the JSON array only.
"""


def language_hint(path: str) -> str:
    """Lower-cased extension of the file name, or "" when there is none."""
    name = os.path.basename(path)
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[-1].lower()


def _fence_for(content: str) -> str:
    """A backtick fence longer than any backtick run inside the content."""
    runs = [len(run) for run in re.findall(r"`+", content)]
    return "`" * max(3, max(runs, default=0) + 1)


def build_prompt(path: str, content: str) -> str:
    """
    Build the review instruction for one file.

    The content is embedded verbatim; the fence is sized so that code
    blocks inside the file cannot close it early.
    """
    return REVIEW_PROMPT.format(
        filename=path,
        language=language_hint(path),
        fence=_fence_for(content),
        content=content,
    )


def _anthropic_payload(prompt: str) -> Dict[str, Any]:
    return {
        "anthropic_version": "bedrock-2023-05-31",
        "max_tokens": 4096,
        "messages": [
            {"role": "user", "content": [{"type": "text", "text": prompt}]},
        ],
    }


def _amazon_payload(prompt: str) -> Dict[str, Any]:
    return {
        "inferenceConfig": {
            "max_new_tokens": 1000,
            "temperature": 0.2,
        },
        "messages": [
            {"role": "user", "content": [{"text": prompt}]},
        ],
    }


def _generic_payload(prompt: str) -> Dict[str, Any]:
    return {
        "messages": [
            {"role": "user", "content": [{"type": "text", "text": prompt}]},
        ],
        "max_tokens": 4096,
        "temperature": 0.1,
    }


DEFAULT_FAMILY = "generic"

# Model family -> payload builder, matched by substring of the model id
PAYLOAD_BUILDERS: Dict[str, Callable[[str], Dict[str, Any]]] = {
    "anthropic": _anthropic_payload,
    "amazon": _amazon_payload,
    DEFAULT_FAMILY: _generic_payload,
}


def model_family(model_id: str) -> str:
    """Resolve the payload family for a model id, falling back to generic."""
    for family in PAYLOAD_BUILDERS:
        if family != DEFAULT_FAMILY and family in (model_id or ""):
            return family
    return DEFAULT_FAMILY


def build_request_payload(path: str, content: str, model_id: str) -> Dict[str, Any]:
    """
    Build the inference request payload for one file.

    Args:
        path: Path of the file in the repository
        content: Full file content
        model_id: Configured model identifier; selects the payload framing

    Returns:
        Provider-specific request body
    """
    prompt = build_prompt(path, content)
    return PAYLOAD_BUILDERS[model_family(model_id)](prompt)
