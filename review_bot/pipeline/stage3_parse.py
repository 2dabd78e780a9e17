"""Stage 3: Response Parsing - Recover issues from raw model output.

Model output is not guaranteed to be well-formed JSON: it can be wrapped
in prose, truncated, or inconsistently quoted. Parsing is an ordered
chain of attempts, each returning a result or None; the first attempt
that yields issues wins. A malformed object never aborts parsing of the
other objects in the same response.
"""

import json
import re
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..models import Issue, Severity, normalize_severity
from ..utils import get_logger


logger = get_logger()

ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")
# Single-level object, optionally missing its closing brace
OBJECT_PATTERN = re.compile(r"\{[^{}]*\}?")
# String value of a code-carrying field, up to the quote that ends it
CODE_FIELD_PATTERN = re.compile(
    r'(?P<key>"(?:code|solution|replacement_code|replacementCode)"\s*:\s*")'
    r'(?P<value>.*?)'
    r'(?P<end>(?<!\\)"\s*(?=,\s*"|\}|\Z))',
    re.DOTALL,
)
LINE_FIELD_PATTERN = re.compile(r'"line"\s*:\s*"?(\d+)')
BOOL_FIELD_PATTERN = r'"{key}"\s*:\s*(true|false)'
STRING_FIELD_PATTERN = r'"{key}"\s*:\s*"((?:[^"\\]|\\.)*)"'
LIST_FIELD_PATTERN = r'"{key}"\s*:\s*\[([^\]]*)\]'
LIST_ITEM_PATTERN = re.compile(r'"((?:[^"\\]|\\.)*)"')
# End of a complete JSON value: closing quote or bracket, digit or literal
VALUE_END_PATTERN = re.compile(r'["\]\d]|\btrue\b|\bfalse\b|\bnull\b')

DESCRIPTION_KEYS = ("description", "issue")
SUGGESTION_KEYS = ("suggestion", "explanation", "solution")
REPLACEMENT_KEYS = ("replacement_code", "replacementCode", "code", "solution")
REFERENCE_KEYS = ("references", "refs")
AUTO_FIX_KEYS = ("can_auto_fix", "canAutoFix")


def _dig(value: Any, *path: Any) -> Any:
    for key in path:
        if isinstance(key, int):
            if not isinstance(value, list) or len(value) <= key:
                return None
        elif not isinstance(value, dict):
            return None
        value = value[key] if isinstance(key, int) else value.get(key)
    return value


def extract_response_text(body: Any) -> str:
    """
    Pull the generated text out of a decoded response body.

    Recognized shapes: ``content[0].text`` (Anthropic),
    ``messages[0].content[0].text``, ``output.message.content[0].text``
    (Amazon Nova) and a bare string.
    """
    if isinstance(body, str):
        return body

    for path in (
        ("content", 0, "text"),
        ("messages", 0, "content", 0, "text"),
        ("output", "message", "content", 0, "text"),
    ):
        text = _dig(body, *path)
        if isinstance(text, str):
            return text

    return ""


def _coerce_line(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str):
        match = re.match(r"\s*(\d+)", value)
        if match and int(match.group(1)) > 0:
            return int(match.group(1))
    return None


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _first_text(data: Dict[str, Any], keys: Sequence[str]) -> str:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return ""


def _references(data: Dict[str, Any]) -> List[str]:
    for key in REFERENCE_KEYS:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return [value]
        if isinstance(value, list):
            return [str(ref) for ref in value if ref]
    return []


def issue_from_dict(data: Dict[str, Any]) -> Optional[Issue]:
    """
    Build an Issue from a decoded object, accepting the known field aliases.

    Returns None when the object carries no positive integer line.
    """
    line = _coerce_line(data.get("line"))
    if line is None:
        return None

    auto_fix = next((data[k] for k in AUTO_FIX_KEYS if k in data), False)

    return Issue(
        line=line,
        severity=normalize_severity(data.get("severity")),
        description=_first_text(data, DESCRIPTION_KEYS),
        suggestion=_first_text(data, SUGGESTION_KEYS),
        replacement_code=_first_text(data, REPLACEMENT_KEYS),
        references=_references(data),
        can_auto_fix=_coerce_bool(auto_fix),
    )


# Per-object attempts

def _close_object(text: str) -> Optional[str]:
    # Try cutting after each value-ending token, last first, until it decodes
    for match in reversed(list(VALUE_END_PATTERN.finditer(text))):
        candidate = text[:match.end()].rstrip().rstrip(",").rstrip() + "}"
        try:
            json.loads(candidate)
        except json.JSONDecodeError:
            continue
        return candidate
    return None


def repair_object(span: str) -> str:
    """
    Repair common defects of a single JSON object.

    Escapes literal newlines inside code-carrying string fields and
    closes an object whose closing brace is missing. Text following the
    last complete value of a truncated object (trailing prose, a
    swallowed array bracket) is dropped before closing it.
    """
    def escape(match: "re.Match") -> str:
        value = (
            match.group("value")
            .replace("\r\n", "\\n")
            .replace("\n", "\\n")
            .replace("\t", "\\t")
        )
        return match.group("key") + value + match.group("end")

    repaired = CODE_FIELD_PATTERN.sub(escape, span).rstrip()

    if not repaired.endswith("}"):
        closed = _close_object(repaired)
        if closed is not None:
            return closed
        # A truncated object inside an array may have swallowed the "]"
        if repaired.endswith("]") and repaired.count("]") > repaired.count("["):
            repaired = repaired[:-1]
        repaired = repaired.rstrip().rstrip(",").rstrip() + "}"

    return repaired


def _decode_repaired_object(span: str) -> Optional[Issue]:
    try:
        data = json.loads(repair_object(span))
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    return issue_from_dict(data)


def _unescape(value: str) -> str:
    return value.replace("\\n", "\n").replace('\\"', '"')


def _extract_object_fields(span: str) -> Optional[Issue]:
    data: Dict[str, Any] = {"severity": Severity.BAJA.value}

    match = LINE_FIELD_PATTERN.search(span)
    if match:
        data["line"] = int(match.group(1))

    for key in ("severity",) + DESCRIPTION_KEYS + SUGGESTION_KEYS + REPLACEMENT_KEYS:
        match = re.search(STRING_FIELD_PATTERN.format(key=key), span)
        if match:
            data[key] = _unescape(match.group(1))

    for key in REFERENCE_KEYS:
        match = re.search(LIST_FIELD_PATTERN.format(key=key), span)
        if match:
            data[key] = [_unescape(item) for item in LIST_ITEM_PATTERN.findall(match.group(1))]
            break
        match = re.search(STRING_FIELD_PATTERN.format(key=key), span)
        if match:
            data[key] = _unescape(match.group(1))
            break

    for key in AUTO_FIX_KEYS:
        match = re.search(BOOL_FIELD_PATTERN.format(key=key), span)
        if match:
            data[key] = match.group(1) == "true"

    return issue_from_dict(data)


OBJECT_STRATEGIES: Sequence[Callable[[str], Optional[Issue]]] = (
    _decode_repaired_object,
    _extract_object_fields,
)


def parse_object(span: str) -> Optional[Issue]:
    """Recover one Issue from a brace-delimited span, or None."""
    for strategy in OBJECT_STRATEGIES:
        issue = strategy(span)
        if issue is not None:
            return issue
    return None


# Whole-response attempts

def _parse_json_array(text: str) -> Optional[List[Issue]]:
    match = ARRAY_PATTERN.search(text)
    if not match:
        return None

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError:
        logger.debug("Failed to parse JSON array, falling back to per-object parsing")
        return None

    if not isinstance(data, list):
        return None

    issues = []
    for item in data:
        issue = issue_from_dict(item) if isinstance(item, dict) else None
        if issue is not None and issue.is_valid:
            issues.append(issue)

    return issues or None


def _parse_json_objects(text: str) -> Optional[List[Issue]]:
    issues = []
    for span in OBJECT_PATTERN.findall(text):
        issue = parse_object(span)
        if issue is None:
            logger.debug(f"Dropping unparseable object: {span[:80]!r}")
            continue
        if issue.is_valid:
            issues.append(issue)
        else:
            logger.debug(f"Dropping incomplete issue at line {issue.line}")
    return issues or None


RESPONSE_STRATEGIES: Sequence[Callable[[str], Optional[List[Issue]]]] = (
    _parse_json_array,
    _parse_json_objects,
)


def parse_issues(text: str) -> List[Issue]:
    """
    Parse model output text into valid issues.

    Args:
        text: Generated text, possibly mixing prose and JSON

    Returns:
        Valid issues, in the order they appear in the text
    """
    for strategy in RESPONSE_STRATEGIES:
        issues = strategy(text)
        if issues:
            return issues
    return []


def parse_response(body: Any) -> List[Issue]:
    """Parse a decoded inference response body into valid issues."""
    text = extract_response_text(body)
    if not text:
        logger.warning("No content found in model response")
        return []
    return parse_issues(text)
