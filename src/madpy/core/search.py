"""Search an exposition payload for the value of one target series.

The payload is never fully parsed. Each non-comment line's leading token is
read as a selector and compared with the target; only the first equal line
is parsed as a sample descriptor.
"""

import time
from dataclasses import dataclass
from enum import Enum

from madpy.core.errors import ParseError
from madpy.core.models import Sample
from madpy.core.selector import (
    MatchType,
    Selector,
    ValueType,
    parse_expr,
    selectors_equal,
)

COMMENT_PREFIX = "#"


class SearchStatus(Enum):
    """Outcome of searching a line or a payload."""

    FOUND = "found"
    VECTOR_TYPE_MISMATCH = "vector_type_mismatch"
    TARGET_NOT_FOUND = "target_not_found"


@dataclass(frozen=True)
class SearchResult:
    """Search outcome, carrying the value when the target was found."""

    status: SearchStatus
    value: float | None = None


_NOT_FOUND = SearchResult(SearchStatus.TARGET_NOT_FOUND)
_MISMATCH = SearchResult(SearchStatus.VECTOR_TYPE_MISMATCH)


def split_series(line: str) -> tuple[str, str]:
    """Split a line into its leading series token and the remainder.

    Whitespace inside a label block or a quoted label value does not end the
    token.
    """
    in_labels = False
    quote = ""
    escaped = False
    for i, char in enumerate(line):
        if quote:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = ""
        elif char in "\"'`":
            quote = char
        elif char == "{":
            in_labels = True
        elif char == "}":
            in_labels = False
        elif char.isspace() and not in_labels:
            return line[:i], line[i:]
    return line, ""


def _parse_value(line: str, rest: str) -> float:
    """Parse the value field of a sample descriptor."""
    fields = rest.split()
    if len(fields) != 1:
        raise ParseError(f"expected 1 value, got {len(fields)}: {line!r}")
    field = fields[0]
    if "_" in field:
        raise ParseError(f"could not parse sample value {field!r}")
    try:
        return float(field)
    except ValueError as exc:
        raise ParseError(f"could not parse sample value {field!r}") from exc


def search(line: str, target: Selector) -> SearchResult:
    """Search a single exposition line for the target series.

    Args:
        line: One line of the payload.
        target: The configured series selector.

    Returns:
        FOUND with the value if the line holds the target series,
        VECTOR_TYPE_MISMATCH if its leading token does not parse or is not
        a vector, and TARGET_NOT_FOUND otherwise (blank, comment or
        different series).

    Raises:
        ParseError: If the matching line is not a valid single-value sample
            descriptor.
    """
    line = line.strip()
    if not line or line.startswith(COMMENT_PREFIX):
        return _NOT_FOUND
    token, rest = split_series(line)
    try:
        expr = parse_expr(token)
    except ParseError:
        # Series this parser cannot read are never the target.
        return _MISMATCH
    if expr.type is not ValueType.VECTOR or expr.selector is None:
        return _MISMATCH
    if not selectors_equal(target, expr.selector):
        return _NOT_FOUND
    if any(m.match_type is not MatchType.EQUAL for m in expr.selector.matchers):
        raise ParseError(f"sample descriptor labels must use '=': {line!r}")
    return SearchResult(SearchStatus.FOUND, _parse_value(line, rest))


def scan(payload: str, target: Selector) -> SearchResult:
    """Scan a payload line by line; the first matching line wins."""
    for line in payload.splitlines():
        result = search(line, target)
        if result.status is SearchStatus.FOUND:
            return result
        # Mismatched and non-matching lines are skipped alike.
    return _NOT_FOUND


def extract_sample(payload: str, target: Selector) -> Sample | None:
    """Return a timestamped Sample for the target series, or None."""
    result = scan(payload, target)
    if result.status is not SearchStatus.FOUND or result.value is None:
        return None
    return Sample(timestamp=time.time(), value=result.value)
