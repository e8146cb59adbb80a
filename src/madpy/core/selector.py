"""Vector selector parsing and comparison.

Only the part of PromQL needed to name one series is understood: an optional
metric name, an optional block of label matchers and an optional range
suffix. Anything else is rejected with a ParseError.
"""

import re
from dataclasses import dataclass
from enum import Enum

from madpy.core.errors import ConfigError, ParseError

METRIC_NAME_LABEL = "__name__"

_METRIC_NAME_RE = re.compile(r"[a-zA-Z_:][a-zA-Z0-9_:]*")
_LABEL_NAME_RE = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*")
_DURATION_RE = re.compile(r"(?:\d+(?:ms|[smhdwy]))+")
_NUMBER_RE = re.compile(
    r"[+-]?(?:0[xX][0-9a-fA-F]+|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf|nan)",
    re.IGNORECASE,
)
_QUOTES = "\"'`"
_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "\\": "\\",
    '"': '"',
    "'": "'",
}


class ValueType(Enum):
    """Type an expression evaluates to."""

    VECTOR = "vector"
    MATRIX = "matrix"
    SCALAR = "scalar"
    STRING = "string"


class MatchType(Enum):
    """Label matcher operators."""

    EQUAL = "="
    NOT_EQUAL = "!="
    REGEX = "=~"
    NOT_REGEX = "!~"


@dataclass(frozen=True)
class LabelMatcher:
    """A single `label op "value"` constraint."""

    name: str
    match_type: MatchType
    value: str

    def matches(self, label_value: str) -> bool:
        """Return True if the given label value satisfies this matcher."""
        if self.match_type is MatchType.EQUAL:
            return label_value == self.value
        if self.match_type is MatchType.NOT_EQUAL:
            return label_value != self.value
        matched = re.fullmatch(self.value, label_value) is not None
        return matched if self.match_type is MatchType.REGEX else not matched

    def __str__(self) -> str:
        escaped = self.value.replace("\\", "\\\\").replace('"', '\\"')
        return f'{self.name}{self.match_type.value}"{escaped}"'


@dataclass(frozen=True)
class Selector:
    """An instant vector selector.

    Attributes:
        name: Metric name, empty when given only through a __name__ matcher.
        matchers: Label matchers in the order they were written.
    """

    name: str = ""
    matchers: tuple[LabelMatcher, ...] = ()

    @property
    def labels(self) -> dict[str, str]:
        """Resolved label map, metric name included under __name__.

        Matcher kinds are dropped, so `a=~"x"` and `a="x"` both resolve to
        `{"a": "x"}`. Later matchers on the same label win.
        """
        resolved: dict[str, str] = {}
        if self.name:
            resolved[METRIC_NAME_LABEL] = self.name
        for matcher in self.matchers:
            resolved[matcher.name] = matcher.value
        return resolved

    def __str__(self) -> str:
        if not self.matchers:
            return self.name
        return self.name + "{" + ", ".join(str(m) for m in self.matchers) + "}"


@dataclass(frozen=True)
class ParsedExpr:
    """Result of classifying an expression.

    Attributes:
        type: The value type the expression evaluates to.
        selector: The series selector for vector and matrix expressions.
    """

    type: ValueType
    selector: Selector | None = None


class _ExprParser:
    """Single-use recursive descent parser over one expression string."""

    def __init__(self, text: str) -> None:
        self._text = text.strip()
        self._pos = 0

    def parse(self) -> ParsedExpr:
        if not self._text:
            raise ParseError("empty expression")
        if _NUMBER_RE.fullmatch(self._text):
            return ParsedExpr(ValueType.SCALAR)
        if self._peek() in _QUOTES:
            self._string()
            self._expect_end()
            return ParsedExpr(ValueType.STRING)

        name = ""
        match = _METRIC_NAME_RE.match(self._text)
        if match is not None:
            name = match.group()
            self._pos = match.end()
        self._skip_whitespace()
        matchers: tuple[LabelMatcher, ...] = ()
        if self._peek() == "{":
            matchers = self._matchers()
        elif not name:
            raise self._error("unexpected character")
        selector = self._build(name, matchers)

        self._skip_whitespace()
        if self._peek() == "[":
            self._range()
            self._expect_end()
            return ParsedExpr(ValueType.MATRIX, selector)
        self._expect_end()
        return ParsedExpr(ValueType.VECTOR, selector)

    def _peek(self) -> str:
        return self._text[self._pos] if self._pos < len(self._text) else ""

    def _skip_whitespace(self) -> None:
        while self._peek().isspace():
            self._pos += 1

    def _expect_end(self) -> None:
        self._skip_whitespace()
        if self._pos != len(self._text):
            raise self._error("unexpected trailing input")

    def _error(self, message: str) -> ParseError:
        found = self._peek() or "end of input"
        return ParseError(
            f"{message} at position {self._pos} ({found!r}) in {self._text!r}"
        )

    def _matchers(self) -> tuple[LabelMatcher, ...]:
        self._pos += 1
        matchers: list[LabelMatcher] = []
        while True:
            self._skip_whitespace()
            if self._peek() == "}":
                self._pos += 1
                return tuple(matchers)
            matchers.append(self._matcher())
            self._skip_whitespace()
            char = self._peek()
            if char == ",":
                self._pos += 1
            elif char != "}":
                raise self._error("expected ',' or '}' in label matchers")

    def _matcher(self) -> LabelMatcher:
        match = _LABEL_NAME_RE.match(self._text, self._pos)
        if match is None:
            raise self._error("expected label name")
        self._pos = match.end()
        self._skip_whitespace()
        # Two-character operators must be tried before "=".
        for match_type in (
            MatchType.REGEX,
            MatchType.NOT_REGEX,
            MatchType.NOT_EQUAL,
            MatchType.EQUAL,
        ):
            if self._text.startswith(match_type.value, self._pos):
                self._pos += len(match_type.value)
                break
        else:
            raise self._error("expected label matching operator")
        self._skip_whitespace()
        return LabelMatcher(match.group(), match_type, self._string())

    def _string(self) -> str:
        quote = self._peek()
        if not quote or quote not in _QUOTES:
            raise self._error("expected quoted string")
        self._pos += 1
        chars: list[str] = []
        while self._pos < len(self._text):
            char = self._text[self._pos]
            self._pos += 1
            if char == quote:
                return "".join(chars)
            if char == "\\" and quote != "`" and self._pos < len(self._text):
                escaped = self._text[self._pos]
                self._pos += 1
                chars.append(_ESCAPES.get(escaped, "\\" + escaped))
                continue
            chars.append(char)
        raise self._error("unterminated quoted string")

    def _range(self) -> None:
        end = self._text.find("]", self._pos)
        if end == -1:
            raise self._error("unterminated range")
        duration = self._text[self._pos + 1 : end].strip()
        if not _DURATION_RE.fullmatch(duration):
            raise self._error(f"bad range duration {duration!r}")
        self._pos = end + 1

    def _build(self, name: str, matchers: tuple[LabelMatcher, ...]) -> Selector:
        if name and any(m.name == METRIC_NAME_LABEL for m in matchers):
            raise ParseError(f"metric name must not be set twice: {self._text!r}")
        for matcher in matchers:
            if matcher.match_type in (MatchType.REGEX, MatchType.NOT_REGEX):
                try:
                    re.compile(matcher.value)
                except re.error as exc:
                    raise ParseError(
                        f"invalid regular expression {matcher.value!r}: {exc}"
                    ) from exc
        if not name and all(m.matches("") for m in matchers):
            raise ParseError(
                "vector selector must contain at least one non-empty matcher"
            )
        return Selector(name=name, matchers=matchers)


def parse_expr(text: str) -> ParsedExpr:
    """Classify an expression and parse its selector, if any.

    Args:
        text: A selector, range selector, number or string literal.

    Returns:
        ParsedExpr with the value type and, for vectors and matrices, the
        parsed Selector.

    Raises:
        ParseError: If the text is not a supported expression.
    """
    return _ExprParser(text).parse()


def parse_selector(text: str) -> Selector:
    """Parse a configured time series selector.

    Raises:
        ConfigError: If the text does not parse or is not an instant vector.
    """
    try:
        expr = parse_expr(text)
    except ParseError as exc:
        raise ConfigError(
            f"encountered error while parsing time series selector: {exc}"
        ) from exc
    if expr.type is not ValueType.VECTOR or expr.selector is None:
        raise ConfigError(
            f"time series selector must be of {ValueType.VECTOR.value} type, "
            f"got {expr.type.value}"
        )
    return expr.selector


def selectors_equal(a: Selector, b: Selector) -> bool:
    """Return True if both selectors resolve to the same label map."""
    return a.labels == b.labels
