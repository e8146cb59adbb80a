"""Tests for selector parsing and comparison."""

import pytest

from madpy.core.errors import ConfigError, ErrorKind, ParseError
from madpy.core.selector import (
    LabelMatcher,
    MatchType,
    Selector,
    ValueType,
    parse_expr,
    parse_selector,
    selectors_equal,
)

pytestmark = [pytest.mark.core, pytest.mark.tier(1)]


class TestParseExpr:
    """Tests for parse_expr() classification."""

    def test_bare_metric_name_is_vector(self) -> None:
        """A metric name alone is an instant vector."""
        expr = parse_expr("http_requests_total")
        assert expr.type is ValueType.VECTOR
        assert expr.selector == Selector(name="http_requests_total")

    def test_metric_with_labels(self) -> None:
        """Label matchers are parsed in order with their operators."""
        expr = parse_expr('metric{label="value", label2!="x"}')
        assert expr.selector is not None
        assert expr.selector.matchers == (
            LabelMatcher("label", MatchType.EQUAL, "value"),
            LabelMatcher("label2", MatchType.NOT_EQUAL, "x"),
        )

    def test_regex_operators(self) -> None:
        """Both regex operators are recognised."""
        expr = parse_expr('m{a=~"x.*",b!~"y"}')
        assert expr.selector is not None
        assert [m.match_type for m in expr.selector.matchers] == [
            MatchType.REGEX,
            MatchType.NOT_REGEX,
        ]

    def test_trailing_comma_is_allowed(self) -> None:
        """A trailing comma in the label block is accepted."""
        expr = parse_expr('m{a="1",}')
        assert expr.selector is not None
        assert expr.selector.labels == {"__name__": "m", "a": "1"}

    def test_empty_label_block(self) -> None:
        """An empty label block after a name is a plain vector."""
        assert parse_expr("m{}").type is ValueType.VECTOR

    def test_range_suffix_is_matrix(self) -> None:
        """A range suffix turns the selector into a matrix."""
        assert parse_expr('m{a="1"}[5m]').type is ValueType.MATRIX

    @pytest.mark.parametrize("text", ["1", "-2.5e3", "0x1f", "Inf", "NaN", ".5"])
    def test_number_literals_are_scalars(self, text: str) -> None:
        """Number literals classify as scalars."""
        assert parse_expr(text).type is ValueType.SCALAR

    def test_quoted_string_is_string(self) -> None:
        """A quoted literal classifies as a string."""
        assert parse_expr('"hello"').type is ValueType.STRING

    def test_escaped_quote_in_label_value(self) -> None:
        """Backslash escapes inside label values are resolved."""
        expr = parse_expr('m{path="a\\"b"}')
        assert expr.selector is not None
        assert expr.selector.labels["path"] == 'a"b'

    def test_backtick_values_are_raw(self) -> None:
        """Back-tick quoted values keep backslashes."""
        expr = parse_expr("m{re=`a\\.b`}")
        assert expr.selector is not None
        assert expr.selector.labels["re"] == "a\\.b"

    def test_name_given_as_label(self) -> None:
        """The metric name may be given as a __name__ matcher."""
        expr = parse_expr('{__name__="up"}')
        assert expr.selector is not None
        assert expr.selector.labels == {"__name__": "up"}

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "m{",
            'm{a="1"',
            "m{a}",
            'm{a=="1"}',
            'm{a="1" b="2"}',
            'm{a="1"}[5x]',
            "m extra",
            "{}",
            '{a=""}',
            'm{__name__="other"}',
            'm{a=~"("}',
            "1abc",
        ],
    )
    def test_invalid_expressions_raise_parse_error(self, text: str) -> None:
        """Malformed or unsupported expressions raise ParseError."""
        with pytest.raises(ParseError):
            parse_expr(text)


class TestParseSelector:
    """Tests for parse_selector() configuration checks."""

    def test_returns_selector(self) -> None:
        """A valid vector selector is returned parsed."""
        selector = parse_selector('foo{bar="baz"}')
        assert selector.labels == {"__name__": "foo", "bar": "baz"}

    def test_syntax_error_is_config_error(self) -> None:
        """Syntax errors surface as ConfigError."""
        with pytest.raises(ConfigError, match="parsing time series selector") as info:
            parse_selector("foo{")
        assert info.value.kind is ErrorKind.CONFIG
        assert isinstance(info.value.__cause__, ParseError)

    @pytest.mark.parametrize(
        ("text", "got"),
        [("foo[1m]", "matrix"), ("42", "scalar"), ("'x'", "string")],
    )
    def test_non_vector_is_config_error(self, text: str, got: str) -> None:
        """Selectors of any type other than vector are rejected."""
        with pytest.raises(ConfigError, match=f"vector type, got {got}"):
            parse_selector(text)

    def test_str_round_trips_through_parser(self) -> None:
        """str(selector) parses back to an equal selector."""
        selector = parse_selector('foo{a="x\\"y", b=~"z.*"}')
        assert parse_selector(str(selector)) == selector


class TestSelectorsEqual:
    """Tests for selectors_equal()."""

    @pytest.mark.parametrize(
        ("a", "b", "expected"),
        [
            pytest.param(
                'metric{label="value", label2="value2"}',
                'metric{label="value", label2="value2"}',
                True,
                id="equal",
            ),
            pytest.param(
                'metric{label="value", label2="value2"}',
                'metric{label="value", label2="value3"}',
                False,
                id="same-keys-different-values",
            ),
            pytest.param(
                'metric{label1="value", label2="value2"}',
                'metric{label="value", label2="value2"}',
                False,
                id="different-keys",
            ),
            pytest.param(
                'metric{label2="value2", label="value"}',
                'metric{label="value", label2="value2"}',
                True,
                id="order-insensitive",
            ),
            pytest.param('metric{a="1"}', "metric", False, id="extra-label"),
            pytest.param("metric", "other", False, id="different-name"),
            pytest.param(
                'metric{a=~"1"}', 'metric{a="1"}', True, id="matcher-kind-ignored"
            ),
            pytest.param('{__name__="m"}', "m", True, id="name-as-label"),
        ],
    )
    def test_equality(self, a: str, b: str, expected: bool) -> None:
        """Equality holds iff resolved label maps are identical."""
        left, right = parse_expr(a).selector, parse_expr(b).selector
        assert left is not None and right is not None
        assert selectors_equal(left, right) is expected

    @pytest.mark.parametrize(
        "text", ["m", 'm{a="1"}', 'm{a="1",b=~"x"}', '{job="api"}']
    )
    def test_reflexive(self, text: str) -> None:
        """Every selector equals itself."""
        selector = parse_selector(text)
        assert selectors_equal(selector, selector)

    @pytest.mark.parametrize(
        ("a", "b"),
        [("m", 'm{a="1"}'), ('m{a="1"}', 'm{a="1"}'), ('m{a="1"}', 'm{a="2"}')],
    )
    def test_symmetric(self, a: str, b: str) -> None:
        """Comparison gives the same answer in both directions."""
        left, right = parse_selector(a), parse_selector(b)
        assert selectors_equal(left, right) == selectors_equal(right, left)


class TestLabelMatcher:
    """Tests for LabelMatcher.matches()."""

    def test_regex_is_anchored(self) -> None:
        """Regex matchers must match the whole value."""
        matcher = LabelMatcher("a", MatchType.REGEX, "fo")
        assert not matcher.matches("foo")
        assert matcher.matches("fo")

    def test_negative_regex(self) -> None:
        """!~ matches values the pattern does not."""
        matcher = LabelMatcher("a", MatchType.NOT_REGEX, "x+")
        assert matcher.matches("y")
        assert not matcher.matches("xx")
