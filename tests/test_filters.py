"""Tests for parameter filters."""

import pytest

from webutils.filters import NO_HTML, RAW, TRIM, Filter, NoHtmlFilter


@pytest.mark.parametrize(
    "value, expected",
    [
        ("<p>Hello <b>World</b></p>", "Hello World"),
        ("a<!-- hidden -->b", "ab"),
        ('<a href="x">link</a>', "link"),
        ("a < b", "a < b"),
        ("1 <2", "1 <2"),
        ("plain", "plain"),
    ],
)
def test_no_html(value, expected):
    assert NO_HTML.apply(value) == expected


def test_no_html_nested_values():
    value = {"a": ["<i>x</i>", "y"], "b": {"c": "<b>z</b>"}}
    assert NO_HTML.apply(value) == {"a": ["x", "y"], "b": {"c": "z"}}


def test_no_html_other_types():
    assert NO_HTML.apply(5) == 5
    assert NO_HTML.apply(None) is None


def test_raw():
    value = ["<b>x</b>"]
    assert RAW.apply(value) is value


def test_trim():
    assert TRIM.apply("  x ") == "x"
    assert TRIM.apply([" a", {"b": "b "}]) == ["a", {"b": "b"}]


def test_filters_are_callable():
    assert NO_HTML("<i>x</i>") == "x"
    assert repr(NoHtmlFilter()) == "NoHtmlFilter()"


def test_filter_is_abstract():
    with pytest.raises(TypeError):
        Filter()


def test_custom_filter():
    class Upper(Filter):
        def apply(self, value):
            return value.upper()

    assert Upper()("abc") == "ABC"
