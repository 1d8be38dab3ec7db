"""Tests for HTML tag rendering."""

from webutils.html import render_end_tag, render_start_tag


def test_plain_tag():
    assert render_start_tag("div") == "<div>"
    assert render_start_tag("div", {}) == "<div>"


def test_attributes_in_order():
    assert render_start_tag("input", {"type": "text", "name": "q"}) == '<input type="text" name="q">'


def test_list_values_are_joined():
    assert render_start_tag("span", {"class": ["btn", "primary"]}) == '<span class="btn primary">'
    assert render_start_tag("span", {"class": ("a",)}) == '<span class="a">'


def test_values_are_escaped():
    html = render_start_tag("a", {"href": "/?a=1&b=2", "title": "say \"hi\" <now> 'ok'"})
    assert html == '<a href="/?a=1&amp;b=2" title="say &quot;hi&quot; &lt;now&gt; &#x27;ok&#x27;">'


def test_blank_and_non_string_values_are_skipped():
    attributes = {"title": "", "alt": "   ", "class": [], "tabindex": 1, "hidden": None, "id": "x"}
    assert render_start_tag("img", attributes) == '<img id="x">'


def test_end_tag():
    assert render_end_tag("div") == "</div>"
