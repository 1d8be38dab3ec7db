"""Rendering of HTML start and end tags."""

import html
from typing import Any, Mapping, Optional


def render_start_tag(tag_name: str, attributes: Optional[Mapping[str, Any]] = None) -> str:
    """
    Returns the opening tag with the given attributes.

    List and tuple values are joined with spaces (handy for ``class``).
    Only non-blank string values are rendered; they are HTML-escaped.

    Example:
        >>> render_start_tag("a", {"href": "/?a=1&b=2", "class": ["btn", "primary"], "title": ""})
        '<a href="/?a=1&amp;b=2" class="btn primary">'
    """
    parts = ["<", tag_name]
    for name, value in (attributes or {}).items():
        if isinstance(value, (list, tuple)):
            value = " ".join(str(v) for v in value)
        if isinstance(value, str) and value.strip():
            parts.append(f' {name}="{html.escape(value, quote=True)}"')
    parts.append(">")
    return "".join(parts)


def render_end_tag(tag_name: str) -> str:
    """Returns the closing tag, e.g. ``</div>``."""
    return f"</{tag_name}>"
