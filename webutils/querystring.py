"""
Bracket-aware query string decoding.

``parse_qs`` from the standard library keeps every key flat. Web forms,
however, routinely post keys like ``tags[]=a&tags[]=b`` or
``user[address][city]=Berlin`` and expect them back as nested structures.
This module decodes them that way:

- ``a=1&a=2``            -> ``{"a": "2"}`` (last one wins)
- ``a[]=1&a[]=2``        -> ``{"a": ["1", "2"]}``
- ``a[x]=1&a[y][]=2``    -> ``{"a": {"x": "1", "y": ["2"]}}``
- ``a.b=1``              -> ``{"a_b": "1"}``
"""

import re
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union
from urllib.parse import unquote_plus

from webutils.types import QueryParams

MAX_NESTING_LEVEL = 64

_INTEGER_KEY = re.compile(r"^(0|-?[1-9][0-9]*)$")

Key = Union[int, str]


def parse_query_string(query: str, max_nesting_level: int = MAX_NESTING_LEVEL) -> QueryParams:
    """
    Decode a query string (or urlencoded form body) into a dict.

    Keys nested deeper than ``max_nesting_level`` brackets are dropped.
    """
    if not query:
        return {}
    return parse_pairs(_decode_pairs(query), max_nesting_level)


def parse_pairs(pairs: Iterable[Tuple[str, str]], max_nesting_level: int = MAX_NESTING_LEVEL) -> QueryParams:
    """
    Build the nested parameter dict from already decoded ``(key, value)`` pairs.

    Shared by query strings and multipart form fields, which follow the
    same bracket rules.
    """
    result: Dict[Key, Any] = {}
    for key, value in pairs:
        parsed = _split_key(key)
        if parsed is None:
            continue
        name, segments = parsed
        if len(segments) > max_nesting_level:
            continue
        _assign(result, name, segments, value)

    return {str(k): _finalize(v) for k, v in result.items()}


def _decode_pairs(query: str) -> Iterator[Tuple[str, str]]:
    for pair in query.split("&"):
        if not pair:
            continue
        raw_key, _, raw_value = pair.partition("=")
        yield unquote_plus(raw_key, errors="replace"), unquote_plus(raw_value, errors="replace")


def _split_key(key: str) -> Optional[Tuple[str, List[str]]]:
    """Split ``name[a][b]`` into ``("name", ["a", "b"])``."""
    key = key.lstrip(" ")
    start = key.find("[")
    if start == -1:
        name = _normalize_name(key)
        return (name, []) if name else None

    name = _normalize_name(key[:start])
    if not name:
        return None

    segments: List[str] = []
    pos = start
    while pos < len(key) and key[pos] == "[":
        end = key.find("]", pos + 1)
        if end == -1:
            if not segments:
                # Unterminated first bracket: the whole key is a plain name
                return name + "_" + key[start + 1 :], []
            break
        segments.append(key[pos + 1 : end])
        pos = end + 1
    return name, segments


def _normalize_name(name: str) -> str:
    return name.replace(".", "_").replace(" ", "_")


def _assign(container: Dict[Key, Any], name: Key, segments: List[str], value: str) -> None:
    if not segments:
        container[name] = value
        return

    node = container.get(name)
    if not isinstance(node, dict):
        node = {}
        container[name] = node

    segment = segments[0]
    if segment == "":
        key: Key = _next_index(node)
    elif _INTEGER_KEY.match(segment):
        key = int(segment)
    else:
        key = segment
    _assign(node, key, segments[1:], value)


def _next_index(node: Dict[Key, Any]) -> int:
    indexes = [k for k in node if isinstance(k, int)]
    return max(max(indexes) + 1, 0) if indexes else 0


def _finalize(value: Any) -> Any:
    """Turn internal dicts into lists where the keys are 0..n-1 in order."""
    if not isinstance(value, dict):
        return value
    if list(value.keys()) == list(range(len(value))):
        return [_finalize(v) for v in value.values()]
    return {str(k): _finalize(v) for k, v in value.items()}
