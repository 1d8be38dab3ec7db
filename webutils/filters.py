"""
Value filters applied to request parameters.

A filter turns a raw parameter value into the value handed to application
code. ``Request.get_get_param()`` and ``Request.get_post_param()`` use
``NO_HTML`` unless told otherwise.
"""

import re
from abc import ABC, abstractmethod
from typing import Any

_TAG = re.compile(r"<!--.*?-->|<[^>\s][^>]*>", re.DOTALL)


class Filter(ABC):
    """Base class for parameter filters."""

    @abstractmethod
    def apply(self, value: Any) -> Any:
        raise NotImplementedError()  # pragma: no cover

    def __call__(self, value: Any) -> Any:
        return self.apply(value)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class RawFilter(Filter):
    """Returns the value unchanged."""

    def apply(self, value: Any) -> Any:
        return value


class NoHtmlFilter(Filter):
    """
    Strips HTML tags and comments from string values.

    Lists and dicts (bracket parameters) are filtered element by element,
    other types are returned unchanged.
    """

    def apply(self, value: Any) -> Any:
        if isinstance(value, str):
            return _TAG.sub("", value)
        if isinstance(value, list):
            return [self.apply(v) for v in value]
        if isinstance(value, dict):
            return {k: self.apply(v) for k, v in value.items()}
        return value


class TrimFilter(Filter):
    """Strips surrounding whitespace from string values."""

    def apply(self, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        if isinstance(value, list):
            return [self.apply(v) for v in value]
        if isinstance(value, dict):
            return {k: self.apply(v) for k, v in value.items()}
        return value


RAW = RawFilter()
NO_HTML = NoHtmlFilter()
TRIM = TrimFilter()
