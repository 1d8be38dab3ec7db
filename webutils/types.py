"""
Types for WSGI/CGI request environments.

The environment is the only ambient input a Request reads from.
"""

from typing import Any, Callable, Dict, Iterable, List, Literal, Mapping, Union

HttpMethod = Literal[
    "GET",
    "HEAD",
    "POST",
    "PUT",
    "DELETE",
    "OPTIONS",
    "PATCH",
]
"""HTTP methods a web server usually hands to an application."""

Environ = Mapping[str, Any]
"""WSGI or CGI environment (``REQUEST_METHOD``, ``HTTP_*``, ``wsgi.input``, ...)."""

QueryValue = Union[str, List[Any], Dict[str, Any]]
"""A decoded parameter: a string, or a nested list/dict for bracket keys."""

QueryParams = Dict[str, QueryValue]

StartResponse = Callable[..., Any]
WSGIApp = Callable[[Dict[str, Any], StartResponse], Iterable[bytes]]
"""A WSGI application as described in PEP 3333."""
