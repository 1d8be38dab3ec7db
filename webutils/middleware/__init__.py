"""
Request lifecycle middleware.
"""

from webutils.middleware.context import BoundResponse, RequestContextMiddleware, current_request, request_scope

__all__ = [
    "BoundResponse",
    "RequestContextMiddleware",
    "current_request",
    "request_scope",
]
