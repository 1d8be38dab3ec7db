"""
Request-scoped binding of the current Request.

Replaces a process-wide "current request" singleton: each call through
``RequestContextMiddleware`` builds its own ``Request`` and binds it to a
``ContextVar``, so concurrent requests on threads or tasks never see each
other's data.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Callable, Dict, Iterable, Iterator, Optional

from webutils.config import Settings
from webutils.exceptions import NoRequestError
from webutils.request import Request
from webutils.types import StartResponse, WSGIApp

_current_request: ContextVar[Optional[Request]] = ContextVar("webutils_request", default=None)


def current_request() -> Request:
    """Returns the Request bound to the running context."""
    request = _current_request.get()
    if request is None:
        raise NoRequestError("No request bound to the current context")
    return request


@contextmanager
def request_scope(request: Request) -> Iterator[Request]:
    """
    Binds ``request`` for the duration of the ``with`` block.

    Example:
        with request_scope(Request(environ)):
            handle()  # may call current_request()
    """
    token = _current_request.set(request)
    try:
        yield request
    finally:
        _current_request.reset(token)


class BoundResponse:
    """
    Response iterable that keeps ``request`` bound while the server consumes it.

    Generator apps produce their body after the app call has returned, so
    the request is bound again around every chunk and around ``close()``.
    """

    def __init__(self, iterable: Iterable[bytes], request: Request):
        self._iterable = iterable
        self._iterator: Optional[Iterator[bytes]] = None
        self.request = request

    def __iter__(self) -> "BoundResponse":
        return self

    def __next__(self) -> bytes:
        token = _current_request.set(self.request)
        try:
            if self._iterator is None:
                self._iterator = iter(self._iterable)
            return next(self._iterator)
        finally:
            _current_request.reset(token)

    def close(self) -> None:
        close = getattr(self._iterable, "close", None)
        if close is not None:
            with request_scope(self.request):
                close()


class RequestContextMiddleware:
    """
    WSGI middleware that binds a fresh Request to every call.

    The request stays bound while the wrapped application is called and
    while the server iterates and closes its response.

    Example:
        app = RequestContextMiddleware(wsgi_app, settings=Settings.from_env())
    """

    def __init__(
        self,
        app: WSGIApp,
        settings: Optional[Settings] = None,
        request_class: Callable[..., Request] = Request,
    ):
        """
        Args:
            app: Wrapped WSGI application
            settings: Passed to every Request
            request_class: Factory for the per-call Request
        """
        self.app = app
        self.settings = settings
        self.request_class = request_class

    def __call__(self, environ: Dict[str, Any], start_response: StartResponse) -> Iterable[bytes]:
        request = self.request_class(environ, self.settings)
        environ["webutils.request"] = request
        with request_scope(request):
            response = self.app(environ, start_response)
        return BoundResponse(response, request)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(app={self.app!r})"
