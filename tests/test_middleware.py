"""Tests for request-scoped binding and the WSGI middleware."""

from concurrent.futures import ThreadPoolExecutor
from threading import Barrier

import pytest

from webutils.config import Settings
from webutils.exceptions import NoRequestError
from webutils.middleware import RequestContextMiddleware, current_request, request_scope
from webutils.request import Request
from tests.utils import make_environ


def path_app(environ, start_response):
    """WSGI app answering with the path of the bound request."""
    start_response("200 OK", [("Content-Type", "text/plain")])
    return [current_request().path.encode("utf-8")]


def call(app, environ):
    status = {}

    def start_response(status_line, headers):
        status["line"] = status_line

    response = app(environ, start_response)
    try:
        body = b"".join(response)
    finally:
        if hasattr(response, "close"):
            response.close()
    return status["line"], body


def test_no_request_outside_scope():
    with pytest.raises(NoRequestError):
        current_request()


def test_no_request_error_is_lookup_error():
    with pytest.raises(LookupError):
        current_request()


def test_request_scope():
    request = Request(make_environ(uri="/scoped"))
    with request_scope(request) as bound:
        assert bound is request
        assert current_request() is request
    with pytest.raises(NoRequestError):
        current_request()


def test_nested_scopes():
    outer = Request(make_environ(uri="/outer"))
    inner = Request(make_environ(uri="/inner"))
    with request_scope(outer):
        with request_scope(inner):
            assert current_request() is inner
        assert current_request() is outer


def test_middleware_binds_request():
    app = RequestContextMiddleware(path_app)
    environ = make_environ(uri="/items?x=1")

    status, body = call(app, environ)

    assert status == "200 OK"
    assert body == b"/items"
    assert isinstance(environ["webutils.request"], Request)
    with pytest.raises(NoRequestError):
        current_request()


def test_middleware_fresh_request_per_call():
    seen = []

    def app(environ, start_response):
        seen.append(current_request())
        start_response("200 OK", [])
        return []

    middleware = RequestContextMiddleware(app)
    call(middleware, make_environ(uri="/one"))
    call(middleware, make_environ(uri="/two"))

    assert [r.path for r in seen] == ["/one", "/two"]
    assert seen[0] is not seen[1]


def test_middleware_passes_settings():
    def app(environ, start_response):
        start_response("200 OK", [])
        return [current_request().get_body().encode("utf-8")]

    middleware = RequestContextMiddleware(app, settings=Settings(body_methods=["PATCH"]))
    _, body = call(middleware, make_environ("PATCH", "/", body="patched"))
    assert body == b"patched"


def test_middleware_resets_on_error():
    def failing_app(environ, start_response):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        call(RequestContextMiddleware(failing_app), make_environ())
    with pytest.raises(NoRequestError):
        current_request()


def test_concurrent_requests_are_isolated():
    barrier = Barrier(2)

    def app(environ, start_response):
        barrier.wait(timeout=5)
        start_response("200 OK", [])
        return [current_request().path.encode("utf-8")]

    middleware = RequestContextMiddleware(app)
    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(lambda uri: call(middleware, make_environ(uri=uri))[1], ["/a", "/b"]))

    assert results == [b"/a", b"/b"]


def test_repr():
    assert repr(RequestContextMiddleware(path_app)).startswith("RequestContextMiddleware(app=")


def test_generator_app_sees_request():
    def app(environ, start_response):
        start_response("200 OK", [])
        yield current_request().path.encode("utf-8")
        yield b"|"
        yield current_request().get_get_param("x").encode("utf-8")

    _, body = call(RequestContextMiddleware(app), make_environ(uri="/lazy?x=1"))

    assert body == b"/lazy|1"
    with pytest.raises(NoRequestError):
        current_request()


def test_request_bound_on_close():
    closed = []

    class Body:
        def __iter__(self):
            return iter([b"body"])

        def close(self):
            closed.append(current_request().path)

    def app(environ, start_response):
        start_response("200 OK", [])
        return Body()

    _, body = call(RequestContextMiddleware(app), make_environ(uri="/closing"))

    assert body == b"body"
    assert closed == ["/closing"]
    with pytest.raises(NoRequestError):
        current_request()


def test_request_unbound_between_chunks():
    def app(environ, start_response):
        start_response("200 OK", [])
        yield b"a"
        yield b"b"

    response = RequestContextMiddleware(app)(make_environ(uri="/chunks"), lambda status, headers: None)

    assert next(response) == b"a"
    with pytest.raises(NoRequestError):
        current_request()
    assert list(response) == [b"b"]
    response.close()
