"""Tests for the LinkBuilder contract and the web root implementation."""

import pytest

from webutils.links import LinkBuilder, WebRootLinkBuilder
from webutils.request import Request
from tests.utils import make_environ


def test_actions():
    assert LinkBuilder.LIST == "list"
    assert LinkBuilder.VIEW == "view"
    assert LinkBuilder.CREATE == "create"
    assert LinkBuilder.EDIT == "edit"
    assert LinkBuilder.DELETE == "delete"
    assert LinkBuilder.COPY == "copy"


def test_link_builder_is_abstract():
    with pytest.raises(TypeError):
        LinkBuilder()


def test_custom_link_builder():
    class ArticleLinks(LinkBuilder):
        def get_link(self, subject, action=LinkBuilder.VIEW, params=None):
            return f"/articles/{subject['id']}/{action}"

    assert ArticleLinks().get_link({"id": 7}) == "/articles/7/view"
    assert ArticleLinks().get_link({"id": 7}, LinkBuilder.EDIT) == "/articles/7/edit"


@pytest.fixture
def request_in_subdirectory():
    environ = make_environ(
        headers={"X-Forwarded-Proto": "https"},
        environ={"SCRIPT_FILENAME": "/var/www/html/app/index.php"},
    )
    return Request(environ)


def test_web_root_links(request_in_subdirectory):
    links = WebRootLinkBuilder(request_in_subdirectory)
    assert links.get_link("users") == "https://www.example.com/app/users"
    assert links.get_link("users", LinkBuilder.EDIT, {"id": 5}) == "https://www.example.com/app/users/edit?id=5"


def test_relative_links(request_in_subdirectory):
    links = WebRootLinkBuilder(request_in_subdirectory, absolute=False)
    assert links.get_link("/users/", LinkBuilder.LIST) == "/app/users/list"


def test_link_params_and_quoting(request_in_subdirectory):
    links = WebRootLinkBuilder(request_in_subdirectory, absolute=False)
    assert links.get_link("my page", params={"tag": ["a", "b"]}) == "/app/my%20page?tag=a&tag=b"


def test_links_follow_forwarded_root():
    request = Request(make_environ(uri="/internal/x", headers={"X-Forwarded-Root": "/internal,/public/"}))
    assert WebRootLinkBuilder(request).get_link("x") == "http://www.example.com/public/x"
