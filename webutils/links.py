"""
Link building contract.

A LinkBuilder turns "what" (a subject) and "what to do with it" (an action)
into a URL, so templates don't hardcode paths.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional
from urllib.parse import quote, urlencode

from webutils.request import Request


class LinkBuilder(ABC):
    """Constructs links for subjects and actions."""

    LIST = "list"
    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    COPY = "copy"

    @abstractmethod
    def get_link(self, subject: Any, action: str = VIEW, params: Optional[Mapping[str, Any]] = None) -> str:
        """
        Returns the link.

        Args:
            subject: What the link points to (an object, a name, ...)
            action: What the link does with the subject
            params: Parameters for building the link or its query string

        Returns:
            The URL targeting the subject with the action
        """
        raise NotImplementedError()  # pragma: no cover


class WebRootLinkBuilder(LinkBuilder):
    """
    Builds links below the web root of a request.

    ``get_link("users", "edit", {"id": 5})`` gives
    ``https://example.com/app/users/edit?id=5``. The ``view`` action is
    implied and left out of the path.
    """

    def __init__(self, request: Request, absolute: bool = True):
        self.request = request
        self.absolute = absolute

    def get_link(self, subject: Any, action: str = LinkBuilder.VIEW, params: Optional[Mapping[str, Any]] = None) -> str:
        base = self.request.web_root_uri if self.absolute else self.request.web_root
        link = f"{base}/{quote(str(subject).strip('/'))}"
        if action and action != self.VIEW:
            link += f"/{quote(action)}"
        if params:
            link += "?" + urlencode(params, doseq=True)
        return link
