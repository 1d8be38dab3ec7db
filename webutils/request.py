"""
Proxy-aware request object.

Built once per request from a WSGI/CGI environment. Everything derived from
the environment (protocol, host, path, GET parameters, web root) is resolved
in the constructor; the body and POST parameters are read lazily.
"""

import copy
import logging
import posixpath
import re
import time
from typing import Any, Dict, List, Optional, Tuple

from typing_extensions import Annotated, Doc

from webutils.config import Settings
from webutils.filters import NO_HTML, Filter
from webutils.multipart import MULTIPART_CONTENT_TYPE, parse_multipart
from webutils.querystring import parse_query_string
from webutils.types import Environ, QueryParams

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class Request:
    """
    Normalized view of one HTTP request.

    Reverse proxies are taken into account: ``X-Forwarded-Proto`` and
    ``X-Forwarded-Host`` override the scheme and host the server saw, and
    ``X-Forwarded-Root: <localPrefix>,<mappedPrefix>`` declares that the
    proxy maps ``mappedPrefix`` (as seen by the user) onto ``localPrefix``.

    One instance belongs to one request. Do not share it between requests;
    use ``RequestContextMiddleware`` to bind it to the running request.

    Example:
        request = Request(environ)
        if request.path_elements[:1] == ["admin"]:
            ...
        page = request.get_get_param("page", "1")
    """

    def __init__(
        self,
        environ: Annotated[
            Environ,
            Doc(
                """
                WSGI or CGI environment of the request.
                """
            ),
        ],
        settings: Annotated[
            Optional[Settings],
            Doc(
                """
                Defaults such as the fallback URI and the methods that carry a body.
                """
            ),
        ] = None,
    ) -> None:
        self._environ = environ
        self._settings = settings or Settings()

        # Sequence matters, each step reads the results of the previous ones
        self._method: str = str(environ.get("REQUEST_METHOD") or "GET").upper()
        self._headers = self._init_headers()
        self._protocol = self._init_protocol()
        self._http_host = self._init_http_host()
        self._host = self._init_host()
        self._root_uri = f"{self._protocol}://{self._host}"
        self._uri = self._init_uri()
        self._path, _, self._params = self._uri.partition("?")
        self._path_elements = self._init_path_elements()
        self._get_params = self.parse_query_string(self._params, self._settings.max_nesting_level)
        self._document_root = self._init_document_root()
        self._forwarded_root = self._init_forwarded_root()
        self._web_root = self._init_web_root(consider_forwarding=True)
        self._original_path = self._init_original_path()
        self._original_uri = f"{self._original_path}?{self._params}" if self._params else self._original_path
        self._local_web_root = self._init_web_root(consider_forwarding=False)
        self._web_root_uri = f"{self._protocol}://{self._host}{self._web_root}"

        self.app_root: str = self._document_root
        self.relative_app_path: str = ""

        self._raw_body: Optional[bytes] = None
        self._body: Optional[str] = None
        self._post_params: Optional[QueryParams] = None

        self._start_time = int(time.time())

    # Environment parsing

    def _init_headers(self) -> Dict[str, str]:
        """Header names are lowercased with dashes, e.g. ``HTTP_X_FORWARDED_HOST`` -> ``x-forwarded-host``."""
        headers = {}
        for key, value in self._environ.items():
            if key.startswith("HTTP_"):
                headers[key[5:].replace("_", "-").lower()] = value
            elif key in ("CONTENT_TYPE", "CONTENT_LENGTH"):
                headers[key.replace("_", "-").lower()] = value
        return headers

    def _init_protocol(self) -> str:
        """
        The protocol (http, https) as used by the client.

        Proxies may terminate TLS, so ``X-Forwarded-Proto`` wins over the
        scheme the server saw.
        """
        forwarded = self._headers.get("x-forwarded-proto")
        if forwarded:
            return forwarded.split(",")[0].strip().lower()
        scheme = self._environ.get("REQUEST_SCHEME") or self._environ.get("wsgi.url_scheme")
        return str(scheme or "http").lower()

    def _init_http_host(self) -> str:
        host = self._headers.get("host")
        if host:
            return host
        # PEP 3333 URL reconstruction
        server_name = self._environ.get("SERVER_NAME", "")
        port = str(self._environ.get("SERVER_PORT", ""))
        if not server_name:
            return ""
        default_port = "443" if self._protocol == "https" else "80"
        if port and port != default_port:
            return f"{server_name}:{port}"
        return server_name

    def _init_host(self) -> str:
        """
        The host as requested by the client.

        ``X-Forwarded-Host`` may list several hosts when the request passed a
        chain of proxies. The first entry is used when it differs from the
        ``Host`` header, then the last one; otherwise the ``Host`` header.
        """
        forwarded = self._headers.get("x-forwarded-host")
        if forwarded:
            hosts = forwarded.split(",")
            first = hosts[0].strip()
            last = hosts[-1].strip()
            if first and first != self._http_host:
                return first
            if last and last != self._http_host:
                return last
        return self._http_host

    def _init_uri(self) -> str:
        uri = self._environ.get("REQUEST_URI")
        if uri is None:
            uri = self._environ.get("RAW_URI")
        if uri is not None:
            return uri

        script_name = self._environ.get("SCRIPT_NAME", "")
        path_info = self._environ.get("PATH_INFO", "")
        if not script_name and not path_info:
            # Not an HTTP invocation, e.g. a CLI script
            return self._settings.default_request_uri

        uri = script_name + path_info
        query = self._environ.get("QUERY_STRING", "")
        if query:
            uri += "?" + query
        return uri

    def _init_path_elements(self) -> List[str]:
        """``/my/path/index.html`` gives ``["my", "path", "index"]``."""
        path = self._path[1:]
        if path.endswith(".html"):
            path = path[:-5]
        if path.endswith("/"):
            path = path[:-1]
        elements = path.split("/")
        if elements == [""]:
            return []
        return elements

    def _init_document_root(self) -> str:
        return self._environ.get("CONTEXT_DOCUMENT_ROOT") or self._environ.get("DOCUMENT_ROOT") or ""

    def _init_forwarded_root(self) -> Optional[Tuple[str, str]]:
        root_def = self._headers.get("x-forwarded-root")
        if not root_def:
            return None
        parts = root_def.split(",")
        local_prefix = parts[0].strip()
        mapped_prefix = parts[1].strip() if len(parts) > 1 else ""
        return local_prefix, mapped_prefix

    def _init_web_root(self, consider_forwarding: bool) -> str:
        """
        The web path the current application is rooted at.

        ``SCRIPT_NAME`` alone is misleading for CGI-style servers, so the
        directory of ``SCRIPT_FILENAME`` is taken relative to the document
        root. Pure WSGI servers have no script file; there ``SCRIPT_NAME`` is
        the mount point already.
        """
        if consider_forwarding and self._forwarded_root is not None:
            web_root = self._forwarded_root[1]
            if web_root.endswith("/"):
                web_root = web_root[:-1]
            return web_root

        script_filename = self._environ.get("SCRIPT_FILENAME")
        if script_filename:
            file_dir = posixpath.dirname(script_filename)
            web_root = file_dir[len(self._document_root) :]
        else:
            web_root = self._environ.get("SCRIPT_NAME", "")

        context = self._environ.get("CONTEXT")
        if context:
            web_root = context + web_root
        if web_root.endswith("/"):
            web_root = web_root[:-1]
        return web_root

    def _init_original_path(self) -> str:
        """The path as the client requested it at the proxy."""
        path = self._path
        if self._forwarded_root is not None:
            local_prefix, mapped_prefix = self._forwarded_root
            if path.startswith(local_prefix):
                path = mapped_prefix + path[len(local_prefix) :]
        return path

    # Resolved values

    @property
    def method(self) -> str:
        """HTTP method (GET, POST, etc.)."""
        return self._method

    @property
    def headers(self) -> Dict[str, str]:
        """Request headers, names lowercased."""
        return dict(self._headers)

    @property
    def protocol(self) -> str:
        """``http`` or ``https`` as seen by the client."""
        return self._protocol

    @property
    def http_host(self) -> str:
        """Value of the ``Host`` header."""
        return self._http_host

    @property
    def host(self) -> str:
        """Host as requested by the client, may differ from ``http_host`` behind proxies."""
        return self._host

    @property
    def root_uri(self) -> str:
        """``protocol://host``"""
        return self._root_uri

    @property
    def uri(self) -> str:
        """Request URI including the query string."""
        return self._uri

    @property
    def path(self) -> str:
        """Request path without the query string."""
        return self._path

    @property
    def path_elements(self) -> List[str]:
        return list(self._path_elements)

    @property
    def params(self) -> str:
        """Raw query string, empty when there is none."""
        return self._params

    @property
    def get_params(self) -> QueryParams:
        """Decoded query string parameters (a copy, changes do not affect the request)."""
        return copy.deepcopy(self._get_params)

    @property
    def document_root(self) -> str:
        """(Context) document root of the server."""
        return self._document_root

    @property
    def web_root(self) -> str:
        """Web root as seen by the client, e.g. ``""`` or a path mapped by a proxy."""
        return self._web_root

    @property
    def local_web_root(self) -> str:
        """Web root as defined by the local server, ignoring proxies."""
        return self._local_web_root

    @property
    def web_root_uri(self) -> str:
        return self._web_root_uri

    @property
    def original_path(self) -> str:
        """Path as requested at the proxy, without parameters."""
        return self._original_path

    @property
    def original_uri(self) -> str:
        """URI as requested at the proxy, with parameters."""
        return self._original_uri

    @property
    def start_time(self) -> int:
        """Epoch seconds when the request object was created."""
        return self._start_time

    # Parameters

    def has_get_param(self, key: str) -> bool:
        return key in self._get_params

    def get_get_param(self, key: str, default: Any = None, filter: Optional[Filter] = None) -> Any:
        """
        Returns a GET parameter passed through ``filter``.

        Args:
            key: Parameter name
            default: Returned when the parameter is missing
            filter: Sanitizes the value, strips HTML when not given

        Returns:
            The filtered value or ``default``
        """
        if key not in self._get_params:
            return default
        if filter is None:
            filter = NO_HTML
        return filter.apply(copy.deepcopy(self._get_params[key]))

    def has_post_param(self, key: str) -> bool:
        return key in self._load_post_params()

    def get_post_param(self, key: str, default: Any = None, filter: Optional[Filter] = None) -> Any:
        """Returns a POST parameter passed through ``filter`` (HTML stripped by default)."""
        params = self._load_post_params()
        if key not in params:
            return default
        if filter is None:
            filter = NO_HTML
        return filter.apply(copy.deepcopy(params[key]))

    def get_param(self, key: str, default: Any = None, get_precedes: bool = True) -> Any:
        """
        Returns a GET or POST parameter, whichever is found first.

        Empty values (``""``, empty lists) count as missing and the other
        source is searched.

        Args:
            key: Parameter name
            default: Returned when neither source has a value
            get_precedes: Search GET before POST, POST first when False
        """
        first, second = (
            (self.get_get_param, self.get_post_param) if get_precedes else (self.get_post_param, self.get_get_param)
        )
        value = first(key)
        if _is_empty(value):
            value = second(key)
        if _is_empty(value):
            value = default
        return value

    def get_post_params(self) -> QueryParams:
        """
        Returns a copy of all POST parameters, read on first call.

        Requires a positive ``Content-Length``. A header that is present but
        not a positive number is logged as an error and yields no parameters.
        Urlencoded and ``multipart/form-data`` bodies are decoded; file
        uploads are not part of the result.
        """
        return copy.deepcopy(self._load_post_params())

    def _load_post_params(self) -> QueryParams:
        if self._post_params is not None:
            return self._post_params

        self._post_params = {}
        length = self.get_header("Content-Length")
        if not length or length == "0":
            return self._post_params

        if _content_length(length) <= 0:
            logger.error("POST content invalid", extra={"content_length": length, "uri": self._uri})
            return self._post_params

        content_type = self.get_header("Content-Type") or ""
        mime_type = content_type.split(";")[0].strip().lower()
        if mime_type in ("", FORM_CONTENT_TYPE):
            body = self.get_body()
            if body:
                self._post_params = self.parse_query_string(body, self._settings.max_nesting_level)
        elif mime_type == MULTIPART_CONTENT_TYPE:
            raw = self._get_raw_body()
            if raw:
                self._post_params = parse_multipart(raw, content_type, self._settings.max_nesting_level)
        return self._post_params

    def get_body(self) -> Optional[str]:
        """
        Returns the request body, read on first call.

        Only requests whose method carries a body (POST and PUT by default)
        have one; ``None`` for all others.
        """
        raw = self._get_raw_body()
        if raw is None:
            return None
        if self._body is None:
            self._body = raw.decode("utf-8", errors="replace")
        return self._body

    def _get_raw_body(self) -> Optional[bytes]:
        if self._method not in self._settings.body_methods:
            return None
        if self._raw_body is None:
            self._raw_body = self._read_body()
        return self._raw_body

    def _read_body(self) -> bytes:
        stream = self._environ.get("wsgi.input")
        if stream is None:
            return b""
        length = _content_length(self.get_header("Content-Length") or "")
        if length > 0:
            data = stream.read(length)
        elif self._environ.get("wsgi.input_terminated"):
            data = stream.read()
        else:
            # Reading past CONTENT_LENGTH may block on a non-terminated stream
            data = b""
        if isinstance(data, str):
            return data.encode("utf-8")
        return data

    @staticmethod
    def parse_query_string(query: str, max_nesting_level: int = 64) -> QueryParams:
        """Decodes a query string, see ``webutils.querystring``."""
        return parse_query_string(query, max_nesting_level)

    # Misc

    def get_header(self, key: str) -> Optional[str]:
        """Returns a header value, case-insensitive, or None."""
        return self._headers.get(key.lower())

    def get_elapsed_time(self) -> int:
        """Seconds since the request object was created."""
        return int(time.time()) - self._start_time

    def set_app_root(self, app_root: str) -> None:
        """
        Sets the application root directory.

        The app may live in a subdirectory of the document root; in that
        case ``relative_app_path`` becomes the path between both,
        e.g. ``/sub``. Otherwise it is empty.
        """
        self.app_root = app_root
        doc_root = self._document_root
        if len(doc_root) < len(app_root) and app_root.startswith(doc_root):
            self.relative_app_path = app_root[len(doc_root) :]
        else:
            self.relative_app_path = ""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(method={self._method!r}, uri={self._uri!r}, host={self._host!r})"


def _content_length(value: str) -> int:
    """Leading integer of a header value, 0 when there is none."""
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else 0


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, dict)):
        return len(value) == 0
    return False
