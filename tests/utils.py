"""Test utilities and helper functions."""

import io
from typing import Any, Dict, Optional, Union

from webutils.types import HttpMethod


def make_environ(
    method: HttpMethod = "GET",
    uri: str = "/",
    headers: Optional[Dict[str, str]] = None,
    body: Optional[Union[str, bytes]] = None,
    environ: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Create a CGI-style environment as Apache/PHP-FPM would pass it (minimal fields only)."""
    result: Dict[str, Any] = {
        "REQUEST_METHOD": method,
        "REQUEST_URI": uri,
        "REQUEST_SCHEME": "http",
        "HTTP_HOST": "www.example.com",
        "DOCUMENT_ROOT": "/var/www/html",
        "SCRIPT_FILENAME": "/var/www/html/index.php",
    }
    for name, value in (headers or {}).items():
        key = name.upper().replace("-", "_")
        if key not in ("CONTENT_TYPE", "CONTENT_LENGTH"):
            key = "HTTP_" + key
        result[key] = value
    if body is not None:
        data = body.encode("utf-8") if isinstance(body, str) else body
        result["wsgi.input"] = io.BytesIO(data)
        result.setdefault("CONTENT_LENGTH", str(len(data)))
    result.update(environ or {})
    return result
