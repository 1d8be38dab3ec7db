"""
``multipart/form-data`` field decoding.

Only plain form fields are returned. Parts carrying a ``filename`` are
uploads and are skipped, so the result has the same shape as an urlencoded
form body and field names follow the same bracket rules.
"""

import logging
from typing import Dict, List, Optional, Tuple

from python_multipart import MultipartParser
from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import parse_options_header

from webutils.querystring import MAX_NESTING_LEVEL, parse_pairs
from webutils.types import QueryParams

logger = logging.getLogger(__name__)

MULTIPART_CONTENT_TYPE = "multipart/form-data"


def get_boundary(content_type: str) -> Optional[bytes]:
    """Boundary parameter of a multipart Content-Type, None when missing."""
    _, options = parse_options_header(content_type)
    boundary = options.get(b"boundary")
    return boundary or None


def parse_multipart(body: bytes, content_type: str, max_nesting_level: int = MAX_NESTING_LEVEL) -> QueryParams:
    """
    Decode the form fields of a multipart body.

    Malformed bodies are logged and give no fields.
    """
    boundary = get_boundary(content_type)
    if boundary is None:
        logger.error("Multipart content without boundary", extra={"content_type": content_type})
        return {}

    fields: List[Tuple[str, str]] = []
    headers: Dict[str, str] = {}
    header_field = bytearray()
    header_value = bytearray()
    data = bytearray()

    def on_part_begin() -> None:
        headers.clear()
        data.clear()

    def on_part_data(chunk: bytes, start: int, end: int) -> None:
        data.extend(chunk[start:end])

    def on_header_field(chunk: bytes, start: int, end: int) -> None:
        header_field.extend(chunk[start:end])

    def on_header_value(chunk: bytes, start: int, end: int) -> None:
        header_value.extend(chunk[start:end])

    def on_header_end() -> None:
        if header_field:
            name = header_field.decode("utf-8", errors="replace").lower()
            headers[name] = header_value.decode("utf-8", errors="replace")
        header_field.clear()
        header_value.clear()

    def on_part_end() -> None:
        _, options = parse_options_header(headers.get("content-disposition", ""))
        name = options.get(b"name")
        if name is None or b"filename" in options:
            return
        fields.append((name.decode("utf-8", errors="replace"), data.decode("utf-8", errors="replace")))

    callbacks = {
        "on_part_begin": on_part_begin,
        "on_part_data": on_part_data,
        "on_part_end": on_part_end,
        "on_header_field": on_header_field,
        "on_header_value": on_header_value,
        "on_header_end": on_header_end,
    }
    parser = MultipartParser(boundary, callbacks)
    try:
        parser.write(body)
        parser.finalize()
    except MultipartParseError as exc:
        logger.error("Multipart content invalid", extra={"reason": str(exc)})
        return {}
    return parse_pairs(fields, max_nesting_level)
