"""
webutils - request normalization, date formatting and HTML helpers for web apps.
"""

from webutils.config import Settings as Settings
from webutils.date import Date as Date
from webutils.exceptions import DateParseError as DateParseError
from webutils.exceptions import NoRequestError as NoRequestError
from webutils.exceptions import TimezoneError as TimezoneError
from webutils.exceptions import WebUtilsError as WebUtilsError
from webutils.filters import Filter as Filter
from webutils.filters import NoHtmlFilter as NoHtmlFilter
from webutils.html import render_end_tag as render_end_tag
from webutils.html import render_start_tag as render_start_tag
from webutils.i18n import Catalog as Catalog
from webutils.links import LinkBuilder as LinkBuilder
from webutils.links import WebRootLinkBuilder as WebRootLinkBuilder
from webutils.middleware import RequestContextMiddleware as RequestContextMiddleware
from webutils.middleware import current_request as current_request
from webutils.middleware import request_scope as request_scope
from webutils.querystring import parse_query_string as parse_query_string
from webutils.request import Request as Request

__version__ = "0.1.0"
