from typing import Any, Optional

from typing_extensions import Annotated, Doc


class WebUtilsError(RuntimeError):
    """
    A generic, webutils-specific error.
    """


class DateParseError(WebUtilsError, ValueError):
    """The given value cannot be read as a date."""

    def __init__(
        self,
        value: Annotated[
            Any,
            Doc(
                """
                The input that could not be parsed.
                """
            ),
        ],
        reason: Annotated[
            Optional[str],
            Doc(
                """
                Why parsing failed, appended to the message.
                """
            ),
        ] = None,
    ) -> None:
        self.value = value
        message = f"Cannot parse date from {value!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class TimezoneError(WebUtilsError, ValueError):
    """Unknown time zone name."""

    def __init__(
        self,
        name: Annotated[
            str,
            Doc(
                """
                The zone name that is not known to the zone database.
                """
            ),
        ],
    ) -> None:
        self.name = name
        super().__init__(f"Unknown time zone: {name!r}")


class NoRequestError(WebUtilsError, LookupError):
    """
    No request is bound to the current context.

    Raised by ``current_request()`` outside of ``RequestContextMiddleware``
    or ``request_scope()``.
    """
