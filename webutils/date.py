"""
Date/time wrapper with PHP-style format codes and localized names.

``Date`` keeps an aware ``datetime`` together with the zone it should be
rendered in. ``format()`` understands the classic one-letter codes
(``Y-m-d H:i:s``, ``D, d M Y``, ...) and translates day and month names
through an ``i18n.Catalog``::

    >>> d = Date("2024-03-01 12:00:00")
    >>> d.format("l, j. F Y", language="de")
    'Freitag, 1. März 2024'

Output is rendered in GMT unless ``local=True`` is passed.
"""

import calendar
import re
import warnings
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Callable, Dict, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from webutils.config import Settings
from webutils.exceptions import DateParseError, TimezoneError
from webutils.i18n import DATE_STRINGS, DAYS, MONTHS, Catalog

GMT = timezone(timedelta(0), "GMT")

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400
SECONDS_PER_WEEK = 604800

RFC3339 = "Y-m-d\\TH:i:sP"
RFC2822 = "D, d M Y H:i:s O"
MYSQL = "Y-m-d H:i:s"

_NUMERIC = re.compile(r"^[+-]?\d+(\.\d+)?$")

TimezoneLike = Union[str, tzinfo, None]
DateLike = Union[str, int, float, datetime, "Date"]

# PHP format code -> strptime directive, for create_from_format()
_STRPTIME_CODES = {
    "d": "%d",
    "j": "%d",
    "m": "%m",
    "n": "%m",
    "Y": "%Y",
    "y": "%y",
    "H": "%H",
    "G": "%H",
    "h": "%I",
    "g": "%I",
    "i": "%M",
    "s": "%S",
    "u": "%f",
    "D": "%a",
    "l": "%A",
    "M": "%b",
    "F": "%B",
    "A": "%p",
    "a": "%p",
    "O": "%z",
    "P": "%z",
    "T": "%Z",
}


def to_timezone(tz: TimezoneLike) -> tzinfo:
    """Resolves a zone name or ``tzinfo``; ``None`` means GMT."""
    if tz is None:
        return GMT
    if isinstance(tz, tzinfo):
        return tz
    if tz.upper() in ("GMT", "UTC"):
        return GMT if tz.upper() == "GMT" else timezone.utc
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        raise TimezoneError(tz) from None


class Date:
    """
    A point in time plus the zone used to render it.

    Args:
        date: ``"now"``, a Unix timestamp (number or numeric string),
            an ISO 8601 / MySQL string, a ``datetime`` or another Date.
            Naive values are taken to be in ``tz``.
        tz: Zone name or ``tzinfo``, defaults to ``settings.timezone``.
        settings: Default zone, language and ``str()`` format.
        catalog: Translations for day and month names.
    """

    SECONDS_PER_MINUTE = SECONDS_PER_MINUTE
    SECONDS_PER_HOUR = SECONDS_PER_HOUR
    SECONDS_PER_DAY = SECONDS_PER_DAY
    SECONDS_PER_WEEK = SECONDS_PER_WEEK

    def __init__(
        self,
        date: DateLike = "now",
        tz: TimezoneLike = None,
        settings: Optional[Settings] = None,
        catalog: Optional[Catalog] = None,
    ) -> None:
        self._settings = settings or Settings()
        self._catalog = catalog or Catalog(self._settings.language)
        self._tz = to_timezone(tz if tz is not None else self._settings.timezone)
        self._dt = self._parse(date)

    def _parse(self, value: DateLike) -> datetime:
        if isinstance(value, Date):
            return value.to_datetime().astimezone(self._tz)
        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=self._tz)
            return value.astimezone(self._tz)
        if isinstance(value, bool):
            raise DateParseError(value)
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value, timezone.utc).astimezone(self._tz)
        if not isinstance(value, str):
            raise DateParseError(value, "unsupported type")

        text = value.strip()
        if text.startswith("@") and _NUMERIC.match(text[1:]):
            text = text[1:]
        if _NUMERIC.match(text):
            return datetime.fromtimestamp(float(text), timezone.utc).astimezone(self._tz)

        keyword = text.lower()
        if keyword in ("", "now"):
            return datetime.now(self._tz)
        if keyword in ("today", "midnight", "tomorrow", "yesterday"):
            today = datetime.now(self._tz).replace(hour=0, minute=0, second=0, microsecond=0)
            shift = {"tomorrow": 1, "yesterday": -1}.get(keyword, 0)
            return today + timedelta(days=shift)

        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise DateParseError(value, str(exc)) from exc
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=self._tz)
        return parsed.astimezone(self._tz)

    # Rendering

    def format(self, format: str, local: bool = False, translate: bool = True, language: Optional[str] = None) -> str:
        """
        Renders the date with PHP-style format codes.

        Args:
            format: Format string, ``\\`` escapes the next character
            local: Render in the date's zone instead of GMT
            translate: Render day and month names (``D l M F``) through the catalog
            language: Catalog language, defaults to the catalog's default

        Returns:
            The formatted date
        """
        dt = self._dt if local else self._dt.astimezone(GMT)
        return self._render(dt, format, translate, language)

    def calendar(self, format: str, local: bool = False, translate: bool = True) -> str:
        """Same as ``format()``."""
        return self.format(format, local, translate)

    def _render(self, dt: datetime, fmt: str, translate: bool, language: Optional[str]) -> str:
        out = []
        chars = iter(fmt)
        for char in chars:
            if char == "\\":
                out.append(next(chars, ""))
                continue
            if translate and char in "DlMF":
                out.append(self._translated(dt, char, language))
                continue
            renderer = _CODES.get(char)
            out.append(renderer(dt) if renderer else char)
        return "".join(out)

    def _translated(self, dt: datetime, code: str, language: Optional[str]) -> str:
        if code in "Dl":
            return self.day_to_string(dt.isoweekday() % 7, code == "D", language) or ""
        return self.month_to_string(dt.month, code == "M", language) or ""

    def day_to_string(self, day: int, abbr: bool = False, language: Optional[str] = None) -> Optional[str]:
        """Localized name of a weekday, 0 is Sunday. None for other numbers."""
        day = int(day)
        if not 0 <= day <= 6:
            return None
        key = f"date_{DAYS[day]}" + ("_short" if abbr else "")
        return self._catalog.translate(key, language)

    def month_to_string(self, month: int, abbr: bool = False, language: Optional[str] = None) -> Optional[str]:
        """Localized name of a month, 1 is January. None for other numbers."""
        month = int(month)
        if not 1 <= month <= 12:
            return None
        key = f"date_{MONTHS[month - 1]}" + ("_short" if abbr else "")
        return self._catalog.translate(key, language)

    def to_iso8601(self, local: bool = False) -> str:
        """ISO 8601 / RFC 3339, e.g. ``2024-03-01T12:00:00+00:00``."""
        return self.format(RFC3339, local, False)

    def to_rfc822(self, local: bool = False) -> str:
        """RFC 2822, e.g. ``Fri, 01 Mar 2024 12:00:00 +0000``."""
        return self.format(RFC2822, local, False)

    def to_mysql(self, local: bool = False) -> str:
        return self.format(MYSQL, local, False)

    def to_unix(self) -> int:
        return int(self._dt.timestamp())

    def __str__(self) -> str:
        return self._render(self._dt, self._settings.date_format, False, None)

    def __repr__(self) -> str:
        return f"Date({self._dt.isoformat()!r}, tz={_zone_name(self._tz, self._dt)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Date):
            return self._dt == other._dt
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._dt)

    # Zone

    @property
    def timezone(self) -> tzinfo:
        return self._tz

    def to_datetime(self) -> datetime:
        """The underlying aware datetime in the date's zone."""
        return self._dt

    def set_timezone(self, tz: TimezoneLike) -> "Date":
        """Moves the date to another zone; the instant stays the same."""
        self._tz = to_timezone(tz)
        self._dt = self._dt.astimezone(self._tz)
        return self

    def get_offset_from_gmt(self, hours: bool = False) -> Union[int, float]:
        """Offset of the date's zone from GMT in seconds, or hours."""
        offset = self._dt.utcoffset() or timedelta(0)
        seconds = int(offset.total_seconds())
        return seconds / 3600 if hours else seconds

    # Fields, rendered in the date's zone

    @property
    def days_in_month(self) -> str:
        return self.format("t", True)

    @property
    def day_of_week(self) -> str:
        """ISO-8601 day of the week, 1 (Monday) to 7 (Sunday)."""
        return self.format("N", True)

    @property
    def day_of_year(self) -> str:
        """Day of the year starting from 0."""
        return self.format("z", True)

    @property
    def is_leap_year(self) -> bool:
        return self.format("L", True) == "1"

    @property
    def day(self) -> str:
        return self.format("d", True)

    @property
    def hour(self) -> str:
        return self.format("H", True)

    @property
    def minute(self) -> str:
        return self.format("i", True)

    @property
    def second(self) -> str:
        return self.format("s", True)

    @property
    def month(self) -> str:
        return self.format("m", True)

    @property
    def ordinal(self) -> str:
        """English ordinal suffix of the day: st, nd, rd or th."""
        return self.format("S", True)

    @property
    def week(self) -> str:
        """ISO-8601 week number."""
        return self.format("W", True)

    @property
    def year(self) -> str:
        return self.format("Y", True)

    _FIELDS = {
        "daysinmonth": "days_in_month",
        "dayofweek": "day_of_week",
        "dayofyear": "day_of_year",
        "isleapyear": "is_leap_year",
    }
    _FIELD_NAMES = frozenset(
        ("days_in_month", "day_of_week", "day_of_year", "is_leap_year", "day", "hour", "minute")
        + ("second", "month", "ordinal", "week", "year")
    )

    def get(self, name: str) -> Any:
        """
        Looks up a field by name (``"dayofweek"`` or ``"day_of_week"``).

        Unknown names give None and a UserWarning.
        """
        field = self._FIELDS.get(name, name)
        if field not in self._FIELD_NAMES:
            warnings.warn(f"Undefined date property: {name!r}", UserWarning, stacklevel=2)
            return None
        return getattr(self, field)

    # Factories

    @classmethod
    def get_instance(cls, date: DateLike = "now", tz: TimezoneLike = None, **kwargs: Any) -> "Date":
        return cls(date, tz, **kwargs)

    @classmethod
    def create_from_mysql(cls, value: str, tz: TimezoneLike = None, **kwargs: Any) -> "Date":
        return cls(value, tz, **kwargs)

    @classmethod
    def create_local_instance(
        cls, timestamp: Union[int, float], tz: TimezoneLike = None, settings: Optional[Settings] = None, **kwargs: Any
    ) -> "Date":
        """A date for a Unix timestamp, rendered in ``tz`` (default: ``settings.timezone``)."""
        settings = settings or Settings()
        date = cls(timestamp, "UTC", settings=settings, **kwargs)
        date.set_timezone(tz if tz is not None else settings.timezone)
        return date

    @classmethod
    def create_from_format(
        cls, format: str, value: str, tz: TimezoneLike = None, settings: Optional[Settings] = None, **kwargs: Any
    ) -> Optional["Date"]:
        """
        Parses ``value`` according to a PHP-style ``format``.

        Fields missing from the format are zero (midnight, January 1st).
        Returns None when the value does not match the format.
        """
        settings = settings or Settings()
        zone = to_timezone(tz if tz is not None else settings.timezone)
        try:
            if format == "U":
                parsed = datetime.fromtimestamp(int(value), timezone.utc)
            else:
                parsed = datetime.strptime(value, _to_strptime(format))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=zone)
        return cls.create_local_instance(parsed.timestamp(), zone, settings=settings, **kwargs)


def _to_strptime(fmt: str) -> str:
    out = []
    chars = iter(fmt)
    for char in chars:
        if char == "\\":
            out.append(next(chars, "").replace("%", "%%"))
        elif char in ("!", "|"):
            continue
        elif char in _STRPTIME_CODES:
            out.append(_STRPTIME_CODES[char])
        elif char.isalpha():
            raise ValueError(f"Unsupported format code {char!r}")
        else:
            out.append(char.replace("%", "%%"))
    return "".join(out)


def _zone_name(tz: Optional[tzinfo], dt: datetime) -> str:
    key = getattr(tz, "key", None)
    if key:
        return key
    return dt.tzname() or ""


def _offset(dt: datetime, colon: bool) -> str:
    seconds = int((dt.utcoffset() or timedelta(0)).total_seconds())
    sign = "-" if seconds < 0 else "+"
    hours, minutes = divmod(abs(seconds) // 60, 60)
    return f"{sign}{hours:02d}:{minutes:02d}" if colon else f"{sign}{hours:02d}{minutes:02d}"


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def _swatch(dt: datetime) -> str:
    utc = dt.astimezone(timezone.utc)
    seconds = (utc.hour * 3600 + utc.minute * 60 + utc.second + 3600) % SECONDS_PER_DAY
    return f"{int(seconds / 86.4):03d}"


def _english(key: str) -> str:
    return DATE_STRINGS["en"][key]


def _hour12(dt: datetime) -> int:
    return dt.hour % 12 or 12


_CODES: Dict[str, Callable[[datetime], str]] = {
    # Day
    "d": lambda dt: f"{dt.day:02d}",
    "D": lambda dt: _english(f"date_{DAYS[dt.isoweekday() % 7]}_short"),
    "j": lambda dt: str(dt.day),
    "l": lambda dt: _english(f"date_{DAYS[dt.isoweekday() % 7]}"),
    "N": lambda dt: str(dt.isoweekday()),
    "S": lambda dt: _ordinal(dt.day),
    "w": lambda dt: str(dt.isoweekday() % 7),
    "z": lambda dt: str(dt.timetuple().tm_yday - 1),
    # Week
    "W": lambda dt: f"{dt.isocalendar()[1]:02d}",
    # Month
    "F": lambda dt: _english(f"date_{MONTHS[dt.month - 1]}"),
    "m": lambda dt: f"{dt.month:02d}",
    "M": lambda dt: _english(f"date_{MONTHS[dt.month - 1]}_short"),
    "n": lambda dt: str(dt.month),
    "t": lambda dt: str(calendar.monthrange(dt.year, dt.month)[1]),
    # Year
    "L": lambda dt: "1" if calendar.isleap(dt.year) else "0",
    "o": lambda dt: str(dt.isocalendar()[0]),
    "Y": lambda dt: f"{dt.year:04d}",
    "y": lambda dt: f"{dt.year % 100:02d}",
    # Time
    "a": lambda dt: "am" if dt.hour < 12 else "pm",
    "A": lambda dt: "AM" if dt.hour < 12 else "PM",
    "B": _swatch,
    "g": lambda dt: str(_hour12(dt)),
    "G": lambda dt: str(dt.hour),
    "h": lambda dt: f"{_hour12(dt):02d}",
    "H": lambda dt: f"{dt.hour:02d}",
    "i": lambda dt: f"{dt.minute:02d}",
    "s": lambda dt: f"{dt.second:02d}",
    "u": lambda dt: f"{dt.microsecond:06d}",
    "v": lambda dt: f"{dt.microsecond // 1000:03d}",
    # Zone
    "e": lambda dt: _zone_name(dt.tzinfo, dt),
    "I": lambda dt: "1" if dt.dst() else "0",
    "O": lambda dt: _offset(dt, colon=False),
    "P": lambda dt: _offset(dt, colon=True),
    "p": lambda dt: "Z" if not dt.utcoffset() else _offset(dt, colon=True),
    "T": lambda dt: dt.tzname() or "",
    "Z": lambda dt: str(int((dt.utcoffset() or timedelta(0)).total_seconds())),
    # Full date/time
    "c": lambda dt: f"{dt:%Y-%m-%dT%H:%M:%S}{_offset(dt, colon=True)}",
    "r": lambda dt: (
        f"{_english('date_' + DAYS[dt.isoweekday() % 7] + '_short')}, {dt.day:02d} "
        f"{_english('date_' + MONTHS[dt.month - 1] + '_short')} {dt.year:04d} {dt:%H:%M:%S} {_offset(dt, colon=False)}"
    ),
    "U": lambda dt: str(int(dt.timestamp())),
}
