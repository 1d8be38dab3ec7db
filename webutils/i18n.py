"""
Translation lookup for localized strings.

Ships the day and month names used by ``webutils.date.Date`` in English and
German. Applications register more languages with ``Catalog.add()``.
"""

from typing import Dict, Mapping, Optional

DAYS = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")
MONTHS = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)


def _date_strings(days: tuple, days_short: tuple, months: tuple, months_short: tuple) -> Dict[str, str]:
    strings = {}
    for key, name, short in zip(DAYS, days, days_short):
        strings[f"date_{key}"] = name
        strings[f"date_{key}_short"] = short
    for key, name, short in zip(MONTHS, months, months_short):
        strings[f"date_{key}"] = name
        strings[f"date_{key}_short"] = short
    return strings


DATE_STRINGS: Dict[str, Dict[str, str]] = {
    "en": _date_strings(
        ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"),
        ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"),
        (
            "January",
            "February",
            "March",
            "April",
            "May",
            "June",
            "July",
            "August",
            "September",
            "October",
            "November",
            "December",
        ),
        ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"),
    ),
    "de": _date_strings(
        ("Sonntag", "Montag", "Dienstag", "Mittwoch", "Donnerstag", "Freitag", "Samstag"),
        ("So", "Mo", "Di", "Mi", "Do", "Fr", "Sa"),
        (
            "Januar",
            "Februar",
            "März",
            "April",
            "Mai",
            "Juni",
            "Juli",
            "August",
            "September",
            "Oktober",
            "November",
            "Dezember",
        ),
        ("Jan", "Feb", "Mär", "Apr", "Mai", "Jun", "Jul", "Aug", "Sep", "Okt", "Nov", "Dez"),
    ),
}


class Catalog:
    """
    Strings per language.

    Lookups in an unknown language fall back to ``default_language``;
    unknown keys return the key itself.
    """

    def __init__(self, default_language: str = "en", strings: Optional[Mapping[str, Mapping[str, str]]] = None):
        self.default_language = default_language
        self._strings: Dict[str, Dict[str, str]] = {}
        for language, mapping in (DATE_STRINGS if strings is None else strings).items():
            self.add(language, mapping)

    def add(self, language: str, mapping: Mapping[str, str]) -> None:
        """Registers (or overrides) strings for ``language``."""
        self._strings.setdefault(language, {}).update(mapping)

    def translate(self, key: str, language: Optional[str] = None) -> str:
        language = language or self.default_language
        strings = self._strings.get(language)
        if strings is not None and key in strings:
            return strings[key]
        return self._strings.get(self.default_language, {}).get(key, key)

    @property
    def languages(self) -> list:
        return sorted(self._strings)

    def __repr__(self) -> str:
        return f"Catalog(default_language={self.default_language!r}, languages={self.languages!r})"
