"""Tests for the translation catalog."""

from webutils.i18n import Catalog


def test_english_default():
    catalog = Catalog()
    assert catalog.translate("date_monday") == "Monday"
    assert catalog.translate("date_monday_short") == "Mon"
    assert catalog.translate("date_september") == "September"


def test_german():
    catalog = Catalog()
    assert catalog.translate("date_monday", "de") == "Montag"
    assert catalog.translate("date_march_short", "de") == "Mär"


def test_default_language():
    assert Catalog("de").translate("date_sunday") == "Sonntag"


def test_unknown_language_falls_back():
    assert Catalog().translate("date_friday", "xx") == "Friday"


def test_unknown_key_returns_key():
    assert Catalog().translate("no_such_key", "de") == "no_such_key"


def test_add_strings():
    catalog = Catalog()
    catalog.add("fr", {"date_monday": "lundi"})
    assert catalog.translate("date_monday", "fr") == "lundi"
    assert catalog.translate("date_tuesday", "fr") == "Tuesday"
    assert catalog.languages == ["de", "en", "fr"]


def test_custom_strings_only():
    catalog = Catalog("en", {"en": {"greeting": "Hello"}})
    assert catalog.translate("greeting") == "Hello"
    assert catalog.translate("date_monday") == "date_monday"


def test_repr():
    assert repr(Catalog()) == "Catalog(default_language='en', languages=['de', 'en'])"
