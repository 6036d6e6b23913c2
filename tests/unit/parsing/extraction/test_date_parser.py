from datetime import date

import pytest

from src.parsing.extraction.date_parser import DeliveryDateParser


@pytest.fixture
def parser():
    return DeliveryDateParser()


@pytest.mark.parametrize("raw, expected", [
    ("Friday, March 15, 2024", date(2024, 3, 15)),
    ("Fri, Mar 15, 2024", date(2024, 3, 15)),
    ("March 15 2024", date(2024, 3, 15)),
    ("15th March, 2024", date(2024, 3, 15)),
    ("Monday, 18 March 2024", date(2024, 3, 18)),
    ("1st Apr 2024", date(2024, 4, 1)),
    ("2024-03-15", date(2024, 3, 15)),
    ("15/03/2024", date(2024, 3, 15)),
    ("february 29, 2024", date(2024, 2, 29)),
])
def test_valid_dates(parser, raw, expected):
    assert parser.parse(raw) == expected


@pytest.mark.parametrize("raw", [
    "",
    None,
    "February 30, 2024",
    "Feb 29, 2023",
    "Someday 15, 2024",
    "2024-13-01",
])
def test_invalid_dates(parser, raw):
    assert parser.parse(raw) is None


def test_custom_formats():
    parser = DeliveryDateParser(formats=["%d.%m.%Y"])
    assert parser.parse("15.03.2024") == date(2024, 3, 15)
    assert parser.parse("March 15, 2024") is None
