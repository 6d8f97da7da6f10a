from __future__ import annotations

from sources.extraction import (
    extract_agency,
    extract_author,
    extract_cost,
    extract_domain,
    extract_format,
    extract_host,
    extract_hours,
    extract_level,
    extract_prerequisites,
    extract_provider,
    is_quality_source,
    parse_cost,
)


def test_domain_and_provider() -> None:
    assert extract_domain("https://www.coursera.org/learn/x") == "coursera.org"
    assert extract_domain("not a url") == "Unknown"
    assert extract_provider("https://www.edx.org/course/x") == "edX"
    assert extract_provider("https://learn.example.com/x") == "learn.example.com"


def test_cost_extraction_and_parsing() -> None:
    assert extract_cost("Enroll for $1,299.00 today") == "$1,299.00"
    assert extract_cost("free to audit") is None
    assert parse_cost("$1,299.00") == 1299.0
    assert parse_cost("$20-40") == 20.0
    assert parse_cost("Free") is None
    assert parse_cost("Varies") is None
    assert parse_cost(None) is None


def test_hours_and_level() -> None:
    assert extract_hours("About 12 hours to complete") == 12
    assert extract_hours("3 hrs of video") == 3
    assert extract_hours("self paced") is None
    assert extract_level("An introductory course") == "Beginner"
    assert extract_level("Advanced topics") == "Advanced"
    assert extract_level("intermediate learners") == "Intermediate"
    assert extract_level("for everyone") == "All Levels"


def test_people_and_format() -> None:
    assert extract_author("Graph Theory by Reinhard Diestel, hardcover") == "Reinhard Diestel"
    assert extract_host("A weekly show hosted by Jane Doe about math") == "Jane Doe"
    assert extract_format("Kindle edition") == "eBook"
    assert extract_format("Paperback") == "Physical"
    assert extract_format("") == "Physical/eBook"


def test_prerequisites_agency_and_quality() -> None:
    assert extract_prerequisites("Prerequisites: basic algebra. Then more.") == "basic algebra"
    assert extract_agency("https://www.nist.gov/topics") == "NIST"
    assert is_quality_source("https://en.wikipedia.org/wiki/Graph") is True
    assert is_quality_source("https://www.pinterest.com/pin/1") is False
