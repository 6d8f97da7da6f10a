"""Heuristic field extraction from search result URLs and snippets."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlparse


_COST = re.compile(r"\$\d+(?:,\d{3})*(?:\.\d{2})?")
_COST_NUMBER = re.compile(r"\$?(\d+(?:,\d{3})*(?:\.\d{2})?)")
_HOURS = re.compile(r"(\d+)\s*(?:hours?|hrs?)\b", re.IGNORECASE)
_AUTHOR = re.compile(r"by\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)")
_HOST = re.compile(r"(?i:hosted by)\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)")
_PREREQUISITES = re.compile(r"prerequisites?:?\s*([^.]+)", re.IGNORECASE)

_PROVIDERS = (
    ("coursera", "Coursera"),
    ("edx", "edX"),
    ("udacity", "Udacity"),
    ("udemy", "Udemy"),
)

LOW_QUALITY_DOMAINS = ("pinterest", "facebook", "twitter", "instagram")


def extract_domain(url: str) -> str:
    host = urlparse(str(url or "")).hostname
    if not host:
        return "Unknown"
    return host[4:] if host.startswith("www.") else host


def extract_provider(url: str) -> str:
    lowered = str(url or "").lower()
    for marker, provider in _PROVIDERS:
        if marker in lowered:
            return provider
    return extract_domain(url)


def extract_cost(text: str) -> Optional[str]:
    match = _COST.search(str(text or ""))
    return match.group(0) if match else None


def parse_cost(label: Optional[str]) -> Optional[float]:
    """First dollar amount in a label like ``$150`` or ``$20-40``."""
    if not label or label in ("Free", "Varies", "Unknown"):
        return None
    match = _COST_NUMBER.search(label)
    if not match:
        return None
    return float(match.group(1).replace(",", ""))


def extract_hours(text: str) -> Optional[int]:
    match = _HOURS.search(str(text or ""))
    return int(match.group(1)) if match else None


def extract_level(text: str) -> str:
    lowered = str(text or "").lower()
    if re.search(r"beginner|introductory|basics", lowered):
        return "Beginner"
    if re.search(r"advanced|expert|master", lowered):
        return "Advanced"
    if "intermediate" in lowered:
        return "Intermediate"
    return "All Levels"


def extract_author(text: str) -> Optional[str]:
    match = _AUTHOR.search(str(text or ""))
    return match.group(1) if match else None


def extract_format(text: str) -> str:
    lowered = str(text or "").lower()
    if re.search(r"kindle|ebook|digital", lowered):
        return "eBook"
    if re.search(r"hardcover|paperback|physical", lowered):
        return "Physical"
    return "Physical/eBook"


def extract_prerequisites(text: str) -> Optional[str]:
    match = _PREREQUISITES.search(str(text or ""))
    return match.group(1).strip() if match else None


def extract_agency(url: str) -> str:
    domain = extract_domain(url)
    return domain.replace(".gov", "").replace(".edu", "").upper()


def extract_host(text: str) -> Optional[str]:
    match = _HOST.search(str(text or ""))
    return match.group(1) if match else None


def is_quality_source(url: str) -> bool:
    lowered = str(url or "").lower()
    return not any(domain in lowered for domain in LOW_QUALITY_DOMAINS)
