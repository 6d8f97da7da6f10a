"""
Scrapers Module
"""
from .base import BaseScraper, RateLimitedScraper
from .youtube_scraper import YouTubeScraper, parse_iso8601_duration

__all__ = [
    "BaseScraper",
    "RateLimitedScraper",
    "YouTubeScraper",
    "parse_iso8601_duration",
]
