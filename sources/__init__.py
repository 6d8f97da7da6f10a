"""Source connectors: public video feed, web search and field extraction."""

from .connectors import (
    WebHit,
    build_site_query,
    check_url,
    fetch_video_feed,
    parse_search_results,
    parse_video_feed,
    web_search,
)
from .extraction import (
    extract_agency,
    extract_author,
    extract_cost,
    extract_domain,
    extract_format,
    extract_hours,
    extract_host,
    extract_level,
    extract_prerequisites,
    extract_provider,
    is_quality_source,
    parse_cost,
)

__all__ = [
    "WebHit",
    "build_site_query",
    "check_url",
    "fetch_video_feed",
    "parse_search_results",
    "parse_video_feed",
    "web_search",
    "extract_agency",
    "extract_author",
    "extract_cost",
    "extract_domain",
    "extract_format",
    "extract_hours",
    "extract_host",
    "extract_level",
    "extract_prerequisites",
    "extract_provider",
    "is_quality_source",
    "parse_cost",
]
