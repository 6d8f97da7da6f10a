"""Unauthenticated connectors: the public video feed index and HTML web search."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import html as html_lib
import logging
import re
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import parse_qs, unquote, urlparse
import xml.etree.ElementTree as ET

import httpx
from bs4 import BeautifulSoup

from config.settings import FeedSettings, WebSearchSettings
from models import Candidate, SourceType
from utils.exceptions import SourceUnavailable


logger = logging.getLogger(__name__)

_FEED_NS = {
    "atom": "http://www.w3.org/2005/Atom",
    "yt": "http://www.youtube.com/xml/schemas/2015",
    "media": "http://search.yahoo.com/mrss/",
}

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"


@dataclass(frozen=True)
class WebHit:
    """One organic web search result"""
    title: str
    url: str
    snippet: str = ""

    @property
    def text(self) -> str:
        return f"{self.title} {self.snippet}".strip()


def _parse_datetime(value: Any) -> Optional[datetime]:
    text = str(value or "").strip()
    if not text:
        return None
    try:
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _clean_text(value: str) -> str:
    return re.sub(r"\s+", " ", html_lib.unescape(str(value or ""))).strip()


async def _http_get_text(
    url: str,
    *,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = 12.0,
) -> str:
    async with httpx.AsyncClient(timeout=httpx.Timeout(timeout), follow_redirects=True) as client:
        response = await client.get(url, params=params, headers=headers)
        response.raise_for_status()
        return str(response.text or "")


def _feed_text(node: ET.Element, path: str) -> str:
    child = node.find(path, _FEED_NS)
    return str((child.text if child is not None else "") or "").strip()


def parse_video_feed(xml_text: str) -> List[Candidate]:
    """
    Parse an Atom video feed into candidates.

    Duration and view counts are not part of the feed and stay unknown.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise SourceUnavailable(f"malformed video feed: {e}", source="video")

    candidates: List[Candidate] = []
    for entry in root.findall("atom:entry", _FEED_NS):
        video_id = _feed_text(entry, "yt:videoId")
        title = _clean_text(_feed_text(entry, "atom:title"))
        if not video_id or not title:
            continue

        thumbnail_node = entry.find("media:group/media:thumbnail", _FEED_NS)
        published = _parse_datetime(_feed_text(entry, "atom:published"))
        candidates.append(
            Candidate(
                source_type=SourceType.VIDEO,
                title=title,
                origin=_feed_text(entry, "atom:author/atom:name"),
                url=WATCH_URL.format(video_id=video_id),
                raw_signals={
                    "id": video_id,
                    "description": _clean_text(_feed_text(entry, "media:group/media:description")),
                    "published_at": published.isoformat() if published else None,
                    "thumbnail": thumbnail_node.get("url") if thumbnail_node is not None else None,
                    "duration_minutes": None,
                    "view_count": None,
                    "like_count": None,
                },
            )
        )
    return candidates


async def fetch_video_feed(query: str, settings: FeedSettings, *, timeout: float = 12.0) -> List[Candidate]:
    """Search the public video feed index for ``query``."""
    try:
        xml_text = await _http_get_text(settings.base_url, params={"search_query": query}, timeout=timeout)
    except httpx.HTTPError as e:
        raise SourceUnavailable(f"video feed request failed: {e}", source="video", query=query)

    candidates = parse_video_feed(xml_text)
    logger.info(f"[Video:feed] '{query}' returned {len(candidates)} entries")
    return candidates


def build_site_query(base: str, sites: Sequence[str]) -> str:
    """``"python course (site:coursera.org OR site:edx.org)"``"""
    if not sites:
        return base
    return f"{base} ({' OR '.join(f'site:{site}' for site in sites)})"


def _resolve_result_url(href: str) -> str:
    """Unwrap the search engine's redirect link to the target URL."""
    if not href:
        return ""
    if href.startswith("//"):
        href = "https:" + href
    parsed = urlparse(href)
    if parsed.path.startswith("/l/"):
        target = parse_qs(parsed.query).get("uddg")
        if target:
            return unquote(target[0])
    return href


def parse_search_results(html: str, max_results: int = 10) -> List[WebHit]:
    soup = BeautifulSoup(html, "html.parser")
    hits: List[WebHit] = []
    seen = set()
    for result in soup.select("div.result"):
        link = result.select_one("a.result__a")
        if link is None:
            continue
        url = _resolve_result_url(link.get("href", ""))
        if not url.startswith(("http://", "https://")) or url in seen:
            continue
        seen.add(url)
        snippet_node = result.select_one(".result__snippet")
        hits.append(
            WebHit(
                title=_clean_text(link.get_text(" ", strip=True)),
                url=url,
                snippet=_clean_text(snippet_node.get_text(" ", strip=True)) if snippet_node else "",
            )
        )
        if len(hits) >= max_results:
            break
    return hits


async def web_search(query: str, settings: WebSearchSettings, *, timeout: float = 12.0) -> List[WebHit]:
    """Run one web search; raises SourceUnavailable on transport errors."""
    try:
        html = await _http_get_text(
            settings.endpoint,
            params={"q": query},
            headers={"User-Agent": settings.user_agent},
            timeout=timeout,
        )
    except httpx.HTTPError as e:
        raise SourceUnavailable(f"web search failed: {e}", source="web", query=query)

    hits = parse_search_results(html, max_results=settings.max_results)
    logger.info(f"[WebSearch] '{query}' returned {len(hits)} hits")
    return hits


async def check_url(url: str, *, timeout: float = 8.0) -> bool:
    """HEAD the URL; reachable means a non-error status after redirects."""
    try:
        async with httpx.AsyncClient(timeout=httpx.Timeout(timeout), follow_redirects=True) as client:
            response = await client.head(url)
            return response.status_code < 400
    except httpx.HTTPError as e:
        logger.debug(f"[URLCheck] {url} unreachable: {e}")
        return False
