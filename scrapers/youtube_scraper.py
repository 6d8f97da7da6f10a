"""
YouTube Scraper
Credentialed video search through the YouTube Data API v3
API docs: https://developers.google.com/youtube/v3/docs
"""
import asyncio
import re
from typing import Any, Dict, List, Optional
import logging

import aiohttp

from .base import RateLimitedScraper
from config.settings import Settings
from models import Candidate, SourceType
from utils.exceptions import SourceUnavailable


logger = logging.getLogger(__name__)

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

_ISO_DURATION = re.compile(r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?)?$")


def parse_iso8601_duration(value: Optional[str]) -> Optional[float]:
    """
    Convert an ISO 8601 duration (``PT1H2M30S``) to minutes.

    Returns None for missing or unparseable values rather than 0.
    """
    if not value:
        return None
    match = _ISO_DURATION.match(value.strip())
    if not match or not any(match.groups()):
        return None
    days, hours, minutes, seconds = (float(part) if part else 0.0 for part in match.groups())
    return round(days * 1440 + hours * 60 + minutes + seconds / 60, 2)


def _optional_int(value: Any) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class YouTubeScraper(RateLimitedScraper[Candidate]):
    """
    YouTube Data API scraper.

    Two calls per search: ``search`` for ids (snippet only), then ``videos``
    for snippet, contentDetails and statistics of every hit.
    """

    def __init__(self, settings: Settings):
        self.youtube = settings.youtube
        super().__init__(settings, requests_per_second=self.youtube.requests_per_second)

    @property
    def source_type(self) -> SourceType:
        return SourceType.VIDEO

    @property
    def name(self) -> str:
        return "YouTube API"

    def is_configured(self) -> bool:
        return bool(self.youtube.api_key)

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.settings.general.request_timeout),
            )
        return self._session

    async def _get_json(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        await self._wait_for_rate_limit()
        session = await self._get_session()
        try:
            async with session.get(
                f"{self.youtube.base_url}/{endpoint}",
                params={**params, "key": self.youtube.api_key},
            ) as response:
                if response.status == 403:
                    raise SourceUnavailable(
                        "API key rejected or quota exhausted", source="video", endpoint=endpoint
                    )
                response.raise_for_status()
                return await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._log_error(f"{endpoint} request failed", e)
            raise SourceUnavailable(f"{endpoint} request failed: {e}", source="video", endpoint=endpoint)

    async def search(
        self,
        query: str,
        max_results: Optional[int] = None,
        order: Optional[str] = None,
        video_duration: Optional[str] = None,
    ) -> List[Candidate]:
        """
        Search embeddable videos and return them with detail records.

        Args:
            query: search keywords
            max_results: result cap (API maximum 50)
            order: relevance, date, rating, viewCount
            video_duration: short, medium, long, any

        Raises:
            SourceUnavailable: not configured, or a request failed
        """
        if not self.is_configured():
            raise SourceUnavailable("YouTube API key not configured", source="video")

        params = {
            "part": "snippet",
            "q": query,
            "type": "video",
            "maxResults": min(max_results or self.youtube.max_results, 50),
            "order": order or self.youtube.order,
            "videoEmbeddable": "true",
        }
        duration = video_duration or self.youtube.video_duration
        if duration and duration != "any":
            params["videoDuration"] = duration

        logger.info(f"[{self.name}] Searching: {query}")
        data = await self._get_json("search", params)

        video_ids = [
            item.get("id", {}).get("videoId")
            for item in data.get("items", [])
            if item.get("id", {}).get("videoId")
        ]
        if not video_ids:
            self._log_search(query, 0)
            return []

        videos = await self.get_video_details(video_ids)
        self._log_search(query, len(videos))
        return videos

    async def get_video_details(self, video_ids: List[str]) -> List[Candidate]:
        data = await self._get_json(
            "videos",
            {"part": "snippet,contentDetails,statistics", "id": ",".join(video_ids)},
        )
        candidates = []
        for item in data.get("items", []):
            candidate = self._convert_to_candidate(item)
            if candidate:
                candidates.append(candidate)
        return candidates

    def _convert_to_candidate(self, item: Dict[str, Any]) -> Optional[Candidate]:
        video_id = item.get("id")
        snippet = item.get("snippet") or {}
        if not video_id or not snippet.get("title"):
            return None

        statistics = item.get("statistics") or {}
        content_details = item.get("contentDetails") or {}
        thumbnails = snippet.get("thumbnails") or {}
        thumbnail = (thumbnails.get("high") or thumbnails.get("medium") or thumbnails.get("default") or {}).get("url")

        return Candidate(
            source_type=SourceType.VIDEO,
            title=snippet["title"],
            origin=snippet.get("channelTitle", ""),
            url=WATCH_URL.format(video_id=video_id),
            raw_signals={
                "id": video_id,
                "description": snippet.get("description", ""),
                "channel_id": snippet.get("channelId"),
                "published_at": snippet.get("publishedAt"),
                "thumbnail": thumbnail,
                "category_id": snippet.get("categoryId"),
                "tags": list(snippet.get("tags") or []),
                "duration_minutes": parse_iso8601_duration(content_details.get("duration")),
                "view_count": _optional_int(statistics.get("viewCount")),
                "like_count": _optional_int(statistics.get("likeCount")),
                "comment_count": _optional_int(statistics.get("commentCount")),
                "resolved_by": "api",
            },
        )
