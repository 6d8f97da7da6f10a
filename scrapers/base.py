"""
Base Scraper
Abstract base for credentialed API scrapers
"""
from abc import ABC, abstractmethod
from typing import Generic, List, Optional, TypeVar
import asyncio
import logging
import time

from config.settings import Settings
from models import SourceType


logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseScraper(ABC, Generic[T]):
    """
    Scraper base class.

    Settings are injected; the aiohttp session is created lazily by
    subclasses and released by ``close`` or the async context manager.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._session = None

    @property
    @abstractmethod
    def source_type(self) -> SourceType:
        """Source type produced by this scraper"""

    @property
    @abstractmethod
    def name(self) -> str:
        """Scraper name used in log lines"""

    @abstractmethod
    async def search(self, query: str, max_results: Optional[int] = None) -> List[T]:
        """
        Search the upstream API.

        Raises:
            SourceUnavailable: request failed or upstream is not configured
        """

    def is_configured(self) -> bool:
        """Override to check API keys"""
        return True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        if self._session:
            await self._session.close()
            self._session = None

    def _log_search(self, query: str, count: int):
        logger.info(f"[{self.name}] Search '{query}' returned {count} results")

    def _log_error(self, message: str, error: Exception):
        logger.error(f"[{self.name}] {message}: {error}")


class RateLimitedScraper(BaseScraper[T]):
    """Scraper with a minimum interval between requests"""

    def __init__(self, settings: Settings, requests_per_second: float = 1.0):
        super().__init__(settings)
        self._rate_limit = requests_per_second
        self._last_request_time = 0.0
        self._lock = asyncio.Lock()

    async def _wait_for_rate_limit(self):
        # the lock guards only the inter-request delay, never the request itself
        async with self._lock:
            time_since_last = time.monotonic() - self._last_request_time
            min_interval = 1.0 / self._rate_limit

            if time_since_last < min_interval:
                await asyncio.sleep(min_interval - time_since_last)

            self._last_request_time = time.monotonic()
