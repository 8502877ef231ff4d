#!/usr/bin/env python3
"""
Async NewsAPI client

Queries the NewsAPI.org ``articles`` endpoint for a single source and keeps
the entries whose title or description satisfy a relevance predicate.
One request per source, no retries.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import aiohttp
import pytz
from dateutil import parser as date_parser

from .config import DEFAULT_BASE_URL, DEFAULT_USER_AGENT
from .exceptions import SourceError, SourceParseError, SourceStatusError, SourceTransportError
from .matcher import Predicate
from .models.article import Article
from .models.source import Source

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=pytz.utc)
_ONE_MILLISECOND = timedelta(milliseconds=1)


def published_at_to_timestamp(published_at: Any) -> Optional[float]:
    """
    Convert an upstream ``publishedAt`` value to epoch seconds.

    Whole milliseconds since the epoch divided by 1000, so sub-second
    precision survives (``...40.500Z`` -> ``...40.5``). Naive values are
    taken as UTC. Returns None when the value is missing or unparseable.
    """
    if not published_at or not isinstance(published_at, str):
        return None

    try:
        dt = date_parser.parse(published_at)
        if dt.tzinfo is None:
            dt = pytz.utc.localize(dt)
        # An offset of a day or more only fails once utcoffset() is consulted
        milliseconds = (dt - _EPOCH) // _ONE_MILLISECOND
    except (ValueError, OverflowError) as e:
        logger.debug(f"Failed to parse date '{published_at}': {e}")
        return None

    return milliseconds / 1000


@dataclass
class SourceQueryResult:
    """Outcome of querying one source: matched articles or the error."""
    source: Source
    articles: List[Article] = field(default_factory=list)
    error: Optional[SourceError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class NewsApiClient:
    """Per-source NewsAPI query client backed by an aiohttp session."""

    ARTICLES_PATH = '/v1/articles'

    def __init__(self,
                 api_key: str,
                 base_url: str = DEFAULT_BASE_URL,
                 timeout: int = 10,
                 user_agent: str = DEFAULT_USER_AGENT,
                 session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize NewsAPI client.

        Args:
            api_key: NewsAPI.org credential
            base_url: Upstream base URL
            timeout: Total request timeout in seconds
            user_agent: User-Agent header for owned sessions
            session: Externally managed session; not closed by the client
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.user_agent = user_agent

        self._session = session
        self._owns_session = session is None

    async def __aenter__(self):
        """Async context manager entry."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={'User-Agent': self.user_agent}
            )
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def articles_url(self) -> str:
        return f"{self.base_url}{self.ARTICLES_PATH}"

    async def query(self, predicate: Predicate, source: Source) -> SourceQueryResult:
        """
        Query one source; per-source failures are returned, never raised.

        Args:
            predicate: Relevance test applied to title and description
            source: Source to query

        Returns:
            SourceQueryResult holding either the matched articles or the error
        """
        try:
            articles = await self.fetch_articles(predicate, source)
        except SourceError as e:
            return SourceQueryResult(source=source, error=e)
        return SourceQueryResult(source=source, articles=articles)

    async def fetch_articles(self, predicate: Predicate, source: Source) -> List[Article]:
        """
        Fetch and filter articles for one source.

        Raises:
            SourceTransportError: Network failure or timeout
            SourceParseError: Body is not a JSON object
            SourceStatusError: Upstream status is not "ok"
        """
        if self._session is None:
            raise RuntimeError("NewsApiClient must be used as async context manager")

        params = {'source': source.id, 'apiKey': self.api_key}

        try:
            logger.debug(f"Querying NewsAPI for source: {source.id}")
            async with self._session.get(self.articles_url(), params=params) as response:
                try:
                    payload = await response.json(content_type=None)
                except ValueError as e:
                    raise SourceParseError(source.id, f"response body (HTTP {response.status})", e)

        except asyncio.TimeoutError as e:
            raise SourceTransportError(source.id, e)
        except aiohttp.ClientError as e:
            raise SourceTransportError(source.id, e)

        return self.parse_payload(payload, predicate, source)

    def parse_payload(self, payload: Any, predicate: Predicate, source: Source) -> List[Article]:
        """Validate a decoded payload and keep the entries that match."""
        if not isinstance(payload, dict):
            raise SourceParseError(source.id, "response payload")

        status = payload.get('status')
        if status != 'ok':
            raise SourceStatusError(source.id, status, payload.get('message'))

        entries = payload.get('articles') or []
        if not isinstance(entries, list):
            raise SourceParseError(source.id, "articles list")

        articles = []
        for entry in entries:
            article = self._parse_entry(entry, predicate, source)
            if article is not None:
                articles.append(article)

        logger.debug(f"{source.id}: {len(articles)}/{len(entries)} entries matched")
        return articles

    def _parse_entry(self, entry: Dict[str, Any], predicate: Predicate, source: Source) -> Optional[Article]:
        """Build an Article from one upstream entry if it is relevant."""
        if not isinstance(entry, dict):
            logger.debug(f"Skipping non-object entry from {source.id}")
            return None

        title = entry.get('title')
        description = entry.get('description')

        if not (predicate.test(title) or predicate.test(description)):
            return None

        return Article(
            title=title,
            description=description,
            timestamp=published_at_to_timestamp(entry.get('publishedAt')),
            source=source.name,
            link=entry.get('url'),
            media=entry.get('urlToImage'),
            source_id=source.id
        )
