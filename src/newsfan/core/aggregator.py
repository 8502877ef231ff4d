#!/usr/bin/env python3
"""
News Aggregator

Fans a search phrase out to every configured source in parallel, waits for
all of them to settle, merges the matched articles and caps the merged list
by source priority. A failing source is logged and left out; it never aborts
the run.
"""

import asyncio
import concurrent.futures
import logging
import time
from typing import Any, Awaitable, Callable, Iterable, List, Optional

from .config import Config, get_config
from .exceptions import SourceError
from .matcher import Matcher, Predicate
from .models.article import Article
from .models.source import Source
from .newsapi_client import NewsApiClient, SourceQueryResult
from .reducer import reduce_articles
from .sources.catalog import SourceCatalog

logger = logging.getLogger(__name__)


class NewsAggregator:
    """Parallel per-source search with partial-failure tolerance."""

    def __init__(self,
                 client: Any,
                 catalog: Optional[SourceCatalog] = None,
                 matcher: Optional[Matcher] = None,
                 priority: Optional[List[str]] = None,
                 max_articles: int = 10,
                 include_unlisted: bool = False):
        """
        Initialize aggregator.

        Args:
            client: Object with ``async query(predicate, source) -> SourceQueryResult``
            catalog: Configured sources; required by ``search``
            matcher: Predicate factory (default threshold if None)
            priority: Source ids, highest first (catalog order if None)
            max_articles: Result cap applied by ``search``
            include_unlisted: Let unlisted sources fill leftover room
        """
        self.client = client
        self.catalog = catalog
        self.matcher = matcher or Matcher()
        self.priority = priority
        self.max_articles = max_articles
        self.include_unlisted = include_unlisted

    @classmethod
    def from_config(cls, client: Any, config: Config, catalog: SourceCatalog) -> 'NewsAggregator':
        """Create an aggregator wired from application configuration."""
        return cls(
            client=client,
            catalog=catalog,
            matcher=Matcher(config.aggregation.match_threshold),
            priority=config.aggregation.source_priority or None,
            max_articles=config.aggregation.max_articles,
            include_unlisted=config.aggregation.include_unlisted_sources
        )

    async def aggregate(self, phrase: str, sources: Iterable[Source]) -> List[Article]:
        """
        Query every source concurrently and merge the matched articles.

        Returns only once every query has settled. Articles are appended one
        source batch at a time in completion order.

        Args:
            phrase: Search phrase
            sources: Sources to query

        Returns:
            Merged candidate list (possibly empty)
        """
        sources = list(sources)
        if not sources:
            logger.info("No sources configured, nothing to query")
            return []

        predicate = self.matcher.build(phrase)

        logger.info(f"Querying {len(sources)} sources in parallel for '{phrase}'")
        start_time = time.time()

        tasks = [
            asyncio.ensure_future(self._query_source(predicate, source))
            for source in sources
        ]

        merged: List[Article] = []
        succeeded = 0
        failed = 0

        for next_done in asyncio.as_completed(tasks):
            result = await next_done

            if not result.ok:
                failed += 1
                logger.error(f"Request to {result.source.id} failed: {result.error}")
                continue

            succeeded += 1
            merged.extend(result.articles)
            logger.debug(f"{result.source.id} contributed {len(result.articles)} articles")

        duration = time.time() - start_time
        logger.info(
            f"Queried {succeeded}/{len(sources)} sources successfully "
            f"({failed} failed) in {duration:.2f}s, {len(merged)} candidate articles"
        )

        return merged

    async def _query_source(self, predicate: Predicate, source: Source) -> SourceQueryResult:
        """Run one query; anything it raises becomes a failed result."""
        try:
            return await self.client.query(predicate, source)
        except SourceError as e:
            return SourceQueryResult(source=source, error=e)
        except Exception as e:
            logger.debug(f"Unexpected error querying {source.id}", exc_info=True)
            return SourceQueryResult(
                source=source,
                error=SourceError(source.id, f"Unexpected error querying {source.id}: {e}")
            )

    async def search(self,
                     phrase: str,
                     source_ids: Optional[List[str]] = None,
                     max_articles: Optional[int] = None) -> List[Article]:
        """
        Run one aggregation: query, merge, then cap by source priority.

        Args:
            phrase: Search phrase
            source_ids: Restrict the run to these catalog ids
            max_articles: Override the configured cap

        Returns:
            Final result list
        """
        if self.catalog is None:
            raise RuntimeError("NewsAggregator.search requires a source catalog")

        sources = self.catalog.select(source_ids) if source_ids else self.catalog.sources
        cap = self.max_articles if max_articles is None else max_articles

        candidates = await self.aggregate(phrase, sources)

        priority = self.catalog.resolve_priority(self.priority)
        results = reduce_articles(candidates, priority, cap, include_unlisted=self.include_unlisted)

        logger.info(f"Returning {len(results)} of {len(candidates)} articles (cap {cap})")
        return results


def _run_sync(coro_factory: Callable[[], Awaitable[List[Article]]]) -> List[Article]:
    """Run a coroutine to completion from synchronous code."""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro_factory())

    # Called from inside a running loop: use a private loop on a worker thread
    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
        future = executor.submit(asyncio.run, coro_factory())
        return future.result()


def fetch_news(phrase: str,
               config: Optional[Config] = None,
               catalog: Optional[SourceCatalog] = None,
               source_ids: Optional[List[str]] = None,
               max_articles: Optional[int] = None,
               callback: Optional[Callable[[List[Article]], None]] = None) -> List[Article]:
    """
    Convenience function to search all sources from synchronous code.

    Args:
        phrase: Search phrase
        config: Application configuration (global config if None)
        catalog: Source catalog (loaded from config if None)
        source_ids: Restrict the run to these catalog ids
        max_articles: Override the configured cap
        callback: Invoked once with the final list

    Returns:
        Final result list
    """
    config = config or get_config()
    if catalog is None:
        catalog = SourceCatalog.from_file(config.aggregation.sources_file)

    async def _fetch() -> List[Article]:
        async with NewsApiClient(
            api_key=config.newsapi.api_key,
            base_url=config.newsapi.base_url,
            timeout=config.newsapi.request_timeout,
            user_agent=config.newsapi.user_agent
        ) as client:
            aggregator = NewsAggregator.from_config(client, config, catalog)
            return await aggregator.search(phrase, source_ids=source_ids, max_articles=max_articles)

    articles = _run_sync(_fetch)

    if callback is not None:
        callback(articles)

    return articles
