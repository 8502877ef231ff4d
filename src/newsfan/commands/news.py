#!/usr/bin/env python3
"""
News command endpoints for searching sources by phrase.
"""

import asyncio
import logging
from argparse import Namespace
from typing import List, Optional

from .base import BaseCommand
from ..core.aggregator import NewsAggregator
from ..core.formatters import articles_to_json, format_articles
from ..core.models.article import Article

logger = logging.getLogger(__name__)


class NewsCommand(BaseCommand):
    """Search configured news sources for a phrase."""

    SUBCOMMANDS = ('search',)

    def run(self, subcommand: str, args: Namespace) -> int:
        return self.search(args)

    def search(self, args: Namespace) -> int:
        """Query every source for the phrase and print the capped result."""
        # Fails fast on a missing credential before any request goes out
        self.config_manager.validate_startup()

        phrase = " ".join(args.phrase).strip() if isinstance(args.phrase, list) else args.phrase
        if not phrase:
            self.logger.error("A search phrase is required")
            return 1

        articles = asyncio.run(self._search(
            phrase,
            source_ids=getattr(args, 'sources', None),
            max_articles=getattr(args, 'cap', None)
        ))

        if getattr(args, 'json', False):
            print(articles_to_json(articles))
        else:
            print(format_articles(articles, phrase))
        return 0

    async def _search(self,
                      phrase: str,
                      source_ids: Optional[List[str]] = None,
                      max_articles: Optional[int] = None) -> List[Article]:
        async with self.create_newsapi_client() as client:
            aggregator = NewsAggregator.from_config(client, self.config, self.source_catalog)
            return await aggregator.search(phrase, source_ids=source_ids, max_articles=max_articles)
