#!/usr/bin/env python3
"""
Priority reducer

Caps a merged candidate list to a maximum size, keeping articles from
higher-priority sources first.
"""

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List

from .models.article import Article

logger = logging.getLogger(__name__)


def group_by_source(articles: Iterable[Article]) -> Dict[str, List[Article]]:
    """Group articles by source id, preserving order within each group."""
    groups: Dict[str, List[Article]] = OrderedDict()
    for article in articles:
        groups.setdefault(article.source_id, []).append(article)
    return groups


def reduce_articles(articles: List[Article],
                    priority: List[str],
                    cap: int,
                    include_unlisted: bool = False) -> List[Article]:
    """
    Select at most ``cap`` articles ordered by source priority.

    When the candidates already fit, the list is returned as is. Otherwise
    each prioritized source contributes its articles in their original
    order until the cap is reached, possibly part-way through a source.
    Articles from sources missing from ``priority`` are dropped unless
    ``include_unlisted`` is set, in which case they fill any remaining room.

    Args:
        articles: Merged candidate list
        priority: Source ids, highest priority first
        cap: Maximum number of articles to return
        include_unlisted: Append articles from unlisted sources after the walk

    Returns:
        Bounded result list
    """
    if cap < 0:
        raise ValueError(f"cap must not be negative, got {cap}")

    if cap == 0:
        return []

    if len(articles) <= cap:
        return articles

    groups = group_by_source(articles)
    selected: List[Article] = []
    visited = set()

    for source_id in priority:
        if source_id in visited:
            continue
        visited.add(source_id)

        for article in groups.get(source_id, ()):
            selected.append(article)
            if len(selected) == cap:
                return selected

    if include_unlisted:
        for article in articles:
            if article.source_id in visited:
                continue
            selected.append(article)
            if len(selected) == cap:
                return selected

    dropped = [source_id for source_id in groups if source_id not in visited]
    if dropped and not include_unlisted:
        logger.debug(f"Dropped articles from sources outside priority list: {', '.join(dropped)}")

    return selected
