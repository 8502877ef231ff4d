"""
Core aggregation components: matcher, source query client, aggregator, reducer.
"""

from .aggregator import NewsAggregator, fetch_news
from .matcher import Matcher, Predicate, build_predicate
from .newsapi_client import NewsApiClient, SourceQueryResult
from .reducer import reduce_articles

__all__ = [
    'NewsAggregator',
    'fetch_news',
    'Matcher',
    'Predicate',
    'build_predicate',
    'NewsApiClient',
    'SourceQueryResult',
    'reduce_articles',
]
