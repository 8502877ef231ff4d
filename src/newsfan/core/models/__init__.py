"""
Data models for the news aggregator.
"""

from .article import Article
from .source import Source

__all__ = ['Article', 'Source']
