#!/usr/bin/env python3
"""
Formatting utilities for news display.
"""

import json
from typing import List

from .models.article import Article


def format_article(article: Article) -> str:
    """Format a single article for display."""
    timestamp = ""
    if article.published:
        timestamp = article.published.strftime("%Y-%m-%d %H:%M")

    title = article.title or article.description or "(untitled)"
    return f"[{timestamp}] [{article.source.upper()}] {title}\n    {article.link or ''}\n"


def format_articles(articles: List[Article], phrase: str) -> str:
    """Format a result set with a short header."""
    if not articles:
        return f"No articles found for '{phrase}'."

    lines = [f"Found {len(articles)} articles for '{phrase}':", ""]
    lines.extend(format_article(article) for article in articles)
    return "\n".join(lines)


def articles_to_dict(articles: List[Article]) -> List[dict]:
    """Convert Article objects to dictionaries for API integration."""
    return [article.to_dict() for article in articles]


def articles_to_json(articles: List[Article]) -> str:
    return json.dumps(articles_to_dict(articles), ensure_ascii=False, indent=2)
