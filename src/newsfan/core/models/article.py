#!/usr/bin/env python3
"""
Article data model.

Represents a single matched news article as returned by an upstream source.
"""

from datetime import datetime
from typing import Dict, Any, Optional
from dataclasses import dataclass

import pytz


@dataclass(frozen=True)
class Article:
    """
    Represents a single news article.

    ``source`` is the display name shown to readers; ``source_id`` is the
    identifier of the source it was fetched from and is what priority
    ordering keys on.
    """
    title: Optional[str]
    description: Optional[str]
    timestamp: Optional[float]
    source: str
    link: Optional[str] = None
    media: Optional[str] = None
    source_id: str = ""

    @property
    def published(self) -> Optional[datetime]:
        """Timestamp as an aware UTC datetime."""
        if self.timestamp is None:
            return None
        return datetime.fromtimestamp(self.timestamp, tz=pytz.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'title': self.title,
            'description': self.description,
            'timestamp': self.timestamp,
            'source': self.source,
            'link': self.link,
            'media': self.media,
            'source_id': self.source_id
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Article':
        """Create Article from dictionary."""
        timestamp = data.get('timestamp')
        return cls(
            title=data.get('title'),
            description=data.get('description'),
            timestamp=float(timestamp) if timestamp is not None else None,
            source=data.get('source', ''),
            link=data.get('link'),
            media=data.get('media'),
            source_id=data.get('source_id', '')
        )

    def __repr__(self):
        title = (self.title or '')[:50]
        return f"Article(title='{title}...', source='{self.source}', source_id='{self.source_id}')"
