#!/usr/bin/env python3
"""
Static news source catalog.

Loads the list of ``{id, name}`` source descriptors once at startup and
resolves the configured priority order against it.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..exceptions import ConfigurationError
from ..models.source import Source

logger = logging.getLogger(__name__)

DEFAULT_SOURCES_FILE = Path(__file__).with_name('sources.json')


class SourceCatalog:
    """Ordered, immutable collection of configured sources."""

    def __init__(self, sources: List[Source]):
        self._sources: List[Source] = []
        self._by_id: Dict[str, Source] = {}
        for source in sources:
            if source.id in self._by_id:
                logger.warning(f"Duplicate source id in catalog ignored: {source.id}")
                continue
            self._sources.append(source)
            self._by_id[source.id] = source

    @classmethod
    def from_file(cls, path: Optional[Union[str, Path]] = None) -> 'SourceCatalog':
        """
        Load a catalog from a JSON file holding a list of descriptors.

        Raises:
            ConfigurationError: If the file is missing or malformed
        """
        path = Path(path) if path else DEFAULT_SOURCES_FILE
        try:
            with open(path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
        except OSError as e:
            raise ConfigurationError('NEWS_SOURCES_FILE', f"cannot read {path}: {e}")
        except json.JSONDecodeError as e:
            raise ConfigurationError('NEWS_SOURCES_FILE', f"invalid JSON in {path}: {e}")

        if not isinstance(raw, list):
            raise ConfigurationError('NEWS_SOURCES_FILE', f"{path} must contain a list of sources")

        try:
            sources = [Source.from_dict(item) for item in raw]
        except (AttributeError, ValueError) as e:
            raise ConfigurationError('NEWS_SOURCES_FILE', str(e))

        logger.info(f"Loaded {len(sources)} sources from {path}")
        return cls(sources)

    @property
    def sources(self) -> List[Source]:
        return list(self._sources)

    def ids(self) -> List[str]:
        return [source.id for source in self._sources]

    def get(self, source_id: str) -> Optional[Source]:
        return self._by_id.get(source_id)

    def select(self, source_ids: List[str]) -> List[Source]:
        """
        Sources for the given ids, in the given order.

        Raises:
            KeyError: If an id is not in the catalog
        """
        missing = [source_id for source_id in source_ids if source_id not in self._by_id]
        if missing:
            available = ', '.join(self.ids())
            raise KeyError(f"Unknown source(s) {', '.join(missing)}. Available: {available}")
        return [self._by_id[source_id] for source_id in source_ids]

    def resolve_priority(self, priority: Optional[List[str]] = None) -> List[str]:
        """Configured priority order, falling back to catalog order."""
        if not priority:
            return self.ids()

        unknown = [source_id for source_id in priority if source_id not in self._by_id]
        if unknown:
            logger.warning(f"Priority list names sources not in catalog: {', '.join(unknown)}")
        return list(priority)

    def __len__(self):
        return len(self._sources)

    def __iter__(self):
        return iter(self._sources)

    def __contains__(self, source_id: str) -> bool:
        return source_id in self._by_id
