#!/usr/bin/env python3
"""
Source catalog inspection.
"""

import json
from argparse import Namespace

from .base import BaseCommand


class SourcesCommand(BaseCommand):
    """List configured news sources in priority order."""

    SUBCOMMANDS = ('list',)

    def run(self, subcommand: str, args: Namespace) -> int:
        return self.list_sources(args)

    def list_sources(self, args: Namespace) -> int:
        """Print every catalog source with its priority rank."""
        catalog = self.source_catalog
        priority = catalog.resolve_priority(self.config_manager.get_aggregation_config().source_priority)
        rank = {source_id: index for index, source_id in enumerate(priority, 1)}

        rows = []
        for source in catalog:
            rows.append({
                'id': source.id,
                'name': source.name,
                'priority': rank.get(source.id)
            })
        rows.sort(key=lambda row: (row['priority'] is None, row['priority'] or 0))

        if getattr(args, 'json', False):
            print(json.dumps(rows, ensure_ascii=False, indent=2))
            return 0

        print(f"{len(rows)} configured sources:")
        for row in rows:
            position = row['priority'] if row['priority'] is not None else '-'
            print(f"  {position:>3}  {row['id']:<28} {row['name']}")
        return 0
