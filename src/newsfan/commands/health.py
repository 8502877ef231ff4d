#!/usr/bin/env python3
"""
Health check command.

Validates the startup configuration and the source catalog without
querying any upstream source.
"""

import logging
from argparse import Namespace
from typing import Any, Dict

from .base import BaseCommand, EXIT_CONFIG_ERROR
from ..core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class HealthCommand(BaseCommand):
    """Handle configuration health checks."""

    SUBCOMMANDS = ('check',)

    def run(self, subcommand: str, args: Namespace) -> int:
        return self.check(args)

    def check(self, args: Namespace) -> int:
        """Run configuration health check."""
        print("System Health Check")
        print("=" * 50)

        try:
            self.config_manager.validate_startup()
        except ConfigurationError as e:
            print(f"  FAIL configuration: {e.message}")
            return EXIT_CONFIG_ERROR

        status = self.config_manager.get_status()
        print("  OK   configuration")
        print(f"       base url:      {status['base_url']}")
        print(f"       timeout:       {status['request_timeout']}s")
        print(f"       max articles:  {status['max_articles']}")

        report = self.check_sources()
        print(f"  OK   catalog: {report['source_count']} sources")

        if report['unknown_priority_ids']:
            print(f"  WARN priority ids not in catalog: {', '.join(report['unknown_priority_ids'])}")
        if report['unlisted_ids']:
            print(f"  WARN sources outside priority list: {', '.join(report['unlisted_ids'])}")

        healthy = report['source_count'] > 0
        print("\nOverall: " + ("healthy" if healthy else "unhealthy"))
        return 0 if healthy else 1

    def check_sources(self) -> Dict[str, Any]:
        """Compare the configured priority list with the catalog."""
        catalog = self.source_catalog
        configured = self.config.aggregation.source_priority
        priority = catalog.resolve_priority(configured)

        unlisted = []
        if configured and not self.config.aggregation.include_unlisted_sources:
            # These can never reach the result set once the cap is exceeded
            unlisted = [source_id for source_id in catalog.ids() if source_id not in priority]

        return {
            'source_count': len(catalog),
            'unknown_priority_ids': [source_id for source_id in priority if source_id not in catalog],
            'unlisted_ids': unlisted
        }
