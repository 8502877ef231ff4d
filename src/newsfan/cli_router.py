#!/usr/bin/env python3
"""
Command line entry point.

Parses ``<command> <subcommand> [options]`` and hands the parsed arguments
to the matching command group.
"""

import argparse
import logging
import sys
from typing import Dict, List, Optional

from .commands import get_command
from .core.config import get_config_manager
from .core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

EXAMPLES = """
Examples:
  newsfan news search election
  newsfan news search "climate summit" --cap 5 --json
  newsfan news search election --sources bbc-news reuters --verbose

  newsfan sources list
  newsfan health check
"""


def enable_debug_logging() -> None:
    """Lower the root logger and its handlers, which update_logging() pins to LOG_LEVEL."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in root.handlers:
        handler.setLevel(logging.DEBUG)


class CLIRouter:
    """Builds the argument parser and routes invocations to command groups."""

    def __init__(self, container=None):
        self._container = container
        self._group_parsers: Dict[str, argparse.ArgumentParser] = {}
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog='newsfan',
            description="Search NewsAPI sources for a phrase in parallel",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=EXAMPLES
        )
        groups = parser.add_subparsers(dest='command', metavar='{command}', help='Available commands')

        news = self._add_group(groups, 'news', 'Search news sources for a phrase')
        search = news.add_parser('search', help='Search every configured source for a phrase')
        search.add_argument('phrase', nargs='+', help='Search phrase (words are joined with spaces)')
        search.add_argument('--cap', type=int, default=None,
                            help='Maximum articles to return (default: NEWS_MAX_ARTICLES)')
        search.add_argument('--sources', nargs='+', default=None, metavar='ID',
                            help='Only query these source ids')
        search.add_argument('--json', action='store_true', help='Print results as JSON')
        search.add_argument('--verbose', action='store_true', help='Debug logging')

        sources = self._add_group(groups, 'sources', 'Source catalog operations')
        listing = sources.add_parser('list', help='List sources in priority order')
        listing.add_argument('--json', action='store_true', help='Print as JSON')

        health = self._add_group(groups, 'health', 'Configuration health checks')
        health.add_parser('check', help='Validate configuration and the source catalog')

        return parser

    def _add_group(self, groups, name: str, help_text: str):
        group_parser = groups.add_parser(name, help=help_text)
        self._group_parsers[name] = group_parser
        return group_parser.add_subparsers(dest='subcommand', metavar='{subcommand}')

    def route_command(self, args: Optional[List[str]] = None) -> int:
        """
        Parse ``args`` (``sys.argv[1:]`` if None) and run the command.

        Returns:
            Exit code
        """
        try:
            parsed_args = self.parser.parse_args(sys.argv[1:] if args is None else args)
        except SystemExit as e:
            # argparse exits on --help and on usage errors
            return e.code if isinstance(e.code, int) else 0

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        if not getattr(parsed_args, 'subcommand', None):
            logger.error(f"No subcommand specified for '{parsed_args.command}'")
            self._group_parsers[parsed_args.command].print_help()
            return 1

        if getattr(parsed_args, 'verbose', False):
            enable_debug_logging()

        logger.debug(f"Routing {parsed_args.command} {parsed_args.subcommand}")
        command = get_command(parsed_args.command, self._container)
        return command.execute(parsed_args.subcommand, parsed_args)


def main(args: Optional[List[str]] = None) -> int:
    """Console script entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        get_config_manager().update_logging()
    except ConfigurationError as e:
        # The command that needs the configuration reports it
        logger.debug(f"Using default logging: {e}")

    return CLIRouter().route_command(args)


if __name__ == '__main__':
    sys.exit(main())
