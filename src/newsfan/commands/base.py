#!/usr/bin/env python3
"""
Shared behaviour for CLI command groups.

A command group (``news``, ``sources``, ``health``) maps subcommand names to
methods and turns exceptions into process exit codes.
"""

import logging
from abc import ABC, abstractmethod
from argparse import Namespace
from typing import List

from ..core.container import CONFIG, CONFIG_MANAGER, NEWSAPI_CLIENT, SOURCE_CATALOG, get_container
from ..core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# sysexits.h EX_CONFIG
EXIT_CONFIG_ERROR = 78
# errno EINVAL
EXIT_INVALID_ARGUMENT = 22
EXIT_INTERRUPTED = 130


class BaseCommand(ABC):
    """
    Base class for command groups.

    Services come from the container passed in, or the process-wide one.
    """

    SUBCOMMANDS: tuple = ()

    def __init__(self, container=None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self._container = container or get_container()

    @property
    def config_manager(self):
        return self._container.get(CONFIG_MANAGER)

    @property
    def config(self):
        return self._container.get(CONFIG)

    @property
    def source_catalog(self):
        return self._container.get(SOURCE_CATALOG)

    def create_newsapi_client(self):
        """New NewsAPI client; use it as an async context manager."""
        return self._container.get(NEWSAPI_CLIENT)

    def execute(self, subcommand: str, args: Namespace) -> int:
        """
        Dispatch ``subcommand`` to the method of the same name.

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        if subcommand not in self.SUBCOMMANDS:
            available = ", ".join(self.get_available_subcommands())
            self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
            return 1

        try:
            return self.run(subcommand, args)
        except (Exception, KeyboardInterrupt) as e:
            return self.handle_error(e, f"{self.name} {subcommand}")

    @property
    def name(self) -> str:
        return self.__class__.__name__.replace('Command', '').lower()

    @abstractmethod
    def run(self, subcommand: str, args: Namespace) -> int:
        """Run a validated subcommand."""

    def get_available_subcommands(self) -> List[str]:
        return list(self.SUBCOMMANDS)

    def handle_error(self, error: BaseException, context: str = "") -> int:
        """
        Log ``error`` and pick the exit code for it.

        Configuration problems map to EX_CONFIG, bad ids or values to EINVAL.
        """
        error_msg = f"{context}: {error}" if context else str(error)

        if isinstance(error, ConfigurationError):
            self.logger.error(error_msg)
            return EXIT_CONFIG_ERROR
        if isinstance(error, KeyboardInterrupt):
            self.logger.info("Command interrupted by user")
            return EXIT_INTERRUPTED
        if isinstance(error, (KeyError, ValueError)):
            self.logger.error(error_msg)
            return EXIT_INVALID_ARGUMENT

        self.logger.error(error_msg, exc_info=True)
        return 1
