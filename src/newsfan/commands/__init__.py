#!/usr/bin/env python3
"""
CLI command groups: ``news``, ``sources`` and ``health``.
"""

from typing import Dict, Type
from .base import BaseCommand
from .news import NewsCommand
from .sources import SourcesCommand
from .health import HealthCommand

COMMANDS: Dict[str, Type[BaseCommand]] = {
    'news': NewsCommand,
    'sources': SourcesCommand,
    'health': HealthCommand,
}


def get_command(command_name: str, container=None) -> BaseCommand:
    """
    Instantiate the command group registered under ``command_name``.

    Raises:
        ValueError: If no such group exists
    """
    try:
        command_class = COMMANDS[command_name]
    except KeyError:
        available = ', '.join(COMMANDS)
        raise ValueError(f"Unknown command '{command_name}'. Available: {available}") from None
    return command_class(container)
