#!/usr/bin/env python3
"""
Service container for the news aggregator.

Commands look up the configuration, the source catalog and NewsAPI clients
by name instead of constructing them, so tests can swap any of them out.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional, Set

logger = logging.getLogger(__name__)

CONFIG_MANAGER = 'config_manager'
CONFIG = 'config'
SOURCE_CATALOG = 'source_catalog'
NEWSAPI_CLIENT = 'newsapi_client'


class Container:
    """Named services, each either shared (built once) or built per lookup."""

    def __init__(self):
        self._providers: Dict[str, Callable[[], Any]] = {}
        self._shared: Set[str] = set()
        self._instances: Dict[str, Any] = {}
        self._lock = threading.RLock()

    def register_singleton(self, service_name: str, provider: Callable[[], Any]) -> None:
        """Register a provider whose result is cached after the first lookup."""
        with self._lock:
            self._providers[service_name] = provider
            self._shared.add(service_name)
            self._instances.pop(service_name, None)

    def register_factory(self, service_name: str, provider: Callable[[], Any]) -> None:
        """Register a provider called on every lookup."""
        with self._lock:
            self._providers[service_name] = provider
            self._shared.discard(service_name)
            self._instances.pop(service_name, None)

    def register_instance(self, service_name: str, instance: Any) -> None:
        with self._lock:
            self._instances[service_name] = instance

    def get(self, service_name: str) -> Any:
        """
        Look up a service.

        Raises:
            KeyError: If nothing is registered under ``service_name``
        """
        with self._lock:
            if service_name in self._instances:
                return self._instances[service_name]

            provider = self._providers.get(service_name)
            if provider is None:
                raise KeyError(f"Service '{service_name}' not registered")

            instance = provider()
            if service_name in self._shared:
                self._instances[service_name] = instance
                logger.debug(f"Built shared '{service_name}'")
            return instance

    def has(self, service_name: str) -> bool:
        return service_name in self._providers or service_name in self._instances

    @contextmanager
    def override(self, service_name: str, instance: Any) -> Iterator[Any]:
        """Temporarily replace a service with a fixed instance."""
        with self._lock:
            missing = object()
            previous = self._instances.get(service_name, missing)
            self._instances[service_name] = instance
        try:
            yield instance
        finally:
            with self._lock:
                if previous is missing:
                    self._instances.pop(service_name, None)
                else:
                    self._instances[service_name] = previous

    def clear(self) -> None:
        with self._lock:
            self._providers.clear()
            self._shared.clear()
            self._instances.clear()


def build_container(config_manager=None) -> Container:
    """
    Wire the default news services.

    Args:
        config_manager: ConfigManager to use (process-wide one if None)
    """
    container = Container()

    def provide_config_manager():
        from .config import get_config_manager
        return config_manager or get_config_manager()

    def provide_config():
        return container.get(CONFIG_MANAGER).get_config()

    def provide_source_catalog():
        from .sources.catalog import SourceCatalog
        # Catalog inspection must not require the credential
        return SourceCatalog.from_file(container.get(CONFIG_MANAGER).get_aggregation_config().sources_file)

    def provide_newsapi_client():
        from .newsapi_client import NewsApiClient
        newsapi = container.get(CONFIG).newsapi
        return NewsApiClient(
            api_key=newsapi.api_key,
            base_url=newsapi.base_url,
            timeout=newsapi.request_timeout,
            user_agent=newsapi.user_agent
        )

    container.register_singleton(CONFIG_MANAGER, provide_config_manager)
    container.register_singleton(CONFIG, provide_config)
    container.register_singleton(SOURCE_CATALOG, provide_source_catalog)
    # A client owns an aiohttp session bound to one event loop
    container.register_factory(NEWSAPI_CLIENT, provide_newsapi_client)

    return container


_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Process-wide container with the default services."""
    global _container
    if _container is None:
        with _container_lock:
            if _container is None:
                _container = build_container()
    return _container


def reset_container() -> None:
    global _container
    with _container_lock:
        if _container:
            _container.clear()
        _container = None
