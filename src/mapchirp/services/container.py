"""Centralized service container for dependency injection."""

from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from config import ConfigurationSet

    from mapchirp.cache.location_cache import LocationCache
    from mapchirp.cache.protocol import KeyValueStore
    from mapchirp.cache.sweeper import EvictionSweeper
    from mapchirp.credentials import CredentialHolder
    from mapchirp.fetcher import ProfileFetcher
    from mapchirp.messaging import MessageRouter
    from mapchirp.relay import PageRelay, RelayReceiver
    from mapchirp.services.resolution import ResolutionService

logger = logging.getLogger(__name__)


@dataclass
class ServiceConfig:
    """Configuration options for service creation.

    Attributes:
        db_path: Override the store location from the config file.
        coalesce: Override whether concurrent misses share one fetch.
    """

    db_path: Path | None = None
    coalesce: bool | None = None


class ServiceContainer:
    """Lazily-initialized container for service dependencies.

    Supports explicit injection for testing via constructor parameters.
    When dependencies are not provided, they are created on first access
    using the default implementations.
    """

    def __init__(
        self,
        config: ServiceConfig | None = None,
        *,
        store: KeyValueStore | None = None,
        fetcher: ProfileFetcher | None = None,
        app_config: ConfigurationSet | None = None,
    ) -> None:
        self._config = config or ServiceConfig()
        self._store = store
        self._fetcher = fetcher
        self._app_config = app_config

    @property
    def config(self) -> ServiceConfig:
        return self._config

    @cached_property
    def app_config(self) -> ConfigurationSet:
        if self._app_config is not None:
            return self._app_config
        from mapchirp.config import create_config

        return create_config()

    @cached_property
    def store(self) -> KeyValueStore:
        if self._store is not None:
            return self._store
        from mapchirp.cache.sqlite_store import SqliteKeyValueStore
        from mapchirp.config import db_path

        path = self._config.db_path or db_path(self.app_config)
        logger.debug("Using store at %s", path)
        return SqliteKeyValueStore(path)

    @cached_property
    def ttl_seconds(self) -> float:
        from mapchirp.config import ttl_seconds

        return ttl_seconds(self.app_config)

    @cached_property
    def location_cache(self) -> LocationCache:
        from mapchirp.cache.location_cache import LocationCache

        return LocationCache(self.store, ttl_seconds=self.ttl_seconds)

    @cached_property
    def sweeper(self) -> EvictionSweeper:
        from mapchirp.cache.sweeper import EvictionSweeper
        from mapchirp.config import sweep_interval_seconds

        return EvictionSweeper(
            self.store,
            ttl_seconds=self.ttl_seconds,
            interval_seconds=sweep_interval_seconds(self.app_config),
        )

    @cached_property
    def credentials(self) -> CredentialHolder:
        from mapchirp.credentials import CredentialHolder

        return CredentialHolder(self.store)

    @cached_property
    def fetcher(self) -> ProfileFetcher:
        if self._fetcher is not None:
            return self._fetcher
        from mapchirp.fetcher import ProfileFetcher

        cfg = self.app_config
        return ProfileFetcher(
            base_url=str(cfg["fetcher.base_url"]),
            user_agent=str(cfg["fetcher.user_agent"]),
            timeout_seconds=float(str(cfg["fetcher.timeout_seconds"])),
        )

    @cached_property
    def resolver(self) -> ResolutionService:
        from mapchirp.config import coalesce_enabled
        from mapchirp.services.resolution import ResolutionService

        coalesce = self._config.coalesce
        if coalesce is None:
            coalesce = coalesce_enabled(self.app_config)
        return ResolutionService(self.location_cache, self.fetcher, coalesce=coalesce)

    @cached_property
    def router(self) -> MessageRouter:
        from mapchirp.messaging import MessageRouter

        return MessageRouter(self.resolver)

    @cached_property
    def relay(self) -> PageRelay:
        from mapchirp.relay import PageRelay

        return PageRelay()

    @cached_property
    def relay_receiver(self) -> RelayReceiver:
        from mapchirp.relay import RelayReceiver

        return RelayReceiver(self.credentials, self.location_cache)


_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the global service container, creating one if needed."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def set_container(container: ServiceContainer | None) -> None:
    """Set or reset the global service container.

    Pass None to reset, which will cause get_container() to create
    a fresh container on next access.
    """
    global _container
    _container = container


@contextmanager
def cli_context(db_path: Path | None = None, coalesce: bool | None = None) -> Generator[ServiceContainer]:
    """Install a container built from CLI overrides for the duration of a command.

    If a container is already set (e.g., by tests), it is used unchanged and
    left in place on exit.
    """
    if _container is not None:
        yield _container
        return

    container = ServiceContainer(ServiceConfig(db_path=db_path, coalesce=coalesce))
    set_container(container)
    try:
        yield container
    finally:
        set_container(None)
