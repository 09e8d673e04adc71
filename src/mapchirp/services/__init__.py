"""Service container for dependency injection."""

from mapchirp.services.container import (
    ServiceConfig,
    ServiceContainer,
    cli_context,
    get_container,
    set_container,
)

__all__ = [
    "ServiceConfig",
    "ServiceContainer",
    "cli_context",
    "get_container",
    "set_container",
]
