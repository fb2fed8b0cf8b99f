"""Dependency injection container."""

from dishka import AsyncContainer, make_async_container

from discuss.config import Settings
from discuss.util.di import PROVIDERS, get_provider
from discuss.util.logging import setup_logging
from discuss.util.observability import configure_logfire, instrument_httpx


def create_container() -> AsyncContainer:
    """Build production container (all prod implementations).

    One container is one session: it owns the page cache, the event bus
    and the HTTP client, and releases them when closed.

    Settings are loaded from environment variables automatically.

    Returns:
        Configured DI container with production providers
    """
    provider_instances = [get_provider(base, use_mock=False)() for base in PROVIDERS]
    return make_async_container(*provider_instances)


def bootstrap(settings: Settings | None = None) -> AsyncContainer:
    """Configure logging and tracing, then build the production container.

    Args:
        settings: Settings to configure observability with; loaded from the
            environment when omitted

    Returns:
        Configured DI container
    """
    settings = settings or Settings()
    setup_logging(settings)
    configure_logfire(settings)
    # Logfire must be configured before instrumentation
    instrument_httpx()
    return create_container()
