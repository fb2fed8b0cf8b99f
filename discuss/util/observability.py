"""Observability configuration using Logfire.

Usage:
    import logfire

    logfire.info("Comment posted", comment_id=comment.id, scope=str(scope))

    with logfire.span("scope_aggregator.fetch", scope=str(scope)):
        ...
"""

import logfire

from discuss.config import ObservabilitySettings, Settings

SERVICE_NAME = "discuss-comments"
SERVICE_VERSION = "0.1.0"


def sends_to_logfire(settings: ObservabilitySettings) -> bool:
    """Whether telemetry leaves the process.

    An explicit ``send_to_logfire`` wins; otherwise a token turns sending on.
    """
    if settings.send_to_logfire is not None:
        return settings.send_to_logfire
    return bool(settings.logfire_token)


def configure_logfire(settings: Settings) -> None:
    """Configure Logfire for the session.

    Without a token or an explicit opt-in, spans and events only reach the
    console.

    Args:
        settings: Application settings
    """
    observability = settings.observability
    send = sends_to_logfire(observability)

    logfire.configure(
        service_name=SERVICE_NAME,
        service_version=SERVICE_VERSION,
        environment=settings.environment,
        send_to_logfire=send,
        token=observability.logfire_token or None,
        console=logfire.ConsoleOptions(
            colors="auto",
            span_style="show-parents",
            include_timestamps=True,
            verbose=settings.debug,
        ),
    )

    logfire.info(
        "Observability configured",
        environment=settings.environment,
        send_to_logfire=send,
        has_token=bool(observability.logfire_token),
    )


def instrument_httpx() -> None:
    """Trace every request made to the comment store.

    Must run after ``configure_logfire``.
    """
    logfire.instrument_httpx()
    logfire.info("httpx instrumented")
