"""Write events and the bus that carries them.

A successful write publishes one event tagged with the scopes it affects.
Subscribers decide what to do with it; publishers never reach into caches
themselves.
"""

from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import Any

import logfire

from discuss.domain.model import RawComment
from discuss.domain.value import CommentId, Scope
from discuss.domain.value.common import ValueObject


class CommentEvent(ValueObject):
    """Base class for write events."""

    scope: Scope
    comment_id: CommentId

    @property
    def affected(self) -> tuple[Scope, ...]:
        """Scopes whose cached views this write makes stale."""
        return self.scope.affected_scopes()


class CommentPosted(CommentEvent):
    """A comment or reply was created."""

    comment: RawComment


class CommentEdited(CommentEvent):
    """A comment's content was replaced."""

    comment: RawComment


class CommentDeleted(CommentEvent):
    """A comment was deleted."""

    pass


Handler = Callable[[CommentEvent], Awaitable[Any]]


class EventBus:
    """In-process topic bus keyed by event type.

    Handlers subscribed to a base class receive every subclass event.
    Delivery is sequential, in subscription order.
    """

    def __init__(self) -> None:
        self._handlers: dict[type[CommentEvent], list[Handler]] = defaultdict(list)

    def subscribe(
        self, event_type: type[CommentEvent], handler: Handler
    ) -> Callable[[], None]:
        """Register a handler.

        Args:
            event_type: Event class to listen for (subclasses included)
            handler: Coroutine function called with each event

        Returns:
            Callable that removes the subscription
        """
        self._handlers[event_type].append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    async def publish(self, event: CommentEvent) -> list[Any]:
        """Deliver an event to every matching handler.

        A failing handler does not stop delivery to the others, and never
        turns the write that produced the event into a failure: its
        exception is logged and returned in place of a result.

        Args:
            event: Event to deliver

        Returns:
            One result per handler, in delivery order
        """
        handlers = [
            handler
            for event_type in type(event).__mro__
            for handler in list(self._handlers.get(event_type, []))
        ]
        results: list[Any] = []
        with logfire.span(
            "event_bus.publish",
            event=type(event).__name__,
            scope=str(event.scope),
            handlers=len(handlers),
        ):
            for handler in handlers:
                try:
                    results.append(await handler(event))
                except Exception as exc:
                    logfire.error(
                        "Event handler failed",
                        event=type(event).__name__,
                        error=str(exc),
                        error_type=type(exc).__name__,
                        _exc_info=True,
                    )
                    results.append(exc)
        return results

    def clear(self) -> None:
        """Drop every subscription."""
        self._handlers.clear()
