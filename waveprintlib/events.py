from __future__ import annotations

from typing import Any, Callable


class EventBus:
    """Minimal publish/subscribe bus for pipeline progress and conditions.

    Handlers run synchronously, in subscription order, on the emitting
    call.  Known events:

    ``extract.complete``          summary
    ``summary.saved``             path
    ``render.insufficient_data``  columns_drawn, image_width
    ``render.complete``           path, result
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Callable[..., Any]]] = {}

    def subscribe(self, event_type: str, handler: Callable[..., Any]) -> None:
        """Register a handler for an event type."""
        self._handlers.setdefault(event_type, []).append(handler)

    def unsubscribe(self, event_type: str, handler: Callable[..., Any]) -> None:
        """Remove a handler."""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event_type: str, **data: Any) -> None:
        """Fire all handlers for an event type."""
        for handler in list(self._handlers.get(event_type, [])):
            handler(**data)
