"""In-process publish/subscribe hub."""

import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from mediaflowz.events.models import EventName
from mediaflowz.logging.logger import Log

Listener = Callable[[Any], Awaitable[None] | None]


class Subscription:
    """Handle returned by EventBus.subscribe; disposing it unregisters the listener.

    Usable as a context manager. Disposing twice is a no-op.
    """

    def __init__(self, bus: "EventBus", event: EventName, listener: Listener) -> None:
        self._bus = bus
        self.event = event
        self.listener = listener
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def dispose(self) -> None:
        if not self._active:
            return
        self._active = False
        self._bus._remove(self.event, self.listener)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()


class EventBus:
    """Fan-out of typed events to sync or async listeners.

    Listeners run in registration order. A failing listener is logged and does
    not prevent the remaining listeners from running.
    """

    def __init__(self) -> None:
        self._listeners: dict[EventName, list[Listener]] = {}

    def subscribe(self, event: EventName, listener: Listener) -> Subscription:
        self._listeners.setdefault(event, []).append(listener)
        return Subscription(self, event, listener)

    def once(self, event: EventName, listener: Listener) -> Subscription:
        """Subscribe a listener that is removed after its first call."""
        subscription: Subscription

        async def _once(payload: Any) -> None:
            subscription.dispose()
            result = listener(payload)
            if inspect.isawaitable(result):
                await result

        subscription = self.subscribe(event, _once)
        return subscription

    async def emit(self, event: EventName, payload: Any) -> None:
        for listener in list(self._listeners.get(event, [])):
            try:
                result = listener(payload)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                Log.exception(f"Error in event listener for {event.value}: {exc}")

    def listener_count(self, event: EventName) -> int:
        return len(self._listeners.get(event, []))

    def _remove(self, event: EventName, listener: Listener) -> None:
        listeners = self._listeners.get(event)
        if not listeners:
            return
        if listener in listeners:
            listeners.remove(listener)
        if not listeners:
            del self._listeners[event]
