"""
In-process event bus for process lifecycle events.
"""
import asyncio
import logging
from collections import defaultdict
from typing import Awaitable, Callable, Dict, List, Type

from .process_events import ProcessEvent

# An event handler is an async function that takes a ProcessEvent and returns None
EventHandler = Callable[[ProcessEvent], Awaitable[None]]


class ProcessEventBus:
    """
    Asynchronous publish/subscribe bus keyed on the concrete event class.

    A failing handler is logged and never prevents the remaining handlers
    from running.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type[ProcessEvent], List[EventHandler]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def subscribe(self, event_type: Type[ProcessEvent], handler: EventHandler) -> None:
        """
        Subscribes a handler to a specific event type.

        Args:
            event_type: The event class to subscribe to.
            handler: The coroutine function called when such an event is published.
        """
        async with self._lock:
            self._handlers[event_type].append(handler)
            logging.debug(f"Handler {handler.__name__} subscribed to {event_type.__name__}")

    async def unsubscribe(self, event_type: Type[ProcessEvent], handler: EventHandler) -> bool:
        """Remove a handler. Returns False if it was not subscribed."""
        async with self._lock:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)
                return True
            return False

    async def publish(self, event: ProcessEvent) -> None:
        """
        Publishes an event to every handler subscribed to its exact type.

        Handlers run concurrently; exceptions are logged per handler.
        """
        event_type = type(event)
        async with self._lock:
            handlers = list(self._handlers.get(event_type, []))

        if not handlers:
            logging.debug(f"No handlers for event {event_type.__name__}")
            return

        logging.debug(f"Publishing {event_type.__name__} (PID {event.pid}) to {len(handlers)} handler(s)")

        await asyncio.gather(*(self._safe_execute(handler, event) for handler in handlers))

    async def _safe_execute(self, handler: EventHandler, event: ProcessEvent) -> None:
        try:
            await handler(event)
        except Exception as e:
            logging.error(
                f"Unhandled exception in handler '{handler.__name__}' for event "
                f"'{type(event).__name__}': {e}",
                exc_info=True
            )
