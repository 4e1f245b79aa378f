from .event_bus import ProcessEventBus
from .process_events import (
    ProcessEvent,
    ProcessExitedEvent,
    ProcessNotFoundEvent,
    ProcessSpawnedEvent,
)
from .process_listener import EventBusProcessListener

__all__ = [
    "ProcessEventBus",
    "ProcessEvent",
    "ProcessExitedEvent",
    "ProcessNotFoundEvent",
    "ProcessSpawnedEvent",
    "EventBusProcessListener",
]
