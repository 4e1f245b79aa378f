from ..managed_process import ManagedProcess, ProcessListener
from .event_bus import ProcessEventBus
from .process_events import ProcessExitedEvent, ProcessNotFoundEvent


class EventBusProcessListener(ProcessListener):
    """Forwards handle notifications to the application-wide event bus."""

    def __init__(self, event_bus: ProcessEventBus):
        self._event_bus = event_bus

    async def on_exit(self, process: ManagedProcess) -> None:
        await self._event_bus.publish(ProcessExitedEvent(pid=process.pid, name=process.request.name))

    async def on_not_found(self, process: ManagedProcess) -> None:
        await self._event_bus.publish(ProcessNotFoundEvent(pid=process.pid, name=process.request.name))
