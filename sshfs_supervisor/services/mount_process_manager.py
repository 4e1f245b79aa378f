"""Mount Process Manager - orchestrates spawn, monitoring and termination of sshfs helpers."""

import logging
from typing import List, Optional

from .liveness_monitor import LivenessMonitor
from .pid_resolver import PidResolver
from .process_registry import ProcessRegistry
from .process_table import BaseProcessTable, WindowsProcessTable
from .spawner import MountSpawner
from .termination import TerminationCoordinator
from ..config import Settings
from ..core.events.event_bus import ProcessEventBus
from ..core.events.process_events import ProcessSpawnedEvent
from ..core.events.process_listener import EventBusProcessListener
from ..core.managed_process import ManagedProcess, ProcessListener
from ..models import MountProcessInfo, MountRequest


class MountProcessManager:
    """Single entry point for callers: spawn, terminate, terminate_all and listing."""

    def __init__(
        self,
        settings: Settings,
        event_bus: Optional[ProcessEventBus] = None,
        process_table: Optional[BaseProcessTable] = None,
    ):
        self._event_bus = event_bus
        self._process_table = process_table or WindowsProcessTable(
            process_name=settings.sshfs_process_name,
            command_timeout=settings.command_timeout_seconds,
        )

        self._registry = ProcessRegistry()
        self._resolver = PidResolver(self._process_table)
        self._monitor = LivenessMonitor(
            self._process_table,
            interval_seconds=settings.process_monitoring_interval_seconds,
            max_inconclusive_checks=settings.liveness_max_inconclusive_checks,
        )
        self._spawner = MountSpawner(
            settings,
            self._process_table,
            self._resolver,
            self._registry,
            self._monitor,
        )
        self._terminator = TerminationCoordinator(self._process_table, self._registry)
        self._bus_listener = EventBusProcessListener(event_bus) if event_bus else None

        logging.info(f"Initialized {self._process_table.get_platform_name()} mount process manager")

    @property
    def registry(self) -> ProcessRegistry:
        return self._registry

    async def spawn(
        self, request: MountRequest, listener: Optional[ProcessListener] = None
    ) -> ManagedProcess:
        """
        Spawn sshfs for the request.

        The listener is attached before the handle is returned, so a worker
        that vanishes right away still reaches it.
        """
        process = await self._spawner.spawn(request)

        if listener is not None:
            process.add_listener(listener)

        if self._bus_listener is not None:
            process.add_listener(self._bus_listener)
            await self._event_bus.publish(
                ProcessSpawnedEvent(pid=process.pid, name=request.name, mount_point=request.mount_point)
            )
        return process

    async def terminate(self, process: ManagedProcess) -> None:
        await self._terminator.terminate(process)

    async def terminate_pid(self, pid: int) -> bool:
        """Terminate the registered handle with this PID. False if none is registered."""
        process = await self._registry.get(pid)
        if process is None:
            return False
        await self._terminator.terminate(process)
        return True

    async def terminate_all(self) -> int:
        return await self._terminator.terminate_all()

    async def get_process(self, pid: int) -> Optional[ManagedProcess]:
        return await self._registry.get(pid)

    async def list_processes(self) -> List[MountProcessInfo]:
        return [process.to_info() for process in await self._registry.snapshot()]
