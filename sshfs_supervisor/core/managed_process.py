"""
Handle for one supervised sshfs worker process.

The same object is returned to the caller of ``spawn`` and held by the
registry for as long as the worker is managed.
"""

import asyncio
import logging
from datetime import datetime
from typing import List, Optional

from ..models import MountProcessInfo, MountRequest, ProcessState

# Sentinel for a worker PID that has not been resolved yet
UNRESOLVED_PID = 0


class ProcessListener:
    """
    Typed receiver for handle notifications.

    Subclasses override the notifications they care about; the defaults do nothing.
    """

    async def on_exit(self, process: "ManagedProcess") -> None:
        pass

    async def on_not_found(self, process: "ManagedProcess") -> None:
        pass


class ManagedProcess:
    def __init__(self, request: MountRequest, launcher_pid: Optional[int] = None):
        self.request = request
        self.launcher_pid = launcher_pid
        self.intermediate_pid = UNRESOLVED_PID
        self.state = ProcessState.PENDING
        self.started_at = datetime.now()

        self._pid = UNRESOLVED_PID
        self._listeners: List[ProcessListener] = []
        self._liveness_task: Optional[asyncio.Task] = None
        self._timer_stopped = False
        self._stderr_drain: Optional[asyncio.Task] = None
        self._terminated = asyncio.Event()

    def __repr__(self) -> str:
        return f"<ManagedProcess pid={self._pid} name={self.request.name!r} state={self.state.value}>"

    @property
    def pid(self) -> int:
        return self._pid

    @property
    def is_resolved(self) -> bool:
        return self._pid != UNRESOLVED_PID

    def set_pid(self, pid: int) -> None:
        """Set the resolved worker PID. May only happen once."""
        if self.is_resolved:
            raise RuntimeError(f"Worker PID already resolved to {self._pid}")
        if pid <= 0:
            raise ValueError(f"Invalid worker PID: {pid}")
        self._pid = pid

    def add_listener(self, listener: ProcessListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: ProcessListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # Liveness timer

    def attach_liveness_task(self, task: asyncio.Task) -> None:
        if self._liveness_task is not None:
            raise RuntimeError(f"Liveness timer already started for PID {self._pid}")
        self._liveness_task = task

    @property
    def liveness_timer_active(self) -> bool:
        return self._liveness_task is not None and not self._timer_stopped

    def stop_liveness_timer(self) -> bool:
        """
        Stop the liveness timer. Returns True only for the call that actually stopped it.

        Called from inside the timer task itself the task is left to return on its own.
        """
        if self._timer_stopped:
            return False
        self._timer_stopped = True

        task = self._liveness_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
        return True

    # Launcher stderr, inherited by the worker

    def attach_stderr_drain(self, task: asyncio.Task) -> None:
        self._stderr_drain = task

    def stop_stderr_drain(self) -> None:
        task = self._stderr_drain
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    # Termination

    def mark_terminated(self) -> None:
        """Release every caller waiting in wait_terminated()."""
        self._terminated.set()

    async def wait_terminated(self) -> None:
        await self._terminated.wait()

    # Notifications

    async def notify_exit(self) -> None:
        for listener in list(self._listeners):
            await self._deliver(listener.on_exit, "exit")

    async def notify_not_found(self) -> None:
        for listener in list(self._listeners):
            await self._deliver(listener.on_not_found, "notFound")

    async def _deliver(self, callback, notification: str) -> None:
        try:
            await callback(self)
        except Exception as e:
            logging.error(
                f"Listener failed handling '{notification}' for PID {self._pid}: {e}",
                exc_info=True,
            )

    def to_info(self) -> MountProcessInfo:
        return MountProcessInfo(
            pid=self._pid,
            name=self.request.name,
            endpoint=self.request.endpoint,
            mount_point=self.request.mount_point,
            state=self.state,
            started_at=self.started_at,
        )
