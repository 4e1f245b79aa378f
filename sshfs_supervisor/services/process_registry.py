"""
Process Registry - the owned collection of managed sshfs processes.
"""

import asyncio
import logging
from typing import List, Optional

from ..core.exceptions import ProcessAlreadyRegisteredError
from ..core.managed_process import ManagedProcess


class ProcessRegistry:
    """
    Ordered, lock-guarded collection of ManagedProcess handles keyed by resolved PID.

    Handles are added only once their worker PID is resolved and removed only
    by the termination coordinator.
    """

    def __init__(self):
        self._processes: List[ManagedProcess] = []
        self._lock = asyncio.Lock()
        logging.info("ProcessRegistry initialized")

    async def add(self, process: ManagedProcess) -> None:
        """Register a resolved handle. Raises ProcessAlreadyRegisteredError on a duplicate PID."""
        if not process.is_resolved:
            raise ValueError("Only handles with a resolved worker PID can be registered")

        async with self._lock:
            if any(p.pid == process.pid for p in self._processes):
                raise ProcessAlreadyRegisteredError(process.pid)
            self._processes.append(process)

        logging.debug(f"Registered sshfs worker {process.pid} ({process.request.name})")

    async def remove(self, pid: int) -> Optional[ManagedProcess]:
        """Remove the handle with this PID. Returns None if it was not registered."""
        async with self._lock:
            for index, process in enumerate(self._processes):
                if process.pid == pid:
                    return self._processes.pop(index)
            return None

    async def get(self, pid: int) -> Optional[ManagedProcess]:
        async with self._lock:
            return next((p for p in self._processes if p.pid == pid), None)

    async def snapshot(self) -> List[ManagedProcess]:
        """Copy of the currently registered handles, in registration order."""
        async with self._lock:
            return list(self._processes)

    async def count(self) -> int:
        async with self._lock:
            return len(self._processes)
