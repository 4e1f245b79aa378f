"""Liveness Monitor - periodic process-table polling for workers we do not own."""

import asyncio
import logging

from .process_table import BaseProcessTable, LivenessResult
from ..core.managed_process import ManagedProcess
from ..models import ProcessState


class LivenessMonitor:
    """
    One recurring check per managed process.

    The first confirmed absence (or enough consecutive inconclusive queries)
    stops the timer and delivers ``on_not_found`` exactly once. A stopped
    timer is never restarted.
    """

    def __init__(
        self,
        process_table: BaseProcessTable,
        interval_seconds: float = 5.0,
        max_inconclusive_checks: int = 3,
    ):
        self._process_table = process_table
        self._interval = interval_seconds
        self._max_inconclusive = max(1, max_inconclusive_checks)

    def start(self, process: ManagedProcess) -> asyncio.Task:
        """Start monitoring a registered handle."""
        if not process.is_resolved:
            raise ValueError("Cannot monitor a handle without a resolved worker PID")

        task = asyncio.create_task(
            self._monitoring_loop(process), name=f"sshfs-liveness-{process.pid}"
        )
        process.attach_liveness_task(task)
        process.state = ProcessState.RUNNING
        logging.debug(f"Liveness monitoring started for PID {process.pid} every {self._interval}s")
        return task

    def stop(self, process: ManagedProcess) -> bool:
        """Stop monitoring. Returns True if this call stopped the timer."""
        return process.stop_liveness_timer()

    async def _monitoring_loop(self, process: ManagedProcess) -> None:
        inconclusive = 0
        try:
            while process.liveness_timer_active:
                await asyncio.sleep(self._interval)

                result = await self._check(process.pid)

                if result == LivenessResult.ALIVE:
                    inconclusive = 0
                    continue

                if result == LivenessResult.INCONCLUSIVE:
                    inconclusive += 1
                    logging.debug(
                        f"Inconclusive liveness check for PID {process.pid} "
                        f"({inconclusive}/{self._max_inconclusive})"
                    )
                    if inconclusive < self._max_inconclusive:
                        continue

                await self._report_not_found(process)
                return

        except asyncio.CancelledError:
            logging.debug(f"Liveness monitoring cancelled for PID {process.pid}")

    async def _check(self, pid: int) -> LivenessResult:
        try:
            return await self._process_table.is_alive(pid)
        except Exception as e:
            logging.debug(f"Liveness check for PID {pid} raised: {e}")
            return LivenessResult.INCONCLUSIVE

    async def _report_not_found(self, process: ManagedProcess) -> None:
        # Termination may have stopped the timer while the query was in flight
        if not process.stop_liveness_timer():
            return

        process.state = ProcessState.NOT_FOUND
        logging.warning(f"sshfs worker {process.pid} ({process.request.name}) is no longer running")
        await process.notify_not_found()
