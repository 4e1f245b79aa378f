"""Termination Coordinator - tree-kill plus consistent bookkeeping."""

import asyncio
import logging

from .process_registry import ProcessRegistry
from .process_table import BaseProcessTable
from ..core.exceptions import KillFailureError
from ..core.managed_process import ManagedProcess
from ..models import ProcessState


class TerminationCoordinator:
    """
    Terminates managed processes.

    A kill that fails is only logged: the handle is treated as terminated
    for bookkeeping either way, so terminate() never raises.
    """

    def __init__(self, process_table: BaseProcessTable, registry: ProcessRegistry):
        self._process_table = process_table
        self._registry = registry

    async def terminate(self, process: ManagedProcess) -> None:
        if process.state == ProcessState.EXITED:
            logging.debug(f"PID {process.pid} already terminated")
            return
        if process.state == ProcessState.TERMINATING:
            # Another caller owns the kill; finish together with it
            await process.wait_terminated()
            return
        process.state = ProcessState.TERMINATING

        try:
            await self._terminate(process)
        finally:
            process.mark_terminated()

    async def _terminate(self, process: ManagedProcess) -> None:
        # Stop polling first so a tick racing the kill cannot report not-found
        process.stop_liveness_timer()
        process.stop_stderr_drain()

        if process.is_resolved:
            try:
                await self._process_table.kill_tree(process.pid)
                logging.info(f"Terminated sshfs worker {process.pid} ({process.request.name})")
            except KillFailureError as e:
                logging.warning(str(e))
            except Exception as e:
                logging.warning(f"Unexpected error killing PID {process.pid}: {e}")

        removed = await self._registry.remove(process.pid)
        if removed is None:
            logging.debug(f"PID {process.pid} was not registered")

        process.state = ProcessState.EXITED
        await process.notify_exit()

    async def terminate_all(self) -> int:
        """Terminate every handle registered right now. Returns how many were terminated."""
        processes = await self._registry.snapshot()
        if not processes:
            return 0

        logging.info(f"Terminating {len(processes)} sshfs process(es)")
        await asyncio.gather(*(self.terminate(process) for process in processes))
        return len(processes)
