"""PID Resolver - one hop from a known parent PID to its sshfs child."""

import logging

from .process_table import BaseProcessTable
from ..core.exceptions import ProcessNotFoundError
from ..core.managed_process import UNRESOLVED_PID


class PidResolver:
    """Resolves the single sshfs child process of a given parent."""

    def __init__(self, process_table: BaseProcessTable):
        self._process_table = process_table

    async def resolve(self, parent_pid: int) -> int:
        """
        Return the PID of the sshfs process whose parent is parent_pid.

        Raises:
            ProcessNotFoundError: the query failed, found nothing, or returned
                output that does not parse as 'ProcessId=<int>'.
        """
        if parent_pid is None or parent_pid == UNRESOLVED_PID:
            raise ProcessNotFoundError(
                "Cannot resolve a child of an unresolved parent", parent_pid=parent_pid
            )

        result = await self._process_table.query_child_processes(parent_pid)
        if not result.ok:
            logging.debug(
                f"Process query for parent {parent_pid} failed: "
                f"{result.stderr.strip() or result.returncode}"
            )
            raise ProcessNotFoundError("Process not found", parent_pid=parent_pid)

        pid = self.parse_pid(result.stdout)
        if pid is None:
            logging.debug(f"No sshfs child found for parent {parent_pid}: {result.stdout.strip()!r}")
            raise ProcessNotFoundError("Process not found", parent_pid=parent_pid)

        logging.debug(f"Resolved sshfs child {pid} of parent {parent_pid}")
        return pid

    @staticmethod
    def parse_pid(output: str):
        """Parse the first 'key=value' line of a process query. None if absent or malformed."""
        lines = [line.strip() for line in output.splitlines() if line.strip()]
        if not lines:
            return None

        key, sep, value = lines[0].partition("=")
        if not sep:
            return None

        try:
            pid = int(value.strip())
        except ValueError:
            return None

        return pid if pid > 0 else None
