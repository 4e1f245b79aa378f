"""Process table access - the OS command boundary (wmic, tasklist, taskkill)."""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..core.exceptions import KillFailureError


class LivenessResult(str, Enum):
    """Outcome of a single liveness query."""

    ALIVE = "alive"  # PID present in the process table
    ABSENT = "absent"  # Query succeeded, PID not present
    INCONCLUSIVE = "inconclusive"  # Query itself failed or timed out


@dataclass(frozen=True)
class CommandResult:
    returncode: Optional[int]  # None when the command timed out or could not start
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class BaseProcessTable(ABC):
    """Abstract access to the OS process table."""

    @abstractmethod
    async def query_child_processes(self, parent_pid: int) -> CommandResult:
        """Query sshfs processes whose parent is parent_pid. Output is 'ProcessId=<pid>' lines."""
        pass

    @abstractmethod
    async def is_alive(self, pid: int) -> LivenessResult:
        """Check whether pid is present in the process table."""
        pass

    @abstractmethod
    async def kill_tree(self, pid: int) -> None:
        """Forcibly kill pid and all its descendants. Raises KillFailureError."""
        pass

    @abstractmethod
    def get_platform_name(self) -> str:
        """Get platform name for logging."""
        pass


class WindowsProcessTable(BaseProcessTable):
    """Windows process table via wmic, tasklist and taskkill."""

    def __init__(self, process_name: str = "sshfs.exe", command_timeout: float = 10.0):
        super().__init__()
        self._process_name = process_name
        self._command_timeout = command_timeout

    async def query_child_processes(self, parent_pid: int) -> CommandResult:
        where = f"(name='{self._process_name}' and parentprocessid={parent_pid})"
        return await self._run("wmic", "process", "where", where, "get", "processid", "/value")

    async def is_alive(self, pid: int) -> LivenessResult:
        result = await self._run("tasklist", "/FI", f"PID eq {pid}")

        if not result.ok:
            logging.debug(f"Liveness query failed for PID {pid}: {result.stderr.strip() or result.returncode}")
            return LivenessResult.INCONCLUSIVE

        if re.search(rf"\b{pid}\b", result.stdout):
            return LivenessResult.ALIVE
        return LivenessResult.ABSENT

    async def kill_tree(self, pid: int) -> None:
        result = await self._run("taskkill", "/PID", str(pid), "/T", "/F")

        if not result.ok:
            output = (result.stderr or result.stdout).strip()
            raise KillFailureError(pid, output)

        logging.debug(f"Killed process tree for PID {pid}")

    def get_platform_name(self) -> str:
        return "Windows"

    async def _run(self, *cmd: str) -> CommandResult:
        """Run a command with a bounded timeout. Failures are returned, not raised."""
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logging.error(f"Could not run {cmd[0]}: {e}")
            return CommandResult(returncode=None, stderr=str(e))

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self._command_timeout
            )
        except asyncio.TimeoutError:
            logging.warning(f"{cmd[0]} timed out after {self._command_timeout}s")
            try:
                process.kill()
            except ProcessLookupError:
                pass
            await process.wait()
            return CommandResult(returncode=None, stderr=f"{cmd[0]} timed out")

        return CommandResult(
            returncode=process.returncode,
            stdout=stdout.decode(errors="replace") if stdout else "",
            stderr=stderr.decode(errors="replace") if stderr else "",
        )
