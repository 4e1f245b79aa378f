"""
Pytest configuration og shared fixtures.
"""

import asyncio
from typing import Dict, List, Set, Union

import pytest

from sshfs_supervisor.config import Settings
from sshfs_supervisor.core.exceptions import KillFailureError
from sshfs_supervisor.core.managed_process import ProcessListener
from sshfs_supervisor.dependencies import reset_singletons
from sshfs_supervisor.models import MountRequest
from sshfs_supervisor.services.process_table import (
    BaseProcessTable,
    CommandResult,
    LivenessResult,
)


class FakeProcessTable(BaseProcessTable):
    """
    In-memory process table.

    children maps a parent PID to either a child PID or a raw CommandResult.
    liveness maps a PID to a LivenessResult or a list of results consumed per
    check (the last entry repeats).
    """

    def __init__(self):
        self.children: Dict[int, Union[int, CommandResult]] = {}
        self.liveness: Dict[int, Union[LivenessResult, List[LivenessResult]]] = {}
        self.kill_failures: Set[int] = set()
        self.queries: List[int] = []
        self.alive_checks: List[int] = []
        self.killed: List[int] = []
        self.on_kill = None

    async def query_child_processes(self, parent_pid: int) -> CommandResult:
        self.queries.append(parent_pid)
        child = self.children.get(parent_pid)
        if child is None:
            return CommandResult(returncode=0, stdout="")
        if isinstance(child, CommandResult):
            return child
        return CommandResult(returncode=0, stdout=f"\r\r\n\r\r\nProcessId={child}\r\r\n\r\r\n\r\r\n")

    async def is_alive(self, pid: int) -> LivenessResult:
        self.alive_checks.append(pid)
        script = self.liveness.get(pid, LivenessResult.ALIVE)
        if isinstance(script, list):
            return script.pop(0) if len(script) > 1 else script[0]
        return script

    async def kill_tree(self, pid: int) -> None:
        self.killed.append(pid)
        await asyncio.sleep(0)
        if self.on_kill is not None:
            await self.on_kill(pid)
        if pid in self.kill_failures:
            raise KillFailureError(pid, f'ERROR: The process "{pid}" not found.')
        self.liveness[pid] = LivenessResult.ABSENT

    def get_platform_name(self) -> str:
        return "Fake"


@pytest.fixture(autouse=True)
def clean_singletons():
    """Automatically reset singletons before hver test."""
    reset_singletons()
    yield
    reset_singletons()


@pytest.fixture
def process_table():
    return FakeProcessTable()


@pytest.fixture
def sshfs_binary(tmp_path):
    binary = tmp_path / "sshfs.exe"
    binary.write_bytes(b"")
    return binary


@pytest.fixture
def settings(sshfs_binary, tmp_path):
    return Settings(
        sshfs_binary=str(sshfs_binary),
        process_monitoring_interval_seconds=60.0,
        spawn_timeout_seconds=2.0,
        log_file_path=str(tmp_path / "logs" / "test.log"),
    )


@pytest.fixture
def password_request():
    return MountRequest(
        user="bob",
        host="h",
        folder="/x",
        mount_point="Z:",
        port=22,
        name="Share",
        auth_type="password",
        password="p",
    )


class RecordingListener(ProcessListener):
    """Records every notification a handle delivers."""

    def __init__(self):
        self.calls = []

    async def on_exit(self, process):
        self.calls.append(("exit", process.pid))

    async def on_not_found(self, process):
        self.calls.append(("notFound", process.pid))


@pytest.fixture
def listener():
    return RecordingListener()
