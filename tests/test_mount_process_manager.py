"""
Tests for MountProcessManager wiring and event publication.
"""

import asyncio
import logging
from unittest.mock import Mock, AsyncMock, patch

import pytest

from sshfs_supervisor.core.events.event_bus import ProcessEventBus
from sshfs_supervisor.core.events.process_events import (
    ProcessExitedEvent,
    ProcessNotFoundEvent,
    ProcessSpawnedEvent,
)
from sshfs_supervisor.models import ProcessState
from sshfs_supervisor.services.mount_process_manager import MountProcessManager
from sshfs_supervisor.services.process_table import LivenessResult, WindowsProcessTable


def _launcher(pid):
    launcher = Mock()
    launcher.pid = pid
    launcher.returncode = 0
    launcher.stdin = Mock()
    launcher.stdin.drain = AsyncMock()
    launcher.stderr = asyncio.StreamReader()
    launcher.stderr.feed_eof()
    launcher.wait = AsyncMock(return_value=0)
    return launcher


@pytest.fixture
def event_bus():
    return ProcessEventBus()


@pytest.fixture
def manager(settings, event_bus, process_table):
    process_table.children.update({100: 200, 200: 300})
    return MountProcessManager(settings, event_bus=event_bus, process_table=process_table)


async def _record(event_bus, *event_types):
    received = []

    async def handler(event):
        received.append(event)

    for event_type in event_types:
        await event_bus.subscribe(event_type, handler)
    return received


@pytest.mark.asyncio
async def test_defaults_to_windows_process_table(settings):
    manager = MountProcessManager(settings)
    assert isinstance(manager._process_table, WindowsProcessTable)


@pytest.mark.asyncio
async def test_initialization_logged_through_root_logger(settings, process_table, caplog):
    with caplog.at_level(logging.INFO):
        MountProcessManager(settings, process_table=process_table)

    records = [r for r in caplog.records if "mount process manager" in r.getMessage()]
    assert records
    assert records[0].name == "root"
    assert "Initialized Fake mount process manager" in records[0].getMessage()


@pytest.mark.asyncio
async def test_spawn_publishes_and_terminate_publishes(manager, event_bus, password_request, listener):
    received = await _record(event_bus, ProcessSpawnedEvent, ProcessExitedEvent)

    with patch("asyncio.create_subprocess_exec", new=AsyncMock(return_value=_launcher(100))):
        process = await manager.spawn(password_request, listener=listener)

    assert [type(e) for e in received] == [ProcessSpawnedEvent]
    assert received[0].pid == 300
    assert received[0].mount_point == "Z:"

    await manager.terminate(process)

    assert [type(e) for e in received] == [ProcessSpawnedEvent, ProcessExitedEvent]
    assert listener.calls == [("exit", 300)]
    assert await manager.list_processes() == []


@pytest.mark.asyncio
async def test_not_found_is_forwarded_to_bus(settings, event_bus, process_table, password_request):
    settings.process_monitoring_interval_seconds = 0.01
    process_table.children.update({100: 200, 200: 300})
    process_table.liveness[300] = LivenessResult.ABSENT
    manager = MountProcessManager(settings, event_bus=event_bus, process_table=process_table)
    received = await _record(event_bus, ProcessNotFoundEvent)

    with patch("asyncio.create_subprocess_exec", new=AsyncMock(return_value=_launcher(100))):
        process = await manager.spawn(password_request)

    await asyncio.wait_for(process._liveness_task, timeout=1.0)

    assert len(received) == 1
    assert received[0].pid == 300
    assert received[0].name == "Share"
    assert process.state == ProcessState.NOT_FOUND
    # Still registered until terminated
    assert await manager.get_process(300) is process


@pytest.mark.asyncio
async def test_list_and_terminate_by_pid(manager, password_request):
    with patch("asyncio.create_subprocess_exec", new=AsyncMock(return_value=_launcher(100))):
        await manager.spawn(password_request)

    infos = await manager.list_processes()
    assert [(i.pid, i.name, i.state) for i in infos] == [(300, "Share", ProcessState.RUNNING)]

    assert await manager.terminate_pid(999) is False
    assert await manager.terminate_pid(300) is True
    assert await manager.terminate_all() == 0
