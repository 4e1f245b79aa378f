"""
Tests for PidResolver.
"""

import pytest

from sshfs_supervisor.core.exceptions import ProcessNotFoundError
from sshfs_supervisor.core.managed_process import UNRESOLVED_PID
from sshfs_supervisor.services.pid_resolver import PidResolver
from sshfs_supervisor.services.process_table import CommandResult


@pytest.mark.asyncio
async def test_resolves_child_pid(process_table):
    process_table.children[100] = 200

    pid = await PidResolver(process_table).resolve(100)

    assert pid == 200
    assert process_table.queries == [100]


@pytest.mark.asyncio
async def test_malformed_output_raises_process_not_found(process_table):
    """Output without '=' is a resolution failure, not a parse crash."""
    process_table.children[100] = CommandResult(returncode=0, stdout="ProcessId 200\r\n")

    with pytest.raises(ProcessNotFoundError) as exc_info:
        await PidResolver(process_table).resolve(100)

    assert exc_info.value.parent_pid == 100


@pytest.mark.asyncio
async def test_non_integer_value_raises_process_not_found(process_table):
    process_table.children[100] = CommandResult(returncode=0, stdout="ProcessId=abc\r\n")

    with pytest.raises(ProcessNotFoundError):
        await PidResolver(process_table).resolve(100)


@pytest.mark.asyncio
async def test_no_matching_process_raises_process_not_found(process_table):
    with pytest.raises(ProcessNotFoundError):
        await PidResolver(process_table).resolve(100)


@pytest.mark.asyncio
async def test_failed_query_raises_process_not_found(process_table):
    process_table.children[100] = CommandResult(returncode=None, stderr="wmic timed out")

    with pytest.raises(ProcessNotFoundError):
        await PidResolver(process_table).resolve(100)


@pytest.mark.asyncio
async def test_unresolved_parent_is_not_queried(process_table):
    with pytest.raises(ProcessNotFoundError):
        await PidResolver(process_table).resolve(UNRESOLVED_PID)

    assert process_table.queries == []


@pytest.mark.parametrize(
    "output, expected",
    [
        ("ProcessId=4242", 4242),
        ("\r\r\n\r\r\nProcessId=4242\r\r\n\r\r\n", 4242),
        ("ProcessId= 17 ", 17),
        ("ProcessId=1\r\nProcessId=2\r\n", 1),
        ("No Instance(s) Available.", None),
        ("", None),
        ("ProcessId=", None),
        ("ProcessId=0", None),
    ],
)
def test_parse_pid(output, expected):
    assert PidResolver.parse_pid(output) == expected
