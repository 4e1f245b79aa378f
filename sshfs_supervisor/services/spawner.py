"""Spawner - launches the SSHFS-Win helper and follows it to its long-lived worker."""

import asyncio
import logging
from typing import Optional

import aiofiles.os

from .command_builder import build_sshfs_arguments
from .liveness_monitor import LivenessMonitor
from .pid_resolver import PidResolver
from .process_registry import ProcessRegistry
from .process_table import BaseProcessTable
from ..config import Settings
from ..logging_config import register_secret
from ..core.exceptions import (
    HelperExitedAbnormallyError,
    KillFailureError,
    ProcessAlreadyRegisteredError,
    SpawnFailureError,
    SpawnTimeoutError,
)
from ..core.managed_process import ManagedProcess
from ..models import AuthType, MountRequest

# How long to wait for stderr output that may trail the launcher's exit
STDERR_GRACE_SECONDS = 0.1
STDERR_CHUNK_SIZE = 4096


class MountSpawner:
    """
    Launches sshfs for a MountRequest and resolves the worker it hands off to.

    The launched process is only a launcher: it starts an intermediate sshfs
    which in turn runs the real worker, then exits. The worker PID is found
    with two resolver hops, the second only after the launcher exited with 0.
    """

    def __init__(
        self,
        settings: Settings,
        process_table: BaseProcessTable,
        resolver: PidResolver,
        registry: ProcessRegistry,
        monitor: LivenessMonitor,
    ):
        self._settings = settings
        self._process_table = process_table
        self._resolver = resolver
        self._registry = registry
        self._monitor = monitor

    async def spawn(self, request: MountRequest) -> ManagedProcess:
        """
        Launch sshfs for the request and return the registered, monitored handle.

        Raises:
            SpawnFailureError: helper missing, wrote to stderr, exited non-zero
                (HelperExitedAbnormallyError) or did not hand off in time
                (SpawnTimeoutError).
            ProcessNotFoundError: either resolver hop failed.
        """
        await self._preflight(request)

        binary = self._settings.sshfs_binary
        args = build_sshfs_arguments(request)
        logging.info(f"Spawning sshfs for '{request.name}': {request.endpoint} -> {request.mount_point}")
        logging.debug(f"sshfs arguments: {' '.join(args)}")

        try:
            launcher = await asyncio.create_subprocess_exec(
                binary,
                *args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logging.error(f"Could not launch {binary}: {e}")
            raise SpawnFailureError(f"Could not launch {binary}: {e}") from e

        if request.auth_type == AuthType.PASSWORD:
            password = request.password.get_secret_value()
            register_secret(password)
            await self._write_password(launcher, password)

        process = ManagedProcess(request, launcher_pid=launcher.pid)

        # First hop races the launcher's exit; its result is only used afterwards
        first_hop = asyncio.create_task(self._resolver.resolve(launcher.pid))

        try:
            exit_code = await self._wait_for_handoff(launcher)
            if exit_code != 0:
                logging.error(f"sshfs launcher {launcher.pid} exited with code {exit_code}")
                raise HelperExitedAbnormallyError(exit_code)

            process.intermediate_pid = await first_hop
            worker_pid = await self._resolver.resolve(process.intermediate_pid)
        except BaseException:
            self._discard(first_hop)
            raise

        process.set_pid(worker_pid)
        try:
            await self._registry.add(process)
        except ProcessAlreadyRegisteredError:
            # Nothing would track this worker
            await self._kill_tree(worker_pid)
            raise

        self._monitor.start(process)
        process.attach_stderr_drain(
            asyncio.create_task(
                self._drain_stderr(process, launcher.stderr), name=f"sshfs-stderr-{worker_pid}"
            )
        )

        logging.info(
            f"sshfs worker {worker_pid} running for '{request.name}' "
            f"(launcher {launcher.pid}, intermediate {process.intermediate_pid})"
        )
        return process

    async def _preflight(self, request: MountRequest) -> None:
        binary = self._settings.sshfs_binary
        if await self._path_exists(binary) is False:
            raise SpawnFailureError(f"sshfs binary not found: {binary}")

        if request.auth_type == AuthType.KEY_FILE and await self._path_exists(request.key_file) is False:
            raise SpawnFailureError(f"Identity file not found: {request.key_file}")

    async def _path_exists(self, path: str) -> Optional[bool]:
        """None when the check itself timed out."""
        try:
            return await asyncio.wait_for(
                aiofiles.os.path.exists(path),
                timeout=self._settings.preflight_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logging.warning(f"Path check timed out for: {path}")
            return None

    async def _write_password(self, launcher: asyncio.subprocess.Process, password: str) -> None:
        try:
            launcher.stdin.write(f"{password}\n".encode())
            await launcher.stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as e:
            # The launcher already went away; its exit code or stderr reports why
            logging.warning(f"Could not write password to sshfs launcher {launcher.pid}: {e}")

    async def _wait_for_handoff(self, launcher: asyncio.subprocess.Process) -> int:
        """Wait for the launcher to exit. Any stderr output fails the spawn immediately."""
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._settings.spawn_timeout_seconds

        stderr_task = asyncio.create_task(launcher.stderr.read(STDERR_CHUNK_SIZE))
        exit_task = asyncio.create_task(launcher.wait())

        try:
            done, _ = await asyncio.wait(
                {stderr_task, exit_task},
                timeout=self._settings.spawn_timeout_seconds,
                return_when=asyncio.FIRST_COMPLETED,
            )
            if not done:
                raise SpawnTimeoutError(
                    f"sshfs launcher {launcher.pid} did not hand off within "
                    f"{self._settings.spawn_timeout_seconds}s"
                )

            if exit_task in done and not stderr_task.done():
                await asyncio.wait({stderr_task}, timeout=STDERR_GRACE_SECONDS)

            if stderr_task.done():
                data = stderr_task.result()
                if data:
                    text = data.decode(errors="replace")
                    logging.error(f"sshfs launcher {launcher.pid} reported: {text.strip()}")
                    raise SpawnFailureError(text, stderr=text)

            if not exit_task.done():
                remaining = max(0.0, deadline - loop.time())
                try:
                    await asyncio.wait_for(asyncio.shield(exit_task), timeout=remaining)
                except asyncio.TimeoutError:
                    raise SpawnTimeoutError(
                        f"sshfs launcher {launcher.pid} did not exit within "
                        f"{self._settings.spawn_timeout_seconds}s"
                    ) from None

            return exit_task.result()

        except SpawnFailureError:
            await self._kill_launcher(launcher)
            raise
        finally:
            for task in (stderr_task, exit_task):
                if not task.done():
                    task.cancel()

    async def _kill_launcher(self, launcher: asyncio.subprocess.Process) -> None:
        if launcher.returncode is not None:
            return
        await self._kill_tree(launcher.pid)

    async def _kill_tree(self, pid: int) -> None:
        try:
            await self._process_table.kill_tree(pid)
        except KillFailureError as e:
            logging.warning(str(e))

    async def _drain_stderr(self, process: ManagedProcess, stream: asyncio.StreamReader) -> None:
        """Keep reading the stderr pipe the worker inherited so it never blocks on a full pipe."""
        try:
            while True:
                data = await stream.read(STDERR_CHUNK_SIZE)
                if not data:
                    break
                for line in data.decode(errors="replace").splitlines():
                    if line.strip():
                        logging.warning(f"sshfs worker {process.pid} ({process.request.name}): {line}")
        except asyncio.CancelledError:
            logging.debug(f"stderr drain cancelled for PID {process.pid}")

    @staticmethod
    def _discard(task: asyncio.Task) -> None:
        if not task.done():
            task.cancel()
        elif not task.cancelled():
            # Mark the exception as retrieved
            task.exception()
