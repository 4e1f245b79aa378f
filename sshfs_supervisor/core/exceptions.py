# sshfs_supervisor/core/exceptions.py
from typing import Optional


class MountProcessError(Exception):
    """Base exception for mount helper process failures."""
    pass


class ProcessNotFoundError(MountProcessError):
    """Raised when an expected sshfs process cannot be located in the process table."""
    def __init__(self, message: str, parent_pid: Optional[int] = None, pid: Optional[int] = None):
        self.parent_pid = parent_pid
        self.pid = pid
        super().__init__(message)


class SpawnFailureError(MountProcessError):
    """Raised when the mount helper fails before handing off to its worker."""
    def __init__(self, message: str, stderr: str = ""):
        self.stderr = stderr
        super().__init__(message)


class HelperExitedAbnormallyError(SpawnFailureError):
    """Raised when the launcher exits with a non-zero exit code."""
    def __init__(self, exit_code: int, stderr: str = ""):
        self.exit_code = exit_code
        super().__init__(f"Mount helper exited abnormally with exit code {exit_code}", stderr=stderr)


class SpawnTimeoutError(SpawnFailureError):
    """Raised when the launcher does not hand off within the spawn timeout."""
    pass


class KillFailureError(MountProcessError):
    """Raised by the process table when a tree-kill command fails. Never surfaced to callers."""
    def __init__(self, pid: int, output: str = ""):
        self.pid = pid
        self.output = output
        super().__init__(f"Failed to kill process tree for PID {pid}: {output or 'unknown error'}")


class ProcessAlreadyRegisteredError(MountProcessError):
    """Raised when a handle with the same resolved PID is already registered."""
    def __init__(self, pid: int):
        self.pid = pid
        super().__init__(f"A managed process with PID {pid} is already registered")
