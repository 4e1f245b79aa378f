"""
SSHFS-Win process supervision services.

Components:
- MountProcessManager: Orchestrator used by callers
- MountSpawner: Launches sshfs and follows the launcher to its worker
- PidResolver: One parent -> child hop through the process table
- LivenessMonitor: Periodic process-table polling per worker
- ProcessRegistry: Owned collection of managed handles
- TerminationCoordinator: Tree-kill and bookkeeping
- WindowsProcessTable: wmic / tasklist / taskkill boundary
"""

from .liveness_monitor import LivenessMonitor
from .mount_process_manager import MountProcessManager
from .pid_resolver import PidResolver
from .process_registry import ProcessRegistry
from .process_table import BaseProcessTable, LivenessResult, WindowsProcessTable
from .spawner import MountSpawner
from .termination import TerminationCoordinator

__all__ = [
    "MountProcessManager",
    "MountSpawner",
    "PidResolver",
    "LivenessMonitor",
    "ProcessRegistry",
    "TerminationCoordinator",
    "BaseProcessTable",
    "LivenessResult",
    "WindowsProcessTable",
]
