"""
Lifecycle events published for managed sshfs processes.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True, kw_only=True)
class ProcessEvent:
    """
    Something that happened to a managed sshfs worker process.

    Attributes:
        pid: The resolved worker PID the event concerns.
        name: Display name of the mount (the volume name).
        event_id: A unique identifier for the event instance.
        timestamp: The UTC time when the event was created.
    """

    pid: int
    name: str
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True, kw_only=True)
class ProcessSpawnedEvent(ProcessEvent):
    """Published once a spawn has resolved its worker and registered the handle."""
    mount_point: str


@dataclass(frozen=True, kw_only=True)
class ProcessNotFoundEvent(ProcessEvent):
    """Published when the liveness monitor can no longer find the worker."""
    pass


@dataclass(frozen=True, kw_only=True)
class ProcessExitedEvent(ProcessEvent):
    """Published when the termination coordinator has finished with a handle."""
    pass
