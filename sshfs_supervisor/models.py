from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator


class AuthType(str, Enum):
    """Authentication mode passed through to the sshfs helper."""

    PASSWORD = "password"  # Secret is written to the helper's stdin
    KEY_FILE = "key-file"  # Public key authentication with an identity file


class ProcessState(str, Enum):
    """
    Lifecycle of a managed sshfs process.

    Workflow: Pending -> Running -> Terminating -> Exited
    Alternative: Running -> NotFound -> Terminating -> Exited (worker vanished, then terminated)
    """

    PENDING = "Pending"  # Launched, worker PID not resolved yet
    RUNNING = "Running"  # Registered and under liveness monitoring
    NOT_FOUND = "NotFound"  # Liveness monitor could no longer find the worker
    TERMINATING = "Terminating"  # Tree-kill in progress
    EXITED = "Exited"  # Termination coordinator is done with the handle


class MountRequest(BaseModel):
    """
    One mount to establish. Immutable for the duration of a spawn.

    Exactly one of ``password`` / ``key_file`` is populated, selected by ``auth_type``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user: str = Field(..., min_length=1, description="Remote SSH user")
    host: str = Field(..., min_length=1, description="Remote SSH host")
    folder: str = Field(default="", description="Remote folder to mount")
    mount_point: str = Field(
        ..., min_length=1, alias="mountPoint", description="Local mount point, e.g. 'Z:'"
    )
    port: int = Field(default=22, ge=1, le=65535, description="SSH port")
    name: str = Field(..., min_length=1, description="Display name used as volume name")
    auth_type: AuthType = Field(..., alias="authType")
    password: Optional[SecretStr] = Field(default=None)
    key_file: Optional[str] = Field(default=None, alias="keyFile")

    @model_validator(mode="after")
    def _check_credentials(self) -> "MountRequest":
        if self.auth_type == AuthType.PASSWORD:
            if self.password is None:
                raise ValueError("password is required when auth_type is 'password'")
            if self.key_file:
                raise ValueError("key_file must not be set when auth_type is 'password'")
        else:
            if not self.key_file:
                raise ValueError("key_file is required when auth_type is 'key-file'")
            if self.password is not None:
                raise ValueError("password must not be set when auth_type is 'key-file'")
        return self

    @property
    def endpoint(self) -> str:
        """Remote endpoint in sshfs form: user@host:folder."""
        return f"{self.user}@{self.host}:{self.folder}"


class MountProcessInfo(BaseModel):
    """Serializable snapshot of a managed process for the HTTP layer."""

    pid: int = Field(..., description="Resolved worker PID")
    name: str
    endpoint: str
    mount_point: str
    state: ProcessState
    started_at: datetime
