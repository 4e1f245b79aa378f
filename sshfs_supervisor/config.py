from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # SSHFS-Win helper
    sshfs_binary: str = r"C:\Program Files\SSHFS-Win\bin\sshfs.exe"
    sshfs_process_name: str = "sshfs.exe"  # Image name used by the process-table queries

    # Liveness monitoring
    process_monitoring_interval_seconds: float = 5.0
    liveness_max_inconclusive_checks: int = 3  # Consecutive failed queries before a worker counts as gone

    # Timeouts
    command_timeout_seconds: float = 10.0  # wmic / tasklist / taskkill
    spawn_timeout_seconds: float = 60.0  # Launcher hand-off including authentication
    preflight_timeout_seconds: float = 5.0  # Binary / identity file existence checks

    # Logging konfiguration
    log_level: str = "INFO"
    log_file_path: str = "logs/sshfs_supervisor.log"
    log_retention_days: int = 30

    # HTTP surface
    host: str = "127.0.0.1"
    port: int = 8765

    model_config = SettingsConfigDict(
        env_file="settings.env",
        env_prefix="SSHFS_SUPERVISOR_",
        extra="ignore",
    )

    @property
    def log_directory(self) -> Path:
        """Returnerer log directory som Path objekt"""
        return Path(self.log_file_path).parent
