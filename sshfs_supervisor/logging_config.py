import logging
import logging.handlers
from typing import Set

from rich.console import Console
from rich.logging import RichHandler

from .config import Settings

REDACTED = "********"


class SecretRedactingFilter(logging.Filter):
    """Masks registered secrets (mount passwords) in every record a handler emits."""

    def __init__(self):
        super().__init__()
        self._secrets: Set[str] = set()

    def add_secret(self, secret: str) -> None:
        if secret:
            self._secrets.add(secret)

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True

        message = record.getMessage()
        redacted = message
        # Longest first so a secret containing another is masked whole
        for secret in sorted(self._secrets, key=len, reverse=True):
            redacted = redacted.replace(secret, REDACTED)

        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


_secret_filter = SecretRedactingFilter()


def register_secret(secret: str) -> None:
    """Never let this value reach a log handler installed by setup_logging."""
    _secret_filter.add_secret(secret)


def setup_logging(settings: Settings) -> None:
    log_dir = settings.log_directory
    log_dir.mkdir(parents=True, exist_ok=True)

    # markup off: raw sshfs stderr may contain [...] that Rich would interpret
    rich_handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    rich_handler.setLevel(settings.log_level)
    rich_handler.addFilter(_secret_filter)

    file_handler = logging.handlers.TimedRotatingFileHandler(
        filename=settings.log_file_path,
        when="midnight",
        backupCount=settings.log_retention_days,
        encoding="utf-8",
    )
    file_handler.setLevel(settings.log_level)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)-8s [%(module)s] %(message)s")
    )
    file_handler.addFilter(_secret_filter)

    root_logger = logging.getLogger()
    root_logger.setLevel(settings.log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(rich_handler)
    root_logger.addHandler(file_handler)

    # uvicorn installs its own handlers; route its records through ours instead
    for name in ("uvicorn", "uvicorn.error"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logging.info(
        f"Logging initialized - file {settings.log_file_path}, level {settings.log_level}, "
        f"{settings.log_retention_days} days retention; monitoring sshfs every "
        f"{settings.process_monitoring_interval_seconds}s"
    )
