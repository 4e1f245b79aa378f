import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request

from .api import mounts
from .core.events.process_events import ProcessExitedEvent, ProcessNotFoundEvent
from .dependencies import get_event_bus, get_mount_process_manager, get_settings
from .logging_config import setup_logging

settings = get_settings()


async def _log_not_found(event: ProcessNotFoundEvent) -> None:
    logging.warning(f"Mount '{event.name}' lost its sshfs worker (PID {event.pid})")


async def _log_exited(event: ProcessExitedEvent) -> None:
    logging.info(f"Mount '{event.name}' terminated (PID {event.pid})")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    setup_logging(settings)
    logging.info("SSHFS supervisor starting up...")
    logging.info(f"sshfs binary: {settings.sshfs_binary}")

    event_bus = get_event_bus()
    await event_bus.subscribe(ProcessNotFoundEvent, _log_not_found)
    await event_bus.subscribe(ProcessExitedEvent, _log_exited)

    manager = get_mount_process_manager()

    yield

    # Shutdown: no sshfs helper may outlive the supervisor
    logging.info("SSHFS supervisor shutting down...")
    terminated = await manager.terminate_all()
    logging.info(f"Terminated {terminated} sshfs process(es) on shutdown")


app = FastAPI(
    title="SSHFS Supervisor",
    description="Spawns, monitors and terminates SSHFS-Win mount helper processes",
    version="0.1.0",
    lifespan=lifespan,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logging.info(
        f"Incoming request: {request.method} {request.url.path}",
        extra={
            "operation": "http_request",
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
        },
    )

    response = await call_next(request)

    logging.info(
        f"Response: {response.status_code}",
        extra={
            "operation": "http_response",
            "status_code": response.status_code,
            "path": request.url.path,
        },
    )

    return response


app.include_router(mounts.router)


@app.get("/health")
async def health():
    """Health check."""
    return {"status": "healthy", "service": "sshfs-supervisor"}


def run() -> None:
    uvicorn.run(
        "sshfs_supervisor.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":
    run()
