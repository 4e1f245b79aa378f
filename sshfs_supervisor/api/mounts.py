from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from ..core.exceptions import ProcessNotFoundError, SpawnFailureError, SpawnTimeoutError
from ..dependencies import get_mount_process_manager
from ..models import MountProcessInfo, MountRequest
from ..services.mount_process_manager import MountProcessManager

router = APIRouter(prefix="/api", tags=["mounts"])


@router.post("/mounts", response_model=MountProcessInfo, status_code=status.HTTP_201_CREATED)
async def spawn_mount(
    request: MountRequest,
    manager: MountProcessManager = Depends(get_mount_process_manager),
) -> MountProcessInfo:
    """
    Spawn sshfs for a mount request.

    HTTP Status Codes:
        201: Worker resolved, registered and monitored
        502: Helper failed (stderr output, abnormal exit) or worker PID could not be resolved
        504: Helper did not hand off within the spawn timeout
    """
    try:
        process = await manager.spawn(request)
    except SpawnTimeoutError as e:
        raise HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=str(e))
    except SpawnFailureError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.stderr or str(e))
    except ProcessNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"sshfs worker could not be resolved: {e}",
        )
    return process.to_info()


@router.get("/mounts", response_model=List[MountProcessInfo])
async def list_mounts(
    manager: MountProcessManager = Depends(get_mount_process_manager),
) -> List[MountProcessInfo]:
    return await manager.list_processes()


@router.delete("/mounts/{pid}", status_code=status.HTTP_204_NO_CONTENT)
async def terminate_mount(
    pid: int,
    manager: MountProcessManager = Depends(get_mount_process_manager),
) -> Response:
    if not await manager.terminate_pid(pid):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No managed sshfs process with PID {pid}",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/mounts")
async def terminate_all_mounts(
    manager: MountProcessManager = Depends(get_mount_process_manager),
) -> dict:
    """Terminate every registered sshfs process."""
    return {"terminated": await manager.terminate_all()}
