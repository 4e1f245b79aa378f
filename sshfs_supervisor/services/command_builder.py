"""Builds the SSHFS-Win argument vector for a mount request."""

from typing import List

from ..models import AuthType, MountRequest

# Filesystem behaviour applied to every mount
FILESYSTEM_OPTIONS = (
    "-oidmap=user",
    "-ouid=-1",
    "-ogid=-1",
    "-oumask=000",
    "-ocreate_umask=000",
)

CONNECTION_OPTIONS = (
    "-omax_readahead=1GB",
    "-oStrictHostKeyChecking=no",
    "-oUserKnownHostsFile=/dev/null",
    "-oallow_other",
    "-olarge_read",
    "-okernel_cache",
)


def normalize_key_path(path: str) -> str:
    """sshfs expects forward slashes in the identity file path."""
    return path.replace("\\", "/")


def build_sshfs_arguments(request: MountRequest) -> List[str]:
    """Argument vector (without the binary itself) for launching sshfs in 'cmd' mode."""
    args = [
        "cmd",
        request.endpoint,
        request.mount_point,
        f"-p{request.port}",
        *FILESYSTEM_OPTIONS,
        f"-ovolname={request.name}",
        *CONNECTION_OPTIONS,
    ]

    if request.auth_type == AuthType.PASSWORD:
        args.append("-oPreferredAuthentications=password")
        args.append("-opassword_stdin")
    elif request.auth_type == AuthType.KEY_FILE:
        args.append("-oPreferredAuthentications=publickey")
        args.append(f'-oIdentityFile="{normalize_key_path(request.key_file)}"')

    return args

