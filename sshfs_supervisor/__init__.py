"""Supervisor for SSHFS-Win mount helper processes."""

__version__ = "0.1.0"
