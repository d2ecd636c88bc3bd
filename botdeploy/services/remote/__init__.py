"""Remote host operations.

This package separates the remote side of a run into:
- RemoteFileSystem: capability interface (exists, copy, move, make_dirs, run)
- SSHRemoteHost: ssh/scp implementation
- RemoteTransferAgent: staging files
- RemoteInstaller: moving staged files into place
- ServiceLifecycleController: systemd stop/start/enable
"""
from .base import CommandResult, RemoteFileSystem
from .installer import RemoteInstaller
from .lifecycle import ServiceLifecycleController
from .ssh import SSHRemoteHost
from .transfer import RemoteTransferAgent

__all__ = [
    'CommandResult',
    'RemoteFileSystem',
    'RemoteInstaller',
    'RemoteTransferAgent',
    'SSHRemoteHost',
    'ServiceLifecycleController',
]
