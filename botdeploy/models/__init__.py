"""Data models for botdeploy."""
from botdeploy.models.unit import (
    DeployableUnit,
    RemoteLayout,
    RemoteTarget,
    TransferOutcome,
    TransferReport,
)

__all__ = [
    'DeployableUnit',
    'RemoteLayout',
    'RemoteTarget',
    'TransferOutcome',
    'TransferReport',
]
