"""
debdeploy Services Layer

Transport selection, staging, transfer/execution and the deployment pipeline.
"""

from .transport_service import TransportService, select_transport
from .staging_service import LocalStagingArea, remote_temp_dir_name
from .ssh_service import SSHService, build_remote_script
from .deployment_service import DeploymentService

__all__ = [
    "TransportService",
    "select_transport",
    "LocalStagingArea",
    "remote_temp_dir_name",
    "SSHService",
    "build_remote_script",
    "DeploymentService",
]
