"""
Local access configuration for EKS clusters.
"""

import logging
import subprocess
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class ClusterAccessError(Exception):
    """Raised when kubeconfig could not be written."""

    message: str
    returncode: Optional[int] = None

    def __str__(self) -> str:
        return self.message


class ClusterAccessConfigurator:
    """Write kubeconfig entries with `aws eks update-kubeconfig`."""

    def __init__(
        self,
        profile: Optional[str] = None,
        kubeconfig: Optional[str] = None,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ):
        self.profile = profile
        self.kubeconfig = kubeconfig
        self.runner = runner

    def build_command(self, cluster_name: str, region: str) -> List[str]:
        command = [
            "aws",
            "eks",
            "update-kubeconfig",
            "--name",
            cluster_name,
            "--region",
            region,
        ]
        if self.profile:
            command.extend(["--profile", self.profile])
        if self.kubeconfig:
            command.extend(["--kubeconfig", self.kubeconfig])
        return command

    def write_local_access_config(self, cluster_name: str, region: str) -> None:
        """
        Add or refresh the kubeconfig entry for a cluster.

        Raises:
            ClusterAccessError: If the aws CLI is missing or exits non-zero
        """
        command = self.build_command(cluster_name, region)
        logger.debug(f"Running command: {' '.join(command)}")

        try:
            result = self.runner(command, capture_output=True, text=True, check=False)
        except FileNotFoundError:
            raise ClusterAccessError("aws CLI not found in PATH")

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise ClusterAccessError(
                f"Failed to update kubeconfig: {stderr or 'unknown error'}",
                result.returncode,
            )

        print(f"🔑 Kubeconfig updated for cluster {cluster_name}")
