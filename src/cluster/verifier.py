"""
Best-effort cluster reachability check after a deployment.
"""

import logging
from enum import Enum
from typing import Optional

from kubernetes import client, config

logger = logging.getLogger(__name__)


class VerificationOutcome(Enum):
    """Result of a post-deployment check."""

    CONFIRMED = "confirmed"
    INCONCLUSIVE = "inconclusive"


class PostActionVerifier:
    """
    Confirm a cluster answers by listing its nodes.

    The check runs once. Any failure, including a cluster with no nodes
    registered yet, is reported as inconclusive and never raised.
    """

    def __init__(self, kubeconfig: Optional[str] = None):
        self.kubeconfig = kubeconfig

    def verify(self, cluster_name: str, region: str) -> VerificationOutcome:
        try:
            config.load_kube_config(config_file=self.kubeconfig)
            nodes = client.CoreV1Api().list_node().items
        except Exception as e:
            logger.warning(
                f"Could not verify cluster {cluster_name} in {region}: {e}"
            )
            return VerificationOutcome.INCONCLUSIVE

        if not nodes:
            logger.warning(f"Cluster {cluster_name} has no registered nodes yet")
            return VerificationOutcome.INCONCLUSIVE

        print(f"✅ Cluster {cluster_name} is reachable with {len(nodes)} nodes:")
        for node in nodes:
            print(f"  - {node.metadata.name}")
        return VerificationOutcome.CONFIRMED
