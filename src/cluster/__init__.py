"""
Cluster access and verification utilities.
"""

from .access import ClusterAccessConfigurator, ClusterAccessError
from .verifier import PostActionVerifier, VerificationOutcome

__all__ = [
    "ClusterAccessConfigurator",
    "ClusterAccessError",
    "PostActionVerifier",
    "VerificationOutcome",
]
