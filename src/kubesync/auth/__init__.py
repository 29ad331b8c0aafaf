"""Public auth exports for kubesync."""

from __future__ import annotations

from .cluster_auth import ClusterAuth
from .kube_client import KubeClientFactory

__all__ = ["ClusterAuth", "KubeClientFactory"]
