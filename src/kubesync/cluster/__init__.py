"""Public cluster exports for kubesync."""

from __future__ import annotations

from .base import Cluster, ManifestParser
from .kube_cluster import DEFAULT_FIELD_MANAGER, KubernetesCluster, kinds_of

__all__ = [
    "Cluster",
    "ManifestParser",
    "KubernetesCluster",
    "DEFAULT_FIELD_MANAGER",
    "kinds_of",
]
