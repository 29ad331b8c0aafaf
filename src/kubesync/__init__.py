"""kubesync public API."""

from __future__ import annotations

from kubesync.auth import ClusterAuth, KubeClientFactory
from kubesync.cluster import Cluster, KubernetesCluster, ManifestParser
from kubesync.config import SyncConfig
from kubesync.errors import (
    ApiError,
    ApiErrorInfo,
    ApplyError,
    AuthError,
    ConfigError,
    ConflictError,
    ExportError,
    InvalidArgumentError,
    KubeSyncError,
    ManifestError,
    NetworkError,
    NotFoundError,
    ParseError,
    PermissionError,
    RateLimitError,
    SyncError,
    map_api_error,
)
from kubesync.manifests import Manifests
from kubesync.models import Policy, PolicySet, Resource, ResourceID
from kubesync.plan import (
    Action,
    SyncAction,
    SyncDef,
    build_sync_def,
    decide_apply,
    decide_delete,
    filter_namespaces,
    in_scope,
)
from kubesync.reconcile import sync

__all__ = [
    # High-level
    "sync",
    "SyncConfig",
    "Manifests",
    "KubernetesCluster",
    "Cluster",
    "ManifestParser",
    # Auth
    "ClusterAuth",
    "KubeClientFactory",
    # Plan / Models
    "Action",
    "SyncAction",
    "SyncDef",
    "build_sync_def",
    "decide_delete",
    "decide_apply",
    "in_scope",
    "filter_namespaces",
    "Policy",
    "PolicySet",
    "Resource",
    "ResourceID",
    # Errors
    "KubeSyncError",
    "SyncError",
    "ExportError",
    "ParseError",
    "ApplyError",
    "ManifestError",
    "ConfigError",
    "AuthError",
    "PermissionError",
    "InvalidArgumentError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "NetworkError",
    "ApiError",
    "ApiErrorInfo",
    "map_api_error",
]
