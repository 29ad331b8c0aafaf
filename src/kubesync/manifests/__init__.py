"""Public manifests exports for kubesync."""

from __future__ import annotations

from .manifests import CLUSTER_SCOPED_KINDS, MANIFEST_EXTENSIONS, Manifests

__all__ = ["Manifests", "CLUSTER_SCOPED_KINDS", "MANIFEST_EXTENSIONS"]
