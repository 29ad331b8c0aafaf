"""Public model exports for kubesync."""

from __future__ import annotations

from .policy import POLICY_ANNOTATION_PREFIX, Policy, PolicySet
from .resource import CLUSTER_SCOPE, Resource, ResourceID

__all__ = [
    "Policy",
    "PolicySet",
    "POLICY_ANNOTATION_PREFIX",
    "Resource",
    "ResourceID",
    "CLUSTER_SCOPE",
]
