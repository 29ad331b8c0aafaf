"""Cluster authentication information for kubesync."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

SUPPORTED_KINDS: tuple[str, ...] = ("kubeconfig", "in_cluster")


@dataclass(slots=True, frozen=True)
class ClusterAuth:
    """
    How to reach the cluster.

    kind = "kubeconfig":
        data may include:
            - config_file (default: $KUBECONFIG or ~/.kube/config)
            - context (default: current-context)
    kind = "in_cluster":
        data is ignored; the pod's service account is used.
    """

    kind: str
    data: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.kind not in SUPPORTED_KINDS:
            raise ValueError(f"ClusterAuth.kind must be one of {SUPPORTED_KINDS}")

        if not isinstance(self.data, dict):
            raise TypeError("ClusterAuth.data must be a dict")

        for key in ("config_file", "context"):
            value = self.data.get(key)
            if value is not None and (not isinstance(value, str) or not value.strip()):
                raise ValueError(f"ClusterAuth.data['{key}'] must be a non-empty string")

    @classmethod
    def kubeconfig(
        cls,
        config_file: Optional[str] = None,
        context: Optional[str] = None,
    ) -> ClusterAuth:
        data: dict[str, Any] = {}
        if config_file:
            data["config_file"] = config_file
        if context:
            data["context"] = context
        return cls(kind="kubeconfig", data=data)

    @classmethod
    def in_cluster(cls) -> ClusterAuth:
        return cls(kind="in_cluster")

    @property
    def config_file(self) -> Optional[str]:
        return self.data.get("config_file")

    @property
    def context(self) -> Optional[str]:
        return self.data.get("context")
