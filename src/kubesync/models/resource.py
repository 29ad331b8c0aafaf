"""Data model for desired and live resources."""

from __future__ import annotations

from dataclasses import dataclass, field

from .policy import PolicySet

CLUSTER_SCOPE: str = "<cluster>"


@dataclass(slots=True, frozen=True, order=True)
class ResourceID:
    """
    Identity of a resource: namespace, kind and name.

    String form is `<namespace>:<kind>/<name>` with kind lowercased. Cluster-
    scoped resources (empty namespace) use `<cluster>` as namespace, so the
    same object read from a file and from the cluster has the same id.
    """

    namespace: str
    kind: str
    name: str

    def __post_init__(self) -> None:
        if not self.kind or not self.name:
            raise ValueError("ResourceID requires kind and name")
        object.__setattr__(self, "kind", self.kind.lower())
        if self.namespace == CLUSTER_SCOPE:
            object.__setattr__(self, "namespace", "")

    @classmethod
    def parse(cls, value: str) -> ResourceID:
        """Parse `<namespace>:<kind>/<name>`. Raises ValueError."""
        ns, sep, rest = value.partition(":")
        kind, slash, name = rest.partition("/")
        if not sep or not slash:
            raise ValueError(f"Invalid resource id: {value!r}")
        return cls(namespace=ns, kind=kind, name=name)

    def __str__(self) -> str:
        ns = self.namespace or CLUSTER_SCOPE
        return f"{ns}:{self.kind}/{self.name}"


@dataclass(slots=True, frozen=True)
class Resource:
    """
    A unit of desired or live configuration.

    Notes:
        - namespace == "" means cluster-scoped.
        - bytes is the raw document; it is applied verbatim.
    """

    resource_id: ResourceID
    bytes: bytes
    policy: PolicySet = field(default_factory=PolicySet)

    @property
    def id(self) -> str:
        """String key used in resource maps."""
        return str(self.resource_id)

    @property
    def namespace(self) -> str:
        return self.resource_id.namespace

    @property
    def kind(self) -> str:
        return self.resource_id.kind

    @property
    def name(self) -> str:
        return self.resource_id.name
