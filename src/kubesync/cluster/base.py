"""Collaborator contracts used by the sync orchestrator."""

from __future__ import annotations

from typing import Protocol

from kubesync.models import Resource
from kubesync.plan import SyncDef


class Cluster(Protocol):
    """The live system being reconciled."""

    def export(self) -> bytes:
        """Return all in-scope live configuration in a form `parse` accepts."""
        ...

    def sync(self, sync_def: SyncDef) -> None:
        """Perform every action in sync_def. An empty SyncDef is a no-op."""
        ...

    def list_namespaces(self) -> list[str]:
        """Return in-scope namespace names in the cluster's own order."""
        ...


class ManifestParser(Protocol):
    """Turns exported bytes back into resources keyed by id."""

    def parse(self, data: bytes) -> dict[str, Resource]:
        ...
