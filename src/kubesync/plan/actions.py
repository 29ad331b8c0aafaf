"""Sync actions for kubesync."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from kubesync.models import Resource


class Action(str, Enum):
    """Supported sync actions (v1)."""

    APPLY = "APPLY"
    DELETE = "DELETE"


@dataclass(slots=True, frozen=True)
class SyncAction:
    """
    A single action within a SyncDef.

    Tagged union: `action` selects the shape, `resource` is what it acts on.
    There is no way to express apply and delete on one value.
    """

    action: Action
    resource: Resource

    @classmethod
    def apply(cls, resource: Resource) -> SyncAction:
        return cls(Action.APPLY, resource)

    @classmethod
    def delete(cls, resource: Resource) -> SyncAction:
        return cls(Action.DELETE, resource)

    @property
    def is_apply(self) -> bool:
        return self.action is Action.APPLY

    @property
    def is_delete(self) -> bool:
        return self.action is Action.DELETE
