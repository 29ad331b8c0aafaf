"""SyncDef model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from kubesync.models import Resource
from kubesync.util.ids import new_plan_id
from kubesync.util.time import now_utc

from .actions import SyncAction


@dataclass(slots=True)
class SyncDef:
    """
    Ordered actions produced by one reconciliation pass.

    All deletes come before all applies; within a phase actions are sorted
    by resource id.
    """

    actions: list[SyncAction] = field(default_factory=list)
    plan_id: str = field(default_factory=new_plan_id)
    created_at: datetime = field(default_factory=now_utc)

    @property
    def applies(self) -> list[Resource]:
        return [a.resource for a in self.actions if a.is_apply]

    @property
    def deletes(self) -> list[Resource]:
        return [a.resource for a in self.actions if a.is_delete]

    def is_empty(self) -> bool:
        return not self.actions

    def __len__(self) -> int:
        return len(self.actions)
