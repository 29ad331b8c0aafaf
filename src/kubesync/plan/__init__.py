"""Public plan exports for kubesync."""

from __future__ import annotations

from .actions import Action, SyncAction
from .ordering import kind_rank, order_actions
from .planner import build_sync_def, decide_apply, decide_delete
from .scope import filter_namespaces, in_scope
from .sync_def import SyncDef

__all__ = [
    "Action",
    "SyncAction",
    "SyncDef",
    "in_scope",
    "filter_namespaces",
    "decide_delete",
    "decide_apply",
    "build_sync_def",
    "kind_rank",
    "order_actions",
]
