"""Dependency ordering of SyncDef actions for the cluster."""

from __future__ import annotations

from .actions import Action, SyncAction
from .sync_def import SyncDef

# Lower rank is applied earlier and deleted later.
_KIND_RANK: dict[str, int] = {
    "namespace": 0,
    "customresourcedefinition": 1,
    "serviceaccount": 2,
    "clusterrole": 2,
    "clusterrolebinding": 3,
    "role": 2,
    "rolebinding": 3,
    "persistentvolume": 4,
    "persistentvolumeclaim": 5,
    "configmap": 5,
    "secret": 5,
    "deployment": 6,
    "statefulset": 6,
    "daemonset": 6,
    "job": 6,
    "cronjob": 6,
    "service": 7,
    "ingress": 8,
}

_DEFAULT_RANK: int = 9


def kind_rank(kind: str) -> int:
    return _KIND_RANK.get(kind.lower(), _DEFAULT_RANK)


def order_actions(sync_def: SyncDef) -> list[SyncAction]:
    """
    Build the order the cluster should perform actions in.

    Rules:
        - All deletes first, then all applies.
        - Deletes: dependents before dependencies (rank descending).
        - Applies: dependencies before dependents (rank ascending).
        - Ties keep their SyncDef order (sort is stable).
    """
    deletes = [a for a in sync_def.actions if a.action is Action.DELETE]
    applies = [a for a in sync_def.actions if a.action is Action.APPLY]

    deletes.sort(key=lambda a: -kind_rank(a.resource.kind))
    applies.sort(key=lambda a: kind_rank(a.resource.kind))
    return deletes + applies
