"""Per-resource delete/apply decisions and the SyncDef they fold into."""

from __future__ import annotations

from typing import AbstractSet, Mapping, Optional

import structlog

from kubesync.models import Policy, Resource

from .actions import SyncAction
from .scope import in_scope
from .sync_def import SyncDef

log = structlog.get_logger(__name__)


def decide_delete(
    desired_is_empty: bool,
    resource: Resource,
    desired: Mapping[str, Resource],
    whitelist: Optional[AbstractSet[str]],
) -> Optional[SyncAction]:
    """
    Decide whether a live resource is deleted.

    Rules (in order):
        - Empty desired state: never delete anything. An empty map usually
          means the source failed to load, not that everything should go.
          No event is logged per resource; the orchestrator logs
          `deletes_suppressed` once per pass.
        - Ignore policy on the live resource: skip.
        - Namespace outside a non-empty whitelist: skip.
        - Present in the desired state: keep.
        - A Namespace that desired resources still live in: skip. Deleting
          it would cascade to objects the same pass applies.
        - Otherwise: delete.
    """
    if desired_is_empty:
        return None
    if resource.policy.contains(Policy.IGNORE):
        log.info("skip_resource", resource=resource.id, action="delete", reason="policy")
        return None
    if not in_scope(resource.namespace, whitelist):
        log.info(
            "skip_resource",
            resource=resource.id,
            action="delete",
            reason="namespace",
            namespace=resource.namespace,
        )
        return None
    if resource.id in desired:
        return None
    if resource.kind == "namespace" and _holds_desired(resource.name, desired):
        log.info(
            "skip_resource",
            resource=resource.id,
            action="delete",
            reason="namespace_in_use",
        )
        return None
    return SyncAction.delete(resource)


def decide_apply(
    live: Mapping[str, Resource],
    resource: Resource,
    whitelist: Optional[AbstractSet[str]],
) -> Optional[SyncAction]:
    """
    Decide whether a desired resource is applied.

    Rules (in order):
        - Ignore policy on the desired resource: skip.
        - Namespace outside a non-empty whitelist: skip.
        - Live counterpart carries the ignore policy: skip, so an object
          diverged on purpose in the cluster is not clobbered.
        - Live counterpart has identical bytes: skip, nothing to change.
          Live bytes come from the cluster export, which is normalized YAML,
          so this mostly fires for resources the previous pass applied from
          the same normalized form. Raw repository files rarely match it and
          are applied; server-side apply makes that a no-op in the cluster.
        - Otherwise: apply.
    """
    if resource.policy.contains(Policy.IGNORE):
        log.info("skip_resource", resource=resource.id, action="apply", reason="policy")
        return None
    if not in_scope(resource.namespace, whitelist):
        log.info(
            "skip_resource",
            resource=resource.id,
            action="apply",
            reason="namespace",
            namespace=resource.namespace,
        )
        return None
    live_res = live.get(resource.id)
    if live_res is not None and live_res.policy.contains(Policy.IGNORE):
        log.info(
            "skip_resource",
            resource=resource.id,
            action="apply",
            reason="live_policy",
        )
        return None
    if live_res is not None and live_res.bytes == resource.bytes:
        log.debug("skip_resource", resource=resource.id, action="apply", reason="unchanged")
        return None
    return SyncAction.apply(resource)


def build_sync_def(
    live: Mapping[str, Resource],
    desired: Mapping[str, Resource],
    *,
    perform_deletes: bool,
    whitelist: Optional[AbstractSet[str]] = None,
) -> SyncDef:
    """
    Fold per-resource decisions into a SyncDef.

    Deletes (only when perform_deletes) come first, then applies; each phase
    iterates in resource id order so the result is reproducible.
    """
    sync_def = SyncDef()

    if perform_deletes:
        desired_is_empty = len(desired) == 0
        for res_id in sorted(live):
            action = decide_delete(desired_is_empty, live[res_id], desired, whitelist)
            if action is not None:
                sync_def.actions.append(action)

    for res_id in sorted(desired):
        action = decide_apply(live, desired[res_id], whitelist)
        if action is not None:
            sync_def.actions.append(action)

    return sync_def


def _holds_desired(namespace: str, desired: Mapping[str, Resource]) -> bool:
    return any(res.namespace == namespace for res in desired.values())
