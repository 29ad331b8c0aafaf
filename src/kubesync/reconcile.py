"""Reconciliation pass: live export, plan, cluster apply."""

from __future__ import annotations

from typing import AbstractSet, Mapping, Optional

import structlog

from kubesync.cluster import Cluster, ManifestParser
from kubesync.errors import ExportError, ParseError
from kubesync.models import Resource
from kubesync.plan import SyncDef, build_sync_def
from kubesync.util.time import to_rfc3339

log = structlog.get_logger(__name__)


def sync(
    manifests: ManifestParser,
    desired: Mapping[str, Resource],
    cluster: Cluster,
    perform_deletes: bool,
    namespace_whitelist: Optional[AbstractSet[str]] = None,
) -> None:
    """
    Make the cluster match the desired resources.

    Everything in the cluster but not in desired is deleted (when
    perform_deletes); everything in desired is applied unless the live copy
    already has identical bytes.

    Raises:
        ExportError: if the cluster could not export its live state.
        ParseError: if the exported state could not be parsed.
        Any error raised by cluster.sync, unwrapped (e.g. ApplyError).
    """
    whitelist = frozenset(namespace_whitelist or ())
    log.info(
        "sync_started",
        desired=len(desired),
        perform_deletes=perform_deletes,
        namespaces=sorted(whitelist),
    )

    try:
        data = cluster.export()
    except Exception as exc:
        log.error("export_failed", error=str(exc))
        raise ExportError("exporting resource defs from cluster", cause=exc) from exc

    try:
        live = manifests.parse(data)
    except Exception as exc:
        log.error("parse_failed", error=str(exc))
        raise ParseError("parsing exported resources", cause=exc) from exc

    if perform_deletes and not desired:
        log.warning("deletes_suppressed", reason="no desired resources", live=len(live))

    sync_def = build_sync_def(
        live,
        desired,
        perform_deletes=perform_deletes,
        whitelist=whitelist,
    )
    _log_planned(sync_def, live=len(live), desired=len(desired))

    cluster.sync(sync_def)


def _log_planned(sync_def: SyncDef, *, live: int, desired: int) -> None:
    log.info(
        "sync_planned",
        plan_id=sync_def.plan_id,
        created_at=to_rfc3339(sync_def.created_at),
        live=live,
        desired=desired,
        applies=len(sync_def.applies),
        deletes=len(sync_def.deletes),
    )
