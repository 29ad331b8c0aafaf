"""kubesync command line: run one reconciliation pass."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

import structlog

from kubesync.auth import ClusterAuth
from kubesync.cluster import KubernetesCluster, kinds_of
from kubesync.config import SyncConfig, parse_namespace_list
from kubesync.errors import KubeSyncError
from kubesync.logging import configure_logging
from kubesync.manifests import Manifests
from kubesync.reconcile import sync

log = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kubesync",
        description="Make a Kubernetes cluster match the manifests in a directory.",
    )
    parser.add_argument("--root-dir", help="repository checkout (env: KUBESYNC_ROOT_DIR)")
    parser.add_argument("--manifest-dir", help="manifest directory relative to --root-dir")
    parser.add_argument(
        "--namespace",
        action="append",
        default=None,
        help="restrict to this namespace; repeatable (env: KUBESYNC_NAMESPACES)",
    )
    parser.add_argument(
        "--deletes",
        action="store_true",
        default=None,
        help="delete live objects missing from the manifests",
    )
    parser.add_argument("--kubeconfig", help="kubeconfig file")
    parser.add_argument("--context", help="kubeconfig context")
    parser.add_argument(
        "--in-cluster",
        action="store_true",
        help="use the pod service account instead of a kubeconfig",
    )
    parser.add_argument("--log-json", action="store_true", help="emit JSON log lines")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.verbose else "INFO", json=args.log_json)

    try:
        config = SyncConfig.from_env(
            root_dir=args.root_dir,
            manifest_dir=args.manifest_dir,
            namespace_whitelist=parse_namespace_list(args.namespace) if args.namespace else None,
            perform_deletes=args.deletes,
        )
        auth = (
            ClusterAuth.in_cluster()
            if args.in_cluster
            else ClusterAuth.kubeconfig(config_file=args.kubeconfig, context=args.context)
        )

        manifests = Manifests(default_namespace=config.default_namespace)
        desired = manifests.load(config.root_dir, config.manifest_dir)
        cluster = KubernetesCluster(
            auth,
            namespace_whitelist=config.namespace_whitelist,
            extra_kinds=kinds_of(desired.values()),
            field_manager=config.field_manager,
        )
        sync(
            manifests,
            desired,
            cluster,
            config.perform_deletes,
            config.namespace_whitelist,
        )
    except KubeSyncError as exc:
        log.error("sync_failed", error=str(exc), error_type=type(exc).__name__, details=exc.details)
        return 1

    log.info("sync_done")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
