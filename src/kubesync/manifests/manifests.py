"""Manifests: YAML documents <-> identified resources."""

from __future__ import annotations

import os
import re
from typing import Any, Optional

import structlog
import yaml

from kubesync.errors import ManifestError
from kubesync.models import PolicySet, Resource, ResourceID

from .validators import (
    validate_is_mapping,
    validate_not_duplicate,
    validate_required_fields,
)

log = structlog.get_logger(__name__)

MANIFEST_EXTENSIONS: tuple[str, ...] = (".yaml", ".yml")

# Kinds that never carry a namespace.
CLUSTER_SCOPED_KINDS: frozenset[str] = frozenset(
    {
        "apiservice",
        "clusterrole",
        "clusterrolebinding",
        "customresourcedefinition",
        "mutatingwebhookconfiguration",
        "namespace",
        "node",
        "persistentvolume",
        "priorityclass",
        "storageclass",
        "validatingwebhookconfiguration",
    }
)

_DOC_SEPARATOR = re.compile(r"^---[ \t]*(?:#.*)?$", re.MULTILINE)


class Manifests:
    """
    Parse and load Kubernetes manifests.

    Notes:
        - Each document keeps its raw bytes, so exported state can be compared
          byte-for-byte with what the repository declares.
        - Namespaced kinds without metadata.namespace get default_namespace.
    """

    def __init__(self, *, default_namespace: str = "default") -> None:
        if not default_namespace:
            raise ValueError("default_namespace must be a non-empty string")
        self._default_namespace = default_namespace

    def parse(self, data: bytes, *, source: str = "<bytes>") -> dict[str, Resource]:
        """
        Parse a multi-document YAML blob into resources keyed by id.

        Raises:
            ManifestError: on invalid YAML, invalid documents or duplicate ids.
        """
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ManifestError(
                f"Manifest is not valid UTF-8: {source}",
                details={"source": source},
                cause=exc,
            ) from exc

        resources: dict[str, Resource] = {}
        sources: dict[str, str] = {}

        for index, chunk in enumerate(_DOC_SEPARATOR.split(text)):
            raw = chunk.strip()
            if not raw:
                continue
            where = f"{source}#{index}"

            try:
                doc = yaml.safe_load(raw)
            except yaml.YAMLError as exc:
                raise ManifestError(
                    f"Invalid YAML in {where}",
                    details={"source": where},
                    cause=exc,
                ) from exc

            if doc is None:
                continue

            for res in self._resources_from_doc(doc, raw, where):
                validate_not_duplicate(sources, res.id, where)
                resources[res.id] = res
                sources[res.id] = where

        return resources

    def load(self, root_dir: str, manifest_dir: Optional[str] = None) -> dict[str, Resource]:
        """
        Load every *.yaml / *.yml file under root_dir/manifest_dir.

        Raises:
            ManifestError: if a file can't be read or parsed, or a resource is
                defined in more than one file.
        """
        base = os.path.join(root_dir, manifest_dir) if manifest_dir else root_dir
        if not os.path.isdir(base):
            raise ManifestError(
                f"Manifest directory does not exist: {base}",
                details={"path": base},
            )

        resources: dict[str, Resource] = {}
        sources: dict[str, str] = {}

        for path in _walk_manifest_files(base):
            try:
                with open(path, "rb") as f:
                    data = f.read()
            except OSError as exc:
                raise ManifestError(
                    f"Failed to read manifest file: {path}",
                    details={"path": path},
                    cause=exc,
                ) from exc

            rel = os.path.relpath(path, root_dir)
            for res_id, res in self.parse(data, source=rel).items():
                validate_not_duplicate(sources, res_id, rel)
                resources[res_id] = res
                sources[res_id] = rel

        log.debug("manifests_loaded", path=base, count=len(resources))
        return resources

    # ----------------------------
    # Internals
    # ----------------------------
    def _resources_from_doc(self, doc: Any, raw: str, where: str) -> list[Resource]:
        validate_is_mapping(doc, where)

        kind = doc.get("kind")
        if isinstance(kind, str) and kind.endswith("List") and "items" in doc:
            items = doc.get("items") or []
            if not isinstance(items, list):
                raise ManifestError(
                    f"List items must be a sequence: {where}",
                    details={"source": where},
                )
            out: list[Resource] = []
            for i, item in enumerate(items):
                item_where = f"{where}.items[{i}]"
                validate_is_mapping(item, item_where)
                item_raw = yaml.safe_dump(item, sort_keys=False, default_flow_style=False)
                out.append(self._build_resource(item, item_raw.strip(), item_where))
            return out

        return [self._build_resource(doc, raw, where)]

    def _build_resource(self, doc: dict[str, Any], raw: str, where: str) -> Resource:
        validate_required_fields(doc, where)

        metadata = doc["metadata"]
        kind = doc["kind"]
        if kind.lower() in CLUSTER_SCOPED_KINDS:
            namespace = ""
        else:
            namespace = metadata.get("namespace") or self._default_namespace

        return Resource(
            resource_id=ResourceID(namespace=namespace, kind=kind, name=metadata["name"]),
            bytes=raw.encode("utf-8"),
            policy=PolicySet.from_annotations(metadata.get("annotations")),
        )


def _walk_manifest_files(base: str) -> list[str]:
    paths: list[str] = []
    for dirpath, dirnames, filenames in os.walk(base):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        for name in sorted(filenames):
            if name.endswith(MANIFEST_EXTENSIONS):
                paths.append(os.path.join(dirpath, name))
    return paths
