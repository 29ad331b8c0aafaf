"""Strict validation helpers for manifest documents."""

from __future__ import annotations

from typing import Any

from kubesync.errors import ManifestError


def validate_is_mapping(doc: Any, where: str) -> None:
    if not isinstance(doc, dict):
        raise ManifestError(
            f"Manifest document must be a mapping: {where}",
            details={"source": where, "type": type(doc).__name__},
        )


def validate_required_fields(doc: dict[str, Any], where: str) -> None:
    for key in ("apiVersion", "kind"):
        value = doc.get(key)
        if not isinstance(value, str) or not value.strip():
            raise ManifestError(
                f"Manifest document is missing {key}: {where}",
                details={"source": where, "field": key},
            )

    metadata = doc.get("metadata")
    if not isinstance(metadata, dict):
        raise ManifestError(
            f"Manifest document is missing metadata: {where}",
            details={"source": where, "field": "metadata"},
        )

    name = metadata.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ManifestError(
            f"Manifest document is missing metadata.name: {where}",
            details={"source": where, "field": "metadata.name"},
        )

    namespace = metadata.get("namespace")
    if namespace is not None and not isinstance(namespace, str):
        raise ManifestError(
            f"metadata.namespace must be a string: {where}",
            details={"source": where, "field": "metadata.namespace"},
        )

    annotations = metadata.get("annotations")
    if annotations is not None and not isinstance(annotations, dict):
        raise ManifestError(
            f"metadata.annotations must be a mapping: {where}",
            details={"source": where, "field": "metadata.annotations"},
        )


def validate_not_duplicate(
    sources_by_id: dict[str, str],
    res_id: str,
    where: str,
) -> None:
    """Reject a resource id already defined by another document."""
    if res_id in sources_by_id:
        raise ManifestError(
            f"Duplicate definition of {res_id} ({sources_by_id[res_id]} and {where})",
            details={"resource": res_id, "sources": [sources_by_id[res_id], where]},
        )
