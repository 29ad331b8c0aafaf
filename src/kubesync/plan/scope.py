"""Namespace scoping shared by planning and namespace discovery."""

from __future__ import annotations

from typing import AbstractSet, Iterable, Optional


def in_scope(namespace: str, whitelist: Optional[AbstractSet[str]]) -> bool:
    """Return True if namespace participates. Empty/None whitelist means all."""
    if not whitelist:
        return True
    return namespace in whitelist


def filter_namespaces(
    names: Iterable[str],
    whitelist: Optional[AbstractSet[str]],
) -> list[str]:
    """Return the names in scope, keeping the order they were given in."""
    return [name for name in names if in_scope(name, whitelist)]
