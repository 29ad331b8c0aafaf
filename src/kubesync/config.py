"""Configuration for a reconciliation pass."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from kubesync.errors import ConfigError

_DNS1123_LABEL = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")
_TRUE_VALUES: frozenset[str] = frozenset({"1", "true", "yes", "on"})


@dataclass(slots=True, frozen=True)
class SyncConfig:
    """
    Settings consumed by one pass.

    namespace_whitelist:
        Empty means every namespace is in scope.
    perform_deletes:
        Off by default; deleting live objects missing from the repository
        can remove things nobody declared (including this tool).
    """

    root_dir: str
    manifest_dir: Optional[str] = None
    namespace_whitelist: frozenset[str] = frozenset()
    perform_deletes: bool = False
    default_namespace: str = "default"
    field_manager: str = "kubesync"

    def __post_init__(self) -> None:
        if not isinstance(self.root_dir, str) or not self.root_dir.strip():
            raise ConfigError("root_dir must be a non-empty string")

        if not isinstance(self.namespace_whitelist, frozenset):
            object.__setattr__(self, "namespace_whitelist", frozenset(self.namespace_whitelist))

        for name in sorted(self.namespace_whitelist):
            if not _DNS1123_LABEL.match(name) or len(name) > 63:
                raise ConfigError(
                    f"Invalid namespace name in whitelist: {name!r}",
                    details={"namespace": name},
                )

        if not _DNS1123_LABEL.match(self.default_namespace):
            raise ConfigError(
                f"Invalid default namespace: {self.default_namespace!r}",
                details={"namespace": self.default_namespace},
            )

        if not self.field_manager.strip():
            raise ConfigError("field_manager must be a non-empty string")

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        **overrides: object,
    ) -> SyncConfig:
        """
        Build config from KUBESYNC_* environment variables.

        Recognized:
            - KUBESYNC_ROOT_DIR (default: current directory)
            - KUBESYNC_MANIFEST_DIR
            - KUBESYNC_NAMESPACES: comma-separated whitelist
            - KUBESYNC_DELETES: 1/true/yes/on
            - KUBESYNC_DEFAULT_NAMESPACE

        Keyword overrides that are not None win over the environment.
        """
        env = os.environ if environ is None else environ

        values: dict[str, object] = {
            "root_dir": env.get("KUBESYNC_ROOT_DIR", "").strip() or os.getcwd(),
            "manifest_dir": env.get("KUBESYNC_MANIFEST_DIR", "").strip() or None,
            "namespace_whitelist": parse_namespace_list(env.get("KUBESYNC_NAMESPACES", "")),
            "perform_deletes": parse_bool(env.get("KUBESYNC_DELETES", "")),
        }
        default_ns = env.get("KUBESYNC_DEFAULT_NAMESPACE", "").strip()
        if default_ns:
            values["default_namespace"] = default_ns

        for key, value in overrides.items():
            if value is not None:
                values[key] = value

        try:
            return cls(**values)  # type: ignore[arg-type]
        except TypeError as exc:
            raise ConfigError("Unknown configuration option", cause=exc) from exc


def parse_namespace_list(value: str | Iterable[str]) -> frozenset[str]:
    """Parse a comma-separated (or already split) namespace list."""
    if isinstance(value, str):
        parts: Iterable[str] = value.split(",")
    else:
        parts = value
    return frozenset(p.strip() for p in parts if p and p.strip())


def parse_bool(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES
