"""Kubernetes cluster implementation (export / sync / namespace discovery)."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import AbstractSet, Any, Callable, Iterable, Optional, Sequence, TypeVar

import structlog
import yaml

from kubesync.auth import ClusterAuth, KubeClientFactory
from kubesync.errors import (
    ApiError,
    ApiErrorInfo,
    ApplyError,
    AuthError,
    InvalidArgumentError,
    KubeSyncError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    map_api_error,
)
from kubesync.models import Resource
from kubesync.plan import Action, SyncAction, SyncDef, filter_namespaces, order_actions

T = TypeVar("T")

log = structlog.get_logger(__name__)

DEFAULT_FIELD_MANAGER: str = "kubesync"

# A discovered kind is exported only if kubesync can list, apply and delete it.
_REQUIRED_VERBS: frozenset[str] = frozenset({"list", "patch", "delete"})

# Kinds left out of discovery: controller bookkeeping, plus Secrets, which are
# exported only when asked for (export_kinds / extra_kinds).
_UNDISCOVERED_KINDS: frozenset[str] = frozenset(
    {
        "ControllerRevision",
        "Endpoints",
        "EndpointSlice",
        "Event",
        "Lease",
        "Secret",
    }
)

_LAST_APPLIED_ANNOTATION = "kubectl.kubernetes.io/last-applied-configuration"

_SERVER_METADATA_FIELDS: tuple[str, ...] = (
    "uid",
    "resourceVersion",
    "generation",
    "creationTimestamp",
    "managedFields",
    "selfLink",
)

# Namespaces owned by the control plane. Their contents are exported only
# when the whitelist names them; the Namespace objects never are.
_SYSTEM_NAMESPACE_PREFIX = "kube-"
_PROTECTED_NAMESPACES: frozenset[str] = frozenset({"default"})

# Labels the control plane and its addon manager put on what they own.
_SYSTEM_LABELS: tuple[str, ...] = (
    "addonmanager.kubernetes.io/mode",
    "kubernetes.io/cluster-service",
    "kubernetes.io/bootstrapping",
)

# Objects the control plane creates by itself.
_SYSTEM_OBJECTS: frozenset[tuple[str, str]] = frozenset(
    {
        ("service", "kubernetes"),
        ("configmap", "kube-root-ca.crt"),
        ("serviceaccount", "default"),
    }
)


@dataclass(frozen=True)
class _RetryPolicy:
    max_retries: int = 3
    initial_delay_sec: float = 1.0


class KubernetesCluster:
    """
    Cluster backed by the Kubernetes API (dynamic client).

    Notes:
        - export() covers every namespaced kind the API server advertises
          (or exactly export_kinds, when given), plus extra_kinds. Cluster-
          scoped kinds other than Namespace are exported only through
          export_kinds / extra_kinds.
        - The namespace whitelist scopes both export and namespace discovery.
        - Control-plane namespaces and objects are never exported, so they
          are never planned for deletion.
        - sync() keeps going after a failed action and reports every failure
          in one ApplyError at the end.
    """

    def __init__(
        self,
        auth: ClusterAuth,
        *,
        namespace_whitelist: Optional[AbstractSet[str]] = None,
        export_kinds: Optional[Sequence[tuple[str, str]]] = None,
        extra_kinds: Sequence[tuple[str, str]] = (),
        field_manager: str = DEFAULT_FIELD_MANAGER,
    ) -> None:
        client = KubeClientFactory(auth).build_dynamic_client()
        self._setup(client, namespace_whitelist, export_kinds, extra_kinds, field_manager)

    @classmethod
    def from_client(
        cls,
        client: Any,
        *,
        namespace_whitelist: Optional[AbstractSet[str]] = None,
        export_kinds: Optional[Sequence[tuple[str, str]]] = None,
        extra_kinds: Sequence[tuple[str, str]] = (),
        field_manager: str = DEFAULT_FIELD_MANAGER,
    ) -> "KubernetesCluster":
        """Create cluster from a pre-built dynamic client (useful for tests)."""
        obj = cls.__new__(cls)
        obj._setup(client, namespace_whitelist, export_kinds, extra_kinds, field_manager)
        return obj

    def _setup(
        self,
        client: Any,
        namespace_whitelist: Optional[AbstractSet[str]],
        export_kinds: Optional[Sequence[tuple[str, str]]],
        extra_kinds: Sequence[tuple[str, str]],
        field_manager: str,
    ) -> None:
        if not field_manager:
            raise InvalidArgumentError("field_manager must be a non-empty string")
        self._client = client
        self._namespace_whitelist = frozenset(namespace_whitelist or ())
        self._export_kinds = tuple(export_kinds) if export_kinds is not None else None
        self._extra_kinds = tuple(extra_kinds)
        self._field_manager = field_manager
        self._retry_policy = _RetryPolicy()

    # ----------------------------
    # Public API
    # ----------------------------
    def list_namespaces(self) -> list[str]:
        """Return in-scope namespace names, in the order the API lists them."""
        return [_name_of(ns) for ns in self._namespace_objects()]

    def export(self) -> bytes:
        """Export in-scope namespaces and their objects as a YAML stream."""
        apis = self._export_apis()
        namespaced = [api for api in apis if api.namespaced]
        cluster_scoped = [api for api in apis if not api.namespaced and api.kind != "Namespace"]

        docs: list[dict[str, Any]] = []
        for ns_obj in self._namespace_objects():
            namespace = _name_of(ns_obj)
            if not self._exports_namespace(namespace):
                continue
            if _is_exportable(ns_obj, "Namespace"):
                docs.append(_clean_object(ns_obj, "v1", "Namespace"))

            for api in namespaced:
                for item in self._list_items(api, namespace):
                    if _is_exportable(item, api.kind):
                        docs.append(_clean_object(item, api.group_version, api.kind))

        # Cluster-scoped objects have no namespace, so a whitelist excludes them.
        if not self._namespace_whitelist:
            for api in cluster_scoped:
                for item in self._list_items(api, None):
                    if _is_exportable(item, api.kind):
                        docs.append(_clean_object(item, api.group_version, api.kind))

        log.debug("cluster_exported", count=len(docs), kinds=len(apis))
        chunks = [yaml.safe_dump(doc, sort_keys=False).strip() for doc in docs]
        return "\n---\n".join(chunks).encode("utf-8")

    def sync(self, sync_def: SyncDef) -> None:
        """
        Perform every action of sync_def in dependency order.

        Raises:
            AuthError: immediately, since no later action can succeed.
            ApplyError: after all actions ran, if any of them failed.
        """
        if sync_def.is_empty():
            return

        failures: dict[str, str] = {}
        for action in order_actions(sync_def):
            try:
                self._perform(action)
            except KubeSyncError as exc:
                if isinstance(exc, AuthError):
                    raise
                failures[action.resource.id] = str(exc)
                log.warning(
                    "action_failed",
                    resource=action.resource.id,
                    action=action.action.value,
                    error=str(exc),
                )

        if failures:
            raise ApplyError(
                f"{len(failures)} of {len(sync_def)} sync actions failed",
                details={"plan_id": sync_def.plan_id, "failures": failures},
            )

    # ----------------------------
    # Internals
    # ----------------------------
    def _perform(self, action: SyncAction) -> None:
        res = action.resource
        if action.action is Action.APPLY:
            self._apply(res)
            return
        if action.action is Action.DELETE:
            self._delete(res)
            return
        raise InvalidArgumentError("Unsupported action", details={"action": action.action})

    def _apply(self, res: Resource) -> None:
        body = _load_body(res)
        api = self._api_resource(body["apiVersion"], body["kind"])
        log.debug("applying", resource=res.id)
        self._execute(
            lambda: self._client.server_side_apply(
                api,
                body=body,
                name=res.name,
                namespace=res.namespace or None,
                field_manager=self._field_manager,
                force_conflicts=True,
            )
        )

    def _delete(self, res: Resource) -> None:
        body = _load_body(res)
        api = self._api_resource(body["apiVersion"], body["kind"])
        log.debug("deleting", resource=res.id)
        try:
            self._execute(
                lambda: self._client.delete(
                    api,
                    name=res.name,
                    namespace=res.namespace or None,
                )
            )
        except NotFoundError:
            log.debug("already_deleted", resource=res.id)

    def _exports_namespace(self, namespace: str) -> bool:
        if namespace.startswith(_SYSTEM_NAMESPACE_PREFIX):
            return namespace in self._namespace_whitelist
        return True

    def _export_apis(self) -> list[Any]:
        """Resolve the kinds export() lists, without duplicates."""
        if self._export_kinds is None:
            apis = self._discover_apis()
        else:
            apis = [self._api_resource(v, k) for v, k in self._export_kinds]
        apis += [self._api_resource(v, k) for v, k in self._extra_kinds]

        seen: set[tuple[str, str]] = set()
        out: list[Any] = []
        for api in apis:
            key = (api.group_version, api.kind)
            if key not in seen:
                seen.add(key)
                out.append(api)
        return out

    def _discover_apis(self) -> list[Any]:
        found = self._execute(lambda: self._client.resources.search())
        apis: list[Any] = []
        for api in found:
            verbs = set(_attr(api, "verbs") or ())
            if not _REQUIRED_VERBS <= verbs:
                continue
            if not _attr(api, "preferred") or "/" in (_attr(api, "name") or ""):
                continue
            if not _attr(api, "namespaced") or api.kind in _UNDISCOVERED_KINDS:
                continue
            apis.append(api)
        return apis

    def _namespace_objects(self) -> list[dict[str, Any]]:
        items = self._list_items(self._api_resource("v1", "Namespace"), None)
        by_name = {_name_of(i): i for i in items}
        names = filter_namespaces(by_name, self._namespace_whitelist)
        return [by_name[name] for name in names]

    def _list_items(self, api: Any, namespace: Optional[str]) -> list[dict[str, Any]]:
        if namespace is None:
            data = self._execute(lambda: self._client.get(api))
        else:
            data = self._execute(lambda: self._client.get(api, namespace=namespace))
        items = _to_dict(data).get("items") or []
        return [_to_dict(i) for i in items]

    def _api_resource(self, api_version: str, kind: str) -> Any:
        return self._execute(
            lambda: self._client.resources.get(api_version=api_version, kind=kind)
        )

    def _execute(self, func: Callable[[], T]) -> T:
        delay = self._retry_policy.initial_delay_sec
        for attempt in range(self._retry_policy.max_retries + 1):
            try:
                return func()
            except Exception as exc:
                mapped = self._map_exception(exc)
                if mapped is exc:
                    raise
                if self._should_retry(mapped) and attempt < self._retry_policy.max_retries:
                    time.sleep(delay)
                    delay *= 2
                    continue
                raise mapped from exc

        raise ApiError("Unexpected retry loop termination")

    def _should_retry(self, exc: Exception) -> bool:
        if isinstance(exc, RateLimitError):
            return True
        if isinstance(exc, NetworkError):
            return True
        if isinstance(exc, ApiError):
            status_code = getattr(exc, "details", {}).get("status_code")
            return isinstance(status_code, int) and 500 <= status_code <= 599
        return False

    def _map_exception(self, exc: Exception) -> Exception:
        if isinstance(exc, KubeSyncError):
            return exc

        try:
            from kubernetes.client.exceptions import ApiException
            from kubernetes.dynamic.exceptions import DynamicApiError, ResourceNotFoundError
            from urllib3.exceptions import HTTPError as Urllib3HTTPError
        except Exception:  # pragma: no cover
            ApiException = DynamicApiError = ResourceNotFoundError = None  # type: ignore[assignment,misc]
            Urllib3HTTPError = None  # type: ignore[assignment,misc]

        if ResourceNotFoundError is not None and isinstance(exc, ResourceNotFoundError):
            return InvalidArgumentError("Unknown resource kind", cause=exc)

        if ApiException is not None and isinstance(exc, (ApiException, DynamicApiError)):
            return map_api_error(_api_exception_to_info(exc), cause=exc)

        if isinstance(exc, (OSError, TimeoutError)):
            return NetworkError("Network error", cause=exc)
        if Urllib3HTTPError is not None and isinstance(exc, Urllib3HTTPError):
            return NetworkError("Network error", cause=exc)

        return ApiError("Kubernetes API error", cause=exc)


def _to_dict(obj: Any) -> dict[str, Any]:
    if isinstance(obj, dict):
        return obj
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise ApiError("Unexpected API response type", details={"type": type(obj).__name__})


def kinds_of(resources: Iterable[Resource]) -> list[tuple[str, str]]:
    """Return the (apiVersion, kind) pairs of resources, in first-seen order."""
    out: list[tuple[str, str]] = []
    for res in resources:
        try:
            body = yaml.safe_load(res.bytes)
        except yaml.YAMLError:
            continue
        if not isinstance(body, dict):
            continue
        api_version, kind = body.get("apiVersion"), body.get("kind")
        if isinstance(api_version, str) and isinstance(kind, str):
            pair = (api_version, kind)
            if pair not in out:
                out.append(pair)
    return out


def _attr(obj: Any, name: str) -> Any:
    # Discovery entries answer unknown attributes with KeyError.
    try:
        return getattr(obj, name)
    except (AttributeError, KeyError):
        return None


def _name_of(obj: dict[str, Any]) -> str:
    return str((obj.get("metadata") or {}).get("name", ""))


def _is_system_namespace(name: str) -> bool:
    return name.startswith(_SYSTEM_NAMESPACE_PREFIX) or name in _PROTECTED_NAMESPACES


def _is_exportable(obj: dict[str, Any], kind: str) -> bool:
    metadata = obj.get("metadata") or {}
    if metadata.get("ownerReferences"):
        return False
    labels = metadata.get("labels") or {}
    if any(label in labels for label in _SYSTEM_LABELS):
        return False

    name = str(metadata.get("name") or "")
    kind = kind.lower()
    if kind == "namespace":
        return not _is_system_namespace(name)
    if kind == "secret" and obj.get("type") == "kubernetes.io/service-account-token":
        return False
    if kind in ("clusterrole", "clusterrolebinding") and name.startswith("system:"):
        return False
    return (kind, name) not in _SYSTEM_OBJECTS


def _clean_object(obj: dict[str, Any], api_version: str, kind: str) -> dict[str, Any]:
    """Drop server-populated fields so the object reads like a manifest."""
    metadata = dict(obj.get("metadata") or {})
    for key in _SERVER_METADATA_FIELDS:
        metadata.pop(key, None)

    annotations = dict(metadata.get("annotations") or {})
    annotations.pop(_LAST_APPLIED_ANNOTATION, None)
    if annotations:
        metadata["annotations"] = annotations
    else:
        metadata.pop("annotations", None)

    cleaned: dict[str, Any] = {"apiVersion": api_version, "kind": kind, "metadata": metadata}
    for key, value in obj.items():
        if key in ("apiVersion", "kind", "metadata", "status"):
            continue
        cleaned[key] = value
    return cleaned


def _load_body(res: Resource) -> dict[str, Any]:
    try:
        body = yaml.safe_load(res.bytes)
    except yaml.YAMLError as exc:
        raise InvalidArgumentError(
            "Resource bytes are not valid YAML",
            details={"resource": res.id},
            cause=exc,
        ) from exc
    if not isinstance(body, dict) or "apiVersion" not in body or "kind" not in body:
        raise InvalidArgumentError(
            "Resource bytes are not a Kubernetes object",
            details={"resource": res.id},
        )
    return body


def _api_exception_to_info(exc: Any) -> ApiErrorInfo:
    status_code = getattr(exc, "status", None)
    reason = getattr(exc, "reason", None)

    message = None
    details: dict[str, Any] = {}

    body = getattr(exc, "body", None)
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str) and body:
        try:
            payload = json.loads(body)
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            message = payload.get("message") or None
            if isinstance(payload.get("reason"), str):
                details["reason_detail"] = payload["reason"]

    if not isinstance(status_code, int):
        status_code = 0

    return ApiErrorInfo(
        status_code=status_code,
        reason=reason if isinstance(reason, str) else None,
        message=message,
        details=details or None,
    )
