"""Kubernetes API client construction for kubesync."""

from __future__ import annotations

from kubesync.errors import AuthError, InvalidArgumentError

from .cluster_auth import ClusterAuth


class KubeClientFactory:
    """Load cluster credentials and build Kubernetes API client objects."""

    def __init__(self, auth: ClusterAuth) -> None:
        if not isinstance(auth, ClusterAuth):
            raise InvalidArgumentError("KubeClientFactory requires a ClusterAuth")
        self._auth = auth

    def build_api_client(self):
        """
        Return an authenticated API client.

        Returns:
            kubernetes.client.ApiClient

        Raises:
            AuthError: if the configuration can't be loaded.
        """
        try:
            from kubernetes import client, config
        except Exception as exc:  # pragma: no cover
            raise AuthError(
                "Kubernetes client library is not available",
                details={"hint": "Install kubernetes"},
                cause=exc,
            ) from exc

        if self._auth.kind == "in_cluster":
            try:
                configuration = client.Configuration()
                config.load_incluster_config(client_configuration=configuration)
                return client.ApiClient(configuration)
            except Exception as exc:
                raise AuthError(
                    "Failed to load in-cluster configuration",
                    cause=exc,
                ) from exc

        try:
            return config.new_client_from_config(
                config_file=self._auth.config_file,
                context=self._auth.context,
            )
        except Exception as exc:
            raise AuthError(
                "Failed to load kubeconfig",
                details={
                    "config_file": self._auth.config_file,
                    "context": self._auth.context,
                },
                cause=exc,
            ) from exc

    def build_dynamic_client(self):
        """
        Build a dynamic client (discovers resource kinds at runtime).

        Returns:
            kubernetes.dynamic.DynamicClient
        """
        try:
            from kubernetes.dynamic import DynamicClient
        except Exception as exc:  # pragma: no cover
            raise AuthError(
                "Kubernetes client library is not available",
                details={"hint": "Install kubernetes"},
                cause=exc,
            ) from exc

        api_client = self.build_api_client()
        try:
            return DynamicClient(api_client)
        except Exception as exc:
            raise AuthError("Failed to build dynamic client", cause=exc) from exc
