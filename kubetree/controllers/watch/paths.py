"""Kubernetes API paths for watchable resources."""

from __future__ import annotations

# kind -> (api prefix, plural, namespaced)
_RESOURCE_PATHS: dict[str, tuple[str, str, bool]] = {
    "pods": ("/api/v1", "pods", True),
    "services": ("/api/v1", "services", True),
    "configmaps": ("/api/v1", "configmaps", True),
    "secrets": ("/api/v1", "secrets", True),
    "events": ("/api/v1", "events", True),
    "persistentvolumeclaims": ("/api/v1", "persistentvolumeclaims", True),
    "namespaces": ("/api/v1", "namespaces", False),
    "nodes": ("/api/v1", "nodes", False),
    "persistentvolumes": ("/api/v1", "persistentvolumes", False),
    "deployments": ("/apis/apps/v1", "deployments", True),
    "statefulsets": ("/apis/apps/v1", "statefulsets", True),
    "daemonsets": ("/apis/apps/v1", "daemonsets", True),
    "replicasets": ("/apis/apps/v1", "replicasets", True),
    "jobs": ("/apis/batch/v1", "jobs", True),
    "cronjobs": ("/apis/batch/v1", "cronjobs", True),
    "ingresses": ("/apis/networking.k8s.io/v1", "ingresses", True),
}


class WatchPaths:
    """Helpers that build API paths for common resources."""

    @staticmethod
    def supported_kinds() -> tuple[str, ...]:
        return tuple(_RESOURCE_PATHS)

    @staticmethod
    def for_kind(kind: str, namespace: str | None = None) -> str:
        """Return the collection path for ``kind``, scoped to ``namespace`` if namespaced.

        Raises:
            KeyError: If ``kind`` is not a known resource.
        """
        prefix, plural, namespaced = _RESOURCE_PATHS[kind.lower()]
        if namespaced and namespace:
            return f"{prefix}/namespaces/{namespace}/{plural}"
        return f"{prefix}/{plural}"

    @staticmethod
    def is_namespaced(kind: str) -> bool:
        return _RESOURCE_PATHS[kind.lower()][2]

    @staticmethod
    def pods(namespace: str | None = None) -> str:
        return WatchPaths.for_kind("pods", namespace)

    @staticmethod
    def deployments(namespace: str | None = None) -> str:
        return WatchPaths.for_kind("deployments", namespace)

    @staticmethod
    def services(namespace: str | None = None) -> str:
        return WatchPaths.for_kind("services", namespace)

    @staticmethod
    def namespaces() -> str:
        return WatchPaths.for_kind("namespaces")

    @staticmethod
    def nodes() -> str:
        return WatchPaths.for_kind("nodes")

    @staticmethod
    def events(namespace: str | None = None) -> str:
        return WatchPaths.for_kind("events", namespace)

    @staticmethod
    def configmaps(namespace: str | None = None) -> str:
        return WatchPaths.for_kind("configmaps", namespace)

    @staticmethod
    def secrets(namespace: str | None = None) -> str:
        return WatchPaths.for_kind("secrets", namespace)
