"""Conversion of raw Kubernetes objects into tree nodes."""

from __future__ import annotations

from typing import Any

from kubetree.constants.values import TAG_CATEGORY, TAG_NAMESPACE, TAG_RESOURCE
from kubetree.models.tree import TreeNode


def _metadata(obj: dict[str, Any]) -> dict[str, Any]:
    metadata = obj.get("metadata")
    return metadata if isinstance(metadata, dict) else {}


def resource_identity(obj: dict[str, Any], kind: str) -> str:
    """Stable node id for ``obj``: its UID, else ``namespace/name``."""
    metadata = _metadata(obj)
    uid = metadata.get("uid")
    if uid:
        return f"{kind}:{uid}"
    namespace = metadata.get("namespace") or ""
    name = metadata.get("name") or "unknown"
    return f"{kind}:{namespace}/{name}" if namespace else f"{kind}:{name}"


def resource_status(obj: dict[str, Any], kind: str) -> str:
    """Short status summary shown next to the resource name."""
    status = obj.get("status") or {}
    spec = obj.get("spec") or {}
    kind = kind.lower()

    if kind in ("pods", "namespaces"):
        return str(status.get("phase") or "")
    if kind in ("deployments", "statefulsets", "replicasets"):
        desired = spec.get("replicas", 0) or 0
        ready = status.get("readyReplicas", 0) or 0
        return f"{ready}/{desired} ready"
    if kind == "daemonsets":
        desired = status.get("desiredNumberScheduled", 0) or 0
        ready = status.get("numberReady", 0) or 0
        return f"{ready}/{desired} ready"
    if kind == "services":
        return str(spec.get("type") or "")
    if kind == "nodes":
        for condition in status.get("conditions") or []:
            if condition.get("type") == "Ready":
                return "Ready" if condition.get("status") == "True" else "NotReady"
        return "Unknown"
    return ""


def resource_node(obj: dict[str, Any], kind: str) -> TreeNode:
    metadata = _metadata(obj)
    name = str(metadata.get("name") or "unknown")
    namespace = metadata.get("namespace")
    status = resource_status(obj, kind)

    description = " · ".join(part for part in (namespace, status) if part) or None
    tooltip_lines = [
        f"Kind: {obj.get('kind') or kind}",
        f"Name: {name}",
    ]
    if namespace:
        tooltip_lines.append(f"Namespace: {namespace}")
    if status:
        tooltip_lines.append(f"Status: {status}")
    tooltip_lines.append(f"Created: {metadata.get('creationTimestamp') or 'Unknown'}")

    return TreeNode(
        id=resource_identity(obj, kind),
        label=name,
        description=description,
        tooltip="\n".join(tooltip_lines),
        tag=TAG_RESOURCE,
        payload=obj,
    )


def category_node(kind: str, description: str | None = None) -> TreeNode:
    return TreeNode(
        id=f"category-{kind}",
        label=kind.capitalize(),
        description=description,
        tooltip=f"All {kind} in scope",
        tag=TAG_CATEGORY,
        payload=kind,
        expandable=True,
    )


def namespace_node(obj: dict[str, Any]) -> TreeNode:
    metadata = _metadata(obj)
    name = str(metadata.get("name") or "unknown")
    phase = (obj.get("status") or {}).get("phase") or "Unknown"
    created = metadata.get("creationTimestamp") or "Unknown"
    return TreeNode(
        id=resource_identity(obj, "namespaces"),
        label=name,
        description="Terminating" if phase == "Terminating" else None,
        tooltip=f"Namespace: {name}\nStatus: {phase}\nCreated: {created}",
        tag=TAG_NAMESPACE,
        payload=obj,
    )
