"""Resource controller - kubectl-backed listing of cluster objects.

Providers call :meth:`ResourceController.list_resources` whenever the tree
asks for children; nothing is cached here beyond in-flight de-duplication,
so every refresh sees the current state of the cluster.
"""

from __future__ import annotations

import asyncio
import logging
import subprocess
from typing import Any

from kubetree.constants.timeouts import KUBECTL_COMMAND_TIMEOUT
from kubetree.controllers.base import BaseController
from kubetree.controllers.resources.fetchers import ResourceFetcher
from kubetree.controllers.watch.paths import WatchPaths

logger = logging.getLogger(__name__)


class ResourceController(BaseController):
    """Lists Kubernetes objects through kubectl."""

    _CONNECTION_CHECK_TIMEOUT = 12

    def __init__(self, context: str | None = None, kubectl_binary: str = "kubectl") -> None:
        """Initialize the resource controller.

        Args:
            context: Optional Kubernetes context name.
            kubectl_binary: kubectl executable to invoke.
        """
        self.context = context
        self._kubectl_binary = kubectl_binary
        self._kubectl_tasks: dict[tuple[str, ...], asyncio.Task[str]] = {}
        self._fetcher = ResourceFetcher(self._run_kubectl)

    def _run_kubectl_sync(
        self,
        args: tuple[str, ...],
        timeout: int = KUBECTL_COMMAND_TIMEOUT,
    ) -> str:
        """Run a kubectl command synchronously (thread-safe wrapper target)."""
        cmd = [self._kubectl_binary]
        if self.context:
            cmd.extend(["--context", self.context])
        cmd.extend(args)
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout)
        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise RuntimeError(stderr or "kubectl command failed")
        return result.stdout

    async def _run_kubectl(self, args: tuple[str, ...]) -> str:
        """Run kubectl on a worker thread, sharing identical in-flight calls."""
        existing = self._kubectl_tasks.get(args)
        if existing is not None:
            return await asyncio.shield(existing)

        task = asyncio.create_task(asyncio.to_thread(self._run_kubectl_sync, args))
        self._kubectl_tasks[args] = task
        try:
            return await task
        except subprocess.TimeoutExpired as exc:
            raise RuntimeError(f"kubectl timed out after {exc.timeout}s") from exc
        finally:
            if self._kubectl_tasks.get(args) is task:
                self._kubectl_tasks.pop(args, None)

    async def check_connection(self) -> bool:
        try:
            await asyncio.to_thread(
                self._run_kubectl_sync,
                ("get", "--raw", "/readyz"),
                self._CONNECTION_CHECK_TIMEOUT,
            )
        except (OSError, RuntimeError, subprocess.TimeoutExpired) as exc:
            logger.warning("Cluster connection check failed: %s", exc)
            return False
        return True

    async def list_resources(
        self,
        kind: str,
        namespace: str | None = None,
    ) -> list[dict[str, Any]]:
        namespaced = WatchPaths.is_namespaced(kind) if kind in WatchPaths.supported_kinds() else True
        return await self._fetcher.fetch_resources_raw(
            kind,
            namespace=namespace,
            namespaced=namespaced,
        )
