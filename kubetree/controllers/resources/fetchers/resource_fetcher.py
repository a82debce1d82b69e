"""Resource fetcher - lists Kubernetes objects of one kind through kubectl."""

from __future__ import annotations

import json
import logging
from typing import Any

from kubetree.constants.timeouts import CLUSTER_REQUEST_TIMEOUT

logger = logging.getLogger(__name__)


class ResourceFetcher:
    """Fetches raw object lists from the Kubernetes cluster."""

    _QUERY_TIMEOUT = CLUSTER_REQUEST_TIMEOUT
    _RETRY_QUERY_TIMEOUT = "45s"
    _CHUNK_SIZE = 500
    _TIMEOUT_ERROR_TOKENS = (
        "timed out",
        "timeout",
        "deadline exceeded",
        "i/o timeout",
        "context deadline exceeded",
    )

    def __init__(self, run_kubectl_func: Any) -> None:
        """Initialize with kubectl runner function.

        Args:
            run_kubectl_func: Async function to run kubectl commands
        """
        self._run_kubectl = run_kubectl_func

    @classmethod
    def _is_timeout_error(cls, error: Exception) -> bool:
        """Return True when error indicates timeout-like failure."""
        message = str(error).lower()
        return any(token in message for token in cls._TIMEOUT_ERROR_TOKENS)

    def build_list_args(
        self,
        kind: str,
        *,
        namespace: str | None = None,
        namespaced: bool = True,
        request_timeout: str | None = None,
    ) -> tuple[str, ...]:
        """Build ``kubectl get`` arguments for one kind."""
        args: list[str] = ["get", kind]
        if namespaced:
            if namespace:
                args.extend(["-n", namespace])
            else:
                args.append("--all-namespaces")
        args.extend(
            [
                f"--chunk-size={self._CHUNK_SIZE}",
                "-o",
                "json",
                f"--request-timeout={request_timeout or self._QUERY_TIMEOUT}",
            ]
        )
        return tuple(args)

    async def fetch_resources_raw(
        self,
        kind: str,
        *,
        namespace: str | None = None,
        namespaced: bool = True,
    ) -> list[dict[str, Any]]:
        """Fetch raw objects, retrying once with a longer timeout on timeouts."""
        timeout_plan = [self._QUERY_TIMEOUT, self._RETRY_QUERY_TIMEOUT]

        output = ""
        for attempt, timeout in enumerate(timeout_plan, start=1):
            try:
                output = await self._run_kubectl(
                    self.build_list_args(
                        kind,
                        namespace=namespace,
                        namespaced=namespaced,
                        request_timeout=timeout,
                    )
                )
                break
            except Exception as exc:
                is_retryable = self._is_timeout_error(exc)
                has_next_attempt = attempt < len(timeout_plan)
                if is_retryable and has_next_attempt:
                    logger.warning(
                        "%s fetch timed out (attempt %s/%s with %s, namespace=%s), retrying",
                        kind,
                        attempt,
                        len(timeout_plan),
                        timeout,
                        namespace or "all",
                    )
                    continue
                raise

        if not output:
            return []

        try:
            data = json.loads(output)
        except json.JSONDecodeError:
            logger.exception("Error parsing %s JSON", kind)
            return []

        items = data.get("items", [])
        return [item for item in items if isinstance(item, dict)]
