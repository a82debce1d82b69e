"""kubectl-backed watch transport.

Streams ``kubectl get --raw "<path>?watch=true&..."`` which emits one JSON
watch frame per line, for as long as the API server keeps the stream open.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from collections.abc import AsyncIterator
from contextlib import suppress
from typing import Any

from kubetree.models.watch import WatchRequest
from kubetree.utils.errors import WatchError

logger = logging.getLogger(__name__)

# Single watch frames can carry large objects (ConfigMaps, CRDs).
_STREAM_LINE_LIMIT = 16 * 1024 * 1024
_STDERR_CHUNK_SIZE = 4096
_STDERR_TAIL_LIMIT = 64 * 1024

_SERVER_ERROR_RE = re.compile(r"Error from server \((?P<reason>[A-Za-z]+)\)")
_REASON_STATUS_CODES: dict[str, int] = {
    "BadRequest": 400,
    "Unauthorized": 401,
    "Forbidden": 403,
    "NotFound": 404,
    "MethodNotAllowed": 405,
    "Timeout": 408,
    "Conflict": 409,
    "Gone": 410,
    "Expired": 410,
    "TooManyRequests": 429,
    "InternalError": 500,
    "ServiceUnavailable": 503,
    "ServerTimeout": 504,
}


def error_from_kubectl_stderr(stderr: str, returncode: int | None = None) -> WatchError:
    """Build a :class:`WatchError` from kubectl's stderr, inferring the HTTP status."""
    message = stderr.strip() or f"kubectl exited with code {returncode}"
    status_code: int | None = None

    match = _SERVER_ERROR_RE.search(message)
    if match:
        status_code = _REASON_STATUS_CODES.get(match.group("reason"))
    elif "You must be logged in to the server" in message:
        status_code = 401

    return WatchError(message, status_code=status_code)


class KubectlWatchConnection:
    """An open ``kubectl get --raw`` watch stream.

    stderr is drained in the background while frames are read, so a chatty
    kubectl cannot stall on a full pipe. Only the tail is kept for error
    reporting.
    """

    def __init__(self, process: asyncio.subprocess.Process, url: str) -> None:
        self._process = process
        self._url = url
        self._aborted = False
        self._stderr_tail = bytearray()
        self._stderr_task: asyncio.Task[None] | None = None
        self._reap_task: asyncio.Task[None] | None = None

    @property
    def aborted(self) -> bool:
        return self._aborted

    def __aiter__(self) -> AsyncIterator[dict[str, Any]]:
        return self._iter_frames()

    def _start_stderr_drain(self) -> None:
        if self._stderr_task is None and self._process.stderr is not None:
            self._stderr_task = asyncio.get_running_loop().create_task(self._drain_stderr())

    async def _drain_stderr(self) -> None:
        stderr = self._process.stderr
        if stderr is None:
            return
        while True:
            chunk = await stderr.read(_STDERR_CHUNK_SIZE)
            if not chunk:
                return
            self._stderr_tail.extend(chunk)
            if len(self._stderr_tail) > _STDERR_TAIL_LIMIT:
                del self._stderr_tail[:-_STDERR_TAIL_LIMIT]

    async def _iter_frames(self) -> AsyncIterator[dict[str, Any]]:
        stdout = self._process.stdout
        if stdout is None:
            raise WatchError(f"Watch process for {self._url} has no stdout")

        self._start_stderr_drain()
        try:
            while True:
                line = await stdout.readline()
                if not line:
                    break
                text = line.strip()
                if not text:
                    continue
                try:
                    frame = json.loads(text)
                except json.JSONDecodeError:
                    logger.warning("Skipping malformed watch frame from %s", self._url)
                    continue
                if isinstance(frame, dict):
                    yield frame
        except asyncio.CancelledError:
            self.abort()
            raise

        returncode = await self._process.wait()
        if self._stderr_task is not None:
            await self._stderr_task
        if returncode != 0 and not self._aborted:
            raise error_from_kubectl_stderr(
                self._stderr_tail.decode(errors="replace"),
                returncode,
            )

    def abort(self) -> None:
        """Kill the kubectl process backing this stream and reap it."""
        if self._aborted:
            return
        self._aborted = True
        if self._process.returncode is None:
            with suppress(ProcessLookupError):
                self._process.kill()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        self._reap_task = loop.create_task(self._reap())

    async def _reap(self) -> None:
        await self._process.wait()
        if self._stderr_task is not None:
            await self._stderr_task
        logger.debug("Reaped watch process for %s", self._url)


class KubectlWatchTransport:
    """Opens watch streams by spawning kubectl."""

    def __init__(self, context: str | None = None, kubectl_binary: str = "kubectl") -> None:
        self.context = context
        self._kubectl_binary = kubectl_binary

    def build_command(self, request: WatchRequest) -> list[str]:
        cmd = [self._kubectl_binary]
        if self.context:
            cmd.extend(["--context", self.context])
        # Watches are long-lived; disable kubectl's client-side request timeout.
        cmd.extend(["get", "--raw", request.url(), "--request-timeout=0"])
        return cmd

    async def connect(self, request: WatchRequest) -> KubectlWatchConnection:
        """Spawn kubectl for ``request``.

        Raises:
            WatchError: If kubectl cannot be started.
        """
        cmd = self.build_command(request)
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=_STREAM_LINE_LIMIT,
            )
        except FileNotFoundError as exc:
            raise WatchError(f"{self._kubectl_binary} not found on PATH") from exc
        except OSError as exc:
            raise WatchError(f"Failed to start {self._kubectl_binary}: {exc}") from exc

        return KubectlWatchConnection(process, request.url())
