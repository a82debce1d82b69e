"""Tests for ResourceController."""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from kubetree.controllers.base import BaseController
from kubetree.controllers.resources.controller import ResourceController


def completed(stdout: str = "", returncode: int = 0, stderr: str = "") -> MagicMock:
    result = MagicMock()
    result.stdout = stdout
    result.stderr = stderr
    result.returncode = returncode
    return result


class TestResourceController:
    """Tests for ResourceController class."""

    def test_is_base_controller(self) -> None:
        assert isinstance(ResourceController(), BaseController)

    def test_run_kubectl_sync_adds_context(self) -> None:
        controller = ResourceController(context="staging")
        with patch("subprocess.run", return_value=completed("ok")) as mock_run:
            assert controller._run_kubectl_sync(("get", "pods")) == "ok"

        cmd = mock_run.call_args.args[0]
        assert cmd == ["kubectl", "--context", "staging", "get", "pods"]

    def test_run_kubectl_sync_raises_stderr(self) -> None:
        controller = ResourceController()
        with patch("subprocess.run", return_value=completed(returncode=1, stderr="boom\n")):
            with pytest.raises(RuntimeError, match="boom"):
                controller._run_kubectl_sync(("get", "pods"))

    @pytest.mark.asyncio
    async def test_check_connection_true(self) -> None:
        controller = ResourceController()
        with patch("subprocess.run", return_value=completed("ok")):
            assert await controller.check_connection() is True

    @pytest.mark.asyncio
    async def test_check_connection_false_on_failure(self) -> None:
        controller = ResourceController()
        with patch("subprocess.run", side_effect=FileNotFoundError("kubectl")):
            assert await controller.check_connection() is False

    @pytest.mark.asyncio
    async def test_timeout_becomes_runtime_error(self) -> None:
        controller = ResourceController()
        with patch(
            "subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="kubectl", timeout=45),
        ):
            with pytest.raises(RuntimeError, match="timed out"):
                await controller._run_kubectl(("get", "pods"))

    @pytest.mark.asyncio
    async def test_list_resources_cluster_scoped_kind(self) -> None:
        controller = ResourceController()
        with patch("subprocess.run", return_value=completed('{"items": []}')) as mock_run:
            await controller.list_resources("nodes")

        cmd = mock_run.call_args.args[0]
        assert "--all-namespaces" not in cmd
