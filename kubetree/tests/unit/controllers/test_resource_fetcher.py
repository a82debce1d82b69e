"""Tests for resource fetcher."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from kubetree.controllers.resources.fetchers.resource_fetcher import ResourceFetcher


class TestResourceFetcher:
    """Tests for ResourceFetcher class."""

    @pytest.fixture
    def mock_run_kubectl(self) -> AsyncMock:
        """Create mock run_kubectl function."""
        return AsyncMock()

    def test_fetcher_init(self, mock_run_kubectl: AsyncMock) -> None:
        """Test ResourceFetcher initialization with run_kubectl_func."""
        fetcher = ResourceFetcher(run_kubectl_func=mock_run_kubectl)
        assert fetcher._run_kubectl is mock_run_kubectl

    def test_build_list_args_all_namespaces(self, mock_run_kubectl: AsyncMock) -> None:
        args = ResourceFetcher(mock_run_kubectl).build_list_args("pods")

        assert args[:3] == ("get", "pods", "--all-namespaces")
        assert "-o" in args
        assert args[args.index("-o") + 1] == "json"
        assert "--chunk-size=500" in args
        assert "--request-timeout=30s" in args

    def test_build_list_args_cluster_scoped(self, mock_run_kubectl: AsyncMock) -> None:
        args = ResourceFetcher(mock_run_kubectl).build_list_args("nodes", namespaced=False)

        assert "--all-namespaces" not in args
        assert "-n" not in args

    @pytest.mark.asyncio
    async def test_fetch_for_namespace_uses_namespace_scope(
        self,
        mock_run_kubectl: AsyncMock,
    ) -> None:
        """Namespace-scoped fetch should use -n namespace."""
        mock_run_kubectl.return_value = '{"items": []}'
        fetcher = ResourceFetcher(mock_run_kubectl)

        items = await fetcher.fetch_resources_raw("pods", namespace="payments")

        assert items == []
        called_args = mock_run_kubectl.await_args_list[0].args[0]
        assert "--all-namespaces" not in called_args
        ns_index = called_args.index("-n")
        assert called_args[ns_index + 1] == "payments"

    @pytest.mark.asyncio
    async def test_fetch_returns_only_mapping_items(self, mock_run_kubectl: AsyncMock) -> None:
        mock_run_kubectl.return_value = '{"items": [{"metadata": {"name": "a"}}, "junk"]}'

        items = await ResourceFetcher(mock_run_kubectl).fetch_resources_raw("pods")

        assert items == [{"metadata": {"name": "a"}}]

    @pytest.mark.asyncio
    async def test_timeout_is_retried_with_longer_timeout(
        self,
        mock_run_kubectl: AsyncMock,
    ) -> None:
        mock_run_kubectl.side_effect = [
            RuntimeError("context deadline exceeded"),
            '{"items": [{"metadata": {"name": "a"}}]}',
        ]

        items = await ResourceFetcher(mock_run_kubectl).fetch_resources_raw("pods")

        assert len(items) == 1
        assert mock_run_kubectl.await_count == 2
        retry_args = mock_run_kubectl.await_args_list[1].args[0]
        assert "--request-timeout=45s" in retry_args

    @pytest.mark.asyncio
    async def test_non_timeout_error_propagates(self, mock_run_kubectl: AsyncMock) -> None:
        mock_run_kubectl.side_effect = RuntimeError("Forbidden")

        with pytest.raises(RuntimeError, match="Forbidden"):
            await ResourceFetcher(mock_run_kubectl).fetch_resources_raw("secrets")

        assert mock_run_kubectl.await_count == 1

    @pytest.mark.asyncio
    async def test_invalid_json_returns_empty(self, mock_run_kubectl: AsyncMock) -> None:
        mock_run_kubectl.return_value = "not json"

        assert await ResourceFetcher(mock_run_kubectl).fetch_resources_raw("pods") == []

    @pytest.mark.asyncio
    async def test_empty_output_returns_empty(self, mock_run_kubectl: AsyncMock) -> None:
        mock_run_kubectl.return_value = ""

        assert await ResourceFetcher(mock_run_kubectl).fetch_resources_raw("pods") == []
