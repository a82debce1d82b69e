"""Tree providers.

- base_provider: BaseTreeProvider engine (filtering, pagination, refresh, watches)
- resource_provider: kinds at the root, objects underneath
- namespace_provider: flat namespace list
"""

from kubetree.providers.base_provider import (
    BaseTreeProvider,
    HostView,
    ProgressiveLoadConfig,
    ProviderTelemetry,
    WatchErrorNotice,
)
from kubetree.providers.namespace_provider import NamespaceTreeProvider
from kubetree.providers.resource_provider import (
    FetchStatus,
    ResourceClient,
    ResourceTreeProvider,
)

__all__ = [
    "BaseTreeProvider",
    "FetchStatus",
    "HostView",
    "NamespaceTreeProvider",
    "ProgressiveLoadConfig",
    "ProviderTelemetry",
    "ResourceClient",
    "ResourceTreeProvider",
    "WatchErrorNotice",
]
