"""Base controller for resource data sources.

Controllers turn remote API calls into plain dictionaries that tree
providers convert into nodes. They are awaited from Textual workers, so
blocking calls are pushed onto threads.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

logger = logging.getLogger(__name__)


class BaseController(ABC):
    """Base controller class for resource listing.

    Subclasses implement the connection check and the listing call.
    """

    @abstractmethod
    async def check_connection(self) -> bool:
        """Check if the data source is available.

        Returns:
            True if connection is available, False otherwise
        """
        ...

    @abstractmethod
    async def list_resources(
        self,
        kind: str,
        namespace: str | None = None,
    ) -> list[dict[str, Any]]:
        """List raw objects of ``kind``.

        Returns:
            Raw Kubernetes objects, unfiltered and unpaginated
        """
        ...
