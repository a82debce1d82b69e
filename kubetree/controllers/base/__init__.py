"""Base controller classes."""

from kubetree.controllers.base.base_controller import BaseController

__all__ = [
    "BaseController",
]
