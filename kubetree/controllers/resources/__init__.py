"""Resource listing controllers."""

from kubetree.controllers.resources.controller import ResourceController

__all__ = ["ResourceController"]
