"""Fetchers for resource listings."""

from kubetree.controllers.resources.fetchers.resource_fetcher import ResourceFetcher

__all__ = ["ResourceFetcher"]
