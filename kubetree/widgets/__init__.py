"""Widgets module for KubeTree.

- resource_tree: ResourceTree, a Textual Tree bound to a tree provider
"""

from kubetree.widgets.resource_tree import ResourceTree

__all__ = [
    "ResourceTree",
]
