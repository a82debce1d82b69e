"""Tree node models."""

from kubetree.models.tree.tree_node import (
    LoadMorePayload,
    TreeNode,
    error_node,
    load_more_node,
    loading_node,
)

__all__ = [
    "LoadMorePayload",
    "TreeNode",
    "error_node",
    "load_more_node",
    "loading_node",
]
