"""
Size limits for expression trees received over the API.

Trees arrive as JSON dictionaries; these checks run before the tree is turned
into model objects so oversized payloads are rejected cheaply.
"""

from typing import Any

MAX_TREE_DEPTH = 20
MAX_TREE_NODES = 1000


def _children(node: dict[str, Any]) -> list[Any]:
    node_type = node.get("type")
    if node_type == "composite":
        nodes = node.get("nodes")
        if not isinstance(nodes, list):
            return []
        return [child.get("expression") for child in nodes if isinstance(child, dict)]
    if node_type == "group":
        return [node.get("expression")]
    return []


def validate_expression_tree_depth(
    node: dict[str, Any], max_depth: int = MAX_TREE_DEPTH, current_depth: int = 0
) -> None:
    """
    Validate that an expression tree doesn't exceed maximum depth.

    Raises:
        ValueError: If tree exceeds maximum depth
    """
    if current_depth > max_depth:
        raise ValueError(f"Expression tree exceeds maximum depth of {max_depth}")

    for child in _children(node):
        if isinstance(child, dict):
            validate_expression_tree_depth(child, max_depth, current_depth + 1)


def validate_expression_tree_node_count(node: dict[str, Any], max_nodes: int = MAX_TREE_NODES) -> None:
    """
    Validate that an expression tree doesn't exceed maximum node count.

    Raises:
        ValueError: If tree exceeds maximum node count
    """

    def count_nodes(current: dict[str, Any]) -> int:
        return 1 + sum(count_nodes(child) for child in _children(current) if isinstance(child, dict))

    node_count = count_nodes(node)
    if node_count > max_nodes:
        raise ValueError(
            f"Expression tree exceeds maximum node count of {max_nodes} (got {node_count} nodes)"
        )
