"""
node mutator - copy-on-path update of a single node in a forest.

apply_patch(forest, node_id, patch) returns a new forest where only the
target node and its ancestors are new objects. every subtree off the path
is reused as-is, so callers can detect what changed with `is`.
"""

from dataclasses import replace
from typing import Any, Dict, Optional, Tuple

from ..core.models import TreeNode, Forest


def apply_patch(forest: Forest, node_id: str, patch: Dict[str, Any]) -> Forest:
    """
    merge patch into the node with node_id.

    args:
        forest: tuple of root nodes
        node_id: id of the node to change
        patch: field -> new value; omitted fields are kept

    returns:
        the new forest, or the same forest object if node_id is absent
    """
    updated = _patch_nodes(forest, node_id, patch)
    return forest if updated is None else updated


def _patch_nodes(
    nodes: Tuple[TreeNode, ...],
    node_id: str,
    patch: Dict[str, Any]
) -> Optional[Tuple[TreeNode, ...]]:
    """new tuple with the target replaced, or None when it is not below nodes."""
    for index, node in enumerate(nodes):
        if node.id == node_id:
            new_node = replace(node, **patch)
        else:
            if not node.children:
                continue
            children = _patch_nodes(node.children, node_id, patch)
            if children is None:
                continue
            new_node = replace(node, children=children)

        # ids are unique, so the first hit is the only one
        return nodes[:index] + (new_node,) + nodes[index + 1:]

    return None
