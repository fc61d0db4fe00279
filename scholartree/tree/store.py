"""
forest helpers - id derivation, lookup and iteration over keyword trees.

ids are derived from the parent id, the keyword text and the sibling index
at creation time, so they are stable once assigned.
"""

import re
from typing import Iterable, Iterator, List, Optional, Set

from ..core.models import TreeNode, KeywordItem, Forest
from ..core.errors import ValidationError


_WHITESPACE = re.compile(r"\s+")


def slugify(text: str) -> str:
    """lowercase and replace whitespace runs with '-'."""
    return _WHITESPACE.sub("-", text.strip().lower())


def root_id(keyword: str) -> str:
    """id of the root node for a searched keyword."""
    return slugify(keyword)


def child_id(parent_id: str, keyword: str, index: int) -> str:
    """id of the index-th child generated under parent_id."""
    return f"{parent_id}-{slugify(keyword)}-{index}"


def build_children(parent_id: str, items: Iterable[KeywordItem]) -> tuple:
    """synthesize fresh leaf nodes for a list of keyword suggestions."""
    return tuple(
        TreeNode(
            id=child_id(parent_id, item.keyword, index),
            keyword=item.keyword,
            label=item.label
        )
        for index, item in enumerate(items)
    )


def build_tree(keyword: str, items: Iterable[KeywordItem]) -> TreeNode:
    """root node for keyword with one generated child per item."""
    node_id = root_id(keyword)
    return TreeNode(id=node_id, keyword=keyword, children=build_children(node_id, items))


def iter_nodes(forest: Forest) -> Iterator[TreeNode]:
    """depth-first pre-order walk over every node of every tree."""
    stack: List[TreeNode] = list(reversed(forest))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def find_node(forest: Forest, node_id: str) -> Optional[TreeNode]:
    """node with this id, or None."""
    for node in iter_nodes(forest):
        if node.id == node_id:
            return node
    return None


def find_root(forest: Forest, keyword: str) -> Optional[TreeNode]:
    """root tree whose keyword matches exactly, or None."""
    for tree in forest:
        if tree.keyword == keyword:
            return tree
    return None


def count_nodes(forest: Forest) -> int:
    return sum(1 for _ in iter_nodes(forest))


def ensure_unique_ids(forest: Forest):
    """raise ValidationError if any id appears twice in the forest."""
    seen: Set[str] = set()
    for node in iter_nodes(forest):
        if node.id in seen:
            raise ValidationError(f'Duplicate keyword "{node.keyword}" in the research map.')
        seen.add(node.id)
