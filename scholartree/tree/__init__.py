# tree - keyword forest helpers, copy-on-path mutation, mutation budget
from .store import (
    slugify, root_id, child_id, build_children, build_tree,
    iter_nodes, find_node, find_root, count_nodes, ensure_unique_ids
)
from .mutator import apply_patch
from .budget import MutationBudget

__all__ = [
    "slugify", "root_id", "child_id", "build_children", "build_tree",
    "iter_nodes", "find_node", "find_root", "count_nodes", "ensure_unique_ids",
    "apply_patch", "MutationBudget"
]
