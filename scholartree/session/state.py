"""
session state - everything one exploration session owns.

the orchestrator is the only writer. forest updates always go through
update_forest / patch_node so they apply to the latest committed forest.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..core.models import (
    Forest, TreeNode, NetworkData, Paper, CollectedPaper, SessionSnapshot
)
from ..core.config import MUTATION_LIMIT
from ..tree.mutator import apply_patch
from ..tree.budget import MutationBudget


def toggle_collected(
    collection: Tuple[CollectedPaper, ...],
    paper: Paper,
    source_keyword: str
) -> Tuple[CollectedPaper, ...]:
    """remove the entry with paper's title if present, else append it."""
    for index, item in enumerate(collection):
        if item.paper.title == paper.title:
            return collection[:index] + collection[index + 1:]
    return collection + (CollectedPaper(paper=paper, source_keyword=source_keyword),)


@dataclass
class SessionState:
    """mutable container for one session's values."""
    forest: Forest = ()
    network: Optional[NetworkData] = None
    literature_node: Optional[TreeNode] = None     # node open in the literature panel
    selected_keywords: List[str] = field(default_factory=list)
    collected: Tuple[CollectedPaper, ...] = ()
    budget: MutationBudget = field(default_factory=lambda: MutationBudget(MUTATION_LIMIT))

    # status
    pending: int = 0            # operations currently holding the busy flag
    progress_message: str = ""
    error: str = ""

    @property
    def busy(self) -> bool:
        return self.pending > 0

    @property
    def has_data(self) -> bool:
        return bool(self.forest) or self.network is not None

    def update_forest(self, updater: Callable[[Forest], Forest]):
        """apply updater to the current forest."""
        self.forest = updater(self.forest)

    def patch_node(self, node_id: str, **fields):
        self.update_forest(lambda forest: apply_patch(forest, node_id, fields))

    def patch_literature_node(self, node_id: str, **fields):
        """patch the panel node only if it still shows node_id."""
        current = self.literature_node
        if current is not None and current.id == node_id:
            self.literature_node = replace(current, **fields)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            trees=self.forest,
            network=self.network,
            collection=self.collected
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trees": [tree.to_dict() for tree in self.forest],
            "network": self.network.to_dict() if self.network else None,
            "literatureNode": self.literature_node.to_dict() if self.literature_node else None,
            "selectedForNetwork": list(self.selected_keywords),
            "collection": [item.to_dict() for item in self.collected],
            "iterations": self.budget.used,
            "iterationLimit": self.budget.limit,
            "isLoading": self.busy,
            "loadingMessage": self.progress_message,
            "error": self.error
        }
