"""
session orchestrator - runs the user-facing operations of one session.

usage:
    collaborator = ResearchCollaborator.from_config(config.llm)
    session = SessionOrchestrator(collaborator, config=config)

    await session.start_search(["graph neural networks", "drug discovery"])
    tree = session.state.forest[0]
    await session.expand_node(tree.children[0].id, tree.children[0].keyword)
    await session.select_node_for_literature(tree.children[1])

rules every operation follows:
- preconditions (budget, selection size) fail before any model call
- the error slot is cleared when an operation starts its model call
- failures are caught here and written to the error slot; nothing raises
- results are applied to the forest as it is when the call resolves
- a result that would give two nodes the same id is rejected
- busy is held only while a model call is in flight
"""

import asyncio
import logging
from contextlib import contextmanager
from typing import Iterable, List, Optional

from .state import SessionState, toggle_collected
from ..core.config import ExplorerConfig
from ..core.errors import ExplorerError, ValidationError
from ..core.models import TreeNode, NetworkData, Paper, SessionSnapshot
from ..llm.collaborator import ResearchCollaborator
from ..tree.budget import MutationBudget
from ..tree.mutator import apply_patch
from ..tree.store import build_children, ensure_unique_ids, find_node, find_root

logger = logging.getLogger("scholartree.session")


def normalize_keywords(keywords: Iterable[str]) -> List[str]:
    """strip, drop empties and duplicates, keep order."""
    seen = set()
    result = []
    for keyword in keywords:
        keyword = (keyword or "").strip()
        if keyword and keyword not in seen:
            seen.add(keyword)
            result.append(keyword)
    return result


class SessionOrchestrator:
    """owns the session state and drives the research collaborator."""

    def __init__(
        self,
        collaborator: ResearchCollaborator,
        config: Optional[ExplorerConfig] = None,
        state: Optional[SessionState] = None
    ):
        self.collaborator = collaborator
        self.config = config or ExplorerConfig()
        self.state = state or SessionState(budget=MutationBudget(self.config.mutation_limit))
        # bumped by every search; results of older calls are dropped
        self._generation = 0

    # -- status helpers --

    @contextmanager
    def _busy(self, message: str):
        state = self.state
        state.pending += 1
        state.progress_message = message
        try:
            yield
        finally:
            state.pending -= 1
            if state.pending == 0:
                state.progress_message = ""

    def _fail(self, error: Exception, fallback: str) -> bool:
        """write error into the single error slot; returns False for the caller."""
        if isinstance(error, ExplorerError):
            message = str(error)
            logger.warning(f"operation failed: {message}")
        else:
            message = fallback
            logger.exception(f"unexpected error: {error}")
        self.state.error = message
        return False

    def _is_current(self, generation: int) -> bool:
        if generation != self._generation:
            logger.info("dropping result from a previous search")
            return False
        return True

    # -- operations --

    async def start_search(self, keywords: Iterable[str]) -> bool:
        """
        build a fresh research map for keywords.

        one network call plus one tree call per keyword run concurrently;
        the forest and network are committed only if every call succeeds.
        collected papers survive a new search.
        """
        keywords = normalize_keywords(keywords)
        if not keywords:
            return self._fail(ValidationError("Please enter at least one keyword."), "")

        state = self.state
        self._generation += 1
        generation = self._generation

        state.error = ""
        state.forest = ()
        state.network = None
        state.literature_node = None
        state.selected_keywords = list(keywords)
        state.budget.reset()

        logger.info(f"starting search for {len(keywords)} keywords: {keywords}")

        with self._busy("Generating keyword network and topic trees..."):
            try:
                edges, *trees = await asyncio.gather(
                    self.collaborator.generate_network(keywords),
                    *(self.collaborator.generate_tree(keyword) for keyword in keywords)
                )
                forest = tuple(trees)
                ensure_unique_ids(forest)
            except Exception as e:
                if not self._is_current(generation):
                    return False
                return self._fail(e, "An unknown error occurred.")

        if not self._is_current(generation):
            return False

        state.forest = forest
        state.network = NetworkData.build(keywords, edges)
        state.budget.reset()
        logger.info(f"search committed: {len(forest)} trees, {len(edges)} edges")
        return True

    async def select_node_for_literature(self, node: TreeNode) -> bool:
        """
        open node in the literature panel, fetching its papers on first use.

        the fetched papers always land in the forest; the panel is updated
        only if it still shows this node when the call resolves.
        """
        state = self.state
        current = find_node(state.forest, node.id) or node
        state.literature_node = current

        if current.literature is not None or current.is_loading:
            return True

        generation = self._generation
        state.error = ""
        state.patch_node(node.id, is_loading=True)
        state.patch_literature_node(node.id, is_loading=True)

        with self._busy(f'Finding literature for "{current.keyword}"...'):
            try:
                papers = await self.collaborator.find_literature(current.keyword)
            except Exception as e:
                if not self._is_current(generation):
                    return False
                state.patch_node(node.id, is_loading=False)
                state.patch_literature_node(node.id, is_loading=False)
                return self._fail(e, "Failed to fetch literature.")

        if not self._is_current(generation):
            return False

        literature = tuple(papers)
        state.patch_node(node.id, literature=literature, is_loading=False)
        state.patch_literature_node(node.id, literature=literature, is_loading=False)
        logger.info(f"cached {len(literature)} papers for {current.keyword!r}")
        return True

    async def expand_node(self, node_id: str, parent_keyword: str) -> bool:
        """replace a node's children with a fresh expansion (budgeted)."""
        state = self.state
        try:
            if find_node(state.forest, node_id) is None:
                raise ValidationError(f'Node "{node_id}" is not in the research map.')
            ticket = state.budget.reserve()
        except ValidationError as e:
            return self._fail(e, "")

        generation = self._generation
        state.error = ""
        state.patch_node(node_id, is_loading=True)

        with self._busy(f'Expanding "{parent_keyword}"...'):
            try:
                items = await self.collaborator.expand_node(parent_keyword)
            except Exception as e:
                state.budget.release(ticket)
                if not self._is_current(generation):
                    return False
                state.patch_node(node_id, is_loading=False)
                return self._fail(e, "Failed to expand node.")

        if not self._is_current(generation):
            return False

        forest = apply_patch(state.forest, node_id, {"children": build_children(node_id, items), "is_loading": False})
        try:
            ensure_unique_ids(forest)
        except ValidationError as e:
            state.budget.release(ticket)
            state.patch_node(node_id, is_loading=False)
            return self._fail(e, "")

        state.forest = forest
        state.budget.commit(ticket)
        logger.info(f"expanded {node_id} into {len(items)} children ({state.budget.used}/{state.budget.limit})")
        return True

    def toggle_network_selection(self, keyword: str, selected: bool):
        """add keyword to, or remove it from, the network selection."""
        keywords = self.state.selected_keywords
        if selected:
            if keyword not in keywords:
                keywords.append(keyword)
        elif keyword in keywords:
            keywords.remove(keyword)

    async def regenerate_network(self) -> bool:
        """rebuild the network over the current selection (budgeted)."""
        state = self.state
        keywords = list(state.selected_keywords)
        try:
            state.budget.check()
            if len(keywords) < 2:
                raise ValidationError("Select at least two keywords to form a network.")
            ticket = state.budget.reserve()
        except ValidationError as e:
            return self._fail(e, "")

        generation = self._generation
        state.error = ""

        with self._busy("Updating keyword network..."):
            try:
                edges = await self.collaborator.generate_network(keywords)
            except Exception as e:
                state.budget.release(ticket)
                if not self._is_current(generation):
                    return False
                return self._fail(e, "Failed to update network.")

        if not self._is_current(generation):
            return False

        state.network = NetworkData.build(keywords, edges)
        state.budget.commit(ticket)
        logger.info(f"network regenerated: {len(keywords)} keywords, {len(edges)} edges")
        return True

    def toggle_collect_paper(self, paper: Paper, source_keyword: str) -> bool:
        """collect paper, or uncollect it if its title is already collected; True if now collected."""
        state = self.state
        before = len(state.collected)
        state.collected = toggle_collected(state.collected, paper, source_keyword)
        return len(state.collected) > before

    async def refresh_tree(self, keyword: str) -> bool:
        """regenerate the root tree for keyword, leaving other trees alone."""
        state = self.state
        if find_root(state.forest, keyword) is None:
            return self._fail(ValidationError(f'No research tree for "{keyword}".'), "")

        generation = self._generation
        state.error = ""

        with self._busy(f'Refreshing tree for "{keyword}"...'):
            try:
                new_tree = await self.collaborator.generate_tree(keyword)
            except Exception as e:
                if not self._is_current(generation):
                    return False
                return self._fail(e, f'Failed to refresh tree for "{keyword}".')

        if not self._is_current(generation):
            return False

        forest = tuple(new_tree if tree.keyword == keyword else tree for tree in state.forest)
        try:
            ensure_unique_ids(forest)
        except ValidationError as e:
            return self._fail(e, "")

        state.forest = forest
        logger.info(f"refreshed tree for {keyword!r}")
        return True

    # -- read access --

    def find_node(self, node_id: str) -> Optional[TreeNode]:
        return find_node(self.state.forest, node_id)

    def snapshot(self) -> SessionSnapshot:
        """read-only copy of the exportable state."""
        return self.state.snapshot()

    def status(self) -> dict:
        state = self.state
        return {
            "busy": state.busy,
            "message": state.progress_message,
            "error": state.error,
            "budget": state.budget.stats()
        }

    async def close(self):
        await self.collaborator.close()
