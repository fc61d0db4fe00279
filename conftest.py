"""
shared fixtures - in-process fakes for the research collaborator and its LLM provider.
"""

import asyncio
import json
from typing import Dict, List, Optional, Tuple

import pytest

from scholartree.core.config import ExplorerConfig
from scholartree.core.models import KeywordItem, NodeLabel, Paper
from scholartree.llm.collaborator import filter_connections
from scholartree.llm.provider import LLMProvider, LLMResponse
from scholartree.session.orchestrator import SessionOrchestrator
from scholartree.tree.store import build_tree


DEFAULT_CHILDREN = [("alpha", "hot"), ("beta", "classic"), ("gamma", None)]


class FakeProvider(LLMProvider):
    """returns canned texts in order, or raises a queued ProviderError."""

    def __init__(self, *replies):
        super().__init__()
        self.replies = list(replies)
        self.requests = []

    @property
    def name(self) -> str:
        return "fake"

    async def is_available(self) -> bool:
        return True

    async def generate(self, prompt, system=None, temperature=0.3, max_tokens=8192,
                       response_schema=None, use_search=False, model=None):
        self.requests.append({
            "prompt": prompt,
            "system": system,
            "response_schema": response_schema,
            "use_search": use_search,
            "model": model,
            "max_tokens": max_tokens
        })
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if not isinstance(reply, str):
            reply = json.dumps(reply)
        return LLMResponse(text=reply, model="fake")


class FakeCollaborator:
    """
    stands in for ResearchCollaborator.

    results are configured per keyword; an Exception value is raised instead.
    gates[(method, arg)] is an asyncio.Event the call waits on before answering.
    """

    def __init__(self):
        self.calls: List[Tuple[str, object]] = []
        self.trees: Dict[str, object] = {}
        self.expansions: Dict[str, object] = {}
        self.literature: Dict[str, object] = {}
        self.connections: List[dict] = []
        self.network_error: Optional[Exception] = None
        self.gates: Dict[Tuple[str, str], asyncio.Event] = {}
        self.closed = False

    def gate(self, method: str, arg: str) -> asyncio.Event:
        """block (method, arg) until the returned event is set."""
        event = asyncio.Event()
        self.gates[(method, arg)] = event
        return event

    async def _wait(self, method: str, arg: str):
        event = self.gates.get((method, arg))
        if event is not None:
            await event.wait()

    @staticmethod
    def _items(spec) -> List[KeywordItem]:
        return [KeywordItem(keyword=k, label=NodeLabel.parse(label)) for k, label in spec]

    async def generate_tree(self, root_keyword: str):
        self.calls.append(("generate_tree", root_keyword))
        await self._wait("generate_tree", root_keyword)
        result = self.trees.get(root_keyword, DEFAULT_CHILDREN)
        if isinstance(result, Exception):
            raise result
        return build_tree(root_keyword, self._items(result))

    async def expand_node(self, parent_keyword: str):
        self.calls.append(("expand_node", parent_keyword))
        await self._wait("expand_node", parent_keyword)
        result = self.expansions.get(parent_keyword, [(f"{parent_keyword} sub", "niche")])
        if isinstance(result, Exception):
            raise result
        return self._items(result)

    async def generate_network(self, keywords: List[str]):
        if len(keywords) < 2:
            return []
        self.calls.append(("generate_network", tuple(keywords)))
        await self._wait("generate_network", "")
        if self.network_error is not None:
            raise self.network_error
        return filter_connections(self.connections, list(keywords))

    async def find_literature(self, keyword: str):
        self.calls.append(("find_literature", keyword))
        await self._wait("find_literature", keyword)
        result = self.literature.get(keyword)
        if isinstance(result, Exception):
            raise result
        if result is None:
            result = [Paper(title=f"On {keyword}", url=f"https://example.org/{keyword}")]
        return result

    async def close(self):
        self.closed = True

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)


def make_session(collaborator, limit: int = 3) -> SessionOrchestrator:
    config = ExplorerConfig()
    config.mutation_limit = limit
    return SessionOrchestrator(collaborator, config=config)


@pytest.fixture
def collaborator():
    return FakeCollaborator()


@pytest.fixture
def session(collaborator):
    return make_session(collaborator)
