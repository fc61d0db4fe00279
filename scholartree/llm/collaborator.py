"""
research collaborator - the four model calls the session depends on.

each call has a strict response shape. a response that does not match is a
CollaboratorError, never a partial success. the only silent filtering is
what the contracts allow: network edges outside the requested keywords and
malformed paper entries.

usage:
    collaborator = ResearchCollaborator(GeminiProvider(api_key=key))
    tree = await collaborator.generate_tree("graph neural networks")
    papers = await collaborator.find_literature(tree.children[0].keyword)
"""

import json
import logging
from typing import Any, Dict, List, Optional

from .provider import LLMProvider, build_provider, extract_json
from .prompts import (
    TREE_SCHEMA, EXPANSION_SCHEMA, NETWORK_SCHEMA, LITERATURE_SYSTEM,
    tree_prompt, expansion_prompt, network_prompt, literature_prompt
)
from ..core.config import LLMConfig, ProviderKind
from ..core.errors import CollaboratorError, ProviderError, ValidationError
from ..core.models import KeywordItem, NetworkEdge, NodeLabel, Paper, TreeNode
from ..tree.store import build_tree

logger = logging.getLogger("scholartree.llm.collaborator")


class ResponseShapeError(ValueError):
    """model response does not match the expected shape."""
    pass


def _require_list(data: Any, key: str) -> List[Any]:
    if not isinstance(data, dict) or not isinstance(data.get(key), list):
        raise ResponseShapeError(f"response has no '{key}' array")
    return data[key]


def parse_keyword_items(items: List[Any]) -> List[KeywordItem]:
    """keyword suggestions; every entry needs a string keyword and a known label."""
    parsed = []
    for item in items:
        if not isinstance(item, dict):
            raise ResponseShapeError(f"keyword entry is not an object: {item!r}")
        keyword = item.get("keyword")
        if not isinstance(keyword, str) or not keyword.strip():
            raise ResponseShapeError(f"keyword entry without keyword: {item!r}")
        label = item.get("label")
        if label is not None and not isinstance(label, str):
            raise ResponseShapeError(f"label is not a string: {label!r}")
        try:
            node_label = NodeLabel.parse(label)
        except ValueError:
            raise ResponseShapeError(f"unknown label: {label!r}")
        parsed.append(KeywordItem(keyword=keyword.strip(), label=node_label))
    return parsed


def filter_connections(connections: List[Any], keywords: List[str]) -> List[NetworkEdge]:
    """edges whose endpoints both exactly match a requested keyword."""
    allowed = set(keywords)
    edges = []
    for conn in connections:
        if not isinstance(conn, dict):
            continue
        source, target = conn.get("from"), conn.get("to")
        if source not in allowed or target not in allowed:
            continue
        label = conn.get("label")
        edges.append(NetworkEdge(
            source=source,
            target=target,
            label=label if isinstance(label, str) else None
        ))
    dropped = len(connections) - len(edges)
    if dropped:
        logger.debug(f"dropped {dropped} connections outside the requested keywords")
    return edges


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def parse_papers(entries: List[Any]) -> List[Paper]:
    """papers with a string title and url; other fields coerced, bad entries dropped."""
    papers = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        title, url = entry.get("title"), entry.get("url")
        if not isinstance(title, str) or not title.strip() or not isinstance(url, str):
            continue
        authors = entry.get("authors")
        abstract = entry.get("abstract")
        papers.append(Paper(
            title=title.strip(),
            url=url,
            authors=tuple(a for a in authors if isinstance(a, str)) if isinstance(authors, list) else (),
            year=_as_int(entry.get("year")),
            abstract=abstract if isinstance(abstract, str) else "",
            citations=_as_int(entry.get("citations"))
        ))
    return papers


class ResearchCollaborator:
    """typed, shape-checked access to the model for trees, networks and literature."""

    def __init__(
        self,
        provider: LLMProvider,
        literature_model: Optional[str] = None,
        temperature: float = 0.3,
        max_tokens: int = 8192
    ):
        self.provider = provider
        self.literature_model = literature_model
        self.temperature = temperature
        self.max_tokens = max_tokens

    @classmethod
    def from_config(cls, config: LLMConfig) -> "ResearchCollaborator":
        provider = build_provider(config)
        literature_model = config.literature_model if config.provider == ProviderKind.GEMINI else None
        return cls(
            provider,
            literature_model=literature_model,
            temperature=config.temperature,
            max_tokens=config.max_tokens
        )

    async def _json_call(self, prompt: str, schema: Dict[str, Any]) -> Any:
        return await self.provider.generate_json(
            prompt=prompt,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            response_schema=schema
        )

    async def generate_tree(self, root_keyword: str) -> TreeNode:
        """root node for root_keyword with one child per generated sub-keyword."""
        if not root_keyword or not root_keyword.strip():
            raise ValidationError("Please enter a root keyword to begin.")

        try:
            data = await self._json_call(tree_prompt(root_keyword), TREE_SCHEMA)
            if not isinstance(data, dict) or not isinstance(data.get("keyword"), str):
                raise ResponseShapeError("response has no 'keyword' string")
            items = parse_keyword_items(_require_list(data, "children"))
        except (ProviderError, ResponseShapeError) as e:
            logger.error(f"error generating initial tree for {root_keyword!r}: {e}")
            raise CollaboratorError(f'Failed to generate research tree for "{root_keyword}".') from e

        logger.info(f"generated tree for {root_keyword!r} with {len(items)} branches")
        return build_tree(root_keyword, items)

    async def expand_node(self, parent_keyword: str) -> List[KeywordItem]:
        """new, more specific sub-keywords for parent_keyword."""
        try:
            data = await self._json_call(expansion_prompt(parent_keyword), EXPANSION_SCHEMA)
            items = parse_keyword_items(_require_list(data, "expansions"))
        except (ProviderError, ResponseShapeError) as e:
            logger.error(f"error expanding {parent_keyword!r}: {e}")
            raise CollaboratorError("Failed to expand the research topic.") from e

        logger.info(f"expanded {parent_keyword!r} into {len(items)} keywords")
        return items

    async def generate_network(self, keywords: List[str]) -> List[NetworkEdge]:
        """relationships among keywords; fewer than two keywords means no edges and no call."""
        if len(keywords) < 2:
            return []

        try:
            data = await self._json_call(network_prompt(list(keywords)), NETWORK_SCHEMA)
            connections = _require_list(data, "connections")
        except (ProviderError, ResponseShapeError) as e:
            logger.error(f"error generating keyword network: {e}")
            raise CollaboratorError("Failed to generate the keyword network graph.") from e

        return filter_connections(connections, list(keywords))

    async def find_literature(self, keyword: str) -> List[Paper]:
        """verified papers for keyword, via a search-grounded model call."""
        try:
            response = await self.provider.generate(
                prompt=literature_prompt(keyword),
                system=LITERATURE_SYSTEM,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                use_search=True,
                model=self.literature_model
            )
        except ProviderError as e:
            logger.error(f"error finding literature for {keyword!r}: {e}")
            if str(e) == "The model returned an empty response.":
                raise CollaboratorError(f"Failed to find literature: {e}") from e
            raise CollaboratorError(f'Failed to find literature for "{keyword}".') from e

        try:
            data = extract_json(response.text)
        except json.JSONDecodeError as e:
            logger.error(f"literature response for {keyword!r} is not valid JSON: {e}")
            raise CollaboratorError("Failed to find literature: The model returned an invalid format.") from e
        except ValueError as e:
            logger.error(f"no JSON object in literature response: {response.text[:500]}")
            raise CollaboratorError(f'Failed to find literature for "{keyword}".') from e

        try:
            entries = _require_list(data, "papers")
        except ResponseShapeError as e:
            logger.error(f"literature response for {keyword!r}: {e}")
            raise CollaboratorError("Failed to find literature: The model returned an invalid format.") from e

        papers = parse_papers(entries)
        if len(papers) < len(entries):
            logger.info(f"dropped {len(entries) - len(papers)} malformed papers for {keyword!r}")
        return papers

    async def close(self):
        await self.provider.close()
