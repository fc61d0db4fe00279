"""
core data models for scholartree.
keyword trees, papers and the keyword network.

all models are frozen: a change is always a new value, never an in-place edit.
"""

from dataclasses import dataclass
from typing import Optional, List, Dict, Any, Tuple
from enum import Enum


class NodeLabel(Enum):
    """how a keyword sits in its research field."""
    HOT = "hot"          # currently active research front
    CLASSIC = "classic"  # established, well-cited area
    NICHE = "niche"      # small or specialised community

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["NodeLabel"]:
        """parse a label string; None stays None, unknown values raise ValueError."""
        if value is None:
            return None
        return cls(value.strip().lower())


@dataclass(frozen=True)
class Paper:
    """a literature reference returned for a keyword."""
    title: str
    url: str
    authors: Tuple[str, ...] = ()
    year: Optional[int] = None
    abstract: str = ""
    citations: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "authors": list(self.authors),
            "year": self.year,
            "abstract": self.abstract,
            "citations": self.citations,
            "url": self.url
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Paper":
        return cls(
            title=data["title"],
            url=data["url"],
            authors=tuple(data.get("authors") or ()),
            year=data.get("year"),
            abstract=data.get("abstract") or "",
            citations=data.get("citations")
        )


@dataclass(frozen=True)
class KeywordItem:
    """one keyword suggestion from the model, before it becomes a node."""
    keyword: str
    label: Optional[NodeLabel] = None


@dataclass(frozen=True)
class TreeNode:
    """
    one keyword in a research tree.

    id is unique across the whole forest and never reassigned.
    children keep generation order.
    literature is None until fetched.
    """
    id: str
    keyword: str
    label: Optional[NodeLabel] = None
    children: Tuple["TreeNode", ...] = ()
    literature: Optional[Tuple[Paper, ...]] = None
    is_loading: bool = False

    @property
    def has_literature(self) -> bool:
        return self.literature is not None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "keyword": self.keyword,
            "children": [child.to_dict() for child in self.children],
            "isLoading": self.is_loading
        }
        if self.label is not None:
            data["label"] = self.label.value
        if self.literature is not None:
            data["literature"] = [p.to_dict() for p in self.literature]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TreeNode":
        literature = data.get("literature")
        return cls(
            id=data["id"],
            keyword=data["keyword"],
            label=NodeLabel.parse(data.get("label")),
            children=tuple(cls.from_dict(c) for c in data.get("children") or ()),
            literature=(
                tuple(Paper.from_dict(p) for p in literature)
                if literature is not None else None
            ),
            is_loading=bool(data.get("isLoading", False))
        )


# a forest is the ordered tuple of root trees, one per searched keyword
Forest = Tuple[TreeNode, ...]


@dataclass(frozen=True)
class NetworkNode:
    """a keyword in the network graph (id and label are both the keyword)."""
    id: str
    label: str

    @classmethod
    def for_keyword(cls, keyword: str) -> "NetworkNode":
        return cls(id=keyword, label=keyword)


@dataclass(frozen=True)
class NetworkEdge:
    """relationship between two selected keywords."""
    source: str
    target: str
    label: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"from": self.source, "to": self.target}
        if self.label is not None:
            data["label"] = self.label
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NetworkEdge":
        return cls(source=data["from"], target=data["to"], label=data.get("label"))


@dataclass(frozen=True)
class NetworkData:
    """snapshot of the keyword network."""
    nodes: Tuple[NetworkNode, ...] = ()
    edges: Tuple[NetworkEdge, ...] = ()

    @classmethod
    def build(cls, keywords: List[str], edges: List[NetworkEdge]) -> "NetworkData":
        return cls(
            nodes=tuple(NetworkNode.for_keyword(k) for k in keywords),
            edges=tuple(edges)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [{"id": n.id, "label": n.label} for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NetworkData":
        return cls(
            nodes=tuple(NetworkNode(id=n["id"], label=n["label"]) for n in data.get("nodes", [])),
            edges=tuple(NetworkEdge.from_dict(e) for e in data.get("edges", []))
        )


@dataclass(frozen=True)
class CollectedPaper:
    """a paper the user kept, with the keyword it was found under."""
    paper: Paper
    source_keyword: str

    def to_dict(self) -> Dict[str, Any]:
        return {"paper": self.paper.to_dict(), "sourceKeyword": self.source_keyword}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CollectedPaper":
        return cls(paper=Paper.from_dict(data["paper"]), source_keyword=data["sourceKeyword"])


@dataclass
class SessionSnapshot:
    """read-only copy of what an export contains."""
    trees: Forest = ()
    network: Optional[NetworkData] = None
    collection: Tuple[CollectedPaper, ...] = ()
    created_at: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.network is None and not self.trees and not self.collection
