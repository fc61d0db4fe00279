"""
session snapshot export - JSON with network, trees and collection.

format:
{
    "network": {"nodes": [...], "edges": [{"from": ..., "to": ..., "label": ...}]} | null,
    "trees": [{"id": ..., "keyword": ..., "children": [...], "isLoading": false, ...}],
    "collection": [{"paper": {...}, "sourceKeyword": ...}],
    "createdAt": "2026-01-01T00:00:00+00:00"
}
"""

import json
import time
import logging
from pathlib import Path
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ..core.errors import ValidationError
from ..core.models import SessionSnapshot, TreeNode, NetworkData, CollectedPaper

logger = logging.getLogger("scholartree.export")


def export_snapshot(snapshot: SessionSnapshot, created_at: Optional[datetime] = None) -> Dict[str, Any]:
    """serialize a session snapshot; raises ValidationError when there is nothing to export."""
    if snapshot.is_empty:
        raise ValidationError("No data to export.")

    created_at = created_at or datetime.now(timezone.utc)
    return {
        "network": snapshot.network.to_dict() if snapshot.network else None,
        "trees": [tree.to_dict() for tree in snapshot.trees],
        "collection": [item.to_dict() for item in snapshot.collection],
        "createdAt": created_at.isoformat()
    }


def snapshot_to_json(snapshot: SessionSnapshot, indent: int = 2) -> str:
    return json.dumps(export_snapshot(snapshot), indent=indent, ensure_ascii=False)


def write_snapshot(snapshot: SessionSnapshot, output_dir: str = "output") -> str:
    """write the snapshot to output_dir; returns the file path."""
    path = Path(output_dir)
    path.mkdir(parents=True, exist_ok=True)
    filepath = path / f"research-explorer-data-{int(time.time() * 1000)}.json"

    with open(filepath, "w", encoding="utf-8") as f:
        f.write(snapshot_to_json(snapshot))

    logger.info(f"exported snapshot to {filepath}")
    return str(filepath)


def load_snapshot(data: Dict[str, Any]) -> SessionSnapshot:
    """rebuild forest, network and collection from an exported dict."""
    try:
        network = data.get("network")
        return SessionSnapshot(
            trees=tuple(TreeNode.from_dict(t) for t in data.get("trees") or ()),
            network=NetworkData.from_dict(network) if network else None,
            collection=tuple(CollectedPaper.from_dict(c) for c in data.get("collection") or ()),
            created_at=data.get("createdAt")
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid snapshot: {e}") from e


def read_snapshot(filepath: str) -> SessionSnapshot:
    with open(filepath, encoding="utf-8") as f:
        return load_snapshot(json.load(f))
