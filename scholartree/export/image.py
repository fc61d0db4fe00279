"""
network image export - renders the keyword network as a standalone SVG.

layout comes from networkx (spring layout with a fixed seed, so the same
network always renders the same picture).

usage:
    svg = render_network_svg(session.state.network)
    path = write_network_image(session.state.network, "output")
"""

import time
import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import networkx as nx

from ..core.config import ExportConfig
from ..core.errors import ValidationError
from ..core.models import NetworkData

logger = logging.getLogger("scholartree.export")


NODE_RADIUS = 18
NODE_FILL = "#0891b2"     # cyan-600
EDGE_STROKE = "#64748b"   # slate-500
TEXT_FILL = "#e2e8f0"     # slate-200
EDGE_TEXT_FILL = "#94a3b8"  # slate-400


def _escape_xml(text: str) -> str:
    """escape XML special characters."""
    return (text
            .replace("&", "&amp;")
            .replace("<", "&lt;")
            .replace(">", "&gt;")
            .replace('"', "&quot;")
            .replace("'", "&apos;"))


def build_graph(network: NetworkData) -> nx.MultiDiGraph:
    """networkx graph with one node per keyword and one edge per connection."""
    graph = nx.MultiDiGraph()
    for node in network.nodes:
        graph.add_node(node.id, label=node.label)
    for edge in network.edges:
        graph.add_edge(edge.source, edge.target, label=edge.label or "")
    return graph


def _layout(graph: nx.MultiDiGraph, size: int) -> Dict[str, Tuple[float, float]]:
    """node positions scaled into a size x size box."""
    if graph.number_of_nodes() == 0:
        return {}

    positions = nx.spring_layout(nx.Graph(graph), k=2, iterations=50, seed=42)

    xs = [float(p[0]) for p in positions.values()]
    ys = [float(p[1]) for p in positions.values()]
    span_x = max(xs) - min(xs)
    span_y = max(ys) - min(ys)
    inner = size - 4 * NODE_RADIUS

    scaled = {}
    for node_id, (x, y) in positions.items():
        sx = (float(x) - min(xs)) / span_x if span_x else 0.5
        sy = (float(y) - min(ys)) / span_y if span_y else 0.5
        scaled[node_id] = (2 * NODE_RADIUS + sx * inner, 2 * NODE_RADIUS + sy * inner)
    return scaled


def render_network_svg(network: Optional[NetworkData], config: Optional[ExportConfig] = None) -> str:
    """SVG document for the network; raises ValidationError when there is no network."""
    if network is None:
        raise ValidationError("Network graph not found.")

    config = config or ExportConfig()
    margin = config.image_margin
    size = config.image_size
    total = size + 2 * margin

    graph = build_graph(network)
    positions = _layout(graph, size)

    lines: List[str] = []
    lines.append(
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{total}" height="{total}" '
        f'viewBox="0 0 {total} {total}">'
    )
    lines.append('  <defs>')
    lines.append(
        '    <marker id="arrow" viewBox="0 0 10 10" refX="10" refY="5" '
        'markerWidth="6" markerHeight="6" orient="auto-start-reverse">'
    )
    lines.append(f'      <path d="M 0 0 L 10 5 L 0 10 z" fill="{EDGE_STROKE}"/>')
    lines.append('    </marker>')
    lines.append('  </defs>')
    lines.append(f'  <rect width="100%" height="100%" fill="{config.background}"/>')
    lines.append(f'  <g transform="translate({margin},{margin})">')

    # edges first so nodes draw on top
    for source, target, attrs in graph.edges(data=True):
        x1, y1 = positions[source]
        x2, y2 = positions[target]
        label = _escape_xml(attrs.get("label", ""))

        if source == target:
            # self relation: small loop above the node
            cy = y1 - NODE_RADIUS - 10
            lines.append(
                f'    <circle cx="{x1:.1f}" cy="{cy:.1f}" r="10" fill="none" '
                f'stroke="{EDGE_STROKE}" stroke-width="1.5"/>'
            )
            lx, ly = x1, cy - 14
        else:
            lines.append(
                f'    <line x1="{x1:.1f}" y1="{y1:.1f}" x2="{x2:.1f}" y2="{y2:.1f}" '
                f'stroke="{EDGE_STROKE}" stroke-width="1.5" marker-end="url(#arrow)"/>'
            )
            lx, ly = (x1 + x2) / 2, (y1 + y2) / 2

        if label:
            lines.append(
                f'    <text x="{lx:.1f}" y="{ly:.1f}" fill="{EDGE_TEXT_FILL}" font-size="10" '
                f'text-anchor="middle">{label}</text>'
            )

    for node_id, attrs in graph.nodes(data=True):
        x, y = positions[node_id]
        label = _escape_xml(attrs.get("label", node_id))
        lines.append(f'    <circle cx="{x:.1f}" cy="{y:.1f}" r="{NODE_RADIUS}" fill="{NODE_FILL}"/>')
        lines.append(
            f'    <text x="{x:.1f}" y="{y + NODE_RADIUS + 14:.1f}" fill="{TEXT_FILL}" '
            f'font-size="12" text-anchor="middle">{label}</text>'
        )

    lines.append('  </g>')
    lines.append('</svg>')
    return "\n".join(lines)


def write_network_image(
    network: Optional[NetworkData],
    output_dir: str = "output",
    config: Optional[ExportConfig] = None
) -> str:
    """write the network SVG to output_dir; returns the file path."""
    svg = render_network_svg(network, config)

    path = Path(output_dir)
    path.mkdir(parents=True, exist_ok=True)
    filepath = path / f"research-network-{int(time.time() * 1000)}.svg"

    with open(filepath, "w", encoding="utf-8") as f:
        f.write(svg)

    logger.info(f"exported network image to {filepath}")
    return str(filepath)
