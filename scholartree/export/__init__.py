# export - session snapshot (JSON) and network image (SVG)
from .snapshot import export_snapshot, snapshot_to_json, write_snapshot, load_snapshot, read_snapshot
from .image import build_graph, render_network_svg, write_network_image

__all__ = [
    "export_snapshot", "snapshot_to_json", "write_snapshot", "load_snapshot", "read_snapshot",
    "build_graph", "render_network_svg", "write_network_image"
]
