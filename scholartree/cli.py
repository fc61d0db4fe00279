"""
scholartree CLI - build a research map from the command line and export it.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .core.config import ExplorerConfig, ProviderKind
from .core.logs import setup_logging
from .core.models import TreeNode
from .export.image import write_network_image
from .export.snapshot import write_snapshot
from .llm.collaborator import ResearchCollaborator
from .session.orchestrator import SessionOrchestrator

logger = logging.getLogger("scholartree.cli")


def print_tree(node: TreeNode, depth: int = 0):
    label = f" [{node.label.value}]" if node.label else ""
    papers = f" ({len(node.literature)} papers)" if node.literature is not None else ""
    print(f"{'  ' * depth}- {node.keyword}{label}{papers}")
    for child in node.children:
        print_tree(child, depth + 1)


async def explore(session: SessionOrchestrator, keywords: List[str], expand: int = 0, literature: bool = False) -> bool:
    """search, then expand the first branches and fetch their literature."""
    if not await session.start_search(keywords):
        return False

    for tree in session.state.forest:
        for child in tree.children[:expand]:
            if not await session.expand_node(child.id, child.keyword):
                logger.warning(f"stopping expansion: {session.state.error}")
                return True

    if literature:
        # fetch concurrently; each call only touches its own node
        branches = [child for tree in session.state.forest for child in tree.children[:max(expand, 1)]]
        await asyncio.gather(*(session.select_node_for_literature(node) for node in branches))

    return True


async def run(args: argparse.Namespace, session: SessionOrchestrator) -> int:
    try:
        ok = await explore(session, args.keywords, expand=args.expand, literature=args.literature)
    finally:
        await session.close()

    state = session.state
    if not ok:
        print(f"Error: {state.error}")
        return 1

    if not args.quiet:
        print(f"\n{'='*60}")
        print(f"RESEARCH MAP: {', '.join(args.keywords)}")
        print(f"{'='*60}\n")
        for tree in state.forest:
            print_tree(tree)
        if state.network and state.network.edges:
            print("\nConnections:")
            for edge in state.network.edges:
                relation = f" ({edge.label})" if edge.label else ""
                print(f"  {edge.source} -> {edge.target}{relation}")
        print(f"\nIterations used: {state.budget.used}/{state.budget.limit}")
        if state.error:
            print(f"Last error: {state.error}")

    output_dir = args.output or session.config.export.output_dir
    print(f"\nJSON: {write_snapshot(session.snapshot(), output_dir)}")
    if state.network is not None:
        print(f"Network: {write_network_image(state.network, output_dir, session.config.export)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Explore research keywords as AI-generated trees.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  scholartree "graph neural networks"
  scholartree "protein folding" "drug discovery" --expand 2 --literature
  scholartree "quantum error correction" --provider ollama -o maps
        """
    )
    parser.add_argument(
        "keywords",
        nargs="+",
        help="root keywords (one tree each)"
    )
    parser.add_argument(
        "--expand", "-e",
        type=int,
        default=0,
        help="expand the first N branches of each tree (default: 0)"
    )
    parser.add_argument(
        "--literature", "-l",
        action="store_true",
        help="fetch literature for the explored branches"
    )
    parser.add_argument(
        "--provider", "-p",
        type=str,
        choices=[kind.value for kind in ProviderKind],
        help="LLM backend (default: from SCHOLARTREE_PROVIDER or gemini)"
    )
    parser.add_argument(
        "--limit",
        type=int,
        help="iteration limit for expansions and network updates"
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        help="output directory (default: from SCHOLARTREE_EXPORT_DIR or output)"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="minimal output"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="verbose/debug output"
    )
    return parser


def main(argv: Optional[List[str]] = None, session: Optional[SessionOrchestrator] = None) -> int:
    args = build_parser().parse_args(argv)

    log_level = logging.WARNING if args.quiet else (logging.DEBUG if args.verbose else logging.INFO)
    setup_logging(level=log_level)

    if session is None:
        config = ExplorerConfig.from_env()
        if args.provider:
            config.llm.provider = ProviderKind(args.provider)
        if args.limit is not None:
            config.mutation_limit = args.limit
        session = SessionOrchestrator(ResearchCollaborator.from_config(config.llm), config=config)

    return asyncio.run(run(args, session))


if __name__ == "__main__":
    sys.exit(main())
