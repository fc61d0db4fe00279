"""
scholartree web application - one in-memory exploration session over JSON.

run:
    uvicorn scholartree.web.app:app --host 0.0.0.0 --port 8765

endpoints:
    GET  /api/state                      → full session state
    POST /api/search                     → start a new search
    POST /api/nodes/{node_id}/literature → open node in the literature panel
    POST /api/nodes/{node_id}/expand     → expand node (budgeted)
    POST /api/selection                  → toggle a keyword in the network selection
    POST /api/network                    → regenerate the network (budgeted)
    POST /api/collection                 → toggle-collect a paper
    POST /api/trees/refresh              → regenerate one root tree
    GET  /api/export/json                → session snapshot download
    GET  /api/export/network.svg         → network image download

operations that fail record the message in state["error"] and still
return 200 with the state; the client shows it as the error banner.
"""

import json
import time
import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel

from ..core.config import ExplorerConfig
from ..core.errors import ValidationError
from ..core.logs import setup_logging
from ..core.models import Paper
from ..export.image import render_network_svg
from ..export.snapshot import export_snapshot
from ..llm.collaborator import ResearchCollaborator
from ..session.orchestrator import SessionOrchestrator

logger = logging.getLogger("scholartree.web")


# models
class SearchRequest(BaseModel):
    keywords: List[str]


class ExpandRequest(BaseModel):
    parent_keyword: Optional[str] = None


class SelectionRequest(BaseModel):
    keyword: str
    selected: bool


class PaperModel(BaseModel):
    title: str
    url: str
    authors: List[str] = []
    year: Optional[int] = None
    abstract: str = ""
    citations: Optional[int] = None

    def to_paper(self) -> Paper:
        return Paper(
            title=self.title,
            url=self.url,
            authors=tuple(self.authors),
            year=self.year,
            abstract=self.abstract,
            citations=self.citations
        )


class CollectRequest(BaseModel):
    paper: PaperModel
    source_keyword: str


class RefreshRequest(BaseModel):
    keyword: str


def create_app(
    orchestrator: Optional[SessionOrchestrator] = None,
    config: Optional[ExplorerConfig] = None
) -> FastAPI:
    """app bound to one session; builds it from the environment if not given."""
    if orchestrator is None:
        config = config or ExplorerConfig.from_env()
        orchestrator = SessionOrchestrator(
            ResearchCollaborator.from_config(config.llm),
            config=config
        )
    session = orchestrator

    app = FastAPI(title="ScholarTree", description="Research keyword explorer")
    app.state.session = session

    @app.on_event("shutdown")
    async def shutdown():
        await session.close()

    @app.get("/api/state")
    async def get_state():
        """current session state."""
        return session.state.to_dict()

    @app.post("/api/search")
    async def search(req: SearchRequest):
        """start a new search; replaces trees and network."""
        await session.start_search(req.keywords)
        return session.state.to_dict()

    @app.post("/api/nodes/{node_id}/literature")
    async def node_literature(node_id: str):
        """open node in the literature panel, fetching papers on first use."""
        node = session.find_node(node_id)
        if node is None:
            raise HTTPException(status_code=404, detail="Node not found")
        await session.select_node_for_literature(node)
        return session.state.to_dict()

    @app.post("/api/nodes/{node_id}/expand")
    async def node_expand(node_id: str, req: Optional[ExpandRequest] = None):
        """replace node children with a fresh expansion."""
        node = session.find_node(node_id)
        if node is None:
            raise HTTPException(status_code=404, detail="Node not found")
        parent_keyword = (req.parent_keyword if req else None) or node.keyword
        await session.expand_node(node_id, parent_keyword)
        return session.state.to_dict()

    @app.post("/api/selection")
    async def selection(req: SelectionRequest):
        """toggle keyword membership in the network selection."""
        session.toggle_network_selection(req.keyword, req.selected)
        return session.state.to_dict()

    @app.post("/api/network")
    async def network():
        """regenerate the network over the current selection."""
        await session.regenerate_network()
        return session.state.to_dict()

    @app.post("/api/collection")
    async def collection(req: CollectRequest):
        """collect a paper, or uncollect it if already collected."""
        session.toggle_collect_paper(req.paper.to_paper(), req.source_keyword)
        return session.state.to_dict()

    @app.post("/api/trees/refresh")
    async def refresh(req: RefreshRequest):
        """regenerate the root tree for a keyword."""
        await session.refresh_tree(req.keyword)
        return session.state.to_dict()

    @app.get("/api/export/json")
    async def export_json():
        """session snapshot as a JSON download."""
        try:
            data = export_snapshot(session.snapshot())
        except ValidationError as e:
            raise HTTPException(status_code=404, detail=str(e))

        filename = f"research-explorer-data-{int(time.time() * 1000)}.json"
        return Response(
            content=json.dumps(data, indent=2, ensure_ascii=False),
            media_type="application/json",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'}
        )

    @app.get("/api/export/network.svg")
    async def export_network():
        """network image as an SVG download."""
        try:
            svg = render_network_svg(session.state.network, session.config.export)
        except ValidationError as e:
            raise HTTPException(status_code=404, detail=str(e))

        filename = f"research-network-{int(time.time() * 1000)}.svg"
        return Response(
            content=svg,
            media_type="image/svg+xml",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'}
        )

    logger.info(f"session app ready (mutation limit {session.state.budget.limit})")
    return app


setup_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8765)
