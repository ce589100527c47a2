"""
Skill Graph Engine: Layout API Server
=====================================

HTTP surface over one SkillGraphEngine. The simulation ticks on the
server's event loop; clients poll the graph or follow the SSE stream.

Endpoints:
- GET    /health                         -> Engine status
- GET    /api/v1/graph                   -> Current layout snapshot
- POST   /api/v1/skills                  -> Replace the skill set
- POST   /api/v1/events                  -> Drag / click / hover event
- POST   /api/v1/suggestions             -> Generate and merge suggestions
- POST   /api/v1/suggestions/{id}/accept -> Promote a suggestion
- DELETE /api/v1/suggestions/{id}        -> Reject a suggestion
- GET    /api/v1/stream                  -> Snapshot stream (SSE)

Environment:
- SKILLGRAPH_CONFIG   path to a JSON EngineConfig
- GEMINI_API_KEY      enables the Gemini provider (catalog otherwise)

Usage:
    uvicorn skillgraph.api.server:app --reload
"""
import asyncio
import json
import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from ..adapter.providers import CatalogProvider, GeminiProvider, RecommendationProvider
from ..contracts.base import ErrorCode, SkillGraphError
from ..engine import EngineConfig, SkillGraphEngine
from ..frontend.interaction import ActionType, InteractionRequest, dispatch_request
from .mapper import map_error_to_dto, map_node_to_dto, map_report_to_dto, map_view_to_dto

logger = logging.getLogger(__name__)

STREAM_INTERVAL_SECONDS = 0.1

_STATUS_BY_CODE: Dict[ErrorCode, int] = {
    ErrorCode.UNKNOWN_NODE: 404,
    ErrorCode.NOT_A_SUGGESTION: 409,
    ErrorCode.INVALID_STATE_TRANSITION: 409,
    ErrorCode.INVALID_COORDINATES: 400,
    ErrorCode.SUGGESTION_IN_PROGRESS: 409,
    ErrorCode.GRAPH_RELOADED: 409,
    ErrorCode.SUGGESTION_EMPTY: 404,
    ErrorCode.SUGGESTION_TIMEOUT: 504,
    ErrorCode.SUGGESTION_FAILED: 502,
    ErrorCode.ENGINE_INACTIVE: 503,
}


# =============================================================================
# REQUEST MODELS
# =============================================================================

class LoadRequest(BaseModel):
    # Records stay loose: malformed ones are skipped by the loader, not rejected here
    skills: List[Dict[str, Any]]


class EventRequest(BaseModel):
    action: str
    node_id: Optional[str] = None
    x: Optional[float] = None
    y: Optional[float] = None


# =============================================================================
# INFRASTRUCTURE SETUP
# =============================================================================

def provider_from_env(config: EngineConfig) -> RecommendationProvider:
    api_key = os.environ.get("GEMINI_API_KEY")
    if api_key:
        return GeminiProvider(api_key, timeout=config.suggestion.timeout_seconds)
    return CatalogProvider(seed=config.suggestion.random_seed)


def config_from_env() -> EngineConfig:
    path = os.environ.get("SKILLGRAPH_CONFIG")
    if path:
        logger.info("Loading engine config from %s", path)
        return EngineConfig.load(path)
    return EngineConfig()


def _error_status(exc: SkillGraphError) -> HTTPException:
    return HTTPException(
        status_code=_STATUS_BY_CODE.get(exc.code, 400),
        detail={"code": exc.code.name, "message": str(exc)},
    )


def create_app(
    engine: Optional[SkillGraphEngine] = None,
    stream_interval: float = STREAM_INTERVAL_SECONDS,
) -> FastAPI:
    """
    Build the application.

    An injected engine is used as-is (tests); otherwise one is built from
    the environment at startup.
    """
    state: Dict[str, Optional[SkillGraphEngine]] = {"engine": None}

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        instance = engine
        if instance is None:
            config = config_from_env()
            instance = SkillGraphEngine(config, provider=provider_from_env(config))
        logger.info("Skill graph engine ready (provider: %s)", instance.provider.provider_id)
        instance.start()
        state["engine"] = instance

        yield

        logger.info("Shutting down skill graph engine")
        instance.close()
        state["engine"] = None

    app = FastAPI(
        title="Skill Graph Engine API",
        version="0.1.0",
        description="Force-directed skill graph layout",
        lifespan=lifespan,
    )

    # CORS (Allow renderer)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    def current() -> SkillGraphEngine:
        instance = state["engine"]
        if instance is None or not instance.is_active:
            raise HTTPException(status_code=503, detail="Engine not initialized")
        return instance

    # =========================================================================
    # ENDPOINTS
    # =========================================================================

    @app.get("/health")
    async def health_check():
        instance = current()
        return {
            "status": "online",
            "provider": instance.provider.provider_id,
            "nodes": len(instance.graph),
            "running": instance.simulation.is_running,
        }

    @app.get("/api/v1/graph")
    async def get_graph():
        return map_view_to_dto(current().snapshot())

    @app.post("/api/v1/skills")
    async def load_skills(request: LoadRequest):
        instance = current()
        report = instance.load(request.skills)
        return {
            "report": map_report_to_dto(report),
            "graph": map_view_to_dto(instance.snapshot()),
        }

    @app.post("/api/v1/events")
    async def post_event(request: EventRequest):
        instance = current()
        try:
            action = ActionType(request.action)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Unknown action {request.action!r}")
        try:
            interaction = InteractionRequest(
                action=action, node_id=request.node_id, x=request.x, y=request.y,
                source_component="http",
            )
            dispatch_request(instance.interaction, interaction)
        except SkillGraphError as e:
            raise _error_status(e)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return map_view_to_dto(instance.snapshot())

    @app.post("/api/v1/suggestions")
    async def generate_suggestions():
        instance = current()
        result = await instance.suggest()
        if result.is_failure:
            raise HTTPException(
                status_code=_STATUS_BY_CODE.get(result.error.code, 500),
                detail=map_error_to_dto(result.error),
            )
        view = instance.snapshot()
        added = {n.id for n in result.value.nodes}
        return {
            "added": [map_node_to_dto(n) for n in view.nodes if n.node_id in added],
            "graph": map_view_to_dto(view),
        }

    @app.post("/api/v1/suggestions/{node_id}/accept")
    async def accept_suggestion(node_id: str):
        instance = current()
        try:
            instance.accept_suggestion(node_id)
        except SkillGraphError as e:
            raise _error_status(e)
        return map_node_to_dto(instance.snapshot().node(node_id))

    @app.delete("/api/v1/suggestions/{node_id}")
    async def reject_suggestion(node_id: str):
        instance = current()
        try:
            node = instance.reject_suggestion(node_id)
        except SkillGraphError as e:
            raise _error_status(e)
        return {"removed": node.id}

    @app.get("/api/v1/stream")
    async def stream_graph(limit: Optional[int] = None):
        """
        Server-Sent Events (SSE) endpoint for live layout updates.
        Emits a snapshot whenever the graph changed or the simulation ticked.
        """
        instance = current()

        async def event_generator():
            last_seen = None
            sent = 0
            while instance.is_active:
                marker = (instance.graph.version, instance.simulation.tick_count, id(instance.graph))
                if marker != last_seen:
                    yield f"data: {json.dumps(map_view_to_dto(instance.snapshot()))}\n\n"
                    last_seen = marker
                    sent += 1
                    if limit is not None and sent >= limit:
                        return
                await asyncio.sleep(stream_interval)
            yield "event: closed\ndata: {}\n\n"

        return StreamingResponse(
            event_generator(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
            },
        )

    return app


app = create_app()
