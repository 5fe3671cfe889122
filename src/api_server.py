#!/usr/bin/env python3
"""
Health Grid - Reveal API

Serves the grid and owns the single reveal session. Clients (the generated
3D viewer, or any other renderer) post selection/close events and poll the
current frame:
- POST /api/select/{id}  select an entity and start its playback
- POST /api/close        close the sidebar / session
- GET  /api/frame        draw descriptors for the current instant

Usage:
    source venv/bin/activate
    python src/api_server.py
    # or: uvicorn api_server:app --app-dir src --port 8085
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from generate_3d import generate_html
from grid_config import GridSettings
from logging_config import get_logger, setup_logging
from network_data import NetworkData, UnknownEntity, load_network
from playback_scheduler import PlaybackScheduler
from render_adapter import Frame, render_frame
from reveal_engine import RevealEngine

logger = get_logger("api_server")

app = FastAPI(
    title="Health Grid Reveal API",
    description="Selection-driven reveal playback for the 3D health grid",
    version="1.0.0"
)

# Enable CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@dataclass
class GridContext:
    """Everything the service shares between requests."""
    settings: GridSettings
    network: NetworkData
    engine: RevealEngine
    scheduler: PlaybackScheduler


# Loaded once on startup
context: Optional[GridContext] = None


def build_context(settings: GridSettings, network: Optional[NetworkData] = None) -> GridContext:
    if network is None:
        network = load_network(settings.resolved_data_path)
    engine = RevealEngine(network, mode=settings.mode, interval_ms=settings.reveal_interval_ms)
    return GridContext(
        settings=settings,
        network=network,
        engine=engine,
        scheduler=PlaybackScheduler(engine),
    )


def load_context(settings: Optional[GridSettings] = None, network: Optional[NetworkData] = None) -> GridContext:
    """Install the service context. Load errors propagate and abort startup."""
    global context
    settings = settings or GridSettings.from_env()
    context = build_context(settings, network)
    logger.info(
        "Grid ready: %d entities, mode=%s, interval=%dms",
        len(context.network.entities), settings.mode.value, settings.reveal_interval_ms,
    )
    return context


def require_context() -> GridContext:
    if context is None:
        raise HTTPException(status_code=503, detail="Data not loaded")
    return context


@app.on_event("startup")
async def startup():
    if context is None:
        load_context()


@app.on_event("shutdown")
async def shutdown():
    if context is not None:
        await context.scheduler.shutdown()


# Response models
class EntityInfo(BaseModel):
    id: str
    lat: float
    lng: float
    label: str
    type: str
    color: str
    size: float
    description: str = ""


class EntityDetailResponse(EntityInfo):
    neighbors: list[str]
    sequence: Optional[list[str]] = None


class EntitiesResponse(BaseModel):
    total_entities: int
    entities: list[EntityInfo]


class SessionResponse(BaseModel):
    state: str
    session_id: Optional[int] = None
    mode: str
    selected_entity_id: Optional[str] = None
    active_path: list[str] = []
    cursor: int = 0
    is_complete: bool = True


def _entity_info(ctx: GridContext, entity_id: str) -> EntityInfo:
    entity = ctx.network.entity(entity_id)
    return EntityInfo(**entity.model_dump(mode="json", by_alias=True))


def _session_response(ctx: GridContext) -> SessionResponse:
    session = ctx.engine.current_session()
    if session is None:
        return SessionResponse(state=ctx.engine.state.value, mode=ctx.engine.mode.value)
    return SessionResponse(state=ctx.engine.state.value, **session.as_dict())


# Endpoints

@app.get("/")
async def root():
    """API info endpoint."""
    return {
        "service": "health-grid-api",
        "version": "1.0.0",
        "endpoints": {
            "/api/entities": "All grid entities",
            "/api/entity/{entity_id}": "Single entity with neighbors and sequence",
            "/api/session": "Current reveal session",
            "/api/select/{entity_id}": "POST - select an entity",
            "/api/close": "POST - close the current session",
            "/api/tick": "POST - reveal the next step now",
            "/api/frame": "Draw descriptors for the current frame",
            "/viewer": "3D viewer page",
        }
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "data_loaded": context is not None,
        "entities_count": len(context.network.entities) if context else 0,
        "mode": context.engine.mode.value if context else None,
    }


@app.get("/api/entities", response_model=EntitiesResponse)
async def get_entities():
    ctx = require_context()
    entities = [_entity_info(ctx, entity_id) for entity_id in ctx.network.entities]
    return EntitiesResponse(total_entities=len(entities), entities=entities)


@app.get("/api/entity/{entity_id}", response_model=EntityDetailResponse)
async def get_entity(entity_id: str):
    """
    Get full details for a specific entity.
    Used by the sidebar when a node is clicked.
    """
    ctx = require_context()
    if not ctx.network.has_entity(entity_id):
        raise HTTPException(status_code=404, detail=f"Entity {entity_id} not found")

    sequence = ctx.network.sequence_for(entity_id)
    return EntityDetailResponse(
        **_entity_info(ctx, entity_id).model_dump(),
        neighbors=sorted(ctx.network.neighbors(entity_id)),
        sequence=list(sequence) if sequence is not None else None,
    )


@app.get("/api/session", response_model=SessionResponse)
async def get_session():
    return _session_response(require_context())


@app.post("/api/select/{entity_id}", response_model=SessionResponse)
async def select_entity(entity_id: str):
    """
    Select an entity. The current session is replaced and playback restarts
    from the first step, even for the entity already selected.
    """
    ctx = require_context()
    try:
        ctx.scheduler.select(entity_id)
    except UnknownEntity as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return _session_response(ctx)


@app.post("/api/close", response_model=SessionResponse)
async def close_session():
    ctx = require_context()
    ctx.scheduler.close()
    return _session_response(ctx)


@app.post("/api/tick", response_model=SessionResponse)
async def tick():
    ctx = require_context()
    ctx.scheduler.tick()
    return _session_response(ctx)


@app.get("/api/frame", response_model=Frame)
async def get_frame():
    ctx = require_context()
    return render_frame(ctx.network, ctx.engine)


@app.get("/api/stats")
async def get_stats():
    """Get statistics about the loaded grid."""
    ctx = require_context()
    categories: dict[str, int] = {}
    for entity in ctx.network.entities.values():
        categories[entity.category.value] = categories.get(entity.category.value, 0) + 1

    return {
        "metadata": dict(ctx.network.metadata),
        "entities": len(ctx.network.entities),
        "connections": len(ctx.network.connections),
        "sequences": len(ctx.network.sequences),
        "categories": categories,
        "mode": ctx.engine.mode.value,
        "reveal_interval_ms": ctx.engine.interval_ms,
    }


@app.get("/viewer", response_class=HTMLResponse)
async def viewer():
    ctx = require_context()
    title = ctx.network.metadata.get("title", "Health Grid")
    return HTMLResponse(content=generate_html(ctx.network, title))


if __name__ == "__main__":
    import uvicorn
    settings = GridSettings.from_env()
    setup_logging(settings.log_level, settings.log_file)
    load_context(settings)
    uvicorn.run(app, host=settings.host, port=settings.port)
