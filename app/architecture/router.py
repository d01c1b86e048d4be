# FILE: app/architecture/router.py
"""
Architecture API Router - HTTP API Endpoints

Graph traversal (read-only, app.graph):
- GET /api/components/{id}/dependencies?depth=N
- GET /api/components/{id}/dependents
- GET /api/components/{id}/context
- GET /api/components/{id}/neighbourhood?hops=N
- GET /api/graph/implementation-order
- GET /api/graph/components-by-status?version=V
- GET /api/graph/next-implementable?version=V
- GET /api/graph/path?from=A&to=B
- GET /api/graph/layer-overview

Management and plain reads (app.architecture.service):
- GET /api/architecture
- GET/POST /api/components (GET filters: type, layer, tag, search)
- GET/PATCH/DELETE /api/components/{id}
- PUT /api/components/{id}/layer
- GET /api/components/{id}/edges
- GET/POST /api/layers, GET /api/layers/{id}
- POST /api/edges, DELETE /api/edges/{edge_id}
- GET /api/components/{id}/versions
- PATCH /api/components/{id}/versions/{version}/progress
- GET /api/components/{id}/versions/{version}/features
- GET/PUT/DELETE /api/components/{id}/versions/{version}/features/{filename}
- GET /api/components/{id}/versions/{version}/step-totals
"""
import logging
from dataclasses import asdict
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.orm import Session

from app.db import get_db
from app.auth import require_auth
from app.architecture import service, schemas
from app.architecture.errors import (
    ArchitectureError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from app.architecture.repositories import ArchitectureRepos, build_repos
from app import graph
from config.graph_limits import (
    DEFAULT_DEPTH,
    DEFAULT_HOPS,
    DEFAULT_VERSION,
    MAX_DEPTH,
    MAX_HOPS,
    clamp_param,
    is_known_version,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["architecture"],
    dependencies=[Depends(require_auth)],
)


def get_repos(db: Session = Depends(get_db)) -> ArchitectureRepos:
    return build_repos(db)


def _to_http(exc: ArchitectureError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=400, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


def _unexpected(action: str) -> HTTPException:
    logger.exception(f"[architecture.router] Error {action}")
    return HTTPException(status_code=500, detail=f"Internal error {action}")


async def _require_node(repos: ArchitectureRepos, node_id: str) -> None:
    if not await repos.nodes.exists(node_id):
        raise HTTPException(status_code=404, detail=f"Node not found: {node_id}")


def _require_version(version: str) -> str:
    if not is_known_version(version):
        raise HTTPException(status_code=400, detail=f"Invalid version: {version}")
    return version


# ============== GRAPH TRAVERSAL ==============

@router.get("/components/{node_id}/dependencies")
async def get_dependencies(
    node_id: str,
    depth: Optional[str] = None,
    repos: ArchitectureRepos = Depends(get_repos),
):
    await _require_node(repos, node_id)
    max_depth = clamp_param(depth, DEFAULT_DEPTH, MAX_DEPTH)
    try:
        tree = await graph.dependency_tree(repos, node_id, max_depth)
    except Exception:
        raise _unexpected("building dependency tree")
    return {"dependencies": [entry.to_dict() for entry in tree]}


@router.get("/components/{node_id}/dependents")
async def get_dependents(node_id: str, repos: ArchitectureRepos = Depends(get_repos)):
    await _require_node(repos, node_id)
    try:
        return await graph.dependents(repos, node_id)
    except Exception:
        raise _unexpected("listing dependents")


@router.get("/components/{node_id}/context")
async def get_component_context(node_id: str, repos: ArchitectureRepos = Depends(get_repos)):
    try:
        context = await graph.component_context(repos, node_id)
    except ArchitectureError as e:
        raise _to_http(e)
    except Exception:
        raise _unexpected("building component context")
    return context.to_dict()


@router.get("/components/{node_id}/neighbourhood")
async def get_neighbourhood(
    node_id: str,
    hops: Optional[str] = None,
    repos: ArchitectureRepos = Depends(get_repos),
):
    await _require_node(repos, node_id)
    max_hops = clamp_param(hops, DEFAULT_HOPS, MAX_HOPS)
    try:
        result = await graph.neighbourhood(repos, node_id, max_hops)
    except Exception:
        raise _unexpected("computing neighbourhood")
    return result.to_dict()


@router.get("/graph/implementation-order")
async def get_implementation_order(repos: ArchitectureRepos = Depends(get_repos)):
    try:
        result = await graph.implementation_order(repos)
    except Exception:
        raise _unexpected("computing implementation order")
    if result.has_cycle:
        return JSONResponse(
            status_code=409,
            content={"error": "Dependency cycle detected", "cycle": result.cycle},
        )
    return result.order


@router.get("/graph/components-by-status")
async def get_components_by_status(
    version: str = DEFAULT_VERSION,
    repos: ArchitectureRepos = Depends(get_repos),
):
    _require_version(version)
    try:
        buckets = await graph.components_by_status(repos, version)
    except Exception:
        raise _unexpected("classifying components")
    return buckets.to_dict()


@router.get("/graph/next-implementable")
async def get_next_implementable(
    version: str = DEFAULT_VERSION,
    repos: ArchitectureRepos = Depends(get_repos),
):
    _require_version(version)
    try:
        ready = await graph.next_implementable(repos, version)
    except Exception:
        raise _unexpected("finding next implementable components")
    return [c.to_dict() for c in ready]


@router.get("/graph/path")
async def get_shortest_path(
    from_id: Optional[str] = Query(None, alias="from"),
    to_id: Optional[str] = Query(None, alias="to"),
    repos: ArchitectureRepos = Depends(get_repos),
):
    if not from_id or not to_id:
        raise HTTPException(status_code=400, detail="Missing required query parameters: from, to")
    try:
        result = await graph.shortest_path(repos, from_id, to_id)
    except Exception:
        raise _unexpected("computing shortest path")
    return result.to_dict()


@router.get("/graph/layer-overview")
async def get_layer_overview(repos: ArchitectureRepos = Depends(get_repos)):
    try:
        layers = await graph.layer_overview(repos)
    except Exception:
        raise _unexpected("building layer overview")
    return [layer.to_dict() for layer in layers]


# ============== COMPONENTS ==============

@router.get("/architecture")
async def get_architecture(repos: ArchitectureRepos = Depends(get_repos)):
    try:
        return await service.get_architecture(repos)
    except Exception:
        raise _unexpected("reading architecture")


@router.get("/components", response_model=List[schemas.ComponentOut])
async def list_components(
    node_type: Optional[str] = Query(None, alias="type"),
    layer: Optional[str] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
    repos: ArchitectureRepos = Depends(get_repos),
):
    return await service.list_components(repos, node_type=node_type, layer=layer, tag=tag, search=search)


@router.post("/components", response_model=schemas.ComponentOut, status_code=201)
async def create_component(data: schemas.ComponentCreate, repos: ArchitectureRepos = Depends(get_repos)):
    try:
        return await service.create_component(
            repos,
            data.id,
            data.name,
            data.type,
            layer=data.layer,
            description=data.description,
            tags=data.tags,
            color=data.color,
            icon=data.icon,
            sort_order=data.sort_order,
        )
    except ArchitectureError as e:
        raise _to_http(e)


@router.get("/components/{node_id}", response_model=schemas.ComponentOut)
async def get_component(node_id: str, repos: ArchitectureRepos = Depends(get_repos)):
    try:
        return await service.get_component(repos, node_id)
    except ArchitectureError as e:
        raise _to_http(e)


@router.patch("/components/{node_id}", response_model=schemas.ComponentOut)
async def update_component(
    node_id: str,
    data: schemas.ComponentUpdate,
    repos: ArchitectureRepos = Depends(get_repos),
):
    try:
        return await service.update_component(
            repos,
            node_id,
            name=data.name,
            description=data.description,
            tags=data.tags,
            color=data.color,
            icon=data.icon,
            sort_order=data.sort_order,
        )
    except ArchitectureError as e:
        raise _to_http(e)


@router.put("/components/{node_id}/layer", response_model=schemas.ComponentOut)
async def move_component(
    node_id: str,
    data: schemas.ComponentMove,
    repos: ArchitectureRepos = Depends(get_repos),
):
    try:
        return await service.move_component(repos, node_id, data.layer)
    except ArchitectureError as e:
        raise _to_http(e)


@router.delete("/components/{node_id}", status_code=204)
async def delete_component(node_id: str, repos: ArchitectureRepos = Depends(get_repos)):
    try:
        await service.delete_component(repos, node_id)
    except ArchitectureError as e:
        raise _to_http(e)
    return Response(status_code=204)


# ============== LAYERS ==============

@router.get("/layers", response_model=List[schemas.ComponentOut])
async def list_layers(repos: ArchitectureRepos = Depends(get_repos)):
    return await service.list_layers(repos)


@router.get("/layers/{layer_id}", response_model=schemas.LayerDetail)
async def get_layer(layer_id: str, repos: ArchitectureRepos = Depends(get_repos)):
    try:
        layer, children = await service.get_layer(repos, layer_id)
    except ArchitectureError as e:
        raise _to_http(e)
    return {**asdict(layer), "children": [asdict(c) for c in children]}


@router.post("/layers", response_model=schemas.ComponentOut, status_code=201)
async def create_layer(data: schemas.LayerCreate, repos: ArchitectureRepos = Depends(get_repos)):
    try:
        return await service.create_layer(
            repos,
            data.id,
            data.name,
            description=data.description,
            color=data.color,
            icon=data.icon,
            sort_order=data.sort_order,
        )
    except ArchitectureError as e:
        raise _to_http(e)


# ============== EDGES ==============

@router.post("/edges", response_model=schemas.EdgeOut, status_code=201)
async def create_edge(data: schemas.EdgeCreate, repos: ArchitectureRepos = Depends(get_repos)):
    try:
        return await service.create_edge(repos, data.source_id, data.target_id, data.type, label=data.label)
    except ArchitectureError as e:
        raise _to_http(e)


@router.delete("/edges/{edge_id}", status_code=204)
async def delete_edge(edge_id: int, repos: ArchitectureRepos = Depends(get_repos)):
    try:
        await service.delete_edge(repos, edge_id)
    except ArchitectureError as e:
        raise _to_http(e)
    return Response(status_code=204)


@router.get("/components/{node_id}/edges", response_model=schemas.ComponentEdges)
async def get_component_edges(node_id: str, repos: ArchitectureRepos = Depends(get_repos)):
    try:
        return await service.component_edges(repos, node_id)
    except ArchitectureError as e:
        raise _to_http(e)


# ============== VERSIONS & FEATURES ==============

@router.get("/components/{node_id}/versions", response_model=List[schemas.VersionSummary])
async def list_versions(node_id: str, repos: ArchitectureRepos = Depends(get_repos)):
    try:
        return await service.list_versions(repos, node_id)
    except ArchitectureError as e:
        raise _to_http(e)


@router.patch("/components/{node_id}/versions/{version}/progress", response_model=schemas.VersionOut)
async def update_progress(
    node_id: str,
    version: str,
    data: schemas.ProgressUpdate,
    repos: ArchitectureRepos = Depends(get_repos),
):
    try:
        return await service.update_progress(repos, node_id, version, data.progress, data.status)
    except ArchitectureError as e:
        raise _to_http(e)


@router.put("/components/{node_id}/versions/{version}/features/{filename}", response_model=schemas.FeatureOut)
async def upload_feature(
    node_id: str,
    version: str,
    filename: str,
    data: schemas.FeatureUpload,
    repos: ArchitectureRepos = Depends(get_repos),
):
    try:
        return await service.upload_feature(repos, node_id, version, filename, data.content)
    except ArchitectureError as e:
        raise _to_http(e)


@router.get("/components/{node_id}/versions/{version}/step-totals", response_model=schemas.StepTotalsOut)
async def get_step_totals(node_id: str, version: str, repos: ArchitectureRepos = Depends(get_repos)):
    try:
        return await service.step_totals(repos, node_id, version)
    except ArchitectureError as e:
        raise _to_http(e)


@router.get("/components/{node_id}/versions/{version}/features", response_model=schemas.FeatureList)
async def list_features(node_id: str, version: str, repos: ArchitectureRepos = Depends(get_repos)):
    try:
        features, totals = await service.list_features(repos, node_id, version)
    except ArchitectureError as e:
        raise _to_http(e)
    return {"features": features, "totals": totals}


@router.get("/components/{node_id}/versions/{version}/features/{filename}")
async def get_feature(
    node_id: str,
    version: str,
    filename: str,
    request: Request,
    repos: ArchitectureRepos = Depends(get_repos),
):
    """JSON by default; the raw Gherkin text when the client accepts text/plain."""
    try:
        feature = await service.get_feature(repos, node_id, version, filename)
    except ArchitectureError as e:
        raise _to_http(e)
    if "text/plain" in request.headers.get("accept", ""):
        return PlainTextResponse(feature.content or "")
    return schemas.FeatureDetail.model_validate(feature).model_dump()


@router.delete("/components/{node_id}/versions/{version}/features/{filename}", status_code=204)
async def delete_feature(
    node_id: str,
    version: str,
    filename: str,
    repos: ArchitectureRepos = Depends(get_repos),
):
    try:
        await service.delete_feature(repos, node_id, version, filename)
    except ArchitectureError as e:
        raise _to_http(e)
    return Response(status_code=204)
