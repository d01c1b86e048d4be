# FILE: app/architecture/schemas.py
"""
Pydantic schemas for the architecture API.

Graph query responses are produced by the engine's result `to_dict()`
methods; the models here cover management requests and responses.
"""
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field


# ============== COMPONENT ==============

class ComponentCreate(BaseModel):
    id: str = Field(..., description="Kebab-case node id, at most 64 characters")
    name: str
    type: str = Field(..., description="layer, component, store, external, phase, app or mcp")
    layer: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    color: Optional[str] = None
    icon: Optional[str] = None
    sort_order: int = 0


class ComponentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    type: str
    layer: Optional[str]
    description: Optional[str]
    tags: List[str]
    color: Optional[str]
    icon: Optional[str]
    sort_order: int
    current_version: Optional[str]


class ComponentUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    sort_order: Optional[int] = None


class ComponentMove(BaseModel):
    layer: str = Field(..., description="Id of the destination layer")


# ============== LAYER ==============

class LayerCreate(BaseModel):
    id: str = Field(..., description="Kebab-case node id, at most 64 characters")
    name: str
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    sort_order: int = 0


class LayerDetail(ComponentOut):
    children: List[ComponentOut] = Field(default_factory=list)


# ============== EDGE ==============

class EdgeCreate(BaseModel):
    source_id: str
    target_id: str
    type: str
    label: Optional[str] = None


class EdgeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    source_id: str
    target_id: str
    type: str
    label: Optional[str]


class ComponentEdges(BaseModel):
    inbound: List[EdgeOut]
    outbound: List[EdgeOut]


# ============== VERSION ==============

class ProgressUpdate(BaseModel):
    progress: int = Field(..., description="0-100")
    status: Optional[str] = Field(None, description="planned, in-progress or complete; derived when omitted")


class VersionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    node_id: str
    version: str
    progress: int
    status: str
    updated_at: Optional[str] = None


class VersionSummary(BaseModel):
    version: str
    progress: int
    status: str
    total_steps: int
    feature_count: int


class StepTotalsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_steps: int
    feature_count: int


# ============== FEATURE ==============

class FeatureUpload(BaseModel):
    content: str = Field(..., description="Gherkin feature file content")


class FeatureOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    node_id: str
    version: str
    filename: str
    title: str
    step_count: int
    updated_at: Optional[str] = None


class FeatureDetail(FeatureOut):
    content: Optional[str] = None


class FeatureList(BaseModel):
    features: List[FeatureOut]
    totals: StepTotalsOut
