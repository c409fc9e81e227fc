"""
Result Types

Types returned by providers, the extraction pipeline and the read interfaces.

Provider Models:
    - ProviderResponse: Raw model text plus responding model id
    - ConnectionCheck: Outcome of a provider connection test

Pipeline Models:
    - ChunkOutcome: Per-chunk step record (parsed result or captured error)
    - ExtractionSummary: Counts returned by a successful pass

Read Models:
    - TerritoryListing: Reconciled known/frontier territories
    - AgentHierarchy, AgentListing: Reconciled agents and coordinator tree
    - InsightListing: Insights grouped by severity with counts
    - GraphNode, GraphEdge, GraphView: Entity graph for external rendering
"""

from pydantic import BaseModel, Field

from atlas_kg.types.extraction import ChunkExtraction
from atlas_kg.types.records import Agent, Insight, Territory

# -----------------------------------------------------------------------------
# Provider Models
# -----------------------------------------------------------------------------


class ProviderResponse(BaseModel):
    """
    Raw textual response from a provider.

    Attributes:
        text: Model output, unparsed
        model: Identifier of the responding model
    """

    text: str
    model: str


class ConnectionCheck(BaseModel):
    """Result of testing a provider configuration."""

    success: bool
    message: str
    available_models: list[str] = []


# -----------------------------------------------------------------------------
# Pipeline Models
# -----------------------------------------------------------------------------


class ChunkOutcome(BaseModel):
    """
    Record of one chunk step in an extraction pass.

    Exactly one of `result` or `error` is set. `error_kind` is "provider" for a
    failed call (fatal for the pass) and "parse" for unusable output (recovered).
    """

    index: int
    chars: int
    model: str | None = None
    result: ChunkExtraction | None = None
    error: str | None = None
    error_kind: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.result is not None


class ExtractionSummary(BaseModel):
    """Counts of records created by a successful extraction pass."""

    document_id: str
    chunks: int = 0
    failed_chunks: int = 0
    entities: int = 0
    relationships: int = 0
    insights: int = 0
    territories: int = 0
    agents: int = 0
    extracted_by: str | None = None
    duration_seconds: float = 0.0


# -----------------------------------------------------------------------------
# Read Models
# -----------------------------------------------------------------------------


class TerritoryListing(BaseModel):
    """Reconciled territories of a project, split by status."""

    known: list[Territory] = Field(default_factory=list)
    frontier: list[Territory] = Field(default_factory=list)


class AgentHierarchy(BaseModel):
    """A coordinator with its direct explorer children."""

    coordinator: Agent
    children: list[Agent] = Field(default_factory=list)


class AgentListing(BaseModel):
    """Reconciled agents of a project plus the coordinator tree."""

    agents: list[Agent] = Field(default_factory=list)
    hierarchy: AgentHierarchy | None = None


class InsightCounts(BaseModel):
    total: int = 0
    critical: int = 0
    warning: int = 0
    info: int = 0
    unacknowledged: int = 0


class InsightListing(BaseModel):
    """Insights ordered critical-first, then newest-first, with severity groups."""

    insights: list[Insight] = Field(default_factory=list)
    grouped: dict[str, list[Insight]] = Field(default_factory=dict)
    counts: InsightCounts = Field(default_factory=InsightCounts)


class GraphNode(BaseModel):
    """Entity shaped for external graph rendering. Metadata stays an explicit map."""

    id: str
    name: str
    type: str
    subtype: str | None = None
    description: str | None = None
    confidence: float
    review_status: str
    territory_id: str | None = None
    size: int
    metadata: dict[str, str] = Field(default_factory=dict)


class GraphEdge(BaseModel):
    id: str
    source: str
    target: str
    label: str
    weight: int


class GraphView(BaseModel):
    """All entities and edges of a project."""

    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
