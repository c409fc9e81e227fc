"""
Record Types

Persisted records of the knowledge model. Every record belongs to a project and
carries a UUID assigned by the core plus ISO-8601 UTC timestamps.

Storage Models:
    - Document: Uploaded source text and its extraction lifecycle
    - Entity, EntityType: Typed node extracted from a document
    - Edge: Directed, weighted relationship between two entities
    - Insight: Risk/gap/opportunity finding (never merged)
    - Territory: Known cluster of same-typed entities, or a frontier hint
    - Agent: Coordinator/explorer summary derived from territory populations
    - ChatMessage, ChatRole: Question or answer in a project's graph chat
"""

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def new_id() -> str:
    """Return a fresh record id."""
    return str(uuid4())


def utc_now() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class EntityType(str, Enum):
    """Closed set of entity types the extractor may emit."""

    PERSON = "person"
    TEAM = "team"
    ORGANISATION = "organisation"
    CLIENT = "client"
    SERVICE = "service"
    STRATEGY = "strategy"
    GOAL = "goal"
    FINANCIAL = "financial"
    PROCESS = "process"
    SYSTEM = "system"
    LOCATION = "location"
    CONTEXT = "context"
    CULTURE = "culture"


class DocumentStatus(str, Enum):
    UPLOADED = "uploaded"
    PROCESSING = "processing"
    EXTRACTED = "extracted"
    FAILED = "failed"


class InsightType(str, Enum):
    INCONSISTENCY = "inconsistency"
    GAP = "gap"
    RISK = "risk"
    OPPORTUNITY = "opportunity"
    OBSERVATION = "observation"
    CULTURE = "culture"


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class TerritoryStatus(str, Enum):
    KNOWN = "known"
    FRONTIER = "frontier"


class AgentRole(str, Enum):
    COORDINATOR = "coordinator"
    EXPLORER = "explorer"


class AgentStatus(str, Enum):
    ACTIVE = "active"
    COMPLETE = "complete"
    PENDING = "pending"


class Document(BaseModel):
    """
    A source document owned by a project.

    Created on upload (outside the core); the pipeline only moves it through
    its status lifecycle and records entity/edge counts.
    """

    id: str = Field(default_factory=new_id)
    project_id: str
    filename: str = ""
    content: str = ""
    status: DocumentStatus = DocumentStatus.UPLOADED
    entity_count: int = 0
    edge_count: int = 0
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)

    model_config = ConfigDict(use_enum_values=True, validate_default=True)


class Entity(BaseModel):
    """
    A persisted entity in the knowledge graph.

    Attributes:
        name: Free-text name as extracted (identity within a pass is exact match)
        type: Entity classification
        metadata: Arbitrary extracted key/value pairs (kept separate from typed fields)
        confidence: Confidence score in [0, 1]
        territory_id: Back-reference to the known territory grouping this entity
        extracted_by: Identifier of the model that produced this entity
    """

    id: str = Field(default_factory=new_id)
    project_id: str
    document_id: str
    name: str
    type: EntityType
    subtype: str | None = None
    description: str | None = None
    metadata: dict[str, str] = {}
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    review_status: str = "pending"
    territory_id: str | None = None
    extracted_by: str | None = None
    created_at: str = Field(default_factory=utc_now)

    model_config = ConfigDict(use_enum_values=True)


class Edge(BaseModel):
    """A directed relationship between two entities of the same extraction pass."""

    id: str = Field(default_factory=new_id)
    project_id: str
    document_id: str | None = None
    source_id: str
    target_id: str
    label: str = ""
    weight: int = Field(default=1, ge=1, le=5)
    created_at: str = Field(default_factory=utc_now)


class Insight(BaseModel):
    """A finding reported by the model. Insights are never deduplicated."""

    id: str = Field(default_factory=new_id)
    project_id: str
    document_id: str | None = None
    type: InsightType
    severity: Severity
    text: str
    acknowledged: bool = False
    created_at: str = Field(default_factory=utc_now)

    model_config = ConfigDict(use_enum_values=True)


class Territory(BaseModel):
    """
    A cluster of the knowledge model.

    Known territories group the entities of one type materialized in one pass.
    Frontier territories have no members and carry exploration metadata instead.
    Separate passes create rows with identical (name, type, status); those are
    merged at read time.
    """

    id: str = Field(default_factory=new_id)
    project_id: str
    name: str
    type: str
    status: TerritoryStatus
    description: str | None = None
    hint: str | None = None
    risk: str | None = None
    value: str | None = None
    access_needed: str | None = None
    entity_ids: list[str] = []
    created_at: str = Field(default_factory=utc_now)

    model_config = ConfigDict(use_enum_values=True)


class Agent(BaseModel):
    """
    A coordinator or explorer agent summarising part of the knowledge model.

    Explorers point at their pass's coordinator through parent_agent_id.
    """

    id: str = Field(default_factory=new_id)
    project_id: str
    name: str
    role: AgentRole
    status: AgentStatus = AgentStatus.ACTIVE
    domain: str | None = None
    description: str | None = None
    entities_managed: int = 0
    parent_agent_id: str | None = None
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)

    model_config = ConfigDict(use_enum_values=True, validate_default=True)


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """
    One turn of a project's graph chat.

    Both the question and the answer are persisted, so a failed answer still
    leaves the question in the history.
    """

    id: str = Field(default_factory=new_id)
    project_id: str
    role: ChatRole
    content: str
    referenced_entity_ids: list[str] = []
    created_at: str = Field(default_factory=utc_now)

    model_config = ConfigDict(use_enum_values=True)
