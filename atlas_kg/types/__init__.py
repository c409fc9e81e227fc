"""
Type Definitions

Pydantic models for all data structures.

Storage Models (persisted by a StorageBackend):
    - Document, Entity, Edge, Insight, Territory, Agent, ChatMessage
    - Enums: EntityType, DocumentStatus, InsightType, Severity,
      TerritoryStatus, AgentRole, AgentStatus, ChatRole

Extraction Models (model output, per chunk and merged):
    - ChunkExtraction, ExtractedEntity, ExtractedRelationship,
      ExtractedInsight, FrontierHint

Result Models:
    - ProviderResponse, ConnectionCheck, ChunkOutcome, ExtractionSummary
    - TerritoryListing, AgentListing, AgentHierarchy, InsightListing, GraphView
"""

from atlas_kg.types.extraction import (
    ChunkExtraction,
    ExtractedEntity,
    ExtractedInsight,
    ExtractedRelationship,
    FrontierHint,
)
from atlas_kg.types.records import (
    Agent,
    AgentRole,
    AgentStatus,
    ChatMessage,
    ChatRole,
    Document,
    DocumentStatus,
    Edge,
    Entity,
    EntityType,
    Insight,
    InsightType,
    Severity,
    Territory,
    TerritoryStatus,
    new_id,
    utc_now,
)
from atlas_kg.types.results import (
    AgentHierarchy,
    AgentListing,
    ChunkOutcome,
    ConnectionCheck,
    ExtractionSummary,
    GraphEdge,
    GraphNode,
    GraphView,
    InsightCounts,
    InsightListing,
    ProviderResponse,
    TerritoryListing,
)

__all__ = [
    # Storage Models
    "Document",
    "DocumentStatus",
    "Entity",
    "EntityType",
    "Edge",
    "Insight",
    "InsightType",
    "Severity",
    "Territory",
    "TerritoryStatus",
    "Agent",
    "AgentRole",
    "AgentStatus",
    "ChatMessage",
    "ChatRole",
    "new_id",
    "utc_now",
    # Extraction Models
    "ChunkExtraction",
    "ExtractedEntity",
    "ExtractedRelationship",
    "ExtractedInsight",
    "FrontierHint",
    # Result Models
    "ProviderResponse",
    "ConnectionCheck",
    "ChunkOutcome",
    "ExtractionSummary",
    "TerritoryListing",
    "AgentHierarchy",
    "AgentListing",
    "InsightCounts",
    "InsightListing",
    "GraphNode",
    "GraphEdge",
    "GraphView",
]
