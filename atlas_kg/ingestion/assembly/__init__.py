"""
Knowledge Assembly

Final phase of a pass: materializes records and derives summary views.

Modules:
    materializer: Entities, edges and insights with pass-local identity
    territories: Known territories by entity type, frontier territories by hint
    agents: Coordinator plus explorers for well-populated types

Identity:
    - No cross-pass deduplication at write time
    - Territories and agents repeat across passes and are merged at read
      time by atlas_kg.reconciliation
"""

from atlas_kg.ingestion.assembly.agents import EXPLORER_THRESHOLD, build_agents
from atlas_kg.ingestion.assembly.materializer import MaterializedPass, Materializer
from atlas_kg.ingestion.assembly.territories import derive_territories, group_by_type

__all__ = [
    "Materializer",
    "MaterializedPass",
    "derive_territories",
    "group_by_type",
    "build_agents",
    "EXPLORER_THRESHOLD",
]
