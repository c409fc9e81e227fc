"""
Read-Time Reconciliation

Merges the duplicate territory and agent rows that repeated extraction passes
produce. Storage keeps the raw rows; every read goes through these functions.

Modules:
    territories: Merge by (name, type, status), union of member entity ids
    agents: Merge by (name, role), plus coordinator hierarchy
"""

from atlas_kg.reconciliation.agents import build_hierarchy, reconcile_agents
from atlas_kg.reconciliation.territories import reconcile_territories

__all__ = ["reconcile_territories", "reconcile_agents", "build_hierarchy"]
