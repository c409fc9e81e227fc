"""
Agent Reconciliation

Each extraction pass creates a "System Coordinator" plus explorers, so a
project accumulates agents with the same (name, role). They are merged at
read time with a single rule:

    - entities_managed: sum over the group
    - status: "active" if any member is active, else the first member's status
    - created_at/updated_at: the pair of the most recent member
    - description/domain: the first member's value, else the first non-empty one
    - parent_agent_id: re-pointed to the merged id of the parent's group

The merged agent keeps the id of the first member, which makes the rule
idempotent.
"""

from atlas_kg.types import Agent, AgentHierarchy, AgentRole, AgentStatus


def _first_non_empty(group: list[Agent], field: str) -> str | None:
    for agent in group:
        value = getattr(agent, field)
        if value:
            return value
    return None


def _merge_group(group: list[Agent]) -> Agent:
    canonical = group[0]
    latest = max(group, key=lambda a: (a.created_at, a.updated_at))

    if any(a.status == AgentStatus.ACTIVE for a in group):
        status = AgentStatus.ACTIVE.value
    else:
        status = canonical.status

    return canonical.model_copy(
        update={
            "status": status,
            "entities_managed": sum(a.entities_managed for a in group),
            "created_at": latest.created_at,
            "updated_at": latest.updated_at,
            "description": _first_non_empty(group, "description"),
            "domain": _first_non_empty(group, "domain"),
        }
    )


def reconcile_agents(rows: list[Agent]) -> list[Agent]:
    """
    Merge agent rows that share (name, role).

    Args:
        rows: Raw agent rows in creation order

    Returns:
        One agent per group, in first-seen order
    """
    groups: dict[tuple[str, str], list[Agent]] = {}
    for row in rows:
        groups.setdefault((row.name, row.role), []).append(row)

    # Any member id -> id of the merged agent it belongs to
    merged_id: dict[str, str] = {}
    for group in groups.values():
        for agent in group:
            merged_id[agent.id] = group[0].id

    merged: list[Agent] = []
    for group in groups.values():
        agent = _merge_group(group)
        if agent.parent_agent_id is not None:
            agent.parent_agent_id = merged_id.get(agent.parent_agent_id, agent.parent_agent_id)
        merged.append(agent)

    return merged


def build_hierarchy(agents: list[Agent]) -> AgentHierarchy | None:
    """
    Build the coordinator tree from reconciled agents.

    Returns:
        The first coordinator with its direct children, or None without one
    """
    coordinator = next((a for a in agents if a.role == AgentRole.COORDINATOR), None)
    if coordinator is None:
        return None

    children = [a for a in agents if a.parent_agent_id == coordinator.id]
    return AgentHierarchy(coordinator=coordinator, children=children)
