"""
Agent Hierarchy Builder

Summarises a pass's territory populations as agents: one coordinator for the
pass and one explorer per entity type with enough members.
"""

from atlas_kg.types import Agent, AgentRole, AgentStatus, Entity

EXPLORER_THRESHOLD = 3

COORDINATOR_NAME = "System Coordinator"
COORDINATOR_DESCRIPTION = "Primary agent overseeing knowledge extraction and analysis"


def build_agents(
    project_id: str,
    type_groups: dict[str, list[Entity]],
    *,
    threshold: int = EXPLORER_THRESHOLD,
) -> list[Agent]:
    """
    Build the coordinator and explorer agents of one pass.

    Args:
        project_id: Owning project
        type_groups: Pass entities grouped by type (first-seen order)
        threshold: Minimum group size that gets an explorer

    Returns:
        The coordinator first, then explorers in type-group order
    """
    total = sum(len(members) for members in type_groups.values())
    coordinator = Agent(
        project_id=project_id,
        name=COORDINATOR_NAME,
        role=AgentRole.COORDINATOR,
        status=AgentStatus.ACTIVE,
        description=COORDINATOR_DESCRIPTION,
        entities_managed=total,
    )
    agents = [coordinator]

    for entity_type, members in type_groups.items():
        if len(members) < threshold:
            continue
        agents.append(
            Agent(
                project_id=project_id,
                name=f"{entity_type.capitalize()} Explorer",
                role=AgentRole.EXPLORER,
                status=AgentStatus.ACTIVE,
                domain=entity_type,
                description=f"Specialized agent for analyzing {entity_type} entities",
                entities_managed=len(members),
                parent_agent_id=coordinator.id,
            )
        )

    return agents
