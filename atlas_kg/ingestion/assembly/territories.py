"""
Territory Deriver

Clusters one pass's entities into known territories by entity type and turns
frontier hints into frontier territories.
"""

from atlas_kg.types import Entity, FrontierHint, Territory, TerritoryStatus

FRONTIER_TYPE = "frontier"


def group_by_type(entities: list[Entity]) -> dict[str, list[Entity]]:
    """Group entities by type, keeping first-seen type order."""
    groups: dict[str, list[Entity]] = {}
    for entity in entities:
        groups.setdefault(entity.type, []).append(entity)
    return groups


def derive_territories(
    project_id: str,
    entities: list[Entity],
    frontier_hints: list[FrontierHint],
) -> list[Territory]:
    """
    Derive the territories of one pass.

    One known territory per entity type present (named after the type,
    capitalized), followed by one frontier territory per hint. Member
    entities get their territory_id set in place.

    Args:
        project_id: Owning project
        entities: Entities materialized in this pass
        frontier_hints: Frontier hints from the merged extraction

    Returns:
        Known territories in first-seen type order, then frontier territories
    """
    territories: list[Territory] = []

    for entity_type, members in group_by_type(entities).items():
        territory = Territory(
            project_id=project_id,
            name=entity_type.capitalize(),
            type=entity_type,
            status=TerritoryStatus.KNOWN,
            description=f"Territory containing {len(members)} {entity_type} entities",
            entity_ids=[e.id for e in members],
        )
        for entity in members:
            entity.territory_id = territory.id
        territories.append(territory)

    for hint in frontier_hints:
        territories.append(
            Territory(
                project_id=project_id,
                name=hint.name,
                type=FRONTIER_TYPE,
                status=TerritoryStatus.FRONTIER,
                hint=hint.hint,
                risk=hint.risk,
                value=hint.value,
                access_needed=hint.access_needed,
            )
        )

    return territories
