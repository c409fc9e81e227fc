"""
Territory Reconciliation

Every extraction pass writes its own known territory per entity type, so a
project accumulates rows with identical (name, type, status). This merges
them at read time without touching storage.
"""

from atlas_kg.types import Territory


def reconcile_territories(rows: list[Territory]) -> list[Territory]:
    """
    Merge territory rows that share (name, type, status).

    Groups keep first-seen order. Scalar fields come from the first row of a
    group; entity_ids are the union of all members, deduplicated by id in
    first-seen order.

    Args:
        rows: Raw territory rows in creation order

    Returns:
        One territory per group
    """
    groups: dict[tuple[str, str, str], list[Territory]] = {}
    for row in rows:
        groups.setdefault((row.name, row.type, row.status), []).append(row)

    merged: list[Territory] = []
    for group in groups.values():
        first = group[0]
        entity_ids = list(dict.fromkeys(eid for t in group for eid in t.entity_ids))
        merged.append(first.model_copy(update={"entity_ids": entity_ids}))

    return merged
