"""
Parquet Storage Backend

Primary storage for knowledge base data.

Modules:
    backend: ParquetBackend class

Table Schemas (every table also has project_id and revision):
    documents.parquet:
        id, filename, content, status, entity_count, edge_count, created_at, updated_at

    entities.parquet:
        id, document_id, name, type, subtype, description, metadata (JSON),
        confidence, review_status, territory_id, extracted_by, created_at

    edges.parquet:
        id, document_id, source_id, target_id, label, weight, created_at

    insights.parquet:
        id, document_id, type, severity, text, acknowledged, created_at

    territories.parquet:
        id, name, type, status, description, hint, risk, value, access_needed,
        entity_ids (JSON), created_at

    agents.parquet:
        id, name, role, status, domain, description, entities_managed,
        parent_agent_id, created_at, updated_at

    messages.parquet:
        id, role, content, referenced_entity_ids (JSON), created_at
"""

from atlas_kg.storage.parquet.backend import ParquetBackend

__all__ = ["ParquetBackend"]
