"""
DuckDB Query Layer

Relational queries on Parquet part files.

Modules:
    queries: Latest-revision reads

Query Pattern:

    -- Latest revision per id, in creation order
    SELECT * EXCLUDE (rn, first_revision) FROM (
        SELECT *,
            ROW_NUMBER() OVER (PARTITION BY id ORDER BY revision DESC) AS rn,
            MIN(revision) OVER (PARTITION BY id) AS first_revision
        FROM read_parquet('entities.parquet/part-*.parquet')
        WHERE project_id = ?
    )
    WHERE rn = 1
    ORDER BY first_revision
"""

from atlas_kg.storage.duckdb.queries import DuckDBQueries

__all__ = ["DuckDBQueries"]
