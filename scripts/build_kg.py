#!/usr/bin/env python3
"""
Build Knowledge Graph Script

Thin wrapper around KnowledgeGraph upload and extraction APIs.

Usage:
    python scripts/build_kg.py test_data/handbook.txt
    python scripts/build_kg.py test_data/handbook.txt --project acme
    python scripts/build_kg.py test_data/handbook.txt --output ./my_kb
    python scripts/build_kg.py test_data/handbook.txt --provider local --model llama3.2
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import shutil
import time
from pathlib import Path

from dotenv import load_dotenv

from atlas_kg.api.knowledge_graph import KnowledgeGraph
from atlas_kg.config import AtlasConfig, ProviderConfig

PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(PROJECT_ROOT / ".env")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build a knowledge graph from an organisational document"
    )
    parser.add_argument("input", type=Path, help="Path to a text or markdown file")
    parser.add_argument(
        "--project",
        type=str,
        default="default",
        help="Project id (default: default)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("./test_kb"),
        help="Output directory for knowledge base (default: ./test_kb)",
    )
    parser.add_argument(
        "--provider",
        choices=("hosted", "local"),
        default=None,
        help="Provider kind (default: from AtlasConfig)",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Model override (default: provider default)",
    )
    parser.add_argument(
        "--clean",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Clean output directory before building (default: true)",
    )
    return parser.parse_args()


async def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if not args.input.exists():
        raise FileNotFoundError(f"Input file not found: {args.input}")

    if args.clean and args.output.exists():
        shutil.rmtree(args.output)

    config = AtlasConfig(provider_kind=args.provider) if args.provider else AtlasConfig()
    provider_config = ProviderConfig.from_settings(config)
    if args.model:
        provider_config.model_name = args.model

    start = time.time()
    async with KnowledgeGraph(args.output, config=config) as kg:
        def on_progress(stage: str, progress: float) -> None:
            print(f"  [{stage}] {progress * 100:.0f}%")

        content = args.input.read_text(encoding="utf-8", errors="replace")
        document = await kg.add_document(args.project, content, filename=args.input.name)
        print(f"Extracting {args.input.name} ({len(content)} chars)...")
        result = await kg.extract(
            args.project, document.id, provider_config, on_progress=on_progress
        )
        listing = await kg.list_territories(args.project)

    total = time.time() - start
    print("\nExtraction complete")
    print(f"  Document ID: {result.document_id}")
    print(f"  Chunks: {result.chunks}")
    print(f"  Entities: {result.entities}")
    print(f"  Relationships: {result.relationships}")
    print(f"  Insights: {result.insights}")
    print(f"  Territories: {len(listing.known)} known, {len(listing.frontier)} frontier")
    print(f"  Agents: {result.agents}")
    print(f"  Extract duration: {result.duration_seconds:.2f}s")
    print(f"  Total script duration: {total:.2f}s")
    if result.failed_chunks:
        print(f"  Warnings: {result.failed_chunks} chunk(s) returned unusable output")


if __name__ == "__main__":
    asyncio.run(main())
