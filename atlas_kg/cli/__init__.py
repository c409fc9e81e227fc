"""
Command-Line Interface

CLI commands for AtlasKG operations.

Commands:
    atlas-kg extract        - Upload a text file and run an extraction pass
    atlas-kg territories    - List reconciled territories of a project
    atlas-kg agents         - Show the reconciled agent hierarchy
    atlas-kg insights       - List insights, critical first
    atlas-kg chat           - Ask a question about a project's graph
    atlas-kg history        - Show the chat history of a project
    atlas-kg info           - Display project statistics
    atlas-kg test-provider  - Check that the configured provider is reachable

Usage:
    # Extract a document with the hosted provider (ANTHROPIC_API_KEY from .env)
    atlas-kg extract handbook.txt --kb ./my_kb --project acme

    # Extract with a local model server
    atlas-kg extract handbook.txt --kb ./my_kb --project acme --provider local

    # Show territories
    atlas-kg territories --kb ./my_kb --project acme

    # Ask about the graph
    atlas-kg chat "Who leads the platform team?" --kb ./my_kb --project acme
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.tree import Tree

__all__ = ["main", "app"]

app = typer.Typer(
    name="atlas-kg",
    help="Organisational knowledge graphs from documents",
    no_args_is_help=True,
)
console = Console()

_SEVERITY_STYLES = {"critical": "red", "warning": "yellow", "info": "cyan"}


def _load_config(config_path: Optional[Path]):
    from atlas_kg.config import AtlasConfig

    if config_path is not None:
        return AtlasConfig.from_file(config_path)
    return AtlasConfig()


def _provider_config(config, provider: Optional[str], model: Optional[str]):
    from atlas_kg.config import ProviderConfig

    if provider is not None:
        config = config.with_overrides(provider_kind=provider)
    provider_config = ProviderConfig.from_settings(config)
    if model is not None:
        provider_config.model_name = model
    return provider_config


@app.command()
def extract(
    path: Path = typer.Argument(
        ...,
        help="Text file to extract from",
        exists=True,
        dir_okay=False,
    ),
    kb: Path = typer.Option(
        Path("./kb"),
        "--kb", "-k",
        help="Knowledge base directory",
    ),
    project: str = typer.Option(
        "default",
        "--project", "-p",
        help="Project id",
    ),
    provider: Optional[str] = typer.Option(
        None,
        "--provider",
        help="Provider kind: hosted, local or none (default from config)",
    ),
    model: Optional[str] = typer.Option(
        None,
        "--model", "-m",
        help="Model override",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="TOML configuration file",
        exists=True,
    ),
) -> None:
    """Upload a text file and run an extraction pass over it."""

    async def _run() -> int:
        from atlas_kg.api.knowledge_graph import KnowledgeGraph
        from atlas_kg.errors import ConfigError, ExtractionError

        config = _load_config(config_path)
        kg = KnowledgeGraph(kb, config)

        try:
            content = path.read_text(encoding="utf-8", errors="replace")
            document = await kg.add_document(project, content, filename=path.name)

            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                console=console,
            ) as progress:
                task = progress.add_task(f"Extracting {path.name}...")
                try:
                    summary = await kg.extract(
                        project,
                        document.id,
                        _provider_config(config, provider, model),
                        on_progress=lambda stage, _: progress.update(
                            task, description=f"{path.name}: {stage}"
                        ),
                    )
                except ConfigError as e:
                    console.print(f"[red]Configuration error:[/] {e}")
                    return 2
                except ExtractionError as e:
                    console.print(f"[red]{e}[/]")
                    return 1
                progress.update(task, completed=True)

            console.print()
            console.print(Panel(
                f"[green]Extraction completed for {path.name}[/]\n\n"
                f"  Document ID: {summary.document_id}\n"
                f"  Chunks: {summary.chunks}\n"
                f"  Entities: {summary.entities}\n"
                f"  Relationships: {summary.relationships}\n"
                f"  Insights: {summary.insights}\n"
                f"  Territories: {summary.territories}\n"
                f"  Agents: {summary.agents}\n"
                f"  Model: {summary.extracted_by}\n"
                f"  Duration: {summary.duration_seconds:.1f}s",
                title="Extraction Complete",
            ))
            if summary.failed_chunks:
                console.print(
                    f"[yellow]{summary.failed_chunks} chunk(s) returned unusable output[/]"
                )
            return 0
        finally:
            await kg.close()

    code = asyncio.run(_run())
    if code:
        raise typer.Exit(code)


@app.command()
def territories(
    kb: Path = typer.Option(
        Path("./kb"),
        "--kb", "-k",
        help="Knowledge base directory",
        exists=True,
    ),
    project: str = typer.Option("default", "--project", "-p", help="Project id"),
) -> None:
    """List reconciled territories of a project."""

    async def _run() -> None:
        from atlas_kg.api.knowledge_graph import KnowledgeGraph

        kg = KnowledgeGraph(kb, create=False)
        try:
            listing = await kg.list_territories(project)
        finally:
            await kg.close()

        table = Table(title=f"Known Territories: {project}")
        table.add_column("Name", style="cyan")
        table.add_column("Type")
        table.add_column("Entities", justify="right", style="green")
        for t in listing.known:
            table.add_row(t.name, t.type, str(len(t.entity_ids)))
        console.print(table)

        if listing.frontier:
            frontier = Table(title="Frontier")
            frontier.add_column("Name", style="magenta")
            frontier.add_column("Hint")
            frontier.add_column("Risk")
            frontier.add_column("Value")
            frontier.add_column("Access Needed", style="dim")
            for t in listing.frontier:
                frontier.add_row(
                    t.name, t.hint or "", t.risk or "", t.value or "", t.access_needed or ""
                )
            console.print(frontier)

    asyncio.run(_run())


@app.command()
def agents(
    kb: Path = typer.Option(
        Path("./kb"),
        "--kb", "-k",
        help="Knowledge base directory",
        exists=True,
    ),
    project: str = typer.Option("default", "--project", "-p", help="Project id"),
) -> None:
    """Show the reconciled agent hierarchy of a project."""

    async def _run() -> None:
        from atlas_kg.api.knowledge_graph import KnowledgeGraph

        kg = KnowledgeGraph(kb, create=False)
        try:
            listing = await kg.list_agents(project)
        finally:
            await kg.close()

        if listing.hierarchy is None:
            console.print("[yellow]No agents yet. Run 'atlas-kg extract' first.[/]")
            return

        root = listing.hierarchy.coordinator
        tree = Tree(
            f"[bold cyan]{root.name}[/] ({root.status}, {root.entities_managed} entities)"
        )
        for child in listing.hierarchy.children:
            tree.add(f"{child.name} [dim]{child.domain or ''}[/] ({child.entities_managed})")
        console.print(tree)

    asyncio.run(_run())


@app.command()
def insights(
    kb: Path = typer.Option(
        Path("./kb"),
        "--kb", "-k",
        help="Knowledge base directory",
        exists=True,
    ),
    project: str = typer.Option("default", "--project", "-p", help="Project id"),
) -> None:
    """List insights of a project, critical first."""

    async def _run() -> None:
        from atlas_kg.api.knowledge_graph import KnowledgeGraph

        kg = KnowledgeGraph(kb, create=False)
        try:
            listing = await kg.list_insights(project)
        finally:
            await kg.close()

        table = Table(title=f"Insights: {project}")
        table.add_column("Severity")
        table.add_column("Type", style="dim")
        table.add_column("Finding")
        for insight in listing.insights:
            style = _SEVERITY_STYLES.get(insight.severity, "white")
            table.add_row(f"[{style}]{insight.severity}[/]", insight.type, insight.text)
        console.print(table)

        counts = listing.counts
        console.print(
            f"\n[dim]{counts.total} total: {counts.critical} critical, "
            f"{counts.warning} warning, {counts.info} info "
            f"({counts.unacknowledged} unacknowledged)[/]"
        )

    asyncio.run(_run())


@app.command()
def chat(
    question: str = typer.Argument(..., help="Question about the project's graph"),
    kb: Path = typer.Option(
        Path("./kb"),
        "--kb", "-k",
        help="Knowledge base directory",
        exists=True,
    ),
    project: str = typer.Option("default", "--project", "-p", help="Project id"),
    provider: Optional[str] = typer.Option(
        None,
        "--provider",
        help="Provider kind: hosted, local or none (default from config)",
    ),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model override"),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="TOML configuration file",
        exists=True,
    ),
) -> None:
    """Ask a question about a project's knowledge graph."""

    async def _run() -> int:
        from atlas_kg.api.knowledge_graph import KnowledgeGraph
        from atlas_kg.errors import ConfigError, ProviderError

        config = _load_config(config_path)
        kg = KnowledgeGraph(kb, config, create=False)
        try:
            with console.status("Thinking..."):
                answer = await kg.chat(
                    project, question, _provider_config(config, provider, model)
                )
        except ConfigError as e:
            console.print(f"[red]Configuration error:[/] {e}")
            return 2
        except (ProviderError, ValueError) as e:
            console.print(f"[red]{e}[/]")
            return 1
        finally:
            await kg.close()

        console.print(Panel(answer.content, title="Answer"))
        return 0

    code = asyncio.run(_run())
    if code:
        raise typer.Exit(code)


@app.command()
def history(
    kb: Path = typer.Option(
        Path("./kb"),
        "--kb", "-k",
        help="Knowledge base directory",
        exists=True,
    ),
    project: str = typer.Option("default", "--project", "-p", help="Project id"),
    limit: int = typer.Option(100, "--limit", "-n", help="Messages to show"),
) -> None:
    """Show the chat history of a project, oldest first."""

    async def _run() -> None:
        from atlas_kg.api.knowledge_graph import KnowledgeGraph

        kg = KnowledgeGraph(kb, create=False)
        try:
            messages = await kg.list_messages(project, limit)
        finally:
            await kg.close()

        if not messages:
            console.print("[yellow]No chat messages yet.[/]")
            return

        for message in messages:
            style = "bold cyan" if message.role == "user" else "green"
            console.print(f"[{style}]{message.role}[/] [dim]{message.created_at}[/]")
            console.print(message.content, markup=False)
            console.print()

    asyncio.run(_run())


@app.command()
def info(
    kb: Path = typer.Option(
        Path("./kb"),
        "--kb", "-k",
        help="Knowledge base directory",
        exists=True,
    ),
    project: str = typer.Option("default", "--project", "-p", help="Project id"),
) -> None:
    """Display project statistics."""

    async def _run() -> None:
        from atlas_kg.api.knowledge_graph import KnowledgeGraph

        kg = KnowledgeGraph(kb, create=False)

        try:
            stats = await kg.stats(project)

            table = Table(title=f"Knowledge Base: {kb} ({project})")
            table.add_column("Metric", style="cyan")
            table.add_column("Count", justify="right", style="green")

            table.add_row("Documents", str(stats["documents"]))
            table.add_row("Entities", str(stats["entities"]))
            table.add_row("Edges", str(stats["edges"]))
            table.add_row("Insights", str(stats["insights"]))
            table.add_row("Territories", str(stats["territories"]))
            table.add_row("Agents", str(stats["agents"]))
            table.add_row("Chat Messages", str(stats["messages"]))

            console.print(table)

        finally:
            await kg.close()

    asyncio.run(_run())


@app.command("test-provider")
def test_provider(
    provider: Optional[str] = typer.Option(
        None,
        "--provider",
        help="Provider kind: hosted or local (default from config)",
    ),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model override"),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="TOML configuration file",
        exists=True,
    ),
) -> None:
    """Check that the configured provider is reachable."""

    async def _run() -> bool:
        from atlas_kg.providers.factory import build_provider
        from atlas_kg.errors import ConfigError

        config = _load_config(config_path)
        try:
            llm = build_provider(_provider_config(config, provider, model), config)
        except ConfigError as e:
            console.print(f"[red]{e}[/]")
            return False

        async with llm:
            check = await llm.check()

        style = "green" if check.success else "red"
        console.print(f"[{style}]{check.message}[/]")
        for name in check.available_models:
            console.print(f"  - {name}")
        return check.success

    if not asyncio.run(_run()):
        raise typer.Exit(1)


def main() -> None:
    """Entry point for the CLI."""
    load_dotenv()
    app()
