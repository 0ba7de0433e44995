"""Typer-based CLI for IsoCatalog aggregation with Pydantic v2 configuration."""

import asyncio
import json
import logging
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from IsoCatalog.Aggregation.catalog import CatalogAssembler
from IsoCatalog.Aggregation.config import AggregationConfig, load_config
from IsoCatalog.Aggregation.models import SourceCatalogEntry
from IsoCatalog.Aggregation.net.client import HttpAccess, ProbeResult
from IsoCatalog.Aggregation.sources import build_sources, get_registry, load_source_plugins
from IsoCatalog.concurrency import fan_out

console = Console()
app = typer.Typer(help="IsoCatalog installation-media catalog aggregator")

# ============================================================================
# Setup
# ============================================================================


def _setup_logging(verbose: bool) -> None:
    """Setup logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# ============================================================================
# Commands
# ============================================================================


@app.command()
def sources() -> None:
    """List registered source generators."""
    load_source_plugins()
    registry = get_registry()

    table = Table(title="Source Generators")
    table.add_column("Name", style="cyan")
    table.add_column("Pretty name", style="green")
    table.add_column("Homepage", style="magenta")

    for name in sorted(registry):
        cls = registry[name]
        table.add_row(name, cls.pretty_name or name, cls.homepage or "")

    console.print(table)
    console.print(f"\n[cyan]Registered: {len(registry)}[/cyan]")


@app.command()
def build(
    source: Optional[List[str]] = typer.Option(
        None,
        "--source",
        "-s",
        help="Source to build (repeatable; default: all)",
    ),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
        envvar="ISOCATALOG_CONFIG",
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Verbose"),
) -> None:
    """Assemble the catalog and print a summary."""
    _setup_logging(verbose)

    try:
        cfg = load_config(path=config)
        load_source_plugins()
        selected = build_sources(source or None)
        console.print(
            Panel(
                f"[bold green]✓ Config loaded[/bold green]\n"
                f"Hash: {cfg.config_hash()[:8]}...\n"
                f"Sources: {len(selected)}",
                title="IsoCatalog",
            )
        )

        entries, summary = asyncio.run(_assemble(cfg, selected))

        table = Table(title="Catalog")
        table.add_column("Source", style="cyan")
        table.add_column("Releases", style="green", justify="right")
        table.add_column("Newest", style="yellow")
        for entry in entries:
            newest = entry.releases[0]
            table.add_row(entry.pretty_name, str(len(entry.releases)), newest.describe())
        console.print(table)
        console.print(Panel(summary, title="Assembly Summary"))

    except Exception as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        if verbose:
            raise
        raise typer.Exit(code=1)


@app.command()
def check(
    urls: List[str] = typer.Argument(..., help="URLs to probe"),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
        envvar="ISOCATALOG_CONFIG",
    ),
) -> None:
    """Probe URLs the way catalog validation does."""
    try:
        cfg = load_config(path=config)
        results = asyncio.run(_probe_all(cfg, urls))
    except Exception as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        raise typer.Exit(code=1)

    table = Table(title="Link Check")
    table.add_column("URL", style="cyan")
    table.add_column("Status", justify="right")
    table.add_column("Result")
    for result in results:
        status = str(result.status) if result.status is not None else "-"
        if result.ok:
            verdict = "[green]valid[/green]"
        else:
            reason = result.failure.value if result.failure else "invalid"
            verdict = f"[red]invalid ({reason})[/red]"
        table.add_row(result.url, status, verdict)
    console.print(table)

    if not all(result.ok for result in results):
        raise typer.Exit(code=1)


@app.command("config")
def print_config(
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file",
        envvar="ISOCATALOG_CONFIG",
    ),
    raw: bool = typer.Option(False, "--raw", help="Raw JSON"),
) -> None:
    """Print merged effective config."""
    try:
        cfg = load_config(path=config)
    except Exception as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        raise typer.Exit(code=1)

    data = json.dumps(cfg.model_dump(mode="json"), indent=2)
    if raw:
        typer.echo(data)
    else:
        console.print(Panel(data, title="IsoCatalog Config", expand=False))


# ============================================================================
# Helpers
# ============================================================================


async def _assemble(cfg: AggregationConfig, selected: list) -> tuple[List[SourceCatalogEntry], str]:
    async with HttpAccess.from_config(cfg) as access:
        assembler = CatalogAssembler(access)
        entries = await assembler.assemble(selected)
        return entries, assembler.report.summary()


async def _probe_all(cfg: AggregationConfig, urls: List[str]) -> List[ProbeResult]:
    async with HttpAccess.from_config(cfg) as access:
        results = await fan_out(access.probe(url) for url in urls)
    return [
        result if result is not None else ProbeResult(url=url)
        for url, result in zip(urls, results)
    ]


if __name__ == "__main__":
    app()
