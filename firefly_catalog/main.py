"""Entry point for the firefly-catalog command line."""

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from .client import FireflyClient
from .config import FireflyCatalogConfig, load_config, load_credentials
from .db import CatalogStore, CoverageQueries
from .errors import FireflyError
from .files import EntityReader, EntityWriter
from .models import EntityKind, FireflyAggregation
from .provider import PROVIDER_NAME, FireflyEntityProvider, RefreshResult

app = typer.Typer(
    name="firefly-catalog",
    help="Import Firefly cloud inventory into a Backstage-style catalog",
    no_args_is_help=True,
)

console = Console()
logger = logging.getLogger(__name__)


class AppContext:
    """Shared state for all commands."""

    def __init__(self, project: Path, database: str | None):
        self.config: FireflyCatalogConfig = load_config(project)
        if database:
            self.config.catalog.database = database

    def open_store(self) -> CatalogStore:
        return CatalogStore(self.config.catalog.database)


@app.callback()
def main(
    ctx: typer.Context,
    project: Path = typer.Option(
        Path("."), "--project", "-p", help="Directory holding firefly.yaml"
    ),
    database: str | None = typer.Option(
        None, "--database", "-d", help="DuckDB file, overrides the config"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = AppContext(project.resolve(), database)


def _build_client(config: FireflyCatalogConfig) -> FireflyClient:
    credentials = load_credentials()
    return FireflyClient(
        credentials.access_key,
        credentials.secret_key,
        base_url=config.firefly.base_url,
        retry_delay=config.firefly.retry_delay,
        timeout=config.firefly.timeout,
        page_size=config.firefly.page_size,
    )


async def _sync_once(config: FireflyCatalogConfig, store: CatalogStore) -> RefreshResult:
    periodic = config.firefly.periodic_check.model_copy(update={"interval": 0})
    async with _build_client(config) as client:
        provider = FireflyEntityProvider(client, store, periodic)
        await provider.connect(store.connection_for(PROVIDER_NAME))
        return provider.last_result


async def _run_forever(config: FireflyCatalogConfig, store: CatalogStore) -> None:
    async with _build_client(config) as client:
        provider = FireflyEntityProvider(client, store, config.firefly.periodic_check)
        await provider.connect(store.connection_for(PROVIDER_NAME))
        try:
            await asyncio.Event().wait()
        finally:
            await provider.stop()


def _print_result(result: RefreshResult | None) -> None:
    if result is None:
        return
    if result.success:
        console.print(
            f"[green]✓[/green] {result.message} "
            f"({result.resources} resources, {result.systems} systems)"
        )
    else:
        console.print(f"[red]✗[/red] Refresh failed: {result.message}")


@app.command()
def sync(ctx: typer.Context) -> None:
    """Run a single Firefly refresh cycle."""
    state: AppContext = ctx.obj
    store = state.open_store()
    try:
        result = asyncio.run(_sync_once(state.config, store))
    except FireflyError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    finally:
        store.close()

    _print_result(result)
    if result is None or not result.success:
        raise typer.Exit(1)


@app.command()
def run(ctx: typer.Context) -> None:
    """Refresh now and then on the configured interval until interrupted."""
    state: AppContext = ctx.obj
    store = state.open_store()
    try:
        asyncio.run(_run_forever(state.config, store))
    except KeyboardInterrupt:
        console.print("Stopped")
    except FireflyError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    finally:
        store.close()


@app.command("load-components")
def load_components(
    ctx: typer.Context,
    path: Path = typer.Argument(..., exists=True, help="YAML file or directory"),
) -> None:
    """Import Component descriptors used for resource correlation."""
    state: AppContext = ctx.obj
    components = EntityReader().read_entities(path, kind=EntityKind.COMPONENT)
    store = state.open_store()
    try:
        stored = store.add_entities(components, provider="file")
    finally:
        store.close()
    console.print(f"[green]✓[/green] Loaded {stored} components from {path}")


@app.command()
def coverage(
    ctx: typer.Context,
    component: str | None = typer.Option(
        None, "--component", "-c", help="Only resources related to this component"
    ),
    limit: int = typer.Option(5, help="Number of top components to list"),
) -> None:
    """Show IaC coverage of imported resources."""
    state: AppContext = ctx.obj
    store = state.open_store()
    try:
        queries = CoverageQueries(store)
        report = queries.iac_coverage(component)
        top = {
            category: queries.top_components(category, limit)
            for category in ("resources", "unmanaged", "drifted")
        }
    finally:
        store.close()

    if report.total == 0:
        console.print("[yellow]No Firefly resources found[/yellow]")
        return

    table = Table(title="Resources IaC Coverage")
    table.add_column("Status")
    table.add_column("Resources", justify="right")
    table.add_column("Share", justify="right")
    for status, count in report.counts.items():
        table.add_row(status, str(count), f"{report.percent(status)}%")
    console.print(table)

    for category, rows in top.items():
        if not rows:
            continue
        title = "Resources" if category == "resources" else f"{category.capitalize()} Resources"
        top_table = Table(title=f"Top {limit} Components with {title}")
        top_table.add_column("Component")
        top_table.add_column("Resources", justify="right")
        for row in rows:
            top_table.add_row(row.name, str(row.count))
        console.print(top_table)


async def _fetch_aggregations(config: FireflyCatalogConfig) -> list[FireflyAggregation]:
    async with _build_client(config) as client:
        return await client.get_aggregations(config.firefly.periodic_check.filters)


@app.command()
def aggregations(ctx: typer.Context) -> None:
    """Show Firefly's inventory counts for the configured filters."""
    state: AppContext = ctx.obj
    try:
        rows = asyncio.run(_fetch_aggregations(state.config))
    except FireflyError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not rows:
        console.print("[yellow]No aggregations returned[/yellow]")
        return

    table = Table(title="Inventory Aggregations")
    table.add_column("Type")
    table.add_column("Count", justify="right")
    for row in rows:
        table.add_row(row.type, str(row.count))
    console.print(table)


@app.command()
def export(
    ctx: typer.Context,
    output: Path = typer.Argument(..., help="Directory to write YAML files to"),
) -> None:
    """Write the catalog entities as Backstage descriptor files."""
    state: AppContext = ctx.obj
    store = state.open_store()
    try:
        entities = store.get_entities()
    finally:
        store.close()

    written = EntityWriter().export(entities, output)
    console.print(f"[green]✓[/green] Wrote {len(written)} entities to {output}")


if __name__ == "__main__":
    app()
