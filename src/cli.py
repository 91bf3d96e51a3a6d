"""
Command-line interface for ticker-search.

Provides commands to run the API server, manage the stock catalog and
query suggestions from the terminal.

Usage:
    ticker-search serve            # Run the API server
    ticker-search init-db          # Create the stocks table
    ticker-search health           # Check service health
    ticker-search suggest aapl     # Typeahead search
    ticker-search advanced-search --exchange NASDAQ
    ticker-search fetch-stocks     # Refresh catalog from TwelveData
    ticker-search seed             # Load the bundled sample catalog
"""

import asyncio
import json
import sys
from pathlib import Path

import click

from src.config.settings import get_settings
from src.observability.logging import bind_context, setup_logging
from src.observability.metrics import get_metrics


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Ticker Search - symbol suggestions over a securities catalog."""
    if debug:
        import os
        os.environ["LOG_LEVEL"] = "DEBUG"
        get_settings.cache_clear()

    setup_logging()
    bind_context(component="cli")

    settings = get_settings()
    if settings.tracing_enabled:
        from src.observability.tracing import setup_tracing

        setup_tracing(
            service_name=settings.otel_service_name,
            otlp_endpoint=settings.otel_exporter_otlp_endpoint,
        )


def _echo_result(result, as_json: bool) -> None:
    """Print a ResultSet as a table or as the API's JSON body."""
    from src.api.models import SuggestionsResponse

    if as_json:
        click.echo(SuggestionsResponse.from_result(result).model_dump_json(indent=2))
        return

    click.echo(f"\n{result.query}")
    click.echo("-" * 72)
    if not result.suggestions:
        click.echo("No suggestions found.")
        return

    for i, suggestion in enumerate(result.suggestions, 1):
        s = suggestion.security
        match = suggestion.strategy.name if suggestion.strategy else "-"
        click.echo(
            f"{i:>3}. {s.symbol:<10} {s.name[:36]:<36} "
            f"{(s.exchange or ''):<10} {match}"
        )
    click.echo("-" * 72)
    click.echo(f"{result.count} suggestions")


async def _run_search(memory: bool, seed_path: Path | None, search):
    """Run ``search(service)`` against PostgreSQL or a seeded in-memory catalog."""
    from src.catalog.memory import InMemoryCatalog
    from src.catalog.repository import CatalogRepository
    from src.catalog.seed import load_seed_securities
    from src.storage.database import Database
    from src.suggestions.service import SuggestionService

    if memory:
        catalog = InMemoryCatalog(load_seed_securities(seed_path))
        return await search(SuggestionService(catalog))

    async with Database() as db:
        return await search(SuggestionService(CatalogRepository(db)))


def _fail(error) -> None:
    click.echo(click.style(f"Error: {error.message}", fg="red"), err=True)
    for detail in error.errors:
        click.echo(f"  {detail.field}: {detail.message} ({detail.code})", err=True)
    sys.exit(1)


_memory_option = click.option(
    "--memory", is_flag=True, help="Search the bundled seed catalog instead of PostgreSQL"
)
_seed_option = click.option(
    "--seed-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Seed JSON for --memory (defaults to the bundled sample)",
)
_json_option = click.option("--json", "as_json", is_flag=True, help="Print the API JSON body")


@main.command()
@click.argument("query")
@click.option("--limit", default=None, type=int, help="Maximum results (1-50, default 10)")
@_memory_option
@_seed_option
@_json_option
def suggest(
    query: str, limit: int | None, memory: bool, seed_file: Path | None, as_json: bool
) -> None:
    """Typeahead suggestions for QUERY.

    Example:
        ticker-search suggest AAPL
        ticker-search suggest apple --limit 5 --memory
    """
    from src.suggestions.errors import SuggestionError

    try:
        result = asyncio.run(
            _run_search(memory, seed_file, lambda svc: svc.search_by_text(query, limit))
        )
    except SuggestionError as e:
        _fail(e)
        return
    _echo_result(result, as_json)


@main.command("advanced-search")
@click.option("--symbol", default=None, help="Symbol contains")
@click.option("--company", "company_name", default=None, help="Company name contains")
@click.option("--exchange", default=None, help="Exchange contains")
@click.option("--country", default=None, help="Country contains")
@click.option("--currency", default=None, help="Currency contains")
@click.option("--limit", default=10, type=int, help="Maximum results (1-100)")
@_memory_option
@_seed_option
@_json_option
def advanced_search(
    symbol: str | None,
    company_name: str | None,
    exchange: str | None,
    country: str | None,
    currency: str | None,
    limit: int,
    memory: bool,
    seed_file: Path | None,
    as_json: bool,
) -> None:
    """Search by any combination of criteria (all must match).

    Example:
        ticker-search advanced-search --exchange NASDAQ --country "United States"
    """
    from src.suggestions.errors import SuggestionError
    from src.suggestions.schemas import AdvancedSearchQuery

    query = AdvancedSearchQuery(
        symbol=symbol,
        company_name=company_name,
        exchange=exchange,
        country=country,
        currency=currency,
        limit=limit,
    )
    try:
        result = asyncio.run(
            _run_search(memory, seed_file, lambda svc: svc.search_by_criteria(query))
        )
    except SuggestionError as e:
        _fail(e)
        return
    _echo_result(result, as_json)


@main.command("init-db")
def init_db() -> None:
    """Initialize the database schema."""
    from src.catalog.repository import CatalogRepository
    from src.storage.database import Database

    async def run():
        async with Database() as db:
            await CatalogRepository(db).create_table()
        click.echo("Database initialized successfully")

    asyncio.run(run())


@main.command("fetch-stocks")
@click.option("--batch-size", default=None, type=int, help="Rows per insert batch")
def fetch_stocks(batch_size: int | None) -> None:
    """Replace the catalog with the full TwelveData stock list."""
    from src.catalog.repository import CatalogRepository
    from src.ingestion.http_client import RetryConfig
    from src.ingestion.refresh import CatalogRefreshJob
    from src.ingestion.twelvedata import TwelveDataClient
    from src.storage.database import Database

    settings = get_settings()
    if not settings.market_data_configured:
        click.echo(click.style("TWELVE_DATA_API_KEY is not set", fg="red"), err=True)
        sys.exit(1)

    async def run():
        client = TwelveDataClient(
            api_key=settings.twelve_data_api_key,
            base_url=settings.twelve_data_base_url,
            retry_config=RetryConfig(
                max_retries=settings.max_http_retries,
                max_backoff_seconds=settings.max_backoff_seconds,
            ),
            timeout=settings.http_timeout_seconds,
        )
        async with Database() as db:
            job = CatalogRefreshJob(
                source=client,
                repository=CatalogRepository(db),
                batch_size=batch_size or settings.catalog_refresh_batch_size,
            )
            return await job.run()

    result = asyncio.run(run())
    color = "green" if result.success else "red"
    click.echo(click.style(f"{result.message} ({result.processed} records)", fg=color))
    if result.failed:
        sys.exit(1)


@main.command()
@click.option(
    "--path",
    "seed_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Seed JSON file (defaults to the bundled sample)",
)
@click.option("--dry-run", is_flag=True, help="Parse the seed file without writing")
def seed(seed_path: Path | None, dry_run: bool) -> None:
    """Replace the catalog with securities from a JSON seed file."""
    from src.catalog.repository import CatalogRepository
    from src.catalog.seed import load_seed_securities
    from src.storage.database import Database

    securities = load_seed_securities(seed_path)
    if dry_run:
        click.echo(f"Would load {len(securities)} securities")
        return

    async def run():
        async with Database() as db:
            repo = CatalogRepository(db)
            await repo.create_table()
            return await repo.replace_all(securities)

    deleted, inserted = asyncio.run(run())
    click.echo(f"Seeded {inserted} securities ({deleted} replaced)")


@main.command()
def health() -> None:
    """Check health of all dependencies."""
    import structlog
    logger = structlog.get_logger()

    async def check():
        results: dict[str, bool] = {}

        try:
            from src.catalog.repository import CatalogRepository
            from src.storage.database import Database

            async with Database() as db:
                results["postgres"] = await db.health_check()
                if results["postgres"]:
                    count = await CatalogRepository(db).count()
                    results["catalog_populated"] = count > 0
        except Exception as e:
            results["postgres"] = False
            logger.error("Postgres health check failed", error=str(e))

        results["market_data_configured"] = get_settings().market_data_configured

        click.echo("\nHealth Check Results:")
        click.echo("-" * 40)
        for name, status in results.items():
            icon = "✓" if status else "✗"
            color = "green" if status else "red"
            click.echo(click.style(f"  {icon} {name}: {status}", fg=color))
        click.echo("-" * 40)

        if results["postgres"]:
            click.echo(click.style("All core services healthy!", fg="green"))
            sys.exit(0)
        click.echo(click.style("Some services unhealthy!", fg="red"))
        sys.exit(1)

    asyncio.run(check())


@main.command()
@click.option("--host", default=None, help="API server host")
@click.option("--port", default=None, type=int, help="API server port")
@click.option("--reload", is_flag=True, help="Enable auto-reload (dev only)")
@click.option("--metrics-port", default=None, type=int, help="Metrics server port")
def serve(host: str | None, port: int | None, reload: bool, metrics_port: int | None) -> None:
    """Start the ticker search API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    metrics_port = metrics_port or settings.metrics_port

    get_metrics().start_server(port=metrics_port)

    click.echo(f"Starting API server on {host}:{port}")
    click.echo(f"Metrics available on http://localhost:{metrics_port}/metrics")
    click.echo(f"API docs available on http://localhost:{port}/docs")

    uvicorn.run(
        "src.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
