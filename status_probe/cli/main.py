"""CLI commands for status probing and catalog lookups."""

import json
import sys
from dataclasses import dataclass
from pathlib import Path

import click
import structlog
from pydantic import ValidationError

from status_probe import __version__
from status_probe.aggregator.coordinator import StatusAggregator
from status_probe.catalog.loader import CatalogLoader
from status_probe.catalog.service import DEFAULT_LIST_LIMIT, CatalogService
from status_probe.extractors.constants import DEFAULT_MAX_LENGTH
from status_probe.harness.bulk import DEFAULT_WORKERS, BulkChecker, BulkReport
from status_probe.observability.logging import configure_logging, parse_log_level
from status_probe.settings.app import AppSettings, get_settings


logger = structlog.get_logger()

DEFAULT_BULK_LOG = Path("status_fetch.log")


@dataclass
class CliContext:
    """State shared by every subcommand."""

    settings: AppSettings
    catalog_path: Path

    def catalog(self) -> CatalogService:
        """Load the catalog configured for this invocation."""
        return CatalogService.from_loader(CatalogLoader(self.catalog_path))


def _load_settings() -> AppSettings:
    try:
        return get_settings()
    except ValidationError as e:
        click.echo("Invalid configuration:", err=True)
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"])
            click.echo(f"  - {location}: {error['msg']}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    default=None,
    help="Log level name (default: STATUS_PROBE_LOG_LEVEL or INFO).",
)
@click.option(
    "--json-logs/--console-logs",
    default=None,
    help="Emit JSON log lines or human-readable console logs.",
)
@click.option(
    "--catalog",
    "catalog_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to the service catalog JSON file.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    log_level: str | None,
    json_logs: bool | None,
    catalog_path: Path | None,
) -> None:
    """Probe service status pages and search the service catalog."""
    settings = _load_settings()

    level = log_level or settings.log_level
    try:
        parse_log_level(level)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    configure_logging(
        level=level,
        json_format=settings.log_json if json_logs is None else json_logs,
    )
    ctx.obj = CliContext(
        settings=settings,
        catalog_path=catalog_path or settings.catalog_path,
    )


@cli.command()
@click.argument("url")
@click.option(
    "--max-length",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_LENGTH,
    show_default=True,
    help="Character budget for status, history and messages.",
)
@click.pass_obj
def fetch(obj: CliContext, url: str, max_length: int) -> None:
    """Fetch and merge the status of a status page URL."""
    aggregator = StatusAggregator.from_settings(obj.settings)
    result = aggregator.fetch_status(url, max_length)
    click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))


@cli.command()
@click.argument("query")
@click.pass_obj
def search(obj: CliContext, query: str) -> None:
    """Search the catalog by service name."""
    click.echo(obj.catalog().render_search(query))


@cli.command()
@click.argument("name")
@click.pass_obj
def details(obj: CliContext, name: str) -> None:
    """Show the links known for a service."""
    click.echo(obj.catalog().describe(name))


@cli.command("list")
@click.option(
    "--limit",
    type=click.IntRange(min=1),
    default=DEFAULT_LIST_LIMIT,
    show_default=True,
    help="Maximum number of names to print.",
)
@click.pass_obj
def list_services(obj: CliContext, limit: int) -> None:
    """List catalog service names."""
    click.echo(obj.catalog().render_list(limit))


def _print_report(report: BulkReport) -> None:
    click.echo(f"Checked {report.checked} services")
    click.echo(f"Log written to {report.log_path}")

    if report.problems:
        click.echo(f"\nProblems ({report.problem_count}):")
        for problem in report.problems:
            click.echo(f"  - {problem.name}: {'; '.join(problem.reasons)}")
    else:
        click.echo("\nNo problems found")

    if report.suspicious:
        click.echo(f"\nSuspicious statuses ({len(report.suspicious)}):")
        for problem in report.suspicious:
            click.echo(
                f"  - {problem.name}: {problem.latest_status!r} "
                f"({'; '.join(problem.reasons)})"
            )


@cli.command("bulk-check")
@click.option(
    "--limit",
    type=click.IntRange(min=1),
    default=None,
    help="Only check the first N services with a status URL.",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=DEFAULT_WORKERS,
    show_default=True,
    help="Number of concurrent checks.",
)
@click.option(
    "--log-file",
    "log_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_BULK_LOG,
    show_default=True,
    help="JSONL file receiving one line per result.",
)
@click.pass_obj
def bulk_check(
    obj: CliContext, limit: int | None, workers: int, log_path: Path
) -> None:
    """Check every catalog service and report blank or failed results."""
    records = obj.catalog().records
    if not records:
        click.echo(f"Error: No services loaded from {obj.catalog_path}", err=True)
        sys.exit(1)

    checker = BulkChecker(
        StatusAggregator.from_settings(obj.settings), log_path, workers=workers
    )
    report = checker.run(records, limit=limit)
    logger.bind(component="cli").info(
        "bulk_check_reported", checked=report.checked, problems=report.problem_count
    )
    _print_report(report)
