# scrapmarket/cli/runner.py

"""Headless CLI runner on top of the search orchestrator."""

import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.table import Table

from scrapmarket.config.settings import Settings
from scrapmarket.filters.group_filter import FilterCriteria
from scrapmarket.formatting.display_formatter import (
    display_name,
    format_price,
    group_price_per_unit,
)
from scrapmarket.models.product_group import ProductGroup
from scrapmarket.services.backend_client import BackendError
from scrapmarket.services.health_checker import HealthChecker
from scrapmarket.services.history_service import HistoryService
from scrapmarket.services.search_orchestrator import (
    SearchOrchestrator,
    SearchResult,
)
from scrapmarket.storage.file_manager import FileManager, group_to_dict

logger = logging.getLogger("scrapmarket.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def parse_stores(stores_csv: str | None) -> list[str]:
    """Split a comma-separated supermarket list."""
    if not stores_csv:
        return []
    return [s.strip() for s in stores_csv.split(",") if s.strip()]


def _print_table(groups: list[ProductGroup], title: str) -> None:
    """Render a Rich table of ranked groups to stdout."""
    table = Table(title=title, show_lines=True, title_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Product", max_width=50)
    table.add_column("Best price", justify="right", style="green")
    table.add_column("Per unit", justify="right", style="dim")
    table.add_column("Stores", justify="center")
    table.add_column("Cheapest at", style="magenta")
    table.add_column("Stock", justify="center")

    for idx, group in enumerate(groups, 1):
        table.add_row(
            str(idx),
            display_name(group)[:50],
            format_price(group.min_price),
            group_price_per_unit(group) or "-",
            str(group.store_count),
            group.best_offer.store,
            "yes" if group.has_stock else "no",
        )

    Console().print(table)


def _emit(result: SearchResult, output_format: str, title: str) -> None:
    if output_format == "table":
        _print_table(result.groups, title)
        return
    json.dump(
        [group_to_dict(g) for g in result.groups],
        sys.stdout,
        ensure_ascii=False,
        indent=2,
    )
    sys.stdout.write("\n")


def _save(result: SearchResult, output_dir: str | None) -> None:
    """Write JSON and CSV copies of the result."""
    try:
        manager = FileManager(Path(output_dir) if output_dir else None)
        json_path = manager.save_results(result.query, result.groups)
        csv_path = manager.export_csv(result.query, result.groups)
        _err.print(f"[dim]Saved -> {json_path}[/dim]")
        _err.print(f"[dim]Exported -> {csv_path}[/dim]")
    except OSError as exc:
        logger.error("Save failed: %s", exc, exc_info=True)
        _err.print(f"[red]Save failed: {exc}[/red]")


def _summary(result: SearchResult) -> None:
    parts: list[str] = []
    if result.invalid_count:
        parts.append(f"{result.invalid_count} invalid offers")
    if result.filtered_count:
        parts.append(f"{result.filtered_count} filtered")
    detail = f" ({', '.join(parts)})" if parts else ""
    _err.print(
        f"[green]✓ {len(result.groups)} groups"
        f" from {result.offer_count} offers{detail}[/green]"
    )


def cli_search(
    query: str,
    db_only: bool = False,
    data_saver: bool = False,
    input_file: str | None = None,
    criteria: FilterCriteria | None = None,
    sort: str = "relevance",
    output_format: str = "json",
    output_dir: str | None = None,
    save: bool = False,
    orchestrator: SearchOrchestrator | None = None,
) -> int:
    """Run a headless search and return an exit code (0=ok, 1=fail).

    With *input_file* the payload is read from disk instead of the
    backend.
    """
    orchestrator = orchestrator or SearchOrchestrator()
    _err.print(f"[bold]Searching:[/bold] {query}")

    if input_file is not None:
        try:
            with open(input_file, encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, ValueError) as exc:
            _err.print(f"[red]Cannot read {input_file}: {exc}[/red]")
            return 1
        result = orchestrator.process_payload(payload, query, criteria, sort)
    else:
        result = orchestrator.search(
            query,
            db_only=db_only,
            data_saver=data_saver,
            criteria=criteria,
            sort=sort,
        )

    for error_msg in result.errors:
        _err.print(f"[red]Error: {error_msg}[/red]")
    if result.errors:
        return 1

    if not result.groups:
        _err.print("[yellow]No products found.[/yellow]")
        return 1

    _summary(result)
    if save:
        _save(result, output_dir)
    _emit(result, output_format, f"Results for '{query}'")
    return 0


def run_popular(
    output_format: str = "json",
    orchestrator: SearchOrchestrator | None = None,
) -> int:
    """Show the backend's popular products."""
    orchestrator = orchestrator or SearchOrchestrator()
    _err.print("[bold]Loading popular products...[/bold]")
    result = orchestrator.popular()
    for error_msg in result.errors:
        _err.print(f"[red]Error: {error_msg}[/red]")
    if result.errors:
        return 1
    _emit(result, output_format, "Popular products")
    return 0


def run_history(canonid: str, service: HistoryService | None = None) -> int:
    """Print the price history summary of one product."""
    service = service or HistoryService()
    try:
        history = service.get_product_history(canonid)
    except BackendError as exc:
        _err.print(f"[red]History lookup failed: {exc}[/red]")
        return 1

    table = Table(
        title=f"Price history: {history.canonname or history.canonid}",
        show_lines=False,
        title_style="bold cyan",
    )
    table.add_column("Date")
    table.add_column("Supermarket", style="magenta")
    table.add_column("Price", justify="right", style="green")
    table.add_column("Stock", justify="center")
    for entry in history.history:
        table.add_row(
            entry.date,
            entry.supermarket,
            format_price(entry.price),
            "yes" if entry.stock else "no",
        )
    Console().print(table)
    _err.print(
        f"[dim]avg {format_price(history.average_price)} | "
        f"min {format_price(history.min_price)} | "
        f"max {format_price(history.max_price)}[/dim]"
    )
    return 0


def run_health_check(checker: HealthChecker | None = None) -> int:
    """Probe the backend and print a one-row status table."""
    checker = checker or HealthChecker()
    _err.print(
        f"[bold]Checking backend ({Settings.ENVIRONMENT})...[/bold]"
    )
    result = checker.check()

    table = Table(
        title="Backend Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Target", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    if result.status == "ok":
        status = "[green]OK[/green]"
    elif result.status == "slow":
        status = "[yellow]SLOW[/yellow]"
    else:
        status = "[red]DOWN[/red]"

    latency = f"{result.latency_ms:.0f}ms" if result.latency_ms > 0 else "-"
    table.add_row(result.target, status, latency, result.message)
    Console().print(table)
    return 1 if result.status == "down" else 0
