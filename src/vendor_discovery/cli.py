"""CLI entry point for running vendor discovery from a terminal."""

from __future__ import annotations

import argparse
import json
import sys

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from vendor_discovery.config import load_config
from vendor_discovery.errors import InvalidQueryError
from vendor_discovery.logging_setup import configure_logging
from vendor_discovery.models import DiscoveryResult, EnhancementSource
from vendor_discovery.pipeline import build_pipeline

console = Console()

PRICE_SIGNS = {0: "Free", 1: "$", 2: "$$", 3: "$$$", 4: "$$$$"}


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(description="Vendor Discovery")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logs, including score breakdowns")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # --- serve command ---
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Host to bind to")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind to")

    # --- discover command ---
    discover_parser = subparsers.add_parser("discover", help="Find and rank vendors for a query")
    discover_parser.add_argument("query", help='What to look for, e.g. "outdoor wedding venue near downtown"')
    discover_parser.add_argument("--attendees", help="Expected number of attendees")
    discover_parser.add_argument("--event-type", help="Event type (e.g. 'wedding', 'corporate offsite')")
    discover_parser.add_argument("--requirements", help="Special requirements, free text")
    discover_parser.add_argument("--limit", type=int, default=0, help="Show only the top N results (0 = all)")
    discover_parser.add_argument("--json-out", help="Save ranked results as JSON to this file")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "serve":
        from vendor_discovery.api import start_server
        start_server(host=args.host, port=args.port)
    elif args.command == "discover":
        _handle_discover(args)


def _handle_discover(args):
    config = load_config()
    configure_logging("DEBUG" if args.verbose else config.log_level)

    missing = config.validate_keys()
    if "GOOGLE_PLACES_API_KEY" in missing:
        console.print("[red]❌ GOOGLE_PLACES_API_KEY is required. Set it in .env[/red]")
        sys.exit(1)
    if "ANTHROPIC_API_KEY" in missing:
        console.print("[yellow]⚠️  ANTHROPIC_API_KEY missing, results will use fallback classification[/yellow]")

    context = {
        "attendeeCount": args.attendees,
        "eventType": args.event_type,
        "specialRequirements": args.requirements,
    }

    pipeline = build_pipeline(config)
    try:
        result = pipeline.discover(args.query, context)
    except InvalidQueryError as e:
        console.print(f"[red]❌ {e}[/red]")
        sys.exit(1)
    finally:
        pipeline.close()

    _display_results(result, limit=args.limit)

    if args.json_out:
        with open(args.json_out, "w") as f:
            json.dump(
                [r.model_dump(mode="json", by_alias=True) for r in result.results],
                f,
                indent=2,
            )
        console.print(f"\n💾 Results saved to {args.json_out}")


def _display_results(result: DiscoveryResult, limit: int = 0):
    """Pretty-print ranked results to the console."""

    query = result.query
    summary = f"[bold]Query:[/bold] {query.text}"
    if query.context:
        summary += (
            f"\n[bold]Attendees:[/bold] {query.context.attendee_count or 'Not specified'}"
            f"\n[bold]Event Type:[/bold] {query.context.event_type or 'Not specified'}"
            f"\n[bold]Requirements:[/bold] {query.context.special_requirements or 'None'}"
        )
    console.print(Panel(summary, title="🔍 Discovery", border_style="blue"))

    if not result.results:
        console.print(f"\n[yellow]{result.message or 'No results found.'}[/yellow]")
        return

    if result.fell_back:
        console.print("[dim]Some results were classified without the language model.[/dim]")

    shown = result.results[:limit] if limit > 0 else result.results

    table = Table(title=f"{len(result.results)} result(s)", show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Category", style="cyan")
    table.add_column("Score", justify="right", style="green")
    table.add_column("Fit", justify="right")
    table.add_column("Rating", justify="right")
    table.add_column("Price")
    table.add_column("Description")

    for i, r in enumerate(shown, 1):
        fit = f"{r.event_suitability_score:g}" if r.event_suitability_score is not None else "–"
        if r.enhancement_source == EnhancementSource.FALLBACK:
            fit = f"[dim]{fit}[/dim]"
        rating = f"{r.rating:.1f} ({r.rating_count or 0})" if r.rating is not None else "–"
        table.add_row(
            str(i),
            r.name,
            r.category.value,
            f"{r.hybrid_score:.2f}",
            fit,
            rating,
            PRICE_SIGNS.get(r.price_level, "–") if r.price_level is not None else "–",
            r.description,
        )

    console.print(table)


if __name__ == "__main__":
    main()
