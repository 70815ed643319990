"""
Output formatting for ranking results.

Provides multiple output formats:
- JSON: Machine-readable full results
- CSV: Spreadsheet-compatible per-endpoint rows
- Human-readable: Rich terminal tables and summaries
"""

import csv
import json
from io import StringIO
from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .models import EndpointStats, Latency, RunSummary, Unavailable


def _ms(value: Latency, digits: int = 3) -> Optional[float]:
    """Round a latency for export, None when unavailable."""
    if isinstance(value, Unavailable):
        return None
    return round(value, digits)


def _fmt_ms(value: Latency) -> str:
    if isinstance(value, Unavailable):
        return "-"
    return f"{value:.2f}"


def _stats_to_dict(rank: Optional[int], stats: EndpointStats) -> dict:
    return {
        "rank": rank,
        "name": stats.endpoint.name,
        "address": stats.endpoint.address,
        "region": stats.endpoint.region,
        "status": stats.status.value,
        "available": stats.is_available,
        "connectivity": stats.connectivity,
        "attempts": {
            "total": stats.attempts,
            "successful": stats.success_count,
            "timeouts": stats.timeout_count,
            "errors": stats.error_count,
            "success_rate_pct": round(stats.success_rate, 2),
        },
        "latency_ms": {
            "min": _ms(stats.min_latency),
            "max": _ms(stats.max_latency),
            "avg": _ms(stats.avg_latency),
            "median": _ms(stats.median_latency),
            "stddev": _ms(stats.stddev_latency),
            "samples": [round(x, 3) for x in stats.latencies],
        },
        "first_answer": next(
            (m.first_answer for m in stats.samples if m.first_answer), None
        ),
    }


class JSONOutput:
    """JSON output formatter."""

    @staticmethod
    def format(summary: RunSummary, indent: int = 2) -> str:
        """
        Format a run summary as JSON.

        Args:
            summary: RunSummary to format
            indent: JSON indentation level

        Returns:
            JSON string
        """
        data = {
            "metadata": {
                "endpoints": len(summary.ranked),
                "attempts_per_endpoint": summary.attempts_per_endpoint,
                "concurrency": summary.concurrency,
                "duration_seconds": round(summary.duration_seconds, 3),
            },
            "ranking": [
                _stats_to_dict(i + 1, stats) for i, stats in enumerate(summary.ranked)
            ],
            "recommended": [
                {"name": s.endpoint.name, "address": s.endpoint.address}
                for s in summary.recommended
            ],
        }
        return json.dumps(data, indent=indent, ensure_ascii=False)

    @staticmethod
    def save(summary: RunSummary, path: Path) -> None:
        """Save a run summary to a JSON file."""
        with open(path, "w", encoding="utf-8") as f:
            f.write(JSONOutput.format(summary))


class CSVOutput:
    """CSV output formatter."""

    HEADER = [
        "rank",
        "name",
        "address",
        "region",
        "status",
        "attempts",
        "successful",
        "success_rate_pct",
        "min_ms",
        "max_ms",
        "avg_ms",
        "median_ms",
        "stddev_ms",
        "connectivity",
    ]

    @staticmethod
    def format(summary: RunSummary) -> str:
        """
        Format the ranking as CSV, one row per endpoint.

        Unavailable latencies are written as empty cells.
        """
        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(CSVOutput.HEADER)

        for i, stats in enumerate(summary.ranked, start=1):
            writer.writerow([
                i,
                stats.endpoint.name,
                stats.endpoint.address,
                stats.endpoint.region or "",
                stats.status.value,
                stats.attempts,
                stats.success_count,
                round(stats.success_rate, 2),
                *(
                    "" if v is None else v
                    for v in (
                        _ms(stats.min_latency),
                        _ms(stats.max_latency),
                        _ms(stats.avg_latency),
                        _ms(stats.median_latency),
                        _ms(stats.stddev_latency),
                    )
                ),
                stats.connectivity,
            ])

        return output.getvalue()

    @staticmethod
    def save(summary: RunSummary, path: Path) -> None:
        """Save the ranking to a CSV file."""
        with open(path, "w", newline="", encoding="utf-8") as f:
            f.write(CSVOutput.format(summary))


class RichConsoleOutput:
    """Rich library console output with colors and tables."""

    @staticmethod
    def build_table(summary: RunSummary) -> Table:
        """Build the full ranking table."""
        table = Table(
            title="DNS Resolver Ranking",
            box=box.ROUNDED,
            header_style="bold magenta",
        )

        table.add_column("#", justify="right")
        table.add_column("Resolver", style="cyan")
        table.add_column("Address")
        table.add_column("Region", style="dim")
        table.add_column("Avg (ms)", justify="right", style="green")
        table.add_column("Min/Max (ms)", justify="right")
        table.add_column("Success", justify="right")
        table.add_column("Connectivity", justify="center")
        table.add_column("Status")

        for i, stats in enumerate(summary.ranked, start=1):
            if stats.is_available:
                avg = _fmt_ms(stats.avg_latency)
                min_max = f"{_fmt_ms(stats.min_latency)}/{_fmt_ms(stats.max_latency)}"
                status = "[green]ok[/green]"
            else:
                avg = "[red]unavailable[/red]"
                min_max = "-/-"
                status = f"[red]{stats.status.value}[/red]"

            table.add_row(
                str(i),
                stats.endpoint.name,
                stats.endpoint.address,
                stats.endpoint.region or "Unknown",
                avg,
                min_max,
                f"{stats.success_rate:.0f}%",
                "[green]yes[/green]" if stats.connectivity else "[red]no[/red]",
                status,
            )

        return table

    @staticmethod
    def print(summary: RunSummary, console: Optional[Console] = None) -> None:
        """Print a run summary using rich."""
        console = console or Console()

        console.print()
        console.print(Panel.fit(
            "[bold blue]DNS RESOLVER SPEED TEST[/bold blue]",
            border_style="blue",
        ))
        console.print(
            f"  [dim]Endpoints:[/dim] {len(summary.ranked)} | "
            f"[dim]Attempts:[/dim] {summary.attempts_per_endpoint} | "
            f"[dim]Parallel:[/dim] {summary.concurrency} | "
            f"[dim]Duration:[/dim] {summary.duration_seconds:.1f}s"
        )
        console.print()
        console.print(RichConsoleOutput.build_table(summary))
        console.print()

        if summary.recommended:
            lines = [
                f"{i}. {s.endpoint.label} - {_fmt_ms(s.avg_latency)}ms "
                f"(success {s.success_rate:.0f}%, "
                f"connectivity {'ok' if s.connectivity else 'failed'})"
                for i, s in enumerate(summary.recommended, start=1)
            ]
            console.print(Panel(
                "\n".join(lines),
                title="[bold green]Recommended resolvers[/bold green]",
                border_style="green",
            ))
        else:
            console.print(Panel(
                "[bold yellow]No usable DNS server found[/bold yellow]",
                border_style="yellow",
            ))

        console.print()
