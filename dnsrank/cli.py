"""
Command-line interface for dnsrank.

Probes a set of DNS resolvers, ranks them by average response time
and prints or exports the result.
"""

import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import NoReturn, Optional

import click
from rich import box
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .config import ConfigError, RankerConfig, load_config
from .logging_config import configure_logging
from .models import RunSummary, Transport
from .output import CSVOutput, JSONOutput, RichConsoleOutput
from .probes import BaseProbe, SimulatedProbe
from .query_engine import DNSQueryEngine
from .ranking import rank, top_k
from .resolvers import (
    DEFAULT_RESOLVERS,
    RESOLVERS,
    build_registry,
    create_custom_resolver,
    list_resolvers,
)
from .runner import ConcurrentProber, ProberResourceError

logger = logging.getLogger(__name__)


def create_progress_callback():
    """Create a progress display and the callback that drives it."""
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TextColumn("{task.completed}/{task.total}"),
        console=Console(stderr=True),
        transient=True,
    )

    task_id = None

    def callback(message: str, current: int, total: int):
        nonlocal task_id
        if task_id is None:
            task_id = progress.add_task(message, total=total)
        progress.update(task_id, description=message, completed=current)

    return progress, callback


def _apply_overrides(cfg: RankerConfig, **overrides) -> RankerConfig:
    """Replace config values with command-line values that were given."""
    for key, value in overrides.items():
        if value is None or value == ():
            continue
        setattr(cfg, key, list(value) if isinstance(value, tuple) else value)
    return cfg.validate()


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(__version__)
def main():
    """
    dnsrank - find the fastest DNS resolver.

    Queries every resolver a few times in parallel, ranks them by
    average response time and recommends the best ones.
    """
    configure_logging()


@main.command()
@click.option(
    "--resolver", "-r",
    multiple=True,
    help="Resolver to test (can specify multiple). Options: " + ", ".join(list_resolvers()),
)
@click.option(
    "--custom-resolver", "-c",
    multiple=True,
    help="Custom resolver IP address",
)
@click.option(
    "--parallel", "-p",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum resolvers probed at once [default: 10]",
)
@click.option(
    "--attempts", "-n",
    type=click.IntRange(min=1),
    default=None,
    help="Queries per resolver [default: 3]",
)
@click.option(
    "--top", "-k",
    type=click.IntRange(min=0),
    default=None,
    help="Number of resolvers to recommend [default: 3]",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Per-query timeout in seconds [default: 2.0]",
)
@click.option(
    "--domain", "-d",
    multiple=True,
    help="Domain to query (can specify multiple, rotated per attempt)",
)
@click.option(
    "--transport", "-t",
    type=click.Choice([t.value for t in Transport]),
    default=None,
    help="Transport protocol to use [default: udp]",
)
@click.option(
    "--cold",
    is_flag=True,
    help="Prefix a random label to every query to bypass resolver caches",
)
@click.option(
    "--simulate",
    is_flag=True,
    help="Use simulated latencies instead of real queries",
)
@click.option(
    "--seed",
    type=int,
    default=None,
    help="Random seed for --simulate",
)
@click.option(
    "--config", "config_path",
    type=click.Path(),
    default=None,
    help="Path to YAML config file (default: ~/.dnsrank/config.yaml)",
)
@click.option(
    "--output", "-o",
    type=click.Path(),
    help="Output file path (JSON or CSV based on extension)",
)
@click.option(
    "--json", "as_json",
    is_flag=True,
    help="Output results as JSON to stdout",
)
@click.option(
    "--quiet", "-q",
    is_flag=True,
    help="Suppress progress and table output",
)
def run(
    resolver: tuple,
    custom_resolver: tuple,
    parallel: Optional[int],
    attempts: Optional[int],
    top: Optional[int],
    timeout: Optional[float],
    domain: tuple,
    transport: Optional[str],
    cold: bool,
    simulate: bool,
    seed: Optional[int],
    config_path: Optional[str],
    output: Optional[str],
    as_json: bool,
    quiet: bool,
):
    """
    Probe DNS resolvers and rank them by response time.

    Examples:

    \b
      # Test every built-in resolver
      dnsrank run

    \b
      # Compare specific resolvers, 5 queries each
      dnsrank run -r cloudflare -r google -r quad9 -n 5

    \b
      # Offline dry run with reproducible numbers
      dnsrank run --simulate --seed 42

    \b
      # Export results to JSON
      dnsrank run -o results.json
    """
    try:
        cfg = _apply_overrides(
            load_config(config_path),
            concurrency=parallel,
            attempts_per_endpoint=attempts,
            top_k=top,
            timeout=timeout,
            domains=domain,
            transport=transport,
            resolvers=resolver,
        )
    except (ConfigError, FileNotFoundError) as e:
        _fail(str(e))

    logger.debug("Config resolved: %s", cfg)

    custom = cfg.custom_endpoints() + [create_custom_resolver(ip) for ip in custom_resolver]
    try:
        registry = build_registry(cfg.resolvers, custom)
    except ValueError as e:
        _fail(str(e))

    if simulate:
        probe: BaseProbe = SimulatedProbe(seed=seed)
    else:
        probe = DNSQueryEngine(
            domains=cfg.domains or None,
            transport=Transport(cfg.transport),
            timeout=cfg.timeout,
            cache_bypass=cold,
        )

    progress_ctx, progress_callback = None, None
    if not quiet and not as_json:
        progress_ctx, progress_callback = create_progress_callback()

    prober = ConcurrentProber(
        probe,
        attempt_timeout=cfg.timeout,
        progress_callback=progress_callback,
    )

    async def run_probes():
        try:
            return await prober.run_all(
                registry.endpoints,
                attempts_per_endpoint=cfg.attempts_per_endpoint,
                concurrency=cfg.concurrency,
            )
        finally:
            await probe.close()

    started = time.monotonic()
    try:
        if progress_ctx:
            with progress_ctx:
                results = asyncio.run(run_probes())
        else:
            results = asyncio.run(run_probes())
    except ProberResourceError as e:
        _fail(str(e))

    ranked = rank(results)
    summary = RunSummary(
        ranked=ranked,
        recommended=top_k(ranked, cfg.top_k),
        attempts_per_endpoint=cfg.attempts_per_endpoint,
        concurrency=cfg.concurrency,
        duration_seconds=time.monotonic() - started,
    )

    if as_json:
        click.echo(JSONOutput.format(summary))
    elif not quiet:
        RichConsoleOutput.print(summary)

    if output:
        path = Path(output)
        if path.suffix.lower() == ".csv":
            CSVOutput.save(summary, path)
        else:
            if path.suffix.lower() != ".json":
                path = path.with_suffix(".json")
            JSONOutput.save(summary, path)
        if not quiet and not as_json:
            click.echo(f"Results saved to {path}")


@main.command()
def list_available():
    """List all built-in DNS resolvers."""
    console = Console()
    table = Table(
        title="Available DNS Resolvers",
        box=box.ROUNDED,
        header_style="bold cyan",
    )

    table.add_column("Name", style="green")
    table.add_column("Resolver")
    table.add_column("Address", style="cyan")
    table.add_column("Region", style="dim")

    for name, endpoint in RESOLVERS.items():
        table.add_row(name, endpoint.name, endpoint.address, endpoint.region or "Unknown")

    console.print(table)
    console.print()
    console.print(f"[dim]Default resolvers:[/dim] {len(DEFAULT_RESOLVERS)} (all of the above)")


if __name__ == "__main__":
    main()
