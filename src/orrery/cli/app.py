"""Main Typer application for the Orrery CLI.

Commands generate universes to JSON snapshots and inspect existing ones.
"""

import json
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from orrery.generation import (
    STYLE_PRESETS,
    TOPOLOGY_PRESETS,
    ConfigurationError,
    GeneratedUniverse,
    generate_universe,
    load_config,
    validate_universe,
)
from orrery.utils.config import get_log_level, get_output_path

console = Console()

app = typer.Typer(
    name="orrery",
    help="Orrery - deterministic procedural universe generation.",
    rich_markup_mode="rich",
)

_INT_SEED = re.compile(r"-?\d+")


def parse_seed(raw: str) -> Union[int, str]:
    """Numeric strings seed numerically; anything else is hashed."""
    return int(raw) if _INT_SEED.fullmatch(raw) else raw


def parse_overrides(pairs: List[str]) -> Dict[str, Any]:
    """Turn KEY=VALUE pairs into config overrides; values are JSON when they parse."""
    overrides: Dict[str, Any] = {}
    for pair in pairs:
        if "=" not in pair:
            raise typer.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--set")
        key, raw = pair.split("=", 1)
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            value = raw
        overrides[key.strip().replace("-", "_")] = value
    return overrides


def load_universe(path: Path) -> GeneratedUniverse:
    if not path.exists():
        console.print(f"[red]File not found:[/red] {path}")
        raise typer.Exit(code=1)
    try:
        return GeneratedUniverse.model_validate_json(path.read_text())
    except ValidationError as exc:
        console.print(f"[red]Not a universe snapshot:[/red] {path}")
        console.print(str(exc))
        raise typer.Exit(code=1)


def load_config_file(path: Path) -> Dict[str, Any]:
    try:
        data = json.loads(path.read_text())
    except (OSError, ValueError) as exc:
        console.print(f"[red]Cannot read config file:[/red] {path}")
        console.print(str(exc))
        raise typer.Exit(code=2)
    if not isinstance(data, dict):
        console.print(f"[red]Config file must hold a JSON object:[/red] {path}")
        raise typer.Exit(code=2)
    return data


def stats_table(universe: GeneratedUniverse) -> Table:
    table = Table(title=f"Universe {universe.seed}")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")
    for name, value in universe.stats.model_dump().items():
        table.add_row(name.replace("_", " "), str(value))
    return table


@app.command()
def generate(
    seed: str = typer.Option("0", "--seed", "-s", help="Numeric or text seed"),
    systems: Optional[int] = typer.Option(
        None, "--systems", "-n", help="Generate N grouped systems instead of one"
    ),
    style: Optional[str] = typer.Option(None, "--style", help=f"Style preset: {', '.join(STYLE_PRESETS)}"),
    topology: Optional[str] = typer.Option(
        None, "--topology", "-t", help=f"Topology preset: {', '.join(TOPOLOGY_PRESETS)}"
    ),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="JSON file of config values"),
    overrides: List[str] = typer.Option([], "--set", help="Config override KEY=VALUE (repeatable)"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Output JSON path"),
    validate: bool = typer.Option(True, "--validate/--no-validate", help="Validate before writing"),
) -> None:
    """Generate a universe and write it as a JSON snapshot."""
    settings: Dict[str, Any] = {}
    if style is not None:
        if style not in STYLE_PRESETS:
            console.print(f"[red]Unknown style preset:[/red] {style}")
            raise typer.Exit(code=2)
        settings.update(STYLE_PRESETS[style])
    if config_file is not None:
        settings.update(load_config_file(config_file))
    if topology is not None:
        settings["topology_preset"] = topology
    settings.update(parse_overrides(overrides))

    try:
        config = load_config(settings)
        universe = generate_universe(config, parse_seed(seed), systems)
    except ConfigurationError as exc:
        console.print(f"[red]Configuration error[/red] [bold]{exc.field}[/bold]: {exc.message}")
        raise typer.Exit(code=2)

    if validate:
        report = validate_universe(universe)
        if not report.ok:
            for violation in report.violations[:20]:
                console.print(f"[yellow]{violation.code}[/yellow] {violation.entity_id}: {violation.message}")
            console.print(f"[red]{len(report.violations)} violation(s); snapshot not written[/red]")
            raise typer.Exit(code=1)

    if out is None:
        out = get_output_path(ensure_exists=True) / f"universe-{universe.seed}.json"
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(universe.model_dump_json(by_alias=True, indent=2))

    console.print(stats_table(universe))
    console.print(f"[green]✓[/green] Wrote {out}")


@app.command("validate")
def validate_cmd(path: Path = typer.Argument(..., help="Universe JSON snapshot")) -> None:
    """Check a snapshot's structural invariants."""
    universe = load_universe(path)
    report = validate_universe(universe)
    if report.ok:
        console.print(f"[green]✓[/green] {path} is valid ({len(universe.bodies)} bodies)")
        return

    table = Table(title=f"{len(report.violations)} violation(s)")
    table.add_column("Code", style="yellow")
    table.add_column("Entity")
    table.add_column("Message")
    for violation in report.violations:
        table.add_row(violation.code, violation.entity_id, violation.message)
    console.print(table)
    raise typer.Exit(code=1)


@app.command()
def stats(path: Path = typer.Argument(..., help="Universe JSON snapshot")) -> None:
    """Print aggregate counts of a snapshot."""
    console.print(stats_table(load_universe(path)))


@app.command()
def presets() -> None:
    """List style and topology presets."""
    table = Table(title="Presets")
    table.add_column("Kind", style="cyan")
    table.add_column("Name")
    table.add_column("Details")
    for name, values in STYLE_PRESETS.items():
        enabled = sorted(k.removeprefix("enable_") for k, v in values.items() if k.startswith("enable_") and v)
        table.add_row("style", name, ", ".join(enabled) or "core bodies only")
    for name, factory in TOPOLOGY_PRESETS.items():
        doc = (factory.__doc__ or "").strip().splitlines()
        table.add_row("topology", name, doc[0] if doc else "")
    console.print(table)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help="Log level (default: ORRERY_LOG_LEVEL or INFO)"
    ),
) -> None:
    """Orrery - deterministic procedural universe generation."""
    logger.remove()
    logger.add(sys.stderr, level=(log_level or get_log_level()).upper())
