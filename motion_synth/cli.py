from __future__ import annotations

import json
import os
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import AppConfig, load_config
from .constraints import EnvironmentalAnalyzer
from .errors import MotionSynthError
from .path_processor import PathProcessor
from .pipeline import CameraPathPipeline
from .utils import analysis_to_dict, load_commands, load_json, parse_vector

app = typer.Typer(add_completion=False, no_args_is_help=True)


def _resolve_config(config: Optional[str]) -> AppConfig:
    load_dotenv()
    path = config or os.getenv("MOTION_SYNTH_CONFIG")
    return load_config(path) if path else AppConfig()


def _analyzer(cfg: AppConfig, console: Console) -> EnvironmentalAnalyzer:
    analyzer = EnvironmentalAnalyzer(cfg.solver, console=console)
    analyzer.initialize()
    return analyzer


@app.command()
def analyze(
    geometry: str = typer.Argument(..., help="JSON file with bounding_box, center and optional dimensions"),
    config: Optional[str] = typer.Option(None, help="Path to YAML config"),
    as_json: bool = typer.Option(False, "--json", help="Print the analysis as JSON"),
):
    """Derive environment bounds, distances and camera constraints for an object."""
    console = Console()
    cfg = _resolve_config(config)
    try:
        analysis = _analyzer(cfg, Console(stderr=True)).analyze_environment(load_json(geometry))
    except (MotionSynthError, OSError, ValueError) as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(analysis_to_dict(analysis), indent=2))
        return

    c = analysis.camera_constraints
    d = analysis.distances
    table = Table(title="Camera constraints")
    table.add_column("Quantity")
    table.add_column("Min", justify="right")
    table.add_column("Max", justify="right")
    table.add_row("height", f"{c.min_height:.3f}", f"{c.max_height:.3f}")
    table.add_row("distance", f"{c.min_distance:.3f}", f"{c.max_distance:.3f}")
    console.print(table)
    console.print(
        f"Distances to boundary: left {d.left:.2f}, right {d.right:.2f}, front {d.front:.2f}, "
        f"back {d.back:.2f}, top {d.top:.2f}, bottom {d.bottom:.2f}"
    )
    console.print(f"Floor offset: {analysis.object.floor_offset:.3f}")


@app.command("check-position")
def check_position(
    geometry: str = typer.Argument(..., help="JSON file with the object geometry"),
    position: str = typer.Option(..., help="Camera position as x,y,z"),
    target: str = typer.Option(..., help="Look-at target as x,y,z"),
    config: Optional[str] = typer.Option(None, help="Path to YAML config"),
):
    """Check a single camera placement against the object's height and distance constraints."""
    console = Console()
    cfg = _resolve_config(config)
    try:
        pos = parse_vector(position)
        tgt = parse_vector(target)
    except ValueError as exc:
        raise typer.BadParameter(str(exc))
    try:
        analyzer = _analyzer(cfg, Console(stderr=True))
        analysis = analyzer.analyze_environment(load_json(geometry))
    except (MotionSynthError, OSError, ValueError) as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)

    result = analyzer.validate_camera_position(analysis, pos, tgt)
    if not result.is_valid:
        for error in result.errors:
            console.print(f"[red]{escape(error)}[/red]")
        raise typer.Exit(code=1)
    console.print("[bold green]Camera position is valid.[/bold green]")


@app.command()
def process(
    commands: str = typer.Argument(..., help="JSON file with the camera waypoints"),
    geometry: Optional[str] = typer.Option(None, help="JSON file with the object geometry (enables bounds checks)"),
    output: Optional[str] = typer.Option(None, help="Write processed path JSON here instead of stdout"),
    sample_rate: Optional[int] = typer.Option(None, help="Samples per second (overrides config)"),
    initial_orientation: str = typer.Option("0,0,0,1", help="Initial camera quaternion as x,y,z,w"),
    config: Optional[str] = typer.Option(None, help="Path to YAML config"),
):
    """Validate waypoints and turn them into a dense, smoothed camera path."""
    console = Console(stderr=True)
    cfg = _resolve_config(config)
    if sample_rate is not None:
        cfg = cfg.model_copy(update={"path": cfg.path.model_copy(update={"sample_rate": sample_rate})})

    try:
        quaternion = [float(v) for v in initial_orientation.split(",")]
    except ValueError:
        raise typer.BadParameter("initial orientation must be four comma-separated numbers")

    try:
        raw_commands = load_commands(commands)
        if geometry:
            pipeline = CameraPathPipeline(cfg, console=console)
            result = pipeline.generate(load_json(geometry), raw_commands, quaternion).result
        else:
            result = PathProcessor(cfg.path, console=console).process(raw_commands, quaternion)
        data = result.unwrap()
    except (MotionSynthError, OSError, ValueError) as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)

    payload = {"status": result.status, **data.to_dict()}
    if result.status == "degenerate":
        payload["reason"] = result.reason
    text = json.dumps(payload)
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text)
        console.print(f"[bold green]Wrote path:[/bold green] {output} ({data.sample_count} samples)")
    else:
        typer.echo(text)


if __name__ == "__main__":
    app()
