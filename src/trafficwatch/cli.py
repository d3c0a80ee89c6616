from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

from trafficwatch.citations import VIOLATION_TYPES, lookup_citation
from trafficwatch.config import AppConfig, default_config_path, load_config, write_default_config
from trafficwatch.jurisdiction import ReverseGeocoder
from trafficwatch.media.exif import extract_exif
from trafficwatch.media.image_io import expand_paths, read_dimensions, read_image_bytes
from trafficwatch.output_models import ExifOutput
from trafficwatch.report import (
    VehicleAnalysis,
    build_report,
    citation_to_output,
    compose_email,
    maps_url,
    report_to_output,
)
from trafficwatch.util.logging import setup_logging, use_color

app = typer.Typer(help="trafficwatch: turn a photo into a traffic violation report")


@dataclass(slots=True)
class AppState:
    config: AppConfig
    console: Console
    config_path: Path


def _print_banner(console: Console, show_banner: bool) -> None:
    if not show_banner:
        return
    console.print()
    console.print("[bold cyan]trafficwatch[/bold cyan] [dim]photo • location • citation • email[/dim]")
    console.print()


def _state(ctx: typer.Context) -> AppState:
    st = ctx.obj
    if not isinstance(st, AppState):
        raise RuntimeError("app state not initialized")
    return st


def _emit_json(obj: Any) -> None:
    typer.echo(json.dumps(obj, indent=2))


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[Path | None, typer.Option("--config", help="Config YAML path")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose logging")] = False,
) -> None:
    setup_logging(verbose)
    cfg_path = config.expanduser() if config else default_config_path()
    cfg = load_config(cfg_path)
    color_on = use_color()
    console = Console(color_system="auto" if color_on else None, force_terminal=color_on)
    ctx.obj = AppState(config=cfg, console=console, config_path=cfg_path)


@app.command("init-config")
def init_config(
    ctx: typer.Context,
    path: Annotated[Path | None, typer.Option("--path", help="Write config to this path")] = None,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    written = write_default_config(path.expanduser() if path else st.config_path)
    if json_out:
        _emit_json({"config_path": str(written)})
        return
    st.console.print(f"[green]config:[/green] {written}")


@app.command("exif")
def exif_cmd(
    ctx: typer.Context,
    paths: Annotated[list[Path], typer.Argument(help="JPEG files or folders")],
    mask: Annotated[str, typer.Option("--mask", help="Glob-like mask for folders")] = "**/*.{jpg,jpeg}",
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    rows: list[ExifOutput] = []
    for p in expand_paths(paths, mask):
        try:
            data = read_image_bytes(p)
        except OSError as exc:
            st.console.print(f"[red]cannot read {p}:[/red] {exc}")
            raise typer.Exit(1) from exc
        result = extract_exif(data)
        rows.append(ExifOutput(path=str(p), latitude=result.latitude, longitude=result.longitude, date_time=result.date_time))

    if json_out:
        _emit_json([r.model_dump(by_alias=True, exclude_none=True) for r in rows])
        return

    if not rows:
        st.console.print("[dim]no images[/dim]")
        return
    table = Table(title="exif")
    table.add_column("path")
    table.add_column("latitude", justify="right")
    table.add_column("longitude", justify="right")
    table.add_column("taken")
    for r in rows:
        table.add_row(
            r.path or "",
            f"{r.latitude:.6f}" if r.latitude is not None else "-",
            f"{r.longitude:.6f}" if r.longitude is not None else "-",
            r.date_time or "-",
        )
    st.console.print(table)


@app.command("citation")
def citation_cmd(
    ctx: typer.Context,
    violation: Annotated[str, typer.Argument(help="Violation name or description")],
    state: Annotated[str, typer.Option("--state")] = "District of Columbia",
    city: Annotated[str, typer.Option("--city")] = "",
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    citation = lookup_citation(state, city, violation)
    if json_out:
        out = citation_to_output(citation)
        _emit_json(out.model_dump() if out is not None else None)
        return
    if citation is None:
        st.console.print("[dim]no official citation found[/dim]")
        return
    st.console.print(f"[bold]{citation.code}[/bold] {citation.description} [dim]({citation.jurisdiction})[/dim]")
    if citation.fine:
        st.console.print(f"fine: {citation.fine}")


@app.command("report")
def report_cmd(
    ctx: typer.Context,
    image: Annotated[Path, typer.Argument(help="Photo of the violation")],
    plate: Annotated[str, typer.Option("--plate", help="License plate")] = "UNKNOWN",
    vehicle: Annotated[str, typer.Option("--vehicle", help="Vehicle description")] = "",
    violation: Annotated[str, typer.Option("--violation", help=f"One of: {', '.join(VIOLATION_TYPES)}")] = "",
    custom: Annotated[str, typer.Option("--custom", help="Violation text when --violation is Other")] = "",
    detected: Annotated[str | None, typer.Option("--detected", help="Violation suggested by image analysis")] = None,
    geocode: Annotated[bool, typer.Option("--geocode/--no-geocode", help="Look up the jurisdiction online")] = True,
    out: Annotated[Path | None, typer.Option("--out", help="Write the report JSON to this file")] = None,
    save: Annotated[bool, typer.Option("--save", help="Write the report JSON to the configured output dir")] = False,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    cfg = st.config
    try:
        data = read_image_bytes(image)
    except OSError as exc:
        st.console.print(f"[red]cannot read {image}:[/red] {exc}")
        raise typer.Exit(1) from exc

    if violation and violation not in VIOLATION_TYPES:
        st.console.print(f"[red]unknown violation:[/red] {violation} (use --violation Other --custom TEXT)")
        raise typer.Exit(1)

    geocoder = ReverseGeocoder.from_config(cfg.geocode) if geocode and cfg.geocode.enabled else None
    report = build_report(
        data,
        VehicleAnalysis(license_plate=plate.strip().upper() or "UNKNOWN", vehicle_description=vehicle, violation_type=detected),
        selected_violation=violation,
        custom_violation=custom,
        geocoder=geocoder,
        default_email=cfg.report.default_email,
        image_name=image.name,
    )
    draft = compose_email(report, signature=cfg.report.signature)
    payload = report_to_output(report, draft).model_dump()

    target = out
    if target is None and save:
        target = cfg.report.output_dir / f"violation_report_{report.id}.json"
    if target is not None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(payload, indent=2))

    if json_out:
        _emit_json(payload)
        return

    console = st.console
    _print_banner(console, cfg.ui.show_banner)
    width, height = read_dimensions(image)
    table = Table(title=f"report {report.id}", show_header=False)
    table.add_column("field", style="bold")
    table.add_column("value")
    table.add_row("image", f"{image.name} ({width}x{height})" if width and height else image.name)
    table.add_row("violation", report.violation or "[dim](not set)[/dim]")
    table.add_row("plate", report.analysis.license_plate)
    table.add_row("vehicle", report.analysis.vehicle_description or "[dim](none)[/dim]")
    location_note = "from photo" if report.location_source == "image" else "not in photo"
    table.add_row("location", f"{maps_url(report.location)} [dim]({location_note})[/dim]")
    time_note = "from photo" if report.timestamp_source == "image" else "time of report"
    table.add_row("time", f"{report.timestamp} [dim]({time_note})[/dim]")
    table.add_row("recipient", report.recipient_email)
    if report.citation is not None:
        table.add_row("citation", f"{report.citation.code} {report.citation.description}")
    console.print(table)
    console.print(f"[bold]Subject:[/bold] {draft.subject}")
    console.print(draft.body, markup=False)
    console.print(f"[dim]{draft.gmail_url()}[/dim]", soft_wrap=True)
    if target is not None:
        console.print(f"[green]saved:[/green] {target}")
