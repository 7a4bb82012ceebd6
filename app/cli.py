from __future__ import annotations

import logging
import random
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console

from adapters.filesystem.export_repository import FileSystemExportRepository
from adapters.filesystem.json_utils import dump_json_bytes
from adapters.filesystem.params_repository import FileSystemParamsRepository
from adapters.raster.renderer import PillowRenderer, to_png_bytes
from app.config import AppSettings, load_settings
from app.session import MAX_RANDOM_SEED, DiagramSession, ExportKind, resolve_canvas_preset
from domain.models import DiagramParams
from domain.services.generate_diagram import generate_diagram

app = typer.Typer(no_args_is_help=True)
export_app = typer.Typer(no_args_is_help=True)
app.add_typer(export_app, name="export")
console = Console()

_settings: AppSettings | None = None


def _get_settings() -> AppSettings:
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


@app.callback()
def main(
    config: Path | None = typer.Option(None, help="YAML settings file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    global _settings
    try:
        _settings = load_settings(config)
    except FileNotFoundError as exc:
        console.print(f"[red]{exc}[/]")
        raise typer.Exit(code=1) from exc
    level = logging.DEBUG if verbose else getattr(logging, _settings.log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _load_params(params_path: Path | None, seed: int | None) -> DiagramParams:
    settings = _get_settings()
    path = params_path or settings.params_path
    params = DiagramParams()
    if path is not None:
        if not path.exists():
            console.print(f"[red]Parameter file not found:[/] {path}")
            raise typer.Exit(code=1)
        try:
            params = FileSystemParamsRepository().load(path)
        except (ValidationError, ValueError) as exc:
            console.print(f"[red]Invalid parameter file:[/] {exc}")
            raise typer.Exit(code=1) from exc
    if seed is not None:
        params = params.with_updates(random_seed=seed)
    return params


def _apply_preset(params: DiagramParams, preset: str | None) -> DiagramParams:
    if preset is None:
        return params
    try:
        width, height = resolve_canvas_preset(preset)
    except ValueError as exc:
        console.print(f"[red]{exc}[/]")
        raise typer.Exit(code=1) from exc
    return params.with_updates(canvas_width=width, canvas_height=height)


@app.command("generate")
def generate(
    params_path: Path | None = typer.Option(None, "--params", help="JSON parameter file."),
    seed: int | None = typer.Option(None, help="Override the random seed."),
    output: Path | None = typer.Option(None, help="Write the diagram state JSON here."),
) -> None:
    params = _load_params(params_path, seed)
    state = generate_diagram(params)
    if output is None:
        typer.echo(dump_json_bytes(state.to_dict()).decode("utf-8"))
        return
    FileSystemExportRepository().save_state(state, output)
    console.print(
        f"[green]Wrote[/] {output} "
        f"({len(state.nodes)} nodes, {len(state.connections)} connections)"
    )


def _export(
    kind: ExportKind,
    params_path: Path | None,
    seed: int | None,
    preset: str | None,
    output_dir: Path | None,
) -> None:
    settings = _get_settings()
    params = _apply_preset(_load_params(params_path, seed), preset)
    session = DiagramSession(
        params,
        raster_renderer=PillowRenderer(font_path=settings.export.raster_font_path),
        file_prefix=settings.export.file_prefix,
    )
    session.settle(settings.max_ticks)
    target_dir = output_dir or settings.export.output_dir
    path = session.export_to(target_dir, kind)
    if path is None:
        console.print("[yellow]Nothing to export: no diagram state was computed[/]")
        raise typer.Exit(code=1)
    console.print(f"[green]Wrote[/] {path}")


@export_app.command("svg")
def export_svg(
    params_path: Path | None = typer.Option(None, "--params", help="JSON parameter file."),
    seed: int | None = typer.Option(None, help="Override the random seed."),
    preset: str | None = typer.Option(None, help="Canvas preset: 9x16, 4x5, 16x9."),
    output_dir: Path | None = typer.Option(None, help="Directory for the exported file."),
) -> None:
    _export("svg", params_path, seed, preset, output_dir)


@export_app.command("png")
def export_png(
    params_path: Path | None = typer.Option(None, "--params", help="JSON parameter file."),
    seed: int | None = typer.Option(None, help="Override the random seed."),
    preset: str | None = typer.Option(None, help="Canvas preset: 9x16, 4x5, 16x9."),
    output_dir: Path | None = typer.Option(None, help="Directory for the exported file."),
) -> None:
    _export("png", params_path, seed, preset, output_dir)


@app.command("animate")
def animate(
    to_seed: int = typer.Option(..., help="Seed of the diagram to animate towards."),
    params_path: Path | None = typer.Option(None, "--params", help="JSON parameter file."),
    frames_dir: Path | None = typer.Option(None, help="Directory for per-tick PNG frames."),
    max_ticks: int | None = typer.Option(None, help="Stop after this many ticks."),
) -> None:
    settings = _get_settings()
    params = _load_params(params_path, None)
    renderer = PillowRenderer(font_path=settings.export.raster_font_path)
    session = DiagramSession(params, raster_renderer=renderer)
    limit = max_ticks if max_ticks is not None else settings.max_ticks
    session.settle(limit)
    session.driver.renderer = renderer
    session.update(random_seed=to_seed)

    target_dir = frames_dir or settings.export.frames_dir
    export_repo = FileSystemExportRepository()
    frame_count = 0
    while session.driver.is_animating and frame_count < limit:
        session.tick()
        export_repo.save_png(
            to_png_bytes(session.driver.last_output),
            target_dir / f"{settings.export.file_prefix}-frame-{frame_count:04d}.png",
        )
        frame_count += 1

    if session.driver.is_animating:
        console.print(f"[yellow]Animation did not finish after {frame_count} ticks[/]")
    else:
        console.print(f"[green]Wrote[/] {frame_count} frames to {target_dir}")


@app.command("randomize")
def randomize() -> None:
    typer.echo(str(random.Random().randrange(MAX_RANDOM_SEED)))


if __name__ == "__main__":
    app()
