"""
localscribe.cli - Typer CLI entry point.

Loads the model once, then serves transcription requests for the given files.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from localscribe import __version__
from localscribe.config import (
    CONFIG_FILENAME,
    LocalscribeConfig,
    create_default_config,
    find_config_dir,
    load_config,
    resolve_model_path,
    write_config,
)
from localscribe.exceptions import ConfigError, ModelLoadError
from localscribe.host import ModelHost
from localscribe.logging import configure_logging

app = typer.Typer(
    name="localscribe",
    help="On-device speech-to-text for 16kHz mono WAV recordings.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"localscribe {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Localscribe - on-device speech-to-text."""
    pass


def _load_settings(config_dir: str | None, model: str | None) -> LocalscribeConfig:
    """Read config from --config, the nearest localscribe.yaml, or defaults."""
    directory = Path(config_dir) if config_dir else find_config_dir()
    try:
        config = load_config(directory) if directory else LocalscribeConfig()
    except (FileNotFoundError, ConfigError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if model:
        config = config.model_copy(update={"model_path": Path(model).expanduser().resolve()})
    return config


def _start_host(config: LocalscribeConfig) -> ModelHost:
    model_path = resolve_model_path(config)
    try:
        return ModelHost.initialize(model_path, n_threads=config.n_threads)
    except ModelLoadError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(2)


@app.command("transcribe")
def transcribe_cmd(
    files: list[str] = typer.Argument(..., help="16kHz mono 16-bit WAV file(s)"),
    model: str | None = typer.Option(None, "--model", "-m", help="Path to ggml model file"),
    config_dir: str | None = typer.Option(
        None, "--config", "-c", help=f"Directory containing {CONFIG_FILENAME}"
    ),
    workers: int | None = typer.Option(
        None, "--workers", "-w", min=1, help="Concurrent requests (default from config)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Transcribe audio files with the local model."""
    configure_logging(verbose)

    config = _load_settings(config_dir, model)
    host = _start_host(config)

    from localscribe.pipeline import transcribe_files

    paths = [Path(f).expanduser() for f in files]
    results = transcribe_files(
        host,
        paths,
        max_workers=workers or config.max_workers,
        console=None if as_json else (console if len(paths) > 1 else None),
    )

    if as_json:
        typer.echo(
            json.dumps(
                {"results": results["results"], "errors": results["errors"]},
                indent=2,
                ensure_ascii=False,
            )
        )
    else:
        for item in results["results"]:
            if len(paths) > 1:
                console.print(f"\n[cyan]{Path(item['path']).name}[/cyan]")
            typer.echo(item["text"])
        for error in results["errors"]:
            console.print(f"[red]Error: {error['error']}[/red]")

    if results["failed"] > 0:
        raise typer.Exit(1)


@app.command("check-model")
def check_model(
    model: str | None = typer.Option(None, "--model", "-m", help="Path to ggml model file"),
    config_dir: str | None = typer.Option(
        None, "--config", "-c", help=f"Directory containing {CONFIG_FILENAME}"
    ),
) -> None:
    """Load the model and report whether it is usable."""
    config = _load_settings(config_dir, model)
    model_path = resolve_model_path(config)

    table = Table(title="Model Status")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Details")

    try:
        ModelHost.initialize(model_path, n_threads=config.n_threads)
    except ModelLoadError as e:
        table.add_row("Model", "✗ Failed", e.message)
        console.print(table)
        raise typer.Exit(2)

    table.add_row("Model", "✓ Loaded", str(model_path))
    console.print(table)


@app.command("init-config")
def init_config(
    path: str = typer.Option(".", "--path", "-d", help="Directory to write the config in"),
) -> None:
    """Write a default localscribe.yaml."""
    config_file = Path(path) / CONFIG_FILENAME
    if config_file.exists():
        console.print(f"[red]Error: '{config_file}' already exists[/red]")
        raise typer.Exit(1)

    write_config(create_default_config(), config_file)
    console.print(f"[green]✓[/green] Wrote {config_file}")
