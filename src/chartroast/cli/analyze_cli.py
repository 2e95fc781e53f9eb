# -*- coding: utf-8 -*-
"""CLI commands for roasting chart images."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import typer

from chartroast.config import load_config, resolve_api_key
from chartroast.constants import APP_NAME
from chartroast.errors import UnparseableResponse
from chartroast.integrations.anthropic_client import AnthropicClient
from chartroast.models.feedback_record import FeedbackRecord
from chartroast.pipeline.analyzer import ChartAnalyzer
from chartroast.pipeline.exporter import Exporter, render_markdown
from chartroast.pipeline.response_parser import parse_response
from chartroast.utils.file_utils import read_text_file
from chartroast.utils.logger import get_logger, setup_session_logging

app = typer.Typer(help="Critique chart images with a vision model and get improved plot code")
logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool, log_file: Path | None = None) -> None:
    if log_file is not None:
        get_logger("chartroast", log_file)
    elif verbose:
        setup_session_logging(Path.cwd(), APP_NAME)
    else:
        logging.basicConfig(level=logging.WARNING)


def _load_settings(settings_path: Path | None) -> dict:
    try:
        return load_config(settings_path)
    except ValueError as e:
        typer.echo(f"Invalid settings: {e}", err=True)
        raise typer.Exit(code=2)


def _echo_record(record: FeedbackRecord, as_json: bool, title: str) -> None:
    if as_json:
        typer.echo(json.dumps(record.as_dict(), indent=2, ensure_ascii=False))
    else:
        typer.echo(render_markdown(record, title))


@app.command()
def analyze(
    image_path: Path = typer.Argument(..., help="Chart image (JPEG, PNG, GIF or WebP)"),
    media_type: str = typer.Option(None, help="Override the content type guessed from the suffix"),
    settings: Path = typer.Option(None, help="Settings JSON (default: settings.json)"),
    output_dir: Path = typer.Option(None, help="Also write .feedback.json/.feedback.md/.plot.js here"),
    as_json: bool = typer.Option(False, "--json", help="Print the record as JSON"),
    verbose: bool = typer.Option(False, help="Verbose output with a session log file"),
    log_file: Path = typer.Option(None, help="Write the chartroast log to this file"),
) -> None:
    """Roast a chart image and print the feedback."""
    _configure_logging(verbose, log_file)
    if not image_path.exists():
        typer.echo(f"File not found: {image_path}", err=True)
        raise typer.Exit(code=1)

    config = _load_settings(settings)
    record = ChartAnalyzer(settings=config).analyze(image_path, media_type)
    use_json = as_json or config.get("export", {}).get("format") == "json"
    _echo_record(record, use_json, image_path.stem)

    if output_dir is not None:
        written = Exporter().export(record, output_dir, image_path.stem)
        for kind, path in written.items():
            typer.echo(f"Wrote {kind}: {path}", err=True)


@app.command()
def parse(
    raw_path: Path = typer.Argument(..., help="Saved model reply to recover"),
    as_json: bool = typer.Option(False, "--json", help="Print the record as JSON"),
) -> None:
    """Run only the response recovery on a saved model reply."""
    _configure_logging(False)
    try:
        record = parse_response(read_text_file(raw_path))
    except UnparseableResponse as e:
        typer.echo(f"Unparseable response: {e}", err=True)
        raise typer.Exit(code=1)
    _echo_record(record, as_json, raw_path.stem)


@app.command("check-key")
def check_key(
    settings: Path = typer.Option(None, help="Settings JSON (default: settings.json)"),
    remote: bool = typer.Option(False, help="Also verify the key against the API"),
) -> None:
    """Validate the configured Anthropic API key."""
    config = _load_settings(settings)
    key = resolve_api_key(config)
    if not key:
        typer.echo("No Anthropic API key configured (set ANTHROPIC_API_KEY).")
        raise typer.Exit(code=1)
    if not AnthropicClient(key).validate_key(check_remote=remote):
        typer.echo("Anthropic API key is invalid.")
        raise typer.Exit(code=1)
    typer.echo("Anthropic API key OK.")


if __name__ == "__main__":
    app()
