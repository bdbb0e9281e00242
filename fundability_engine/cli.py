"""Command-line entry point: score one record, run CSV batches, serve the API"""

import asyncio
import json
import logging
import sys
from pathlib import Path

import click

from fundability_engine.batch.csv_io import CSV_TEMPLATE, export_to_csv, export_to_json, parse_csv_to_clients
from fundability_engine.batch.processor import process_batch
from fundability_engine.config import settings
from fundability_engine.domain.scoring import ENGINE_VERSION, calculate_fundability_snapshot
from fundability_engine.domain.validation import validate_input
from fundability_engine.infrastructure.clients.webhook import webhook_configs_from_settings
from fundability_engine.infrastructure.observability.logging import setup_logging

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=ENGINE_VERSION, prog_name="fundability")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def cli(verbose: bool) -> None:
    """Fundability Snapshot Engine."""
    # stdout carries command output, so logs go to stderr
    setup_logging("DEBUG" if verbose else settings.log_level, stream=sys.stderr)


@cli.command("score")
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.pass_context
def score_cmd(ctx: click.Context, source) -> None:
    """Score one JSON input record and print the snapshot.

    SOURCE: path to a JSON file, or - for stdin.
    """
    try:
        body = json.load(source)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        click.echo(f"Invalid JSON: {e}", err=True)
        ctx.exit(1)

    validation = validate_input(body)
    if not validation.valid:
        click.echo("Validation failed:", err=True)
        for error in validation.errors:
            click.echo(f"  - {error}", err=True)
        ctx.exit(1)

    snapshot = calculate_fundability_snapshot(validation.data)
    click.echo(json.dumps(snapshot.to_dict(), indent=2, ensure_ascii=False))


@cli.command("batch")
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Write results here (default: stdout)")
@click.option("--format", "output_format", type=click.Choice(["csv", "json"]), default="csv", show_default=True)
@click.option("--concurrency", type=int, default=None, help="Records scored concurrently per chunk")
@click.option("--delay-ms", type=int, default=None, help="Pause between chunks in milliseconds")
@click.option("--notify", is_flag=True, help="Send webhooks configured in the environment")
def batch_cmd(
    input_path: Path,
    output: Path | None,
    output_format: str,
    concurrency: int | None,
    delay_ms: int | None,
    notify: bool,
) -> None:
    """Score every client in a CSV file.

    INPUT_PATH: CSV with a header row (see `fundability template`).
    """
    clients = parse_csv_to_clients(input_path.read_text(encoding="utf-8"))
    webhooks = [config for config in webhook_configs_from_settings(settings) if config.enabled] if notify else []

    def on_progress(processed: int, total: int) -> None:
        logger.debug(f"Progress: {processed}/{total}")

    result = asyncio.run(process_batch(
        clients,
        concurrency=concurrency,
        delay_ms=delay_ms,
        webhooks=webhooks,
        on_progress=on_progress,
    ))

    rendered = export_to_json(result) if output_format == "json" else export_to_csv(result)
    if output is None:
        click.echo(rendered)
    else:
        output.write_text(rendered + "\n", encoding="utf-8")

    summary = result.summary
    click.echo(
        f"Processed {summary['total']} clients in {summary['duration_ms']}ms "
        f"(success: {summary['successful']}, failed: {summary['failed']})",
        err=True,
    )


@cli.command("template")
def template_cmd() -> None:
    """Print an example batch CSV."""
    click.echo(CSV_TEMPLATE)


@cli.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
def serve_cmd(host: str, port: int) -> None:
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("fundability_engine.api.main:app", host=host, port=port)


if __name__ == "__main__":
    cli()
