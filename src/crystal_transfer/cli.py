# src/crystal_transfer/cli.py
"""crystal-transfer Command Line Interface.

Entry point for the crystal-transfer CLI tool.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from pydantic import ValidationError

from crystal_transfer import __version__
from crystal_transfer.contracts.enums import StorageMethod
from crystal_transfer.contracts.errors import TransferError
from crystal_transfer.core.config import TransferSettings, load_settings

__all__ = ["app"]

app = typer.Typer(
    name="crystal-transfer",
    help="Resumable, chunked replication of block trace records.",
    no_args_is_help=True,
)

SETTINGS_OPTION = typer.Option(
    None,
    "--settings",
    "-s",
    help="Path to settings YAML file (defaults and CRYSTAL_TRANSFER_* env vars apply without one).",
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"crystal-transfer version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(f"Error: .env file not found: {env_file}", fg=typer.colors.RED, err=True)
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(False, "--no-dotenv", help="Skip loading .env file."),
    env_file: Path | None = typer.Option(None, "--env-file", help="Path to .env file (skips automatic search)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Output structured JSON logs."),
) -> None:
    """Resumable, chunked replication of block trace records."""
    from crystal_transfer.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "INFO")

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho("Warning: --env-file ignored because --no-dotenv is set.", fg=typer.colors.YELLOW, err=True)


def _load_config(settings: Path | None) -> TransferSettings:
    """Load settings, turning every failure into a readable exit."""
    try:
        return load_settings(settings.expanduser() if settings is not None else None)
    except FileNotFoundError:
        typer.echo(f"Error: Settings file not found: {settings}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None


def _fail(error: Exception) -> typer.Exit:
    typer.secho(f"Error: {error}", fg=typer.colors.RED, err=True)
    return typer.Exit(1)


@app.command()
def run(
    settings: Path | None = SETTINGS_OPTION,
    chunk_size: int | None = typer.Option(
        None,
        "--chunk-size",
        "-c",
        min=1,
        help="Blocks per chunk (overrides settings).",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Fetch and assemble from the source only; write nothing.",
    ),
) -> None:
    """Copy block traces from source to destination, resuming where the destination left off."""
    from crystal_transfer.contracts.sink import ReplicationSink
    from crystal_transfer.core.store import CursorResolver, TraceFetcher, TraceStoreDB
    from crystal_transfer.engine import RetryConfig, RetryManager, TransferOrchestrator
    from crystal_transfer.plugins.sinks import NullSink, TraceTableSink

    config = _load_config(settings)
    effective_chunk_size = chunk_size if chunk_size is not None else config.chunk_size

    try:
        with TraceStoreDB.from_settings(config.source) as source_db:
            sink: ReplicationSink
            if dry_run:
                sink = NullSink()
            else:
                sink = TraceTableSink(TraceStoreDB.from_settings(config.destination, create_tables=True))
            try:
                orchestrator = TransferOrchestrator(
                    fetcher=TraceFetcher(source_db),
                    source_cursor=CursorResolver(source_db),
                    sink=sink,
                    chunk_size=effective_chunk_size,
                    retry_manager=RetryManager(RetryConfig.from_settings(config.retry)),
                )
                summary = orchestrator.run()
            finally:
                sink.close()
    except TransferError as e:
        raise _fail(e) from None

    typer.echo(f"Blocks {summary.start_block}..{summary.target_block}: {summary.chunk_count} chunks")
    typer.echo(f"  Fetched: {summary.blocks_fetched}")
    typer.echo(f"  Written: {summary.blocks_written}")
    typer.echo(f"  Skipped: {summary.blocks_skipped}")


@app.command()
def status(settings: Path | None = SETTINGS_OPTION) -> None:
    """Show the source target block and the destination resume cursor."""
    from crystal_transfer.core.store import MAX_BLOCK_NUMBER, CursorResolver, TraceStoreDB

    config = _load_config(settings)
    try:
        with TraceStoreDB.from_settings(config.source) as source_db:
            target = CursorResolver(source_db).max_block_number()
        with TraceStoreDB.from_settings(config.destination) as destination_db:
            initialized = destination_db.has_trace_table()
            cursor = CursorResolver(destination_db).next_block_number(0, MAX_BLOCK_NUMBER) if initialized else 0
    except TransferError as e:
        raise _fail(e) from None

    typer.echo(f"Source target block: {target}")
    if initialized:
        typer.echo(f"Destination next block: {cursor}")
    else:
        typer.echo(f"Destination next block: {cursor} (not initialized; run creates the trace table)")
    typer.echo(f"Remaining: {max(0, target - cursor)}")


@app.command()
def show(
    block_number: int = typer.Argument(..., min=0, help="Block number to fetch from the source."),
    settings: Path | None = SETTINGS_OPTION,
) -> None:
    """Print the assembled traces for one block number as JSON."""
    from crystal_transfer.core.store import TraceFetcher, TraceStoreDB

    config = _load_config(settings)
    try:
        with TraceStoreDB.from_settings(config.source) as source_db:
            aggregates = TraceFetcher(source_db).fetch_one(block_number)
    except TransferError as e:
        raise _fail(e) from None

    typer.echo(json.dumps([aggregate.to_dict() for aggregate in aggregates], indent=2))


@app.command()
def exists(
    block_hash: str = typer.Argument(..., help="Block hash as plain hex (no 0x prefix)."),
    settings: Path | None = SETTINGS_OPTION,
    source: bool = typer.Option(False, "--source", help="Check the source instead of the destination."),
) -> None:
    """Check whether a block hash is already stored (prints present or absent)."""
    from crystal_transfer.core.hashes import decode_hash
    from crystal_transfer.core.store import IdempotencyCheck, TraceStoreDB

    config = _load_config(settings)
    try:
        # Fail on malformed hex before connecting anywhere
        decode_hash(block_hash)
        store_settings = config.source if source else config.destination
        with TraceStoreDB.from_settings(store_settings) as db:
            found = IdempotencyCheck(db).exists(block_hash)
    except TransferError as e:
        raise _fail(e) from None

    typer.echo("present" if found else "absent")


@app.command()
def methods() -> None:
    """List the canonical storage method names."""
    for name in StorageMethod.names():
        typer.echo(name)
