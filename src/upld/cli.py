"""CLI for upld.

Commands:
    serve                  - Run the HTTP service
    init-db                - Create the content store tables
    put <path|->           - Upload a file (or stdin) and print its URL
    get <identifier>       - Write a paste to stdout
    stats                  - Show upload counter and recent uploads
    purge-expired          - Drop expired pastes from the content store
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from upld.app import Services, build_services
from upld.config import settings
from upld.errors import UpldError

app = typer.Typer(
    name="upld",
    help="upld — content-addressed command line pastebin",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def run_async(coro):
    """Run an async coroutine in sync context."""
    return asyncio.run(coro)


def get_services() -> Services:
    """Services wired to the configured storage tiers."""
    return build_services(settings)


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log at debug level")
    ] = False,
):
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=True)],
    )


@app.command()
def serve(
    host: Annotated[str, typer.Option("--host", "-H", help="Bind address")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", "-p", help="Bind port")] = 8000,
):
    """Run the HTTP service."""
    import uvicorn

    uvicorn.run("upld.app:app", host=host, port=port, log_level=settings.log_level.lower())


@app.command("init-db")
def init_db_command():
    """Create the content store tables."""
    if settings.content_store != "sql":
        console.print("[yellow]Content store is not SQL; nothing to initialize.[/yellow]")
        raise typer.Exit(0)

    from upld.db import init_db

    run_async(init_db())
    console.print("[green]Database initialized.[/green]")


@app.command()
def put(
    path: Annotated[str, typer.Argument(help="File to upload, or - for stdin")],
    host: Annotated[
        str, typer.Option("--host", help="Host to build the returned URL with")
    ] = "localhost",
    name: Annotated[
        str | None, typer.Option("--name", "-n", help="Filename to append to the URL")
    ] = None,
):
    """Upload a file and print the URL it can be fetched from."""
    if path == "-":
        content = typer.get_binary_stream("stdin").read()
    else:
        file_path = Path(path)
        if not file_path.is_file():
            err_console.print(f"[red]Error:[/red] Path does not exist: {path}")
            raise typer.Exit(1)
        content = file_path.read_bytes()
        name = name or file_path.name

    async def _put():
        return await get_services().uploads.handle_upload(content, host, filename=name)

    try:
        result = run_async(_put())
    except UpldError as e:
        err_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e

    if not result.created:
        err_console.print("[yellow]Already stored[/yellow]")
    typer.echo(result.location)


@app.command()
def get(
    identifier: Annotated[str, typer.Argument(help="Paste identifier")],
):
    """Write a paste's content to stdout."""
    async def _get():
        return await get_services().retrievals.handle_retrieve(identifier)

    try:
        result = run_async(_get())
    except UpldError as e:
        err_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e

    stdout = typer.get_binary_stream("stdout")
    stdout.write(result.content)
    stdout.flush()


@app.command()
def stats(
    recent: Annotated[
        int, typer.Option("--recent", "-r", help="Number of recent uploads to list")
    ] = 10,
):
    """Show the all-time upload count and the most recent uploads."""
    async def _stats():
        tracker = get_services().stats
        return await tracker.current_count(), await tracker.history(limit=recent)

    count, history = run_async(_stats())
    console.print(f"[bold]All time uploads:[/bold] {count}")

    if not history:
        return

    table = Table(title="Recent uploads")
    table.add_column("Identifier")
    table.add_column("Uploaded (UTC)")
    for identifier, uploaded_at in reversed(history):
        table.add_row(identifier, uploaded_at.strftime("%Y-%m-%d %H:%M:%S"))
    console.print(table)


@app.command("purge-expired")
def purge_expired():
    """Drop expired pastes from the content store."""
    removed = run_async(get_services().store.purge_expired())
    console.print(f"Removed {removed} expired entries")


if __name__ == "__main__":
    app()
