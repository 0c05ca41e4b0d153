"""Command line entry point: parse the startup flags and run the server."""

from typing import Optional

import typer
import uvicorn
from pydantic import ValidationError

from notecache.config import load_settings
from notecache.main import create_app, setup_logging

app = typer.Typer(
    name="notecache",
    help="NoteCache - plain-text note server backed by a directory of files",
    add_completion=False,
)


def _missing(label: str, flag: str) -> None:
    typer.echo(
        f"Error: {label} parameter is missing. Please specify the --{flag} parameter.",
        err=True,
    )
    raise typer.Exit(code=1)


@app.command()
def serve(
    host: Optional[str] = typer.Option(
        None, "--host", "-h", envvar="NOTECACHE_HOST", help="Server address"
    ),
    port: Optional[int] = typer.Option(
        None, "--port", "-p", envvar="NOTECACHE_PORT", help="Server port"
    ),
    cache: Optional[str] = typer.Option(
        None, "--cache", "-c", envvar="NOTECACHE_CACHE_DIR", help="Cache directory"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", envvar="NOTECACHE_LOG_LEVEL", help="Logging level"
    ),
):
    """Start the note server on HOST:PORT, storing notes under CACHE."""
    if not host:
        _missing("Host", "host")
    if port is None:
        _missing("Port", "port")
    if not cache:
        _missing("Cache", "cache")

    try:
        settings = load_settings(host=host, port=port, cache_dir=cache, log_level=log_level)
    except ValidationError as e:
        typer.echo(f"Error: invalid configuration:\n{e}", err=True)
        raise typer.Exit(code=1)

    setup_logging(settings.log_level)

    try:
        application = create_app(settings)
    except OSError as e:
        typer.echo(f"Error: cannot create cache directory {cache}: {e}", err=True)
        raise typer.Exit(code=1)

    uvicorn.run(
        application,
        host=settings.host,
        port=settings.port,
        log_config=None,
        access_log=False,
    )


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
