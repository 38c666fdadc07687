"""VN Admin CLI using Typer."""

import typer

from vn_admin.core.settings import get_settings, load_env_file

# Load .env file from current directory or project root before anything reads the environment
load_env_file()

from vn_admin.cli.ingest import ingest_app  # noqa: E402

app = typer.Typer(
    name="vn-admin",
    help="VN Admin - Vietnamese provinces and administrative units API",
    add_completion=False,
)
app.add_typer(ingest_app, name="ingest")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(8080, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(
        False, "--reload", "-r", help="Enable auto-reload for development"
    ),
    log_file: str = typer.Option("logs/server.log", "--log-file", help="Log file path"),
) -> None:
    """Start the API server."""
    import uvicorn

    from vn_admin.core.logging import configure_logging

    settings = get_settings()
    configure_logging(settings.log_file or log_file, settings.debug)

    typer.echo(f"Starting VN Admin API on http://{host}:{port}")
    typer.echo("Press Ctrl+C to stop the server")
    typer.echo("")

    uvicorn.run(
        "vn_admin.web.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_config=None,
        timeout_keep_alive=60,
        timeout_graceful_shutdown=10,
    )


@app.command()
def init_db() -> None:
    """Initialize the database (create tables)."""
    from vn_admin.db.engine import init_db as db_init

    typer.echo("Initializing database...")
    db_init()
    typer.echo("Database initialized successfully!")


@app.command()
def cache_ping() -> None:
    """Check which cache backend the server would use."""
    from vn_admin.cache import create_cache
    from vn_admin.core.errors import CacheError

    settings = get_settings()
    cache = create_cache(settings)
    try:
        cache.ping()
    except CacheError as e:
        typer.echo(f"Cache backend '{cache.backend_name}' is not healthy: {e}")
        raise typer.Exit(1)
    finally:
        cache.close()

    typer.echo(f"Cache backend: {cache.backend_name} (ttl {settings.cache_ttl:g}s)")


@app.command()
def stats() -> None:
    """Show how many provinces and units are stored."""
    from vn_admin.db.engine import get_session
    from vn_admin.db.engine import init_db as db_init
    from vn_admin.db.repositories import AdminRepository

    db_init()
    with get_session() as session:
        repo = AdminRepository(session)
        typer.echo(f"Provinces: {repo.count_provinces()}")
        typer.echo(f"Units: {repo.count_units()}")


@app.command()
def version() -> None:
    """Show the VN Admin version."""
    from vn_admin import __version__

    typer.echo(f"VN Admin v{__version__}")


if __name__ == "__main__":
    app()
