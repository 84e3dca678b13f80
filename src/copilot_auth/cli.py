"""Command-line interface for the Copilot auth service.

This module provides the CLI commands for running and managing
the auth service.
"""

import asyncio

import click
from sqlalchemy.engine import make_url

from copilot_auth import __version__
from copilot_auth.core.config import get_settings
from copilot_auth.core.logging import configure_logging, get_logger


@click.group()
@click.version_option(version=__version__, prog_name="copilot-auth")
def cli() -> None:
    """Livestream Copilot authentication and session service.

    Settings are read from COPILOT_AUTH_* environment variables or a .env file.
    """


@cli.command()
@click.option("--host", type=str, default=None, help="Host to bind to (overrides config)")
@click.option("--port", type=int, default=None, help="Port to bind to (overrides config)")
@click.option(
    "--workers",
    type=int,
    default=None,
    help="Number of worker processes (overrides config)",
)
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload for development")
def serve(host: str | None, port: int | None, workers: int | None, reload: bool) -> None:
    """Start the auth server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = workers or settings.workers

    configure_logging(settings)
    logger = get_logger(__name__)
    logger.info(
        "Starting auth server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "copilot_auth.infrastructure.api.app:create_app",
        factory=True,
        host=bind_host,
        port=bind_port,
        workers=1 if reload else bind_workers,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command("init-db")
@click.option("--force", is_flag=True, help="Skip confirmation prompt")
def init_db(force: bool) -> None:
    """Create all database tables."""
    from copilot_auth.infrastructure.persistence.database import DatabaseManager

    settings = get_settings()
    configure_logging(settings)

    if not force:
        click.confirm("This will create all database tables. Continue?", abort=True, default=False)

    async def initialize() -> None:
        db = DatabaseManager(settings)
        try:
            await db.create_tables()
            click.echo("Database initialized successfully.")
        finally:
            await db.disconnect()

    asyncio.run(initialize())


@cli.command("generate-api-key")
@click.option(
    "--env",
    "environment",
    type=click.Choice(["live", "test"]),
    default=None,
    help="Key environment (overrides config)",
)
def generate_api_key(environment: str | None) -> None:
    """Generate an API key and print it with its storage hash.

    The plaintext key is shown once. Store only the hash.
    """
    from copilot_auth.infrastructure.auth import APIKeyService

    settings = get_settings()
    if environment:
        settings = settings.model_copy(update={"api_key_env": environment})

    generated = APIKeyService(settings).generate_api_key()
    click.echo(f"API key:  {generated.key}")
    click.echo(f"Prefix:   {generated.prefix}")
    click.echo(f"SHA-256:  {generated.key_hash}")
    click.echo("Store the hash; the key cannot be shown again.")

@cli.command()
def info() -> None:
    """Display non-secret configuration."""
    settings = get_settings()
    database_url = make_url(settings.database_url).render_as_string(hide_password=True)

    click.echo(f"""
{settings.app_name} v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  API Prefix:   {settings.api_prefix}
  App URL:      {settings.app_url}

Server:
  Host:         {settings.host}
  Port:         {settings.port}
  Workers:      {settings.workers}

Database:
  URL:          {database_url}

Tokens:
  Access:       {settings.jwt_access_expiry} seconds
  Refresh:      {settings.jwt_refresh_expiry} seconds
  Rotation:     {settings.refresh_token_rotation}
  API key env:  {settings.api_key_env}

Email:
  Provider:     {settings.email_provider}

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
