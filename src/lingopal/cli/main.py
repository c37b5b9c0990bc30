"""LingoPal CLI — run the API server and manage the database.

Usage:
    lingopal serve                  # Validate config, check DB, start uvicorn
    lingopal serve --port 8080      # Override LINGOPAL_PORT
    lingopal migrate                # alembic upgrade head
    lingopal check-config           # Print the (redacted) effective config

Every command exits 1 when required configuration is missing, before
anything else happens.
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from lingopal import __version__
from lingopal.config import Settings, load_settings

MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "db" / "migrations"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _settings_or_exit() -> Settings:
    """Load settings; on failure list each bad variable and exit 1."""
    try:
        return load_settings()
    except ValidationError as e:
        click.secho("Configuration error:", fg="red", bold=True, err=True)
        for err in e.errors():
            field = ".".join(str(p) for p in err["loc"])
            env_name = f"LINGOPAL_{field.upper()}"
            click.secho(f"  {env_name}: {err['msg']}", fg="red", err=True)
        click.echo(
            "Set the variables above in the environment or in a .env file.",
            err=True,
        )
        sys.exit(1)


async def _check_database(settings: Settings) -> Optional[str]:
    """Return None if the database answers, else the error message."""
    from lingopal.db.engine import build_engine, check_connection

    engine = build_engine(settings)
    try:
        await check_connection(engine)
        return None
    except Exception as e:
        return str(e)
    finally:
        await engine.dispose()


def _alembic_config(settings: Settings):
    from alembic.config import Config

    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    cfg.set_main_option("sqlalchemy.url", settings.database_url)
    return cfg


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="lingopal")
def main():
    """LingoPal — English speaking practice backend."""


@main.command()
@click.option("--host", help="Bind address (default: LINGOPAL_HOST)")
@click.option("--port", type=int, help="Port (default: LINGOPAL_PORT, 5000)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes (dev only)")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Start the API server."""
    settings = _settings_or_exit()

    error = asyncio.run(_check_database(settings))
    if error:
        click.secho(f"Cannot connect to the database: {error}", fg="red", err=True)
        sys.exit(1)
    click.secho("Database connection verified.", fg="green")

    import uvicorn

    uvicorn.run(
        "lingopal.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command()
@click.option("--revision", default="head", show_default=True, help="Target revision")
def migrate(revision: str):
    """Apply database migrations."""
    settings = _settings_or_exit()

    from alembic import command

    command.upgrade(_alembic_config(settings), revision)
    click.secho(f"Database upgraded to {revision}.", fg="green")


@main.command("check-config")
def check_config():
    """Validate configuration and print it with secrets masked."""
    settings = _settings_or_exit()
    click.echo(json.dumps(settings.redacted(), indent=2, default=str))
    if settings.frontend_url_is_default:
        click.secho(
            "Warning: LINGOPAL_FRONTEND_URL is not set; reset links will point "
            f"at {settings.frontend_url}.",
            fg="yellow",
        )
