from __future__ import annotations

import json
import os
from typing import Optional

import typer
from dotenv import load_dotenv

app = typer.Typer(help="Personal finance API CLI")


def _check_runtime() -> None:
    try:
        import sqlalchemy  # noqa: F401
    except ImportError as e:
        typer.echo(
            "Runtime dependency error: SQLAlchemy failed to import.\n"
            "Create a venv and install the project:\n"
            "  python -m venv .venv\n"
            "  source .venv/bin/activate\n"
            "  pip install -e .\n\n"
            f"Original error: {type(e).__name__}: {e}",
            err=True,
        )
        raise typer.Exit(code=1)


@app.command("init-db")
def init_db_cmd():
    """Create tables and seed the global default categories."""
    load_dotenv()
    _check_runtime()
    from src.db.init_db import init_db
    from src.db.session import get_database_url

    init_db()
    typer.echo(f"Initialized database at {get_database_url()}")


@app.command("settings")
def settings_cmd():
    """Print the effective configuration (secrets masked)."""
    load_dotenv()
    from src.finance.config import load_settings

    data = load_settings().model_dump()
    if data.get("jwt_secret"):
        data["jwt_secret"] = "***"
    typer.echo(json.dumps(data, indent=2))


@app.command("serve")
def serve_cmd(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: Optional[int] = typer.Option(None, help="Defaults to PORT or 8080"),
    reload: bool = typer.Option(False, help="Auto-reload on code changes"),
):
    """Run the REST API."""
    load_dotenv()
    _check_runtime()
    import uvicorn

    from src.finance.config import load_settings

    settings = load_settings()
    uvicorn.run("src.app.main:app", host=host, port=port or settings.port, reload=reload)


@app.command("client")
def client_cmd(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: Optional[int] = typer.Option(None, help="Defaults to CLIENT_PORT or 3000"),
    mock: bool = typer.Option(False, help="Serve sample data instead of calling the API"),
):
    """Run the dashboard web client."""
    load_dotenv()
    import uvicorn

    from src.client.web import create_client_app, default_provider_factory

    env = dict(os.environ)
    if mock:
        env["FINANCE_CLIENT_MOCK"] = "1"
    app_ = create_client_app(default_provider_factory(env))
    uvicorn.run(app_, host=host, port=port or int(os.environ.get("CLIENT_PORT") or 3000))


if __name__ == "__main__":
    app()
