from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

import typer
from rich import box
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .core.config import AppConfig, ConfigLoadResult, load_config
from .core.console import console, setup_logging
from .mcp.server import create_server

app = typer.Typer(help="hello-mcp: a Model Context Protocol server for greetings.")
logger = logging.getLogger(__name__)


@dataclass
class AppState:
    config: AppConfig
    config_meta: ConfigLoadResult
    logger: logging.Logger


@app.callback()
def main(
    ctx: typer.Context,
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to a hello-mcp config file (TOML or JSON)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    # load_config never raises; a broken file yields defaults plus meta.error
    loaded_config, meta = load_config(config_path=config)
    app_logger = setup_logging(level=loaded_config.log_level, verbose=verbose)

    ctx.obj = AppState(config=loaded_config, config_meta=meta, logger=app_logger)

    if meta.error:
        # Safe mode goes to the log (stderr) so it never corrupts the stdio transport.
        app_logger.error(
            "Configuration error in %s, using defaults (safe mode): %s", meta.path, meta.error
        )
    else:
        app_logger.debug(
            "Loaded configuration from %s (env overrides: %s)",
            meta.path,
            sorted(meta.env_overrides),
        )


@app.command("serve")
def serve(
    ctx: typer.Context,
    host: str | None = typer.Option(None, "--host", help="Interface to bind."),
    port: int | None = typer.Option(None, "--port", "-p", help="TCP port to listen on."),
) -> None:
    """Serve MCP over HTTP (POST /mcp)."""
    from .transports.http import serve_http

    state: AppState = ctx.obj
    updates: dict[str, object] = {}
    if host is not None:
        updates["host"] = host
    if port is not None:
        updates["port"] = port
    config = state.config
    if updates:
        config = config.model_copy(update={"http": config.http.model_copy(update=updates)})

    serve_http(create_server(config), config)


@app.command("stdio")
def stdio(ctx: typer.Context) -> None:
    """Serve MCP over stdin/stdout."""
    from .transports.stdio import serve_stdio

    state: AppState = ctx.obj
    server = create_server(state.config)
    try:
        asyncio.run(serve_stdio(server))
    except KeyboardInterrupt:
        state.logger.info("Interrupted, shutting down")


@app.command("capabilities")
def capabilities(ctx: typer.Context) -> None:
    """List the registered tools and resources."""
    state: AppState = ctx.obj
    server = create_server(state.config)

    tools = Table(title="Tools", box=box.SIMPLE_HEAVY, expand=True)
    tools.add_column("Name", style="cyan", no_wrap=True)
    tools.add_column("Arguments", style="magenta")
    tools.add_column("Description", style="white")
    for action in server.registry.list_actions():
        shape = action.input_shape
        arguments = ", ".join(shape.fields) if shape is not None else "-"
        tools.add_row(action.name, arguments, action.description)

    resources = Table(title="Resources", box=box.SIMPLE_HEAVY, expand=True)
    resources.add_column("Name", style="cyan", no_wrap=True)
    resources.add_column("URI", style="magenta")
    resources.add_column("Type", style="green")
    resources.add_column("Description", style="white")
    for resource in server.registry.list_resources():
        resources.add_row(resource.name, resource.uri, resource.media_type, resource.description)

    console.print(tools)
    console.print(resources)


@app.command("config")
def show_config(ctx: typer.Context) -> None:
    """Show the active configuration and where it came from."""
    state: AppState = ctx.obj
    config = state.config
    meta = state.config_meta

    table = Table(title="Config", box=box.SIMPLE, expand=True)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    for key, value in config.model_dump().items():
        table.add_row(key, str(value))

    console.print(table)

    meta_lines = [
        f"Path: {meta.path}",
        "File loaded: yes" if meta.file_loaded else "File loaded: no (using defaults + env)",
    ]

    if meta.env_overrides:
        meta_lines.append("Env overrides: " + ", ".join(sorted(meta.env_overrides)))
    if meta.error:
        meta_lines.append(f"Error: {meta.error}")

    console.print(Panel("\n".join(meta_lines), title="Config source", box=box.SIMPLE))


@app.command("version")
def show_version() -> None:
    """Print the hello-mcp version."""
    console.print(__version__)


def cli() -> None:
    app()


if __name__ == "__main__":
    cli()
