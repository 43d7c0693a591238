"""Command line interface for live-browser-agent."""

from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path
from typing import Annotated, Any, Optional

import typer

from .config import load_config

app = typer.Typer(help="Live Browser Agent entry point")


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Configure logging before executing any command."""

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@app.command()
def version() -> None:
    """Print the package version."""

    try:
        typer.echo(get_version("live-browser-agent"))
    except PackageNotFoundError:  # pragma: no cover - when running from source tree
        typer.echo("0.0.0")


@app.command()
def serve(
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to YAML configuration."),
    ] = None,
    env_file: Annotated[
        Optional[Path],
        typer.Option(
            "--env-file",
            help="Path to an .env file with default configuration values.",
        ),
    ] = None,
    host: Annotated[
        Optional[str],
        typer.Option("--host", help="Binding address for the WebSocket server."),
    ] = None,
    port: Annotated[
        Optional[int],
        typer.Option("--port", help="Port for the WebSocket server."),
    ] = None,
    llm_provider: Annotated[
        Optional[str],
        typer.Option("--llm-provider", help="LLM provider to use."),
    ] = None,
    model: Annotated[
        Optional[str],
        typer.Option("--model", help="LLM model identifier."),
    ] = None,
    api_key: Annotated[
        Optional[str],
        typer.Option("--api-key", help="API key for the LLM provider."),
    ] = None,
    headless: Annotated[
        Optional[bool],
        typer.Option("--headless/--headed", help="Run the browser in headless mode (or headed)."),
    ] = None,
    max_steps: Annotated[
        Optional[int],
        typer.Option("--max-steps", help="Maximum agent actions per instruction."),
    ] = None,
) -> None:
    """Serve the agent WebSocket endpoint."""

    import uvicorn

    from .server.app import create_app

    overrides: dict[str, Any] = {}
    if host is not None:
        overrides["host"] = host
    if port is not None:
        overrides["port"] = port
    if any([llm_provider, model, api_key]):
        overrides.setdefault("llm", {})
        if llm_provider:
            overrides["llm"]["provider"] = llm_provider
        if model:
            overrides["llm"]["model"] = model
        if api_key:
            overrides["llm"]["api_key"] = api_key
    if headless is not None:
        overrides["browser"] = {"headless": headless}
    if max_steps is not None:
        overrides["agent"] = {"max_steps": max_steps}

    config = load_config(config_path, env_file=env_file, **overrides)
    typer.echo(f"Serving on ws://{config.host}:{config.port}/ws (LLM provider: {config.llm.provider})")
    uvicorn.run(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    app()
