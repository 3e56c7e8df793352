"""Command line interface for proton-docs-mcp."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .config import ServerConfig, load_config
from .errors import OrchestratorError
from .factory import build_orchestrator
from .server import package_version, serve

app = typer.Typer(help="Proton Docs MCP server entry point")

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to YAML configuration."),
]
EnvFileOption = Annotated[
    Optional[Path],
    typer.Option("--env-file", help="Path to an .env file with default configuration values."),
]


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Configure logging before executing any command."""

    level = logging.DEBUG if verbose else logging.INFO
    # stdout carries the protocol stream
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


@app.command()
def version() -> None:
    """Print the package version."""

    typer.echo(package_version())


@app.command(name="serve")
def serve_command(
    config_path: ConfigOption = None,
    env_file: EnvFileOption = None,
    headless: Annotated[
        Optional[bool],
        typer.Option("--headless/--headed", help="Run the browser in headless mode (or headed)."),
    ] = None,
    profile_path: Annotated[
        Optional[Path],
        typer.Option("--profile-path", help="Browser user data directory to reuse between runs."),
    ] = None,
    base_url: Annotated[
        Optional[str],
        typer.Option("--base-url", help="Root URL of the document service."),
    ] = None,
    virtual_display: Annotated[
        Optional[bool],
        typer.Option(
            "--virtual-display/--no-virtual-display",
            help="Start an Xvfb display for the headed browser.",
        ),
    ] = None,
) -> None:
    """Serve the document tools over stdio."""

    overrides: dict[str, Any] = {}
    if headless is not None or profile_path is not None or virtual_display is not None:
        overrides.setdefault("browser", {})
        if headless is not None:
            overrides["browser"]["headless"] = headless
        if profile_path is not None:
            overrides["browser"]["profile_path"] = str(profile_path)
        if virtual_display is not None:
            overrides["browser"]["virtual_display"] = virtual_display
    if base_url is not None:
        overrides["editor"] = {"base_url": base_url}

    config = load_config(config_path, env_file=env_file, **overrides)
    asyncio.run(serve(config))


@app.command()
def tools(
    config_path: ConfigOption = None,
    env_file: EnvFileOption = None,
) -> None:
    """List the published tools."""

    config = load_config(config_path, env_file=env_file)
    orchestrator = build_orchestrator(config)
    table = Table(title=f"{config.server_name} tools")
    table.add_column("Tool", style="cyan")
    table.add_column("Arguments")
    table.add_column("Description")
    for operation in orchestrator.operations.values():
        schema = operation.arguments.model_json_schema(by_alias=True)
        required = set(schema.get("required", []))
        arguments = ", ".join(
            name if name in required else f"[{name}]" for name in schema.get("properties", {})
        )
        table.add_row(operation.name, arguments, operation.description)
    Console().print(table)


@app.command()
def call(
    tool: Annotated[str, typer.Argument(help="Tool name, e.g. list_documents.")],
    arguments: Annotated[
        str,
        typer.Option("--args", "-a", help="Tool arguments as a JSON object."),
    ] = "{}",
    config_path: ConfigOption = None,
    env_file: EnvFileOption = None,
) -> None:
    """Run one tool outside the protocol and print its JSON result."""

    try:
        parsed = json.loads(arguments)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"--args is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise typer.BadParameter("--args must be a JSON object")

    config = load_config(config_path, env_file=env_file)
    payload, ok = asyncio.run(_call(config, tool, parsed))
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
    if not ok:
        raise typer.Exit(code=1)


async def _call(
    config: ServerConfig, tool: str, arguments: dict[str, Any]
) -> tuple[dict[str, Any], bool]:
    orchestrator = build_orchestrator(config)
    try:
        result = await orchestrator.run(tool, arguments)
    except OrchestratorError as exc:
        return {"error": {"operation": tool, "code": exc.code, "message": exc.message}}, False
    except ValidationError as exc:
        return {
            "error": {
                "operation": tool,
                "code": "invalid_params",
                "message": str(exc),
            }
        }, False
    finally:
        await orchestrator.shutdown()
    return result.to_payload(), result.ok


if __name__ == "__main__":
    app()
