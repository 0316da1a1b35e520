# === NAVMAP v1 ===
# {
#   "module": "ResilientHTTP.cli",
#   "purpose": "Typer CLI exposing the resilient client and the dad joke demo.",
#   "sections": [
#     {"id": "clicontext", "name": "CliContext", "anchor": "class-clicontext", "kind": "class"},
#     {"id": "get-context", "name": "get_context", "anchor": "function-get-context", "kind": "function"},
#     {"id": "main", "name": "main", "anchor": "function-main", "kind": "function"},
#     {"id": "joke", "name": "joke", "anchor": "function-joke", "kind": "function"},
#     {"id": "get", "name": "get", "anchor": "function-get", "kind": "function"},
#     {"id": "config-show", "name": "config_show", "anchor": "function-config-show", "kind": "function"},
#     {"id": "config-schema", "name": "config_schema", "anchor": "function-config-schema", "kind": "function"}
#   ]
# }
# === /NAVMAP ===

"""Typer CLI for the resilient HTTP client.

Provides:
- Global options (--config, -v/-vv, --json-logs, --version)
- ``joke``: fetch a dad joke, falling back to a canned one on failure
- ``get``: run an arbitrary GET through the resilient pipeline
- ``config show`` / ``config schema``: inspect configuration

Example:
    $ rhttp joke
    $ rhttp -vv get https://httpbin.org/status/503 --max-attempts 2
    $ RHTTP_CLIENT__TIMEOUT_S=5 rhttp config show --format json
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import httpx
import typer
import yaml
from rich.console import Console
from rich.table import Table

from ResilientHTTP import __version__
from ResilientHTTP.config.loader import export_config_schema, load_config
from ResilientHTTP.config.models import AppConfig
from ResilientHTTP.DadJokes import JokeClient
from ResilientHTTP.errors import ConfigurationError
from ResilientHTTP.logging_config import setup_logging
from ResilientHTTP.network.client import create_resilient_client

_console = Console()


class CliContext:
    """Per-invocation state shared by all commands.

    Configuration is loaded lazily so that command-level overrides
    (``--timeout``, ``--max-attempts``) take part in the CLI layer of the
    file < environment < CLI precedence.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        verbosity: int = 0,
        json_logs: bool = False,
    ) -> None:
        self.config_path = config_path
        self.verbosity = verbosity
        self.json_logs = json_logs
        self.console = _console

    def load_settings(self, overrides: dict[str, Any] | None = None) -> AppConfig:
        """Load configuration and configure logging, exiting 2 when invalid."""
        try:
            settings = load_config(path=self.config_path, cli_overrides=overrides)
        except ConfigurationError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(2)

        level = settings.logging.level
        if self.verbosity >= 2:
            level = "DEBUG"
        elif self.verbosity == 1 and level not in ("DEBUG", "INFO"):
            level = "INFO"
        setup_logging(level, json_output=self.json_logs or settings.logging.json_output)
        return settings


app = typer.Typer(
    name="rhttp",
    help="Resilient HTTP client - retries, deadlines, and status validation",
    no_args_is_help=True,
)
config_app = typer.Typer(help="Inspect configuration", no_args_is_help=True)
app.add_typer(config_app, name="config")

_context: CliContext | None = None


def get_context() -> CliContext:
    """Return the current CLI context.

    Raises:
        RuntimeError: If the callback has not run yet
    """
    if _context is None:
        raise RuntimeError("CLI context not initialized")
    return _context


def _client_overrides(timeout: float | None, max_attempts: int | None) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if timeout is not None:
        overrides["client.timeout_s"] = timeout
    if max_attempts is not None:
        overrides["client.retry.max_attempts"] = max_attempts
    return overrides


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"rhttp {__version__}")
        raise typer.Exit(0)


@app.callback()
def main(
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        envvar="RHTTP_CONFIG",
        help="Path to config file (YAML or JSON)",
    ),
    verbosity: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v for INFO, -vv for DEBUG)",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Emit log records as JSON lines on stderr",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Resilient HTTP client.

    Global options go before the subcommand:

        rhttp -c settings.yaml -vv joke
    """
    global _context

    _context = CliContext(config_path=config, verbosity=verbosity, json_logs=json_logs)


@app.command()
def joke(
    timeout: float | None = typer.Option(
        None, "--timeout", "-t", min=0.001, help="Deadline for the request (seconds)"
    ),
    max_attempts: int | None = typer.Option(
        None, "--max-attempts", "-n", min=1, help="Total attempts including the first"
    ),
) -> None:
    """Print a dad joke, or the fallback joke when none can be fetched.

    Example:
        $ rhttp joke --timeout 5
    """
    ctx = get_context()
    settings = ctx.load_settings(_client_overrides(timeout, max_attempts))

    async def _run():
        async with create_resilient_client(settings.client) as client:
            return await JokeClient(client, settings.jokes).fetch_or_fallback()

    result = asyncio.run(_run())
    if result.error:
        typer.echo(f"Warning: {result.error}", err=True)
    typer.echo(result.joke.joke)


@app.command()
def get(
    url: str = typer.Argument(..., help="URL to fetch"),
    timeout: float | None = typer.Option(
        None, "--timeout", "-t", min=0.001, help="Deadline for the request (seconds)"
    ),
    max_attempts: int | None = typer.Option(
        None, "--max-attempts", "-n", min=1, help="Total attempts including the first"
    ),
    header: list[str] = typer.Option(
        [], "--header", "-H", help="Extra request header, 'Name: value' (repeatable)"
    ),
) -> None:
    """GET a URL through the resilient pipeline and print status and body.

    Exits 1 when the call ends in a failure.

    Example:
        $ rhttp get https://icanhazdadjoke.com/ -H "Accept: text/plain"
    """
    ctx = get_context()
    settings = ctx.load_settings(_client_overrides(timeout, max_attempts))

    headers: dict[str, str] = {}
    for raw in header:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            typer.echo(f"Error: invalid header {raw!r}, expected 'Name: value'", err=True)
            raise typer.Exit(2)
        headers[name.strip()] = value.strip()

    async def _run():
        async with create_resilient_client(settings.client) as client:
            return await client.execute(httpx.Request("GET", url, headers=headers))

    result = asyncio.run(_run())
    if not isinstance(result, httpx.Response):
        typer.echo(f"Error: {result.description}", err=True)
        raise typer.Exit(1)

    typer.echo(f"HTTP {result.status_code} {result.reason_phrase}")
    typer.echo(result.text)


@config_app.command("show")
def config_show(
    format_output: str = typer.Option(
        "table", "--format", "-f", help="Output format: table, json, yaml"
    ),
) -> None:
    """Show the merged configuration (file < environment < defaults)."""
    ctx = get_context()
    settings = ctx.load_settings()
    data = settings.model_dump(mode="json")

    if format_output == "json":
        typer.echo(json.dumps(data, indent=2))
    elif format_output == "yaml":
        typer.echo(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))
    elif format_output == "table":
        table = Table(title=f"ResilientHTTP configuration ({settings.config_hash()[:8]})")
        table.add_column("Key", style="cyan")
        table.add_column("Value")
        for key, value in _flatten(data):
            table.add_row(key, json.dumps(value))
        ctx.console.print(table)
    else:
        typer.echo(f"Error: unknown format {format_output!r}; use table, json, or yaml", err=True)
        raise typer.Exit(2)


@config_app.command("schema")
def config_schema() -> None:
    """Print the JSON schema of the configuration file."""
    typer.echo(json.dumps(export_config_schema(), indent=2))


def _flatten(data: dict[str, Any], prefix: str = "") -> list[tuple[str, Any]]:
    rows: list[tuple[str, Any]] = []
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            rows.extend(_flatten(value, f"{dotted}."))
        else:
            rows.append((dotted, value))
    return rows


__all__ = ["app", "CliContext", "get_context", "main"]
