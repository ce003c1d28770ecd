"""Command-line interface for Cloud SQL Scheduler.

Lets operators start or stop instances, or replay a Pub/Sub payload, with
the same dispatcher the Cloud Function uses.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import SchedulerConfig, load_config
from .dispatcher import ActionDispatcher
from .exceptions import InstancePatchError, SchedulerError
from .logging_setup import configure_logging
from .models import Action, DispatchResult

app = typer.Typer(
    name="cloudsql-scheduler",
    help="Cloud SQL Scheduler - start/stop Cloud SQL instances",
    rich_markup_mode="rich",
)
console = Console()

# Admin API client factory; None uses Application Default Credentials
client_factory = None


def _resolve_config(
    env: str | None, config_path: Path | None, dry_run: bool | None = None
) -> SchedulerConfig:
    if env is not None:
        config = load_config(env, config_path)
    elif config_path is not None:
        # Environment comes from the file or its name
        config = SchedulerConfig.from_yaml(config_path)
    else:
        config = SchedulerConfig.from_env()
    if dry_run is not None:
        config = config.model_copy(update={"dry_run": dry_run})
    return config


def _run(
    payload: bytes, env: str | None, config_path: Path | None, dry_run: bool | None
) -> None:
    try:
        config = _resolve_config(env, config_path, dry_run)
        configure_logging(config)
        dispatcher = ActionDispatcher(config, client_factory=client_factory)
        result = dispatcher.handle(payload)
    except InstancePatchError as e:
        target = escape(f"{e.project}/{e.instance}")
        console.print(f"[bold red]❌ Patch failed for {target}: {escape(str(e))}[/bold red]")
        if e.succeeded:
            console.print(f"Already patched: {', '.join(e.succeeded)}")
        sys.exit(1)
    except SchedulerError as e:
        console.print(f"[bold red]❌ Dispatch failed: {escape(str(e))}[/bold red]")
        sys.exit(1)

    _display_result(result)


def _action_payload(action: Action, instances: str, project: str) -> bytes:
    return json.dumps(
        {"Instance": instances, "Project": project, "Action": action.value}
    ).encode("utf-8")


@app.command()
def start(
    instances: str = typer.Argument(..., help="Comma-separated instance names"),
    project: str = typer.Option("", help="Google Cloud project ID"),
    env: str | None = typer.Option(None, help="Environment (dev/staging/prod)"),
    config_path: Path | None = typer.Option(None, help="Custom config file path"),
    dry_run: bool | None = typer.Option(
        None, "--dry-run/--no-dry-run", help="Override the configured dry-run setting"
    ),
) -> None:
    """Start instances (activationPolicy=ALWAYS)."""
    console.print(f"[bold blue]▶️  Starting {instances}...[/bold blue]")
    _run(_action_payload(Action.START, instances, project), env, config_path, dry_run)


@app.command()
def stop(
    instances: str = typer.Argument(..., help="Comma-separated instance names"),
    project: str = typer.Option("", help="Google Cloud project ID"),
    env: str | None = typer.Option(None, help="Environment (dev/staging/prod)"),
    config_path: Path | None = typer.Option(None, help="Custom config file path"),
    dry_run: bool | None = typer.Option(
        None, "--dry-run/--no-dry-run", help="Override the configured dry-run setting"
    ),
) -> None:
    """Stop instances (activationPolicy=NEVER)."""
    console.print(f"[bold blue]⏹️  Stopping {instances}...[/bold blue]")
    _run(_action_payload(Action.STOP, instances, project), env, config_path, dry_run)


@app.command()
def dispatch(
    payload: str | None = typer.Argument(None, help="Raw JSON message payload"),
    file: Path | None = typer.Option(None, "--file", help="Read the payload from a file"),
    env: str | None = typer.Option(None, help="Environment (dev/staging/prod)"),
    config_path: Path | None = typer.Option(None, help="Custom config file path"),
    dry_run: bool | None = typer.Option(
        None, "--dry-run/--no-dry-run", help="Override the configured dry-run setting"
    ),
) -> None:
    """Replay a Pub/Sub message payload through the dispatcher."""
    if file is not None:
        raw = file.read_bytes()
    elif payload is not None:
        raw = payload.encode("utf-8")
    else:
        console.print("[bold red]❌ Provide a payload or --file[/bold red]")
        sys.exit(2)

    _run(raw, env, config_path, dry_run)


@app.command("show-config")
def show_config(
    env: str | None = typer.Option(None, help="Environment (dev/staging/prod)"),
    config_path: Path | None = typer.Option(None, help="Custom config file path"),
) -> None:
    """Show the effective configuration."""
    try:
        config = _resolve_config(env, config_path)
    except SchedulerError as e:
        console.print(f"[bold red]❌ Could not load config: {escape(str(e))}[/bold red]")
        sys.exit(1)

    table = Table(title="Scheduler Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    for key, value in config.model_dump().items():
        table.add_row(key, str(value))
    console.print(table)


def _display_result(result: DispatchResult) -> None:
    """Display patched instances table."""
    title = "Patched Instances (dry run)" if result.dry_run else "Patched Instances"
    table = Table(title=title)
    table.add_column("Project", style="cyan")
    table.add_column("Instance", style="green")
    table.add_column("Activation Policy", style="yellow")
    table.add_column("Operation", style="blue")

    for instance, response in result.responses:
        table.add_row(
            result.project,
            instance,
            result.policy.value,
            str(response.get("name") or response.get("status", "N/A")),
        )

    console.print(table)
    console.print("[bold green]✅ Done![/bold green]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
