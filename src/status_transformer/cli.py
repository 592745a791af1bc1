"""status-transformer CLI for rendering and validating status transformations - Tyro implementation."""

import json
import logging
import sys
from builtins import print as builtin_print
from pathlib import Path
from typing import Annotated, Any

import attrs
import tyro
import yaml
from rich import print
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from status_transformer.config import get_config
from status_transformer.engine import EvaluationResult
from status_transformer.errors import ConfigurationError
from status_transformer.handler import StatusTransformerHandler
from status_transformer.input import StatusTransformation, load_input_file


# Subcommand definitions using attrs
@attrs.define
class Render:
    """Run the function against a RunFunctionRequest file and show the result."""

    request: Annotated[Path, tyro.conf.Positional]
    """YAML or JSON file holding the request (meta, input, observed, context)."""

    json: bool = False
    """Print the RunFunctionResponse as JSON."""


@attrs.define
class Validate:
    """Validate a StatusTransformation input file."""

    input: Annotated[Path, tyro.conf.Positional]
    """YAML or JSON file holding the StatusTransformation."""


# Type alias for all subcommands
Command = Annotated[Render, tyro.conf.subcommand(name="render")] | Annotated[
    Validate, tyro.conf.subcommand(name="validate")
]


def setup_logging(debug: bool = False) -> None:
    """Configure logging with 100-character text width."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s - %(name)-20s - %(levelname)-8s - %(message).100s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def load_request(path: Path) -> dict[str, Any]:
    """Load a RunFunctionRequest from a YAML or JSON file.

    Raises:
        ConfigurationError: If the file cannot be read or is not a mapping
    """
    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"cannot read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"cannot read {path}: expected a mapping, got {type(data).__name__}")
    return data


def handle_render(cmd: Render, debug: bool = False) -> None:
    """Handle the render subcommand."""
    try:
        request = load_request(cmd.request)
        config = get_config()
    except ConfigurationError as e:
        print(f"[red]Error: {e}[/red]", file=sys.stderr)
        sys.exit(1)

    if debug:
        config = config.model_copy(update={"debug": True})

    handler = StatusTransformerHandler(config)
    result = handler.evaluate_request(request)
    tag = (request.get("meta") or {}).get("tag", "")

    if cmd.json:
        builtin_print(json.dumps(handler.to_response(tag, result), indent=2))
    else:
        show_result(result)

    sys.exit(0 if result.succeeded else 1)


def show_result(result: EvaluationResult) -> None:
    """Print conditions and events as rich tables."""
    console = Console()

    conditions_table = Table(show_header=True, show_lines=True)
    conditions_table.add_column("Type", style="cyan")
    conditions_table.add_column("Status", style="yellow")
    conditions_table.add_column("Reason")
    conditions_table.add_column("Message")
    conditions_table.add_column("Target", style="dim")

    for condition in result.conditions:
        status_style = {"True": "green", "False": "red"}.get(condition.status.value, "yellow")
        conditions_table.add_row(
            condition.type,
            f"[{status_style}]{condition.status.value}[/{status_style}]",
            condition.reason,
            condition.message if condition.message is not None else "[dim]none[/dim]",
            condition.target.value,
        )

    console.print(Panel(conditions_table, title="[bold]Conditions[/bold]", border_style="blue"))

    if result.events:
        events_table = Table(show_header=True, show_lines=True)
        events_table.add_column("#", style="dim", width=3)
        events_table.add_column("Severity", style="yellow")
        events_table.add_column("Reason")
        events_table.add_column("Message")
        events_table.add_column("Target", style="dim")

        for i, event in enumerate(result.events, 1):
            events_table.add_row(
                str(i),
                event.severity.value,
                event.reason or "[dim]none[/dim]",
                event.message,
                event.target.value,
            )

        console.print(Panel(events_table, title="[bold]Events[/bold]", border_style="green"))

    summary = result.summary
    if result.succeeded:
        console.print(f"[green]{summary.type}: {summary.reason}[/green]")
    else:
        console.print(f"[red]{summary.type}: {summary.reason}: {summary.message}[/red]")


def handle_validate(cmd: Validate) -> None:
    """Handle the validate subcommand."""
    try:
        transformation = load_input_file(cmd.input)
    except ConfigurationError as e:
        print(f"[red]Invalid input: {e}[/red]", file=sys.stderr)
        sys.exit(1)

    show_hooks(transformation)


def show_hooks(transformation: StatusTransformation) -> None:
    """Print a summary of the status condition hooks."""
    console = Console()

    hooks_table = Table(show_header=True, show_lines=True)
    hooks_table.add_column("#", style="dim", width=3)
    hooks_table.add_column("Matchers", style="cyan")
    hooks_table.add_column("Sets", style="yellow")
    hooks_table.add_column("Events", style="magenta")

    for i, hook in enumerate(transformation.status_condition_hooks):
        if hook.matchers:
            matchers_display = "\n".join(
                f"{m.name or f'matcher {j}'}: {m.type.value}" for j, m in enumerate(hook.matchers)
            )
        else:
            matchers_display = "[dim]none (never matches)[/dim]"

        sets_display = "\n".join(
            f"{s.condition.type}{' (force)' if s.is_forceful else ''}" for s in hook.set_conditions
        )
        events_display = "\n".join(e.event.type or "Normal" for e in hook.create_events)

        hooks_table.add_row(
            str(i),
            matchers_display,
            sets_display or "[dim]none[/dim]",
            events_display or "[dim]none[/dim]",
        )

    console.print(Panel(hooks_table, title="[bold]Status Condition Hooks[/bold]", border_style="green"))
    console.print(f"[green]Valid: {len(transformation.status_condition_hooks)} hook(s)[/green]")


def main(
    cmd: Annotated[Command, tyro.conf.arg(name="")],
    *,
    debug: Annotated[bool, tyro.conf.arg(help="Enable debug logging")] = False,
) -> None:
    """status-transformer - Status Condition Hooks for composite resources.

    Matches conditions of observed resources and derives custom conditions
    and events for the composite resource and its claim.
    """
    setup_logging(debug)

    # Handle each command type
    if isinstance(cmd, Render):
        handle_render(cmd, debug=debug)

    elif isinstance(cmd, Validate):
        handle_validate(cmd)


def entry_point() -> None:
    """Entry point for the status-transformer command."""
    tyro.cli(main)


if __name__ == "__main__":
    entry_point()
