"""Main CLI entry point using Typer.

Every command works on a JSON document: a bare list of actions, a task
(``{"actions": [...]}``) or an action template (``{"elements": [...]}``).
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, NoReturn

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from actionflow import __version__
from actionflow.core.config import get_settings
from actionflow.core.exceptions import GraphError
from actionflow.core.logging import configure_logging
from actionflow.graph import (
    Action,
    ActionState,
    CompletionMeta,
    TaskStatus,
    classify_actions,
    complete_action,
    compute_levels,
    next_task_status,
    to_steps,
    uncomplete_action,
    validate_graph,
    workflow_stats,
)

app = typer.Typer(
    name="actionflow",
    help="Actionflow - action dependency graph engine",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()
err_console = Console(stderr=True)

STATE_STYLES = {
    ActionState.COMPLETED: "green",
    ActionState.AVAILABLE: "yellow",
    ActionState.BLOCKED: "red",
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Actionflow[/bold blue] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    Inspect and update task action workflows.
    """
    configure_logging(get_settings())


# =============================================================================
# DOCUMENT I/O
# =============================================================================


def _actions_key(document: Any) -> str | None:
    if isinstance(document, list):
        return None
    if isinstance(document, dict):
        for key in ("actions", "elements"):
            if key in document:
                return key
    raise typer.BadParameter(
        "expected a list of actions or an object with 'actions' or 'elements'"
    )


def _load(path: Path) -> tuple[Any, list[Action]]:
    """Read a document and validate its actions."""
    try:
        document = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[bold red]Cannot read {path}: {escape(str(e))}[/bold red]")
        raise typer.Exit(code=1) from e

    key = _actions_key(document)
    raw = document if key is None else document[key]
    try:
        actions = [Action.model_validate(item) for item in raw]
    except ValidationError as e:
        console.print(f"[bold red]Invalid action data:[/bold red]\n{escape(str(e))}")
        raise typer.Exit(code=1) from e
    return document, actions


def _dump(document: Any, actions: list[Action], output: Path | None) -> None:
    """Write the updated document to ``output``, or print it."""
    key = _actions_key(document)
    payload = [action.to_dict() for action in actions]
    if key is None:
        document = payload
    else:
        document = {**document, key: payload}
        if "status" in document:
            try:
                current = TaskStatus(document["status"])
            except ValueError:
                current = None
            if current is not None:
                document["status"] = next_task_status(current, actions).value

    text = json.dumps(document, indent=2, ensure_ascii=False)
    if output is None:
        typer.echo(text)
    else:
        output.write_text(text + "\n")
        console.print(f"[dim]Wrote {output}[/dim]")


def _fail(error: GraphError) -> NoReturn:
    console.print(f"[bold red]{type(error).__name__}:[/bold red] {escape(str(error))}")
    raise typer.Exit(code=1)


# =============================================================================
# COMMANDS
# =============================================================================


@app.command()
def validate(
    path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="Task or template JSON file",
    ),
) -> None:
    """
    Check referential integrity and acyclicity of a workflow.
    """
    _, actions = _load(path)
    try:
        validate_graph(actions)
        result = compute_levels(actions)
    except GraphError as e:
        _fail(e)

    console.print(f"[green]Valid[/green]: {len(actions)} actions in {len(result)} levels")


@app.command()
def levels(
    path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="Task or template JSON file",
    ),
) -> None:
    """
    Show the execution levels of a workflow.
    """
    _, actions = _load(path)
    try:
        result = compute_levels(actions)
    except GraphError as e:
        _fail(e)

    table = Table(title="Execution Levels")
    table.add_column("Level", style="cyan")
    table.add_column("Actions")
    table.add_column("Done", style="green")

    for level in result:
        table.add_row(
            str(level.index + 1),
            escape(", ".join(level.action_ids)),
            "yes" if level.is_complete else "no",
        )

    console.print(table)


@app.command()
def status(
    path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="Task or template JSON file",
    ),
) -> None:
    """
    Show completion state and progress of every action.
    """
    _, actions = _load(path)
    try:
        stats = workflow_stats(actions)
    except GraphError as e:
        _fail(e)

    states = classify_actions(actions)

    table = Table(title="Actions")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Depends On")
    table.add_column("State")

    for action in actions:
        state = states[action.id]
        table.add_row(
            escape(action.id),
            escape(action.title),
            escape(", ".join(action.depends_on)),
            f"[{STATE_STYLES[state]}]{state.value}[/{STATE_STYLES[state]}]",
        )

    console.print(table)
    console.print(
        f"{stats.completed_actions} of {stats.total_actions} actions completed "
        f"({stats.progress}%), level {stats.current_level_index} of {stats.total_levels}"
    )


@app.command()
def steps(
    path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="Task or template JSON file",
    ),
) -> None:
    """
    Print the workflow steps derived from execution levels.
    """
    _, actions = _load(path)
    try:
        result = to_steps(actions)
    except GraphError as e:
        _fail(e)

    typer.echo(json.dumps([step.model_dump(by_alias=True) for step in result], indent=2))


@app.command()
def complete(
    path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="Task or template JSON file",
    ),
    action_id: str = typer.Argument(..., help="Action to complete"),
    by: str = typer.Option(..., "--by", "-b", help="ID of the acting user"),
    at: datetime | None = typer.Option(
        None,
        "--at",
        help="Completion time (defaults to now, UTC)",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the updated document here instead of printing it",
    ),
) -> None:
    """
    Complete an action and report the actions it unlocks.
    """
    document, actions = _load(path)
    meta = CompletionMeta(completed_by=by, completed_at=at or datetime.now(timezone.utc))
    try:
        result = complete_action(actions, action_id, meta)
    except GraphError as e:
        _fail(e)

    if result.newly_available:
        ids = ", ".join(a.id for a in result.newly_available)
        err_console.print(f"[green]Now available:[/green] {escape(ids)}")
    _dump(document, result.actions, output)


@app.command()
def uncomplete(
    path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="Task or template JSON file",
    ),
    action_id: str = typer.Argument(..., help="Action to revert"),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the updated document here instead of printing it",
    ),
) -> None:
    """
    Revert a completed action.
    """
    document, actions = _load(path)
    try:
        updated = uncomplete_action(actions, action_id)
    except GraphError as e:
        _fail(e)

    _dump(document, updated, output)


if __name__ == "__main__":
    app()
