"""
Board commands for povboard.

Shows a phase's Kanban board and lists phases with a stored board.
"""
import json
from typing import List, Optional

import click

from povboard.commands.common import board_dir_from, open_core, phase_option
from povboard.constants import get_board_column_width
from povboard.managers import StorageManager
from povboard.models.base import Stage, Task
from povboard.utils import format_date, truncate


@click.group()
def board():
    """Show Kanban boards."""
    pass


def _format_task(task: Task, width: int) -> str:
    parts = [f"{task.order}. {truncate(task.title, width)}", task.priority.value]
    if task.due_date:
        parts.append(f"due {format_date(task.due_date)}")
    if task.assignee:
        parts.append(f"@{task.assignee.name}")
    parts.append(f"({task.id})")
    return "  ".join(parts)


def display_board(phase_id: str, stages: List[Stage]) -> None:
    """Display stages and their tasks in human-readable format."""
    width = get_board_column_width()
    click.echo(f"Phase: {phase_id} ({len(stages)} stages)")

    if not stages:
        click.echo("\nNo stages.")
        return

    for stage in stages:
        click.echo(
            f"\n[{stage.order}] {truncate(stage.name, width)}  {stage.status.value}  "
            f"({len(stage.tasks)} tasks)  ({stage.id})"
        )
        if not stage.tasks:
            click.echo("    No tasks.")
        for task in stage.tasks:
            click.echo(f"    {_format_task(task, width)}")


@board.command(name="show")
@phase_option
@click.option("-j", "--json", "json_output", is_flag=True, help="Output in JSON format.")
@click.pass_context
def show(ctx: click.Context, phase_id: Optional[str], json_output: bool):
    """Show the board of a phase."""
    core = open_core(ctx, phase_id)
    if json_output:
        payload = {
            "phase_id": core.phase_id,
            "stages": [stage.model_dump(mode="json") for stage in core.stages],
        }
        click.echo(json.dumps(payload, indent=2))
    else:
        display_board(core.phase_id, core.stages)


@board.command(name="phases")
@click.pass_context
def phases(ctx: click.Context):
    """List phases that have a board."""
    storage = StorageManager(board_dir_from(ctx))
    phase_ids = storage.list_phase_ids()
    if not phase_ids:
        click.echo("No boards found.")
        return
    for phase_id in phase_ids:
        click.echo(phase_id)
