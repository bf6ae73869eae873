"""
Task commands for povboard.

Create, edit, delete and move the tasks of a phase's board.
"""
from datetime import datetime
from typing import Optional

import click

from povboard.commands.common import open_core, phase_option
from povboard.constants import DATE_FORMAT_ERROR
from povboard.exceptions import (
    InvalidOperationError,
    NotFoundError,
    PovBoardError,
    ValidationError,
)
from povboard.models.base import Assignee, TaskPriority
from povboard.utils import parse_date, validate_date_range

PRIORITY_CHOICES = click.Choice([p.value for p in TaskPriority], case_sensitive=False)


@click.group()
def task():
    """Manage the tasks of a phase's board."""
    pass


def _parse_due(due: Optional[str]) -> Optional[datetime]:
    if due is None:
        return None
    parsed = parse_date(due)
    if parsed is None:
        raise click.BadParameter(DATE_FORMAT_ERROR, param_hint="--due")
    is_valid, error = validate_date_range(parsed)
    if not is_valid:
        raise click.BadParameter(error, param_hint="--due")
    return parsed


def _build_assignee(assignee_id: Optional[str], name: Optional[str], email: Optional[str]) -> Optional[Assignee]:
    if not assignee_id:
        if name or email:
            raise click.BadParameter("--assignee-id is required with a name or email.", param_hint="--assignee-id")
        return None
    return Assignee(id=assignee_id, name=name or assignee_id, email=email)


def _assignee_options(func):
    func = click.option("--assignee-email", help="Assignee email.")(func)
    func = click.option("--assignee-name", help="Assignee display name.")(func)
    func = click.option("--assignee-id", help="Assignee user id.")(func)
    return func


@task.command(name="add")
@click.argument("stage_id")
@phase_option
@click.option("-t", "--title", required=True, help="Task title.")
@click.option("-d", "--desc", help="Task description.")
@click.option("--priority", type=PRIORITY_CHOICES, help="Priority (default: MEDIUM).")
@click.option("--due", help="Due date (e.g. 2024-12-31).")
@_assignee_options
@click.pass_context
def add(ctx: click.Context, stage_id: str, phase_id: Optional[str], title: str, desc: Optional[str],
        priority: Optional[str], due: Optional[str], assignee_id: Optional[str],
        assignee_name: Optional[str], assignee_email: Optional[str]):
    """Add a task at the end of STAGE_ID."""
    due_date = _parse_due(due)
    assignee = _build_assignee(assignee_id, assignee_name, assignee_email)

    core = open_core(ctx, phase_id)
    try:
        created = core.add_task(stage_id, title, desc, priority, due_date, assignee)
        click.echo(f"Task '{created.title}' created successfully ({created.id}).")
    except NotFoundError as e:
        raise click.ClickException(str(e))
    except ValidationError as e:
        raise click.ClickException(f"Validation Error: {e}")
    except PovBoardError as e:
        raise click.ClickException(f"Error: {e}")


@task.command(name="edit")
@click.argument("task_id")
@phase_option
@click.option("-t", "--title", help="New title.")
@click.option("-d", "--desc", help="New description.")
@click.option("--priority", type=PRIORITY_CHOICES, help="New priority.")
@click.option("--due", help="New due date.")
@_assignee_options
@click.option("--clear-due", is_flag=True, help="Remove the due date.")
@click.option("--clear-assignee", is_flag=True, help="Remove the assignee.")
@click.pass_context
def edit(ctx: click.Context, task_id: str, phase_id: Optional[str], title: Optional[str],
         desc: Optional[str], priority: Optional[str], due: Optional[str],
         assignee_id: Optional[str], assignee_name: Optional[str], assignee_email: Optional[str],
         clear_due: bool, clear_assignee: bool):
    """Edit an existing task.

    Only specified fields are updated.
    """
    if not any([title, desc, priority, due, assignee_id, clear_due, clear_assignee]):
        raise click.ClickException(
            "No update parameters provided. "
            "Specify at least one of: -t/--title, -d/--desc, --priority, --due, --assignee-id, "
            "--clear-due, --clear-assignee."
        )
    if clear_due and due:
        raise click.UsageError("--due and --clear-due cannot be used together.")
    if clear_assignee and (assignee_id or assignee_name or assignee_email):
        raise click.UsageError("--clear-assignee cannot be combined with assignee options.")
    due_date = _parse_due(due)
    assignee = _build_assignee(assignee_id, assignee_name, assignee_email)

    core = open_core(ctx, phase_id)
    try:
        updated = core.update_task(
            task_id, title, desc, priority, due_date, assignee,
            clear_due_date=clear_due,
            clear_assignee=clear_assignee,
        )
        click.echo(f"Task '{updated.title}' updated successfully.")
    except NotFoundError as e:
        raise click.ClickException(str(e))
    except ValidationError as e:
        raise click.ClickException(f"Validation Error: {e}")
    except PovBoardError as e:
        raise click.ClickException(f"Error: {e}")


@task.command(name="delete")
@click.argument("task_id")
@phase_option
@click.confirmation_option(prompt="Are you sure you want to delete this task?")
@click.pass_context
def delete(ctx: click.Context, task_id: str, phase_id: Optional[str]):
    """Delete a task."""
    core = open_core(ctx, phase_id)
    try:
        deleted = core.delete_task(task_id)
        click.echo(f"Task '{deleted.title}' deleted successfully.")
    except NotFoundError as e:
        raise click.ClickException(str(e))
    except PovBoardError as e:
        raise click.ClickException(f"Error: {e}")


@task.command(name="move")
@click.argument("task_id")
@phase_option
@click.option("--to", "destination_stage_id", required=True, help="Destination stage id.")
@click.option("-i", "--index", "destination_index", type=int,
              help="Position in the destination stage, 0-based (default: last).")
@click.option("--from", "source_stage_id",
              help="Stage currently holding the task (looked up if omitted).")
@click.pass_context
def move(ctx: click.Context, task_id: str, phase_id: Optional[str], destination_stage_id: str,
         destination_index: Optional[int], source_stage_id: Optional[str]):
    """Move TASK_ID within its stage or to another stage."""
    core = open_core(ctx, phase_id)
    try:
        optimistic = core.move_task(task_id, destination_stage_id, destination_index, source_stage_id)
        if core.stages is not optimistic:
            raise click.ClickException(f"Task '{task_id}' could not be moved.")
        destination = core.get_stage(destination_stage_id)
        moved = destination.find_task(task_id)
        click.echo(f"Task '{moved.title}' moved to '{destination.name}' at position {moved.order}.")
    except NotFoundError as e:
        raise click.ClickException(str(e))
    except InvalidOperationError as e:
        raise click.ClickException(f"Operation Error: {e}")
    except PovBoardError as e:
        raise click.ClickException(f"Error: {e}")
