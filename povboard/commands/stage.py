"""
Stage commands for povboard.

Create, edit, delete and reorder the stages (columns) of a phase's board.
"""
from typing import Optional

import click

from povboard.commands.common import open_core, phase_option
from povboard.exceptions import (
    InvalidOperationError,
    NotFoundError,
    PovBoardError,
    ValidationError,
)
from povboard.models.base import StageStatus

STATUS_CHOICES = click.Choice([s.value for s in StageStatus], case_sensitive=False)


@click.group()
def stage():
    """Manage the stages of a phase's board."""
    pass


@stage.command(name="list")
@phase_option
@click.pass_context
def list_stages(ctx: click.Context, phase_id: Optional[str]):
    """List stages in board order."""
    core = open_core(ctx, phase_id)
    if not core.stages:
        click.echo("No stages.")
        return
    for s in core.stages:
        click.echo(f"{s.order}. {s.name} [{s.status.value}] ({len(s.tasks)} tasks) {s.id}")


@stage.command(name="add")
@phase_option
@click.option("-n", "--name", required=True, help="Stage name.")
@click.option("-d", "--desc", help="Stage description.")
@click.option("-s", "--status", type=STATUS_CHOICES, help="Initial status (default: PENDING).")
@click.pass_context
def add(ctx: click.Context, phase_id: Optional[str], name: str, desc: Optional[str], status: Optional[str]):
    """Add a stage at the end of the board."""
    core = open_core(ctx, phase_id)
    try:
        created = core.add_stage(name, desc, status)
        click.echo(f"Stage '{created.name}' created successfully ({created.id}).")
    except ValidationError as e:
        raise click.ClickException(f"Validation Error: {e}")
    except PovBoardError as e:
        raise click.ClickException(f"Error: {e}")


@stage.command(name="edit")
@click.argument("stage_id")
@phase_option
@click.option("-n", "--name", help="New name.")
@click.option("-d", "--desc", help="New description.")
@click.option("-s", "--status", type=STATUS_CHOICES, help="New status.")
@click.pass_context
def edit(ctx: click.Context, stage_id: str, phase_id: Optional[str], name: Optional[str],
         desc: Optional[str], status: Optional[str]):
    """Edit an existing stage.

    Only specified fields are updated.
    """
    if not any([name, desc, status]):
        raise click.ClickException(
            "No update parameters provided. "
            "Specify at least one of: -n/--name, -d/--desc, -s/--status."
        )

    core = open_core(ctx, phase_id)
    try:
        updated = core.update_stage(stage_id, name, desc, status)
        click.echo(f"Stage '{updated.name}' updated successfully.")
    except NotFoundError as e:
        raise click.ClickException(str(e))
    except ValidationError as e:
        raise click.ClickException(f"Validation Error: {e}")
    except PovBoardError as e:
        raise click.ClickException(f"Error: {e}")


@stage.command(name="delete")
@click.argument("stage_id")
@phase_option
@click.confirmation_option(prompt="Are you sure you want to delete this stage and its tasks?")
@click.pass_context
def delete(ctx: click.Context, stage_id: str, phase_id: Optional[str]):
    """Delete a stage.

    WARNING: This will delete all tasks of the stage as well.
    """
    core = open_core(ctx, phase_id)
    try:
        deleted = core.delete_stage(stage_id)
        click.echo(f"Stage '{deleted.name}' deleted successfully.")
    except NotFoundError as e:
        raise click.ClickException(str(e))
    except PovBoardError as e:
        raise click.ClickException(f"Error: {e}")


@stage.command(name="move")
@click.argument("source_index", type=int)
@click.argument("destination_index", type=int)
@phase_option
@click.pass_context
def move(ctx: click.Context, source_index: int, destination_index: int, phase_id: Optional[str]):
    """Move the stage at SOURCE_INDEX to DESTINATION_INDEX (0-based)."""
    core = open_core(ctx, phase_id)
    try:
        before = core.stages
        optimistic = core.engine.move_stage(source_index, destination_index)
        if optimistic is before:
            click.echo("Stage already at that position.")
            return
        moved = optimistic[destination_index]
        # A failed save reloads the board in place of the optimistic list
        if core.stages is not optimistic:
            raise click.ClickException(f"Stage '{moved.name}' could not be moved.")
        click.echo(f"Stage '{moved.name}' moved to position {destination_index}.")
    except InvalidOperationError as e:
        raise click.ClickException(f"Operation Error: {e}")
    except PovBoardError as e:
        raise click.ClickException(f"Error: {e}")
