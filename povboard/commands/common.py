"""
Helpers shared by the povboard command groups.
"""
from pathlib import Path
from typing import Optional

import click

from povboard.constants import get_default_phase
from povboard.core import BoardCore
from povboard.exceptions import PovBoardError


phase_option = click.option(
    "-p", "--phase", "phase_id", help="Phase id (defaults to config 'default_phase')."
)


def resolve_phase(phase_id: Optional[str]) -> str:
    """Return the given phase id or the configured default.

    Raises:
        click.UsageError: If neither is available.
    """
    if phase_id:
        return phase_id
    default = get_default_phase()
    if default:
        return default
    raise click.UsageError(
        "No phase given. Pass -p/--phase or run 'povboard config set default_phase <id>'."
    )


def board_dir_from(ctx: click.Context) -> Optional[Path]:
    """Return the --board-dir passed to the root command, if any."""
    obj = ctx.find_root().obj or {}
    return obj.get("board_dir")


def open_core(ctx: click.Context, phase_id: Optional[str]) -> BoardCore:
    """Create a BoardCore for the resolved phase, closed with the context."""
    phase = resolve_phase(phase_id)
    try:
        core = BoardCore(phase, board_dir=board_dir_from(ctx))
    except PovBoardError as e:
        raise click.ClickException(f"Error: {e}")
    ctx.call_on_close(core.close)
    return core
