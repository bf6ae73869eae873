"""
CLI for povboard.

Uses BoardCore and managers exclusively.
"""
import sys
from pathlib import Path
from typing import Optional

import click
from loguru import logger

from povboard.commands.board import board
from povboard.commands.config import config
from povboard.commands.stage import stage
from povboard.commands.task import task
from povboard.constants import get_config_manager


def configure_logging(level: str = "WARNING") -> None:
    """Configure loguru logger with the specified level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{module}</cyan>:<cyan>{line}</cyan> - "
            "{message}"
        ),
    )


@click.group()
@click.option("--board-dir", type=click.Path(file_okay=False, path_type=Path),
              help="Board data directory (default: .povboard).")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, board_dir: Optional[Path], verbose: bool):
    """Kanban boards for Proof of Value phases: stages, tasks and their order."""
    configure_logging("DEBUG" if verbose else "WARNING")
    ctx.ensure_object(dict)
    ctx.obj["board_dir"] = board_dir
    get_config_manager(reset=True, board_dir=board_dir)


cli.add_command(board)
cli.add_command(stage)
cli.add_command(task)
cli.add_command(config)


def main() -> None:
    """Console script entry point."""
    cli(obj={})


if __name__ == '__main__':
    main()
