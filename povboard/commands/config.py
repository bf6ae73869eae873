"""
Config command group for povboard.

Commands for viewing and editing board configuration.
"""
import json

import click
from pydantic import ValidationError as PydanticValidationError

from povboard.commands.common import board_dir_from
from povboard.constants import get_config_manager
from povboard.exceptions import StorageError
from povboard.managers import StorageManager
from povboard.models.files import ConfigFile


@click.group()
def config():
    """View and edit board configuration.

    Configuration is stored in .povboard/config.json.
    """
    pass


def _load(ctx: click.Context) -> tuple[StorageManager, ConfigFile]:
    storage = StorageManager(board_dir_from(ctx))
    try:
        return storage, storage.load_config()
    except StorageError as e:
        raise click.ClickException(f"Error: {e}")


def _coerce(key: str, value: str):
    """Turn a command-line string into the value type of a config field."""
    annotation = ConfigFile.model_fields[key].annotation
    if annotation is int:
        try:
            return int(value)
        except ValueError:
            raise click.BadParameter(f"'{key}' expects an integer.", param_hint="VALUE")
    if getattr(annotation, "__origin__", None) is list:
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError:
            parsed = [part.strip() for part in value.split(",") if part.strip()]
        return parsed
    if value.lower() in ("", "none", "null"):
        return None
    return value


@config.command(name="show")
@click.pass_context
def show_config(ctx: click.Context):
    """Show current configuration."""
    _, current = _load(ctx)
    click.echo(json.dumps(current.model_dump(mode="json"), indent=2))


@config.command(name="get")
@click.argument("key")
@click.pass_context
def get_config(ctx: click.Context, key: str):
    """Get a configuration value."""
    _, current = _load(ctx)
    if key not in ConfigFile.model_fields:
        raise click.ClickException(f"Unknown config key '{key}'.")
    value = getattr(current, key)
    click.echo(json.dumps(value) if isinstance(value, list) else str(value))


@config.command(name="set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def set_config(ctx: click.Context, key: str, value: str):
    """Set a configuration value."""
    if key not in ConfigFile.model_fields or key == "schema_version":
        raise click.ClickException(f"Unknown config key '{key}'.")

    storage, current = _load(ctx)
    data = current.model_dump()
    data[key] = _coerce(key, value)
    try:
        updated = ConfigFile.model_validate(data)
    except PydanticValidationError as e:
        raise click.ClickException(f"Validation Error: {e}")

    try:
        storage.save_config(updated)
    except StorageError as e:
        raise click.ClickException(f"Error: {e}")

    get_config_manager().reload()
    click.echo(f"Set {key} = {getattr(updated, key)}")
