"""CLI main entry point."""

import json
import logging
from pathlib import Path

import click

from .config import Settings
from .consts import SETTINGS_FILE_DEFAULT
from .errors import DynaformException
from .log import setup as setup_log
from .models import FileValue
from .parser import load_schema_file
from .session import FormSession

logger = logging.getLogger(__name__)


def load_settings(settings_path: str) -> Settings:
    """Load settings from file when it exists, defaults otherwise."""
    if Path(settings_path).is_file():
        return Settings.load_from_file(settings_path)
    logger.debug(f"Settings file {settings_path} not found, using defaults")
    return Settings()


def load_values(values_path: str) -> dict:
    """Read form values from a JSON file.

    Objects carrying a ``name`` key are read as file values.
    """
    path = Path(values_path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise click.ClickException(f"Unable to read values from {values_path}: {e}")

    if not isinstance(raw, dict):
        raise click.ClickException("Values file must contain a JSON object")

    return {
        name: FileValue.model_validate(value) if isinstance(value, dict) and "name" in value else value
        for name, value in raw.items()
    }


def build_session(ctx, schema_path: str, values_path: str | None = None) -> FormSession:
    settings = ctx.obj["settings"]
    session = FormSession(load_schema_file(schema_path).schema, settings=settings)
    if values_path:
        # a snapshot of values, so no cascade clearing between fields
        session.values.update(load_values(values_path))
    return session


def echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


@click.group()
@click.option("--config", "-c", default=SETTINGS_FILE_DEFAULT, help="Settings file path")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
@click.pass_context
def cli(ctx, config: str, verbose: bool):
    """dynaform - compile and exercise form schemas."""
    ctx.ensure_object(dict)
    try:
        settings = load_settings(config)
    except DynaformException as e:
        raise click.ClickException(str(e))

    setup_log(settings.log_file, level=logging.DEBUG if verbose else logging.WARNING)
    ctx.obj["settings"] = settings


@cli.command(name="fields")
@click.argument("schema_path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def fields(ctx, schema_path: str):
    """Print the compiled, ordered field descriptors."""
    try:
        session = build_session(ctx, schema_path)
    except DynaformException as e:
        raise click.ClickException(str(e))

    echo_json([field.model_dump(mode="json", exclude={"source"}) for field in session.fields])


@cli.command(name="validate")
@click.argument("schema_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("values_path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def validate(ctx, schema_path: str, values_path: str):
    """Validate a JSON values file against a schema."""
    try:
        session = build_session(ctx, schema_path, values_path)
    except DynaformException as e:
        raise click.ClickException(str(e))

    is_valid = session.validate_all()
    echo_json({"valid": is_valid, "required": sorted(session.required_fields()), "errors": session.errors})
    if not is_valid:
        ctx.exit(1)


@cli.command(name="options")
@click.argument("schema_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("field_name")
@click.argument("values_path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def options(ctx, schema_path: str, field_name: str, values_path: str):
    """Print the options of a choice field for the given values."""
    try:
        session = build_session(ctx, schema_path, values_path)
    except DynaformException as e:
        raise click.ClickException(str(e))

    field = session.get_field(field_name)
    if field is None:
        raise click.ClickException(f"Unknown field: {field_name}")

    if field.depends_on:
        choices = session.dependent_options(field)
    else:
        choices = field.options or []
    echo_json([option.model_dump(mode="json") for option in choices])


@cli.command(name="submit")
@click.argument("schema_path", type=click.Path(exists=True, dir_okay=False))
@click.argument("values_path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def submit(ctx, schema_path: str, values_path: str):
    """Run a full submission and print the submitted payload."""
    try:
        session = build_session(ctx, schema_path, values_path)
    except DynaformException as e:
        raise click.ClickException(str(e))

    def handler(values):
        logger.info(f"Submit handler received {len(values)} value(s)")

    result = session.submit(handler)
    echo_json(result.model_dump(mode="json"))
    if not result.success:
        ctx.exit(1)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
